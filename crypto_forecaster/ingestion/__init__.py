"""
Ingestion layer — price-history provider clients.

Submodules:
  coingecko_client — CoinGecko ``market_chart`` historical prices (httpx)

Credential placement (.env, gitignored):
  COINGECKO_API_KEY          — optional CoinGecko demo API key
"""
