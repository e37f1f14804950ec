"""Feature engineering package for the Crypto Forecaster.

Modules
-------
technical — 24h change, moving-average crossover signal, volatility proxy
"""
