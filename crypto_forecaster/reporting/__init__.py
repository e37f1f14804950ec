"""
crypto_forecaster.reporting — terminal rendering of analysis results.

It does NOT compute anything — it only formats ``Recommendation`` and
``Unavailable`` objects produced by the analysis engine.

Modules:
  formatters — ASCII prediction panel for Typer CLI commands.
"""
