"""
ML forecasting layer — per-call linear regression on recent price windows.

Modules
-------
dataset      : build_training_windows() — sliding 5-price windows → next price.
linear_model : LinearPriceRegressor (PyTorch nn.Linear + Adam; fit, predict, close).
predictor    : run_forecast() — train, infer, release; returns ForecastResult.
"""
