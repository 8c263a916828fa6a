"""Crypto Forecaster: multi-horizon price forecasts and buy/sell recommendations
from a single market snapshot."""

__version__ = "0.1.0"
