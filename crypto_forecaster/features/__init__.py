"""Feature engineering for the crypto forecaster.

Modules
-------
history    -- Synthetic daily history from a single snapshot
indicators -- SMA / EMA / RSI / MACD / Bollinger / Stochastic / Williams %R / ROC
sentiment  -- Bounded sentiment signals from the snapshot and recent volume
"""
