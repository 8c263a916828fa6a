"""
Model ensemble layer -- fixed-formula scorers and the forecast aggregator.

Modules
-------
ensemble   : Five scoring functions + the ordered ``DEFAULT_MODELS`` registry.
aggregator : Weighted blend into price targets; rule-based fallback forecast.
"""
