"""
Forecasting bounded context: domain layer.

This module contains all domain logic for the forecasting context:
- Prediction records and their accuracy outcome
- Market and ticker rules
- Ports for market data, macro data and the prediction store
"""
