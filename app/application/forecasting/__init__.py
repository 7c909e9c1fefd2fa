"""
Application layer for the forecasting bounded context.

Use cases coordinate domain entities, ports and the numeric pipeline
to fulfill business operations. No framework or infrastructure imports allowed.
"""
