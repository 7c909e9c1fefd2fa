"""
Infrastructure adapters for the forecasting bounded context.

Each adapter implements a domain port (ABC) and connects
to an external system: Polygon.io, FRED, or the SQL prediction store.
"""
