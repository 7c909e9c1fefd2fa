"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer: market-data APIs, the macro-data
API and the prediction store.
"""
