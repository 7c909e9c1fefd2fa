"""
PriceCast: stock close-price forecasting with volatility bounds.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - forecasting: Price forecasts, persisted predictions, accuracy validation.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (DB, market data, macro data) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas, scheduled jobs.
    - shared: Cross-cutting concerns (errors, security, logging, pacing).

The numeric core (indicators, features, regression) lives in the
sibling `prediction` package.
"""
