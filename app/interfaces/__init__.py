"""
Interfaces layer package.

Contains FastAPI routers, Pydantic request/response schemas,
the validation scheduler and input validation. No business logic
belongs here. Routes and jobs call use cases and return responses.
"""
