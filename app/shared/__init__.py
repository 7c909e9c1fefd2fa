"""
Shared module package.

Contains cross-cutting concerns used across bounded contexts:
- Error handling and mapping
- Security middleware
- Rate limiting
- Logging configuration
- Request pacing for rate-limited providers
"""
