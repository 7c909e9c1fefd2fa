"""
Security concerns: response headers and rate limiting.
"""
