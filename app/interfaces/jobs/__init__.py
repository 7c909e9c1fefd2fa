"""
Background jobs: the scheduled accuracy validator.
"""
