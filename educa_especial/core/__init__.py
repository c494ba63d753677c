"""
Core utilities shared across the Educacao Especial API.

This package hosts configuration, logging, password hashing, CSRF and
rate limit helpers. Routers and services depend on these primitives
instead of reading the environment or hashing passwords themselves.
"""
