"""
Core utilities shared across the bizcard backend.

This package hosts configuration helpers (env vars, paths), logging setup,
password hashing and request rate limiting. Services and routers depend on
these primitives instead of reading os.environ directly.
"""
