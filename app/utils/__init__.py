"""
Utility functions and helpers.

- auth: Password hashing and access tokens
- deps: FastAPI dependencies (current user, relationship components)
"""
