"""Users service package.

Layout:
- ``api``: HTTP endpoints for user CRUD operations.
- ``store``: in-memory user collection and its domain error.
- ``runtime``: service-local metrics helpers.
"""
