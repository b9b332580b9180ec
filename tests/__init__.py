"""Tests for the users platform.

Unit tests cover the store, the HTTP contract, the shared config/logging/
metrics helpers and the load profile's building blocks. They need no running
service.
"""
