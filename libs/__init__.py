"""Shared libraries for the users platform.

Subpackages:
- ``libs.common``: configuration, logging, and metrics.
- ``libs.loadtest``: stage schedule, checks, thresholds and setup/teardown
  used by the Locust load profile.

Notes:
- Avoid service-specific logic; keep modules cohesive and broadly useful.
"""
