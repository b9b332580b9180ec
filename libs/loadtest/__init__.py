"""Building blocks for the users load profile.

Includes:
- ``stages``: ramp-up / hold / ramp-down schedule math.
- ``metrics``: ``Trend`` and ``Rate`` custom metrics plus ``check``.
- ``thresholds``: threshold configuration, parsing and evaluation.
- ``session``: one-time setup and teardown against the API.
- ``stats``: adapters from Locust statistics to threshold metrics.

The Locust entrypoint lives in ``tests/load/locustfile.py``.
"""
