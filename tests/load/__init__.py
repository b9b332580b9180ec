"""Load tests for the users service.

``locustfile.py`` drives a running service through a staged virtual-user
schedule; ``test_load_profile.py`` unit-tests the pieces it is built from.
"""
