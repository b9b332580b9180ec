"""API subpackage for the users service.

Routers expose CRUD endpoints under ``/users``. The transport layer stays
thin and delegates to ``UserStore``.
"""
