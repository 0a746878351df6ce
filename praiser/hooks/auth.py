"""Static admin credentials — the local AdminAuth.

Compares against the ADMIN_USERNAME / ADMIN_PASSWORD configured in
Settings. An empty configured password disables admin access entirely.

Replace with a real identity provider by subclassing AdminAuth from
praiser.hooks.interfaces.
"""

import hmac

from praiser.hooks.interfaces import AdminAuth


class StaticAdminAuth(AdminAuth):
    """Accepts exactly one configured username/password pair."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    async def verify(self, username: str, password: str) -> bool:
        if not self._password:
            return False
        user_ok = hmac.compare_digest(username.encode(), self._username.encode())
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        return user_ok and password_ok
