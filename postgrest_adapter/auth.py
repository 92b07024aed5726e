"""Service-role header construction for PostgREST requests."""

from __future__ import annotations

RETURN_REPRESENTATION = "return=representation"
MERGE_DUPLICATES = "resolution=merge-duplicates"


class ServiceRoleAuth:
    """Builds the headers Supabase expects for service-role access.

    The same key is sent twice: as ``apikey`` for the API gateway and as a
    bearer token for PostgREST itself.
    """

    def __init__(self, service_role_key: str):
        """Initialize authenticator.

        Args:
            service_role_key: The project's service role key.
        """
        self.service_role_key = service_role_key

    def get_headers(self, *prefer: str) -> dict[str, str]:
        """Get headers for a request.

        Args:
            *prefer: Extra ``Prefer`` directives, e.g. ``MERGE_DUPLICATES``.

        Returns:
            Dictionary of headers to include in the request.
        """
        directives = [RETURN_REPRESENTATION, *prefer]
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Content-Type": "application/json",
            "Prefer": ",".join(directives),
        }
