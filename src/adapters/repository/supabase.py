"""
Supabase credential store adapter - Implements AccountStore protocol.

Talks to the hosted database through its PostgREST interface
(``{SUPABASE_URL}/rest/v1/{table}``) with the service role key, so the
service needs nothing from the hosted client SDK beyond plain HTTPS.

PostgREST conventions used here:
- Filters are query parameters: ``username=eq.alice``, ``deleted=is.false``
- ``Prefer: return=representation`` makes PATCH return the updated rows,
  which is how replace_credential tells whether a row matched
- A unique-key violation on insert answers 409

Timeouts, transport errors, unexpected statuses and rows with an
unknown role surface as UpstreamUnavailable.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from src.domain.exceptions import UpstreamUnavailable
from src.domain.ports import Role, UserRecord

logger = logging.getLogger(__name__)

_COLUMNS = "username,pin_hash,active,role,require_pin_change,deleted"


def create_supabase_client(url: str, service_role_key: str, timeout_seconds: float) -> httpx.Client:
    """
    Create the shared HTTP client for the REST interface.

    Args:
        url: Project URL, e.g. https://xyz.supabase.co
        service_role_key: Service role key (bypasses row level security)
        timeout_seconds: Transport timeout for every request
    """
    return httpx.Client(
        base_url=f"{url.rstrip('/')}/rest/v1",
        headers={
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        },
        timeout=timeout_seconds,
    )


class SupabaseCredentialStore:
    """
    Implements CredentialStore and CredentialAdminStore via httpx.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, client: httpx.Client, table: str = "librarians") -> None:
        """
        Initialize store with an HTTP client.

        Args:
            client: httpx.Client whose base_url points at /rest/v1
            table: Table holding librarian accounts
        """
        self._client = client
        self._path = f"/{table}"

    def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, self._path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("Credential store timed out: %s", e)
            raise UpstreamUnavailable("credential store timed out") from e
        except httpx.TransportError as e:
            logger.error("Credential store unreachable: %s", e)
            raise UpstreamUnavailable("credential store unreachable") from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code >= 400:
            logger.error(
                "Credential store answered %s: %s", response.status_code, response.text
            )
            raise UpstreamUnavailable(f"credential store answered {response.status_code}")

    def fetch_user_by_identifier(self, identifier: str) -> UserRecord | None:
        """Fetch a librarian row by normalized username."""
        response = self._request(
            "GET",
            params={"select": _COLUMNS, "username": f"eq.{identifier}", "limit": "1"},
        )
        self._raise_for_status(response)

        rows = response.json()
        if not rows:
            return None

        row = rows[0]
        return UserRecord(
            identifier=row["username"],
            credential_hash=row.get("pin_hash") or "",
            active=bool(row.get("active")),
            role=_parse_role(row.get("role")),
            require_credential_change=bool(row.get("require_pin_change")),
            deleted=bool(row.get("deleted")),
        )

    def set_active(self, identifier: str) -> None:
        """Mark a non-deleted account active."""
        response = self._request(
            "PATCH",
            params={"username": f"eq.{identifier}", "deleted": "is.false"},
            json={"active": True, "updated_at": _now()},
            headers={"Prefer": "return=minimal"},
        )
        self._raise_for_status(response)

    def ping(self) -> None:
        """Cheap read to confirm the REST interface and key work."""
        response = self._request("GET", params={"select": "username", "limit": "1"})
        self._raise_for_status(response)

    def create_user(self, record: UserRecord) -> bool:
        """
        Insert a new librarian row.

        Returns:
            True if inserted, False if the username exists
        """
        response = self._request(
            "POST",
            json={
                "username": record.identifier,
                "pin_hash": record.credential_hash,
                "active": record.active,
                "role": record.role.value,
                "require_pin_change": record.require_credential_change,
                "deleted": False,
            },
            headers={"Prefer": "return=minimal"},
        )
        if response.status_code == httpx.codes.CONFLICT:
            return False
        self._raise_for_status(response)
        return True

    def replace_credential(
        self,
        identifier: str,
        credential_hash: str,
        active: bool,
        require_credential_change: bool,
    ) -> bool:
        """
        Overwrite PIN hash and status flags of a non-deleted account.

        Returns:
            True if a row was updated, False if there is no such account
        """
        response = self._request(
            "PATCH",
            params={"username": f"eq.{identifier}", "deleted": "is.false"},
            json={
                "pin_hash": credential_hash,
                "active": active,
                "require_pin_change": require_credential_change,
                "updated_at": _now(),
            },
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_status(response)
        return len(response.json()) > 0

    def soft_delete(self, identifier: str) -> bool:
        """
        Flag a non-deleted account deleted, inactive and due for a PIN change.

        Returns:
            True if a row was updated, False if there is no such account
        """
        response = self._request(
            "PATCH",
            params={"username": f"eq.{identifier}", "deleted": "is.false"},
            json={
                "deleted": True,
                "active": False,
                "require_pin_change": True,
                "updated_at": _now(),
            },
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_status(response)
        return len(response.json()) > 0

    def count_admins(self) -> int:
        """Count non-deleted admin accounts."""
        response = self._request(
            "GET",
            params={"select": "username", "role": "eq.admin", "deleted": "is.false"},
        )
        self._raise_for_status(response)
        return len(response.json())


def _parse_role(value: str | None) -> Role:
    """Map a stored role to Role; missing means librarian, case is ignored."""
    if not value:
        return Role.LIBRARIAN
    try:
        return Role(value.strip().lower())
    except ValueError:
        logger.error("Credential store holds unknown role %r", value)
        raise UpstreamUnavailable(f"unknown role {value!r} in credential store") from None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
