"""Peplink InControl2 REST client.

Covers the three calls the warranty report needs: the client-credentials
token exchange, the organization list and the per-organization device list.
Every call carries an explicit timeout; nothing is retried.
"""

import logging

import requests

from warrantycheck.config import settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """The token exchange failed or returned no access token."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class UpstreamError(Exception):
    """An InControl REST call failed."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class InControlClient:
    """Thin synchronous wrapper around the InControl2 API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.incontrol_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.upstream_timeout
        self._http = http or requests.Session()

    def close(self):
        self._http.close()

    def fetch_access_token(self, client_id: str, client_secret: str) -> str:
        """Exchange client credentials for a bearer token."""
        url = f"{self.base_url}/api/oauth2/token"
        try:
            resp = self._http.post(
                url,
                data={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "grant_type": "client_credentials",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Failed to get token: {e}") from e

        if not resp.ok:
            raise AuthError(
                f"Failed to get token: {resp.status_code} - {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            token = resp.json().get("access_token")
        except (ValueError, AttributeError):
            token = None
        if not token:
            raise AuthError("No access_token in token response", status_code=resp.status_code)
        return token

    def _get_data(self, path: str, token: str, params: dict | None = None) -> list[dict]:
        url = f"{self.base_url}{path}"
        try:
            resp = self._http.get(
                url,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"GET {path} failed: {e}") from e

        if not resp.ok:
            raise UpstreamError(
                f"GET {path} failed: {resp.status_code} - {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamError(f"GET {path} returned invalid JSON", status_code=resp.status_code) from e

        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, list) else []

    def list_organizations(self, token: str) -> list[dict]:
        orgs = self._get_data("/rest/o", token)
        logger.info(f"InControl returned {len(orgs)} organization(s)")
        return orgs

    def list_devices(self, token: str, organization_id: str) -> list[dict]:
        return self._get_data(
            f"/rest/o/{organization_id}/d", token, params={"includeWarranty": "true"}
        )
