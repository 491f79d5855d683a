"""HTTP client for the Docker Registry V2 API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from tagcheck_cli.errors import (
    NetworkError,
    TagDecodeError,
    TLSValidationError,
    TokenDecodeError,
)
from tagcheck_cli.registry.auth import Credentials
from tagcheck_cli.registry.challenge import AuthChallenge
from tagcheck_cli.registry.parser import ImageReference

logger = logging.getLogger(__name__)

_V2_URL = "https://{registry}/v2/"
_TAGS_LIST_URL = _V2_URL + "{namespace}/{name}/tags/list"

DEFAULT_TIMEOUT = 5


@dataclass
class Token:
    """Token endpoint response.

    Registries disagree on the field name, so both ``token`` and
    ``access_token`` are kept.
    """

    token: str = ""
    access_token: str = ""
    expires_in: int | None = None
    issued_at: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> Token:
        if not isinstance(data, dict):
            raise TokenDecodeError("token response is not a JSON object")
        return cls(
            token=data.get("token") or "",
            access_token=data.get("access_token") or "",
            expires_in=data.get("expires_in"),
            issued_at=data.get("issued_at"),
        )

    @property
    def bearer(self) -> str:
        """Return the token to send, preferring ``token`` over ``access_token``."""
        value = self.token or self.access_token
        if not value:
            raise TokenDecodeError("token response holds neither token nor access_token")
        return value


class RegistryClient:
    """Thin wrapper around the three registry calls the checker needs.

    Status codes are left to the caller; only transport failures are turned
    into exceptions.

    Args:
        timeout: HTTP request timeout in seconds, applied to every call.
        insecure: Skip TLS certificate validation.
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        insecure: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.insecure = insecure
        self._session = session or requests.Session()
        self._session.verify = not insecure

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_v2(self, registry: str) -> requests.Response:
        """Probe the bare ``/v2/`` endpoint of *registry*."""
        return self._get(_V2_URL.format(registry=registry))

    def get_tag_list(
        self,
        reference: ImageReference,
        token: str | None = None,
    ) -> requests.Response:
        """Request the tags list, with a bearer token when one is given."""
        url = _TAGS_LIST_URL.format(
            registry=reference.registry,
            namespace=reference.namespace,
            name=reference.name,
        )
        headers: dict[str, str] = {}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        return self._get(url, headers=headers)

    def get_token(
        self,
        challenge: AuthChallenge,
        credentials: Credentials | None = None,
    ) -> requests.Response:
        """Request a token from the challenge realm, optionally with Basic auth."""
        auth = None
        if credentials is not None:
            auth = (credentials.username, credentials.password)
        return self._get(challenge.token_url(), auth=auth)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> requests.Response:
        """Execute a single GET request, mapping transport failures."""
        logger.debug("GET %s", url)
        try:
            return self._session.get(
                url,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
            )
        except requests.exceptions.SSLError as exc:
            raise TLSValidationError(
                f"certificate is invalid (consider running with --insecure), {exc}"
            ) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"request to {url} failed, {exc}") from exc


def decode_tags(response: requests.Response) -> list[str]:
    """Return the ``tags`` array of a tags list response.

    Raises:
        TagDecodeError: If the body is not a tags list document.
    """
    try:
        data = response.json()
    except ValueError as exc:
        raise TagDecodeError(f"tags response is not JSON, {exc}") from exc

    if not isinstance(data, dict):
        raise TagDecodeError("tags response is not a JSON object")
    tags = data.get("tags") or []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise TagDecodeError("tags response holds no list of strings")
    return tags


def decode_token(response: requests.Response) -> str:
    """Return the bearer token carried by a token endpoint response.

    Raises:
        TokenDecodeError: If the body holds no usable token.
    """
    try:
        data = response.json()
    except ValueError as exc:
        raise TokenDecodeError(f"token response is not JSON, {exc}") from exc
    return Token.from_json(data).bearer
