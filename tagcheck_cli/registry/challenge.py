"""Parse ``WWW-Authenticate: Bearer ...`` challenges into token requests."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlencode

from tagcheck_cli.errors import MalformedChallenge

_BEARER_PREFIX = "Bearer "

# A percent sign must start a two-digit hex escape.
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass
class AuthChallenge:
    """Token endpoint described by a Bearer challenge.

    Attributes:
        realm_url: The token-issuing endpoint.
        params: Remaining challenge parameters (``service``, ``scope``, ...),
            forwarded verbatim as query parameters. Never contains ``realm``.
    """

    realm_url: str
    params: dict[str, list[str]] = field(default_factory=dict)

    def token_url(self) -> str:
        """Return the realm URL with the challenge parameters encoded."""
        if not self.params:
            return self.realm_url
        return f"{self.realm_url}?{urlencode(self.params, doseq=True)}"


def parse_challenge(header: str | None) -> AuthChallenge:
    """Parse a ``Bearer realm="...",service="...",scope="..."`` header.

    Raises:
        MalformedChallenge: If the header is empty, is not valid query syntax
            once rewritten, or names no realm.
    """
    if not header:
        raise MalformedChallenge("no WWW-Authenticate data")

    if header.startswith(_BEARER_PREFIX):
        header = header[len(_BEARER_PREFIX):]
    query = header.replace(",", "&").replace('"', "")

    if ";" in query or _BAD_ESCAPE_RE.search(query):
        raise MalformedChallenge(f"invalid WWW-Authenticate data: {query}")

    values = parse_qs(query, keep_blank_values=True)

    realm = values.pop("realm", None)
    if not realm or not realm[0]:
        raise MalformedChallenge("WWW-Authenticate data names no realm")

    return AuthChallenge(realm_url=realm[0], params=values)
