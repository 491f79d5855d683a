"""Per-registry memo of V2 API support."""

from __future__ import annotations

import logging

from tagcheck_cli.errors import UnsupportedRegistry
from tagcheck_cli.registry.client import RegistryClient

logger = logging.getLogger(__name__)


class RegistryCapabilityCache:
    """Remember, per registry host, whether it answers the V2 API.

    Any status other than 404 on ``GET /v2/`` counts as capable: registries
    commonly answer 401 there. Transport failures (including TLS validation)
    propagate and leave the host unprobed.
    """

    def __init__(self, client: RegistryClient) -> None:
        self._client = client
        self._capable: dict[str, bool] = {}

    def probe(self, registry: str) -> bool:
        """Return whether *registry* implements the V2 API."""
        if registry in self._capable:
            return self._capable[registry]

        response = self._client.get_v2(registry)
        capable = response.status_code != 404
        logger.debug("Registry %s answered %d on /v2/", registry, response.status_code)
        self._capable[registry] = capable
        return capable

    def check(self, registry: str) -> None:
        """Raise :class:`UnsupportedRegistry` unless *registry* is capable."""
        cached = registry in self._capable
        if not self.probe(registry):
            if cached:
                raise UnsupportedRegistry(
                    f"registry {registry} was already checked and is invalid"
                )
            raise UnsupportedRegistry(f"registry {registry} does not implement V2 API")

    def __contains__(self, registry: str) -> bool:
        return registry in self._capable
