"""Credential authenticator — retries pending images with user credentials."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tagcheck_cli.errors import AuthenticationFailed, TagCheckError
from tagcheck_cli.registry.auth import Credentials, resolve_credentials
from tagcheck_cli.registry.client import RegistryClient, decode_tags, decode_token
from tagcheck_cli.store import ClassificationStore, PendingAuthorization

logger = logging.getLogger(__name__)


@dataclass
class AuthenticationSummary:
    """What happened to one batch of credential retries."""

    resolved: list[str] = field(default_factory=list)
    failed: list[tuple[str, TagCheckError]] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)


class CredentialAuthenticator:
    """Replay the token exchange with Basic auth for pending images."""

    def __init__(self, client: RegistryClient) -> None:
        self.client = client

    def fetch_tags(self, entry: PendingAuthorization, credentials: Credentials) -> list[str]:
        """Return the tags of *entry* fetched with *credentials*.

        Raises:
            AuthenticationFailed: If the token endpoint or the registry
                rejects the credentials.
            TagCheckError: On transport or decode failures.
        """
        name = entry.reference.raw_name

        response = self.client.get_token(entry.challenge, credentials)
        if response.status_code != 200:
            raise AuthenticationFailed(
                f"Token request failed for {name}, status {response.status_code}"
            )
        token = decode_token(response)

        response = self.client.get_tag_list(entry.reference, token=token)
        if response.status_code != 200:
            raise AuthenticationFailed(f"Failed authentication for {name}")
        return decode_tags(response)

    def authenticate(
        self,
        store: ClassificationStore,
        batch: Iterable[tuple[int, Credentials]],
    ) -> AuthenticationSummary:
        """Retry each ``(position, credentials)`` pair of *batch*.

        Successful entries move from ``pending`` to ``resolved``; the
        removals are applied only after the whole batch has run.
        """
        summary = AuthenticationSummary()
        to_remove: list[int] = []

        for position, credentials in batch:
            entry = store.pending[position]
            name = entry.reference.raw_name
            if credentials.declined:
                logger.debug("No credentials given for %s, skipping", name)
                summary.declined.append(name)
                continue

            try:
                tags = self.fetch_tags(entry, credentials)
            except TagCheckError as exc:
                logger.info("Authentication for %s failed: %s", name, exc)
                summary.failed.append((name, exc))
                continue

            logger.info("Tags for %s downloaded successfully", name)
            store.add_resolved(entry.reference, tags)
            summary.resolved.append(name)
            to_remove.append(position)

        store.remove_pending(to_remove)
        return summary

    def authorize_from_sources(
        self,
        store: ClassificationStore,
        cli_auths: list[str] | None = None,
    ) -> AuthenticationSummary:
        """Retry pending images whose registry has configured credentials.

        See :func:`~tagcheck_cli.registry.auth.resolve_credentials` for the
        lookup order.
        """
        batch: list[tuple[int, Credentials]] = []
        for entry in store.snapshot():
            credentials = resolve_credentials(entry.reference.registry, cli_auths)
            if credentials is not None:
                batch.append((entry.position, credentials))

        if not batch:
            return AuthenticationSummary()
        return self.authenticate(store, batch)
