"""Result sets accumulated while resolving tags."""

from __future__ import annotations

from dataclasses import dataclass, field

from tagcheck_cli.registry.challenge import AuthChallenge
from tagcheck_cli.registry.parser import ImageReference


@dataclass
class ResolvedImage:
    """An image whose tag list was retrieved."""

    reference: ImageReference
    tags: list[str] = field(default_factory=list)


@dataclass
class PendingAuthorization:
    """An image whose tag list needs user credentials.

    ``position`` is the entry's index in :attr:`ClassificationStore.pending`.
    """

    reference: ImageReference
    challenge: AuthChallenge
    position: int


@dataclass
class ClassificationStore:
    """Holds resolved images and images awaiting authorization.

    Only the tag resolver and the credential authenticator mutate it, and an
    image is never in both lists.
    """

    resolved: list[ResolvedImage] = field(default_factory=list)
    pending: list[PendingAuthorization] = field(default_factory=list)

    def add_resolved(self, reference: ImageReference, tags: list[str]) -> ResolvedImage:
        image = ResolvedImage(reference=reference, tags=list(tags))
        self.resolved.append(image)
        return image

    def add_pending(
        self, reference: ImageReference, challenge: AuthChallenge
    ) -> PendingAuthorization:
        entry = PendingAuthorization(
            reference=reference,
            challenge=challenge,
            position=len(self.pending),
        )
        self.pending.append(entry)
        return entry

    def remove_pending(self, positions: list[int]) -> None:
        """Remove pending entries by position once a batch has completed.

        Removal runs in descending index order so earlier indices stay valid;
        survivors keep their relative order and get renumbered.
        """
        for position in sorted(set(positions), reverse=True):
            del self.pending[position]
        for index, entry in enumerate(self.pending):
            entry.position = index

    def snapshot(self) -> list[PendingAuthorization]:
        """Return a copy of the pending list for a collaborator to render."""
        return list(self.pending)
