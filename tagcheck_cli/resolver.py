"""Tag resolver — walks the anonymous → challenge → token flow for an image."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from tagcheck_cli.errors import MalformedChallenge, TagCheckError, UnexpectedStatusCode
from tagcheck_cli.registry.capability import RegistryCapabilityCache
from tagcheck_cli.registry.challenge import AuthChallenge, parse_challenge
from tagcheck_cli.registry.client import RegistryClient, decode_tags, decode_token
from tagcheck_cli.registry.parser import ImageReference, parse_image_reference
from tagcheck_cli.store import ClassificationStore
from tagcheck_cli.versions import validate_tag

logger = logging.getLogger(__name__)


class ResolveState(enum.Enum):
    ANON_FETCH = "anon_fetch"
    CHALLENGE = "challenge"
    TOKEN_EXCHANGE = "token_exchange"
    AUTH_FETCH = "auth_fetch"
    SUCCESS = "success"
    PENDING_AUTH = "pending_auth"
    ERROR = "error"


@dataclass
class ResolveOutcome:
    """Terminal classification of one image.

    ``trail`` lists every state visited, terminal state included.
    """

    reference: ImageReference
    status: ResolveState
    tags: list[str] = field(default_factory=list)
    challenge: AuthChallenge | None = None
    error: TagCheckError | None = None
    trail: list[ResolveState] = field(default_factory=list)


class TagResolver:
    """Retrieve tag lists, anonymously where the registry allows it.

    Args:
        client: The registry HTTP client.
        capabilities: Cache of registry V2 support, owned by this resolver
            unless one is passed in.
    """

    def __init__(
        self,
        client: RegistryClient,
        capabilities: RegistryCapabilityCache | None = None,
    ) -> None:
        self.client = client
        self.capabilities = capabilities or RegistryCapabilityCache(client)

    def resolve(self, reference: ImageReference) -> ResolveOutcome:
        """Run the state machine for *reference*; errors end in ``ERROR``."""
        trail: list[ResolveState] = []
        outcome = ResolveOutcome(reference=reference, status=ResolveState.ERROR, trail=trail)
        try:
            self._run(outcome, trail)
        except TagCheckError as exc:
            outcome.status = ResolveState.ERROR
            outcome.error = exc
            trail.append(ResolveState.ERROR)
        return outcome

    def _run(self, outcome: ResolveOutcome, trail: list[ResolveState]) -> None:
        reference = outcome.reference
        self.capabilities.check(reference.registry)

        trail.append(ResolveState.ANON_FETCH)
        response = self.client.get_tag_list(reference)
        if response.status_code == 200:
            self._succeed(outcome, decode_tags(response))
            return
        if response.status_code != 401:
            raise UnexpectedStatusCode(response.status_code, response.url)

        trail.append(ResolveState.CHALLENGE)
        header = response.headers.get("WWW-Authenticate")
        try:
            challenge = parse_challenge(header)
        except MalformedChallenge as exc:
            raise MalformedChallenge(
                f"Failed to create url for authentication for {reference.raw_name}, {exc}"
            ) from exc
        outcome.challenge = challenge

        trail.append(ResolveState.TOKEN_EXCHANGE)
        token = decode_token(self.client.get_token(challenge))

        trail.append(ResolveState.AUTH_FETCH)
        response = self.client.get_tag_list(reference, token=token)
        if response.status_code == 200:
            self._succeed(outcome, decode_tags(response))
        elif response.status_code == 401:
            outcome.status = ResolveState.PENDING_AUTH
            trail.append(ResolveState.PENDING_AUTH)
        else:
            raise UnexpectedStatusCode(response.status_code, response.url)

    @staticmethod
    def _succeed(outcome: ResolveOutcome, tags: list[str]) -> None:
        outcome.status = ResolveState.SUCCESS
        outcome.tags = tags
        outcome.trail.append(ResolveState.SUCCESS)

    def classify(self, reference: ImageReference, store: ClassificationStore) -> ResolveOutcome:
        """Resolve *reference* and record the outcome in *store*."""
        outcome = self.resolve(reference)
        if outcome.status is ResolveState.SUCCESS:
            store.add_resolved(reference, outcome.tags)
        elif outcome.status is ResolveState.PENDING_AUTH and outcome.challenge is not None:
            store.add_pending(reference, outcome.challenge)
        else:
            logger.debug("Skipping %s: %s", reference.raw_name, outcome.error)
        return outcome

    def check_images(
        self,
        raw_names: Iterable[str],
        store: ClassificationStore,
        on_skip: Callable[[str, TagCheckError], None] | None = None,
    ) -> list[ResolveOutcome]:
        """Parse, validate and classify each image, in order.

        Per-image failures never stop the loop; *on_skip* is called once for
        each image that ends up in neither result set.
        """
        outcomes: list[ResolveOutcome] = []
        for raw_name in raw_names:
            try:
                reference = parse_image_reference(raw_name)
                validate_tag(reference.tag)
            except TagCheckError as exc:
                logger.info("Ignoring %s due to %s", raw_name, exc)
                if on_skip is not None:
                    on_skip(raw_name, exc)
                continue

            outcome = self.classify(reference, store)
            outcomes.append(outcome)
            if outcome.error is not None and on_skip is not None:
                on_skip(raw_name, outcome.error)
        return outcomes
