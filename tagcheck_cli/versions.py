"""Version comparator — finds tags newer than the deployed one."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

import semver

from tagcheck_cli.errors import InvalidConstraint, InvalidTag
from tagcheck_cli.store import ResolvedImage

logger = logging.getLogger(__name__)

# Dotted numbers (one to three), an optional pre-release and optional build
# metadata, with an optional ``v`` prefix. Leading zeros are tolerated since
# image tags such as ``2024.01`` are common.
_VERSION_RE = re.compile(
    r"^v?(?P<numbers>[0-9]+(?:\.[0-9]+){0,2})"
    r"(?:-(?P<prerelease>[0-9A-Za-z\-~]+(?:\.[0-9A-Za-z\-~]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-~]+(?:\.[0-9A-Za-z\-~]+)*))?$"
)

# Tag that always points at the newest push; nothing can be newer than it.
_FLOATING_TAG = "latest"


@dataclass(frozen=True)
class ParsedVersion:
    """A tag parsed as a semantic version.

    Attributes:
        original: The tag literal, emitted unchanged in reports.
        version: The semantic version value (missing segments are zero).
        segments: How many numeric segments the literal spells out, so that
            ``1.2`` and ``1.2.0`` stay distinguishable.
    """

    original: str
    version: semver.Version
    segments: int


@dataclass
class ImageNewerVersions:
    """Newer versions found for one image; empty means up to date."""

    image_name: str
    newer_versions: list[str] = field(default_factory=list)

    @property
    def up_to_date(self) -> bool:
        return not self.newer_versions


def parse_version(tag: str) -> ParsedVersion | None:
    """Parse *tag* as a semantic version, or return ``None``."""
    match = _VERSION_RE.match(tag)
    if match is None:
        return None

    numbers = [int(n) for n in match.group("numbers").split(".")]
    segments = len(numbers)
    numbers += [0] * (3 - segments)
    version = semver.Version(
        *numbers,
        prerelease=match.group("prerelease"),
        build=match.group("build"),
    )
    return ParsedVersion(original=tag, version=version, segments=segments)


def validate_tag(tag: str) -> None:
    """Reject deployed tags that cannot be compared against other versions.

    Raises:
        InvalidTag: If *tag* is empty, ``latest`` or not a semantic version.
    """
    if not tag:
        raise InvalidTag("not specified tag")
    if tag == _FLOATING_TAG:
        raise InvalidTag("floating latest tag")
    if parse_version(tag) is None:
        raise InvalidTag(f"tag {tag} is not a semantic version")


def parse_sorted_versions(tags: Iterable[str]) -> list[ParsedVersion]:
    """Parse *tags*, dropping non-versions, and sort them ascending."""
    versions: list[ParsedVersion] = []
    for tag in tags:
        parsed = parse_version(tag)
        if parsed is None:
            logger.debug("Failed to create version from tag: %s", tag)
            continue
        versions.append(parsed)
    return sorted(versions, key=lambda v: v.version)


def filter_by_segments(
    versions: Iterable[ParsedVersion], tag_segments: int
) -> list[ParsedVersion]:
    """Keep versions spelling out no more segments than the deployed tag."""
    return [v for v in versions if v.segments <= tag_segments]


class GreaterThan:
    """The constraint ``version > tag``.

    A pre-release candidate only matches when the bound is a pre-release of
    the same major.minor.patch.

    Raises:
        InvalidConstraint: If *tag* is not a semantic version.
    """

    def __init__(self, tag: str) -> None:
        bound = parse_version(tag)
        if bound is None:
            raise InvalidConstraint(f"Malformed constraint: >{tag}")
        self.bound = bound

    def check(self, candidate: ParsedVersion) -> bool:
        if not self._prerelease_allowed(candidate.version):
            return False
        return candidate.version > self.bound.version

    def _prerelease_allowed(self, version: semver.Version) -> bool:
        bound = self.bound.version
        if not version.prerelease:
            return True
        if not bound.prerelease:
            return False
        return version.to_tuple()[:3] == bound.to_tuple()[:3]

    def __repr__(self) -> str:
        return f">{self.bound.original}"


def find_newer_versions(
    current_tag: str,
    tags: Iterable[str],
    all_versions: bool = False,
) -> list[str]:
    """Return the tags newer than *current_tag*, ascending, as literals.

    Unless *all_versions* is set, only tags with at most as many dotted
    segments as *current_tag* are considered, so a deployed ``1.2`` is not
    reported as outdated by ``1.2.1``.

    Raises:
        InvalidConstraint: If *current_tag* is not a semantic version.
    """
    versions = parse_sorted_versions(tags)

    if not all_versions:
        tag_segments = len(current_tag.split("."))
        versions = filter_by_segments(versions, tag_segments)

    constraint = GreaterThan(current_tag)
    return [v.original for v in versions if constraint.check(v)]


def check_images_for_newer_versions(
    resolved: Iterable[ResolvedImage],
    all_versions: bool = False,
) -> tuple[list[ImageNewerVersions], list[tuple[str, InvalidConstraint]]]:
    """Compare every resolved image against its published tags.

    Returns:
        The per-image results in resolution order, and the images skipped
        because their deployed tag is not a valid constraint.
    """
    results: list[ImageNewerVersions] = []
    failures: list[tuple[str, InvalidConstraint]] = []

    for image in resolved:
        name = image.reference.raw_name
        try:
            newer = find_newer_versions(image.reference.tag, image.tags, all_versions)
        except InvalidConstraint as exc:
            logger.info("Failed to check image %s for newer versions, %s", name, exc)
            failures.append((name, exc))
            continue
        results.append(ImageNewerVersions(image_name=name, newer_versions=newer))

    return results, failures
