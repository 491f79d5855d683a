"""Parse Docker image references into registry components."""

from __future__ import annotations

from dataclasses import dataclass

from tagcheck_cli.errors import InvalidReference

DEFAULT_REGISTRY = "registry-1.docker.io"
DEFAULT_NAMESPACE = "library"


@dataclass
class ImageReference:
    """Parsed reference to a Docker image on a registry.

    Attributes:
        raw_name: The image name exactly as reported by the container runtime.
        registry: Registry hostname (e.g. ``registry-1.docker.io``).
        namespace: Repository namespace (e.g. ``library``).
        name: Image name (e.g. ``nginx``).
        tag: Deployed tag, empty when the reference has none.
    """

    raw_name: str
    registry: str
    namespace: str
    name: str
    tag: str = ""

    @property
    def repository(self) -> str:
        """Return the repository path used in registry URLs."""
        return f"{self.namespace}/{self.name}"


def parse_image_reference(raw_name: str) -> ImageReference:
    """Parse an image reference such as ``registry.example.com/team/app:1.2.3``.

    Supported formats:

    * ``nginx`` / ``nginx:1.25``  (official image on Docker Hub)
    * ``author/image:0.2.0``  (user image on Docker Hub)
    * ``registry.example.com/author/image:0.1.0``  (private registry)

    Args:
        raw_name: The image reference string.

    Returns:
        An :class:`ImageReference` with the parsed components.

    Raises:
        InvalidReference: If the reference cannot be parsed.
    """
    segments = raw_name.split("/")
    name, tag = _split_name_and_tag(segments[-1])

    if len(segments) == 1:
        registry, namespace = DEFAULT_REGISTRY, DEFAULT_NAMESPACE
    elif len(segments) == 2:
        registry, namespace = DEFAULT_REGISTRY, segments[0]
    elif len(segments) == 3:
        registry = segments[0]
        # A host always carries a dot; anything else is an ambiguous namespace.
        if "." not in registry:
            raise InvalidReference(f"{registry} is invalid registry")
        namespace = segments[1]
    else:
        raise InvalidReference(f"{raw_name} has too many path segments")

    return ImageReference(
        raw_name=raw_name,
        registry=registry,
        namespace=namespace,
        name=name,
        tag=tag,
    )


def _split_name_and_tag(name_tag: str) -> tuple[str, str]:
    """Split ``name:tag`` into a ``(name, tag)`` tuple."""
    parts = name_tag.split(":")
    if len(parts) > 2:
        raise InvalidReference(f"{name_tag} is invalid image name format")
    if len(parts) == 2:
        return parts[0], parts[1]
    return parts[0], ""
