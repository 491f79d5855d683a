"""Error kinds raised while checking a single image.

Every error here is scoped to one image: the CLI catches them at the image
boundary, reports the reason and moves on to the next image.
"""

from __future__ import annotations


class TagCheckError(Exception):
    """Base class for all per-image errors."""


class InvalidReference(TagCheckError):
    """Raised when an image name cannot be split into its components."""


class InvalidTag(TagCheckError):
    """Raised when the deployed tag is empty, ``latest`` or not a version."""


class InvalidConstraint(TagCheckError):
    """Raised when the deployed tag cannot be turned into a version constraint."""


class RegistryError(TagCheckError):
    """Raised when a registry API call fails."""


class UnsupportedRegistry(RegistryError):
    """Raised when a registry does not implement the V2 API."""


class TLSValidationError(RegistryError):
    """Raised when the registry certificate cannot be validated."""


class NetworkError(RegistryError):
    """Raised when a request to the registry or token endpoint fails."""


class UnexpectedStatusCode(RegistryError):
    """Raised when the registry answers with a status the flow does not expect."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"Unexpected status code {status_code} for {url}")
        self.status_code = status_code
        self.url = url


class MalformedChallenge(RegistryError):
    """Raised when a ``WWW-Authenticate`` header cannot be parsed."""


class TokenDecodeError(RegistryError):
    """Raised when the token endpoint response holds no usable token."""


class TagDecodeError(RegistryError):
    """Raised when a tags list response cannot be decoded."""


class AuthenticationFailed(RegistryError):
    """Raised when user-supplied credentials are rejected."""
