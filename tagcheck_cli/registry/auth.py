"""Credentials for registries that refuse anonymous pulls."""

from __future__ import annotations

import base64
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_DOCKER_HUB_ALIASES = ("docker.io", "registry-1.docker.io", "index.docker.io")


@dataclass
class Credentials:
    """Username and password for HTTP Basic auth against a token endpoint.

    An empty username means the user declined to authenticate.
    """

    username: str = ""
    password: str = ""

    @property
    def declined(self) -> bool:
        return self.username == ""


def resolve_credentials(
    registry: str,
    cli_auths: list[str] | None = None,
) -> Credentials | None:
    """Resolve credentials for a given registry domain.

    Order of precedence:
    1. CLI-provided auth overrides (--auth flag)
    2. Domain-specific env vars (e.g., TAGCHECK_AUTH_REGISTRY_EXAMPLE_COM_USERNAME)
    3. Global env vars (TAGCHECK_USERNAME / TAGCHECK_PASSWORD)
    4. Docker config.json (~/.docker/config.json)

    Docker Hub may be named by any of its aliases (``docker.io``,
    ``registry-1.docker.io``, ``index.docker.io``).

    Args:
        registry: The registry hostname to authenticate against.
        cli_auths: A list of string overrides in the form 'registry=user:pass'.

    Returns:
        The :class:`Credentials` found, otherwise ``None``.
    """
    names = _aliases(registry)

    # 1. Check CLI overrides
    for auth_override in cli_auths or []:
        if "=" not in auth_override:
            continue
        domain, creds = auth_override.split("=", 1)
        if domain in names and ":" in creds:
            user, pwd = creds.split(":", 1)
            logger.debug("Using CLI override credentials for %s", registry)
            return Credentials(user, pwd)

    # 2. Check domain-specific environment variables
    for name in names:
        env_domain = name.upper().replace(".", "_").replace(":", "_").replace("-", "_")
        domain_user = os.environ.get(f"TAGCHECK_AUTH_{env_domain}_USERNAME")
        domain_pass = os.environ.get(f"TAGCHECK_AUTH_{env_domain}_PASSWORD")
        if domain_user and domain_pass:
            logger.debug("Using domain-specific env vars for %s", registry)
            return Credentials(domain_user, domain_pass)

    # 3. Check global environment variables
    global_user = os.environ.get("TAGCHECK_USERNAME")
    global_pass = os.environ.get("TAGCHECK_PASSWORD")
    if global_user and global_pass:
        logger.debug("Using global env vars for %s", registry)
        return Credentials(global_user, global_pass)

    # 4. Check Docker config.json
    return _from_docker_config(registry)


def _aliases(registry: str) -> tuple[str, ...]:
    if registry in _DOCKER_HUB_ALIASES:
        return _DOCKER_HUB_ALIASES
    return (registry,)


def _from_docker_config(registry: str) -> Credentials | None:
    docker_config_path = Path.home() / ".docker" / "config.json"
    try:
        if not docker_config_path.exists():
            return None
        with open(docker_config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        logger.debug("Failed to read %s: %s", docker_config_path, e)
        return None

    auths = config.get("auths", {}) if isinstance(config, dict) else {}
    candidates = [
        registry,
        f"https://{registry}",
        f"https://{registry}/v1/",
        f"https://{registry}/v2/",
    ]
    if registry in _DOCKER_HUB_ALIASES:
        candidates.append("https://index.docker.io/v1/")

    for candidate in candidates:
        entry = auths.get(candidate)
        if not isinstance(entry, dict) or "auth" not in entry:
            continue
        try:
            auth_str = base64.b64decode(entry["auth"]).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug("Failed to decode auth from config.json for %s: %s", candidate, e)
            continue
        if ":" in auth_str:
            user, pwd = auth_str.split(":", 1)
            logger.debug("Using Docker config.json credentials for %s", registry)
            return Credentials(user, pwd)

    return None
