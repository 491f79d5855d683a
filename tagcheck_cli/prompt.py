"""Interactive collection of credentials for images that need them."""

from __future__ import annotations

import click

from tagcheck_cli.registry.auth import Credentials
from tagcheck_cli.store import PendingAuthorization

_TIPS = "Select images by number (e.g. 1,3 or 2-4), 'all' for every image, Enter to finish."


def parse_selection(text: str, count: int) -> list[int]:
    """Turn ``"1,3-4"`` or ``"all"`` into zero-based positions.

    Raises:
        ValueError: If the text names anything outside ``1..count``.
    """
    text = text.strip().lower()
    if text in ("all", "*"):
        return list(range(count))

    positions: set[int] = set()
    for part in text.replace(" ", ",").split(","):
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            start, end = int(start_s), int(end_s)
        else:
            start = end = int(part)
        if start < 1 or end > count or start > end:
            raise ValueError(f"{part} is out of range 1-{count}")
        positions.update(range(start - 1, end))
    return sorted(positions)


class PromptCollector:
    """Ask which pending images to retry and with which credentials.

    ``collect`` returns ``None`` when the user finishes or cancels, so the
    caller stops retrying.
    """

    def collect(
        self, pending: list[PendingAuthorization]
    ) -> list[tuple[int, Credentials]] | None:
        if not pending:
            return None

        click.secho("Unauthorized images", fg="red", bold=True, err=True)
        for entry in pending:
            click.echo(f"  {entry.position + 1:3d}. {entry.reference.raw_name}", err=True)
        click.echo(_TIPS, err=True)

        try:
            positions = self._ask_selection(len(pending))
            if not positions:
                return None
            credentials = self._ask_credentials()
        except click.Abort:
            click.echo(err=True)
            return None

        return [(pending[p].position, credentials) for p in positions]

    def _ask_selection(self, count: int) -> list[int]:
        while True:
            text = click.prompt("Images", default="", show_default=False, err=True)
            if not text.strip():
                return []
            try:
                return parse_selection(text, count)
            except ValueError as exc:
                click.echo(f"Invalid selection: {exc}", err=True)

    def _ask_credentials(self) -> Credentials:
        username = click.prompt("Enter username", default="", show_default=False, err=True)
        if not username:
            return Credentials()
        password = click.prompt("Password", hide_input=True, err=True)
        return Credentials(username=username, password=password)
