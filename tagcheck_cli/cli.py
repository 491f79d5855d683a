"""CLI entry point for tagcheck-cli."""

from __future__ import annotations

import logging
import sys

import click

from tagcheck_cli.authenticator import AuthenticationSummary, CredentialAuthenticator
from tagcheck_cli.containers import ContainerListError, list_running_containers
from tagcheck_cli.errors import TagCheckError
from tagcheck_cli.prompt import PromptCollector
from tagcheck_cli.registry.client import DEFAULT_TIMEOUT, RegistryClient
from tagcheck_cli.registry.parser import parse_image_reference
from tagcheck_cli.report import ReportError, build_report, format_line, format_skip, render_json
from tagcheck_cli.resolver import TagResolver
from tagcheck_cli.store import ClassificationStore
from tagcheck_cli.versions import check_images_for_newer_versions

logger = logging.getLogger(__name__)


def _echo_failures(summary: AuthenticationSummary) -> None:
    for name, exc in summary.failed:
        click.echo(f"  ✗ {name}: {exc}", err=True)
    for name in summary.resolved:
        click.echo(f"  Tags for {name} downloaded successfully", err=True)


@click.group()
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    envvar="TAGCHECK_VERBOSE",
    help="Enable verbose (DEBUG) logging.",
)
def main(verbose: bool) -> None:
    """tagcheck — find newer tags for the images of running containers."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@main.command()
@click.argument("images", nargs=-1)
@click.option(
    "-a",
    "--all",
    "all_versions",
    is_flag=True,
    default=False,
    envvar="TAGCHECK_ALL",
    help="Print all newer versions, not only those with as many segments as the deployed tag.",
)
@click.option(
    "-k",
    "--insecure",
    is_flag=True,
    default=False,
    envvar="TAGCHECK_INSECURE",
    help="Disable TLS certificates validation.",
)
@click.option(
    "-t",
    "--timeout",
    type=click.IntRange(min=1),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    envvar="TAGCHECK_TIMEOUT",
    help="Timeout for HTTP requests in seconds.",
)
@click.option(
    "--auth",
    "auth",
    multiple=True,
    help="Credentials in registry.domain=user:pass format. Can be repeated.",
)
@click.option(
    "--interactive/--no-interactive",
    default=None,
    envvar="TAGCHECK_INTERACTIVE",
    help="Prompt for credentials of images that refuse anonymous access (default: when stdin is a terminal).",
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    envvar="TAGCHECK_FORMAT",
    help="Report format (default: text).",
)
def check(
    images: tuple[str, ...],
    all_versions: bool,
    insecure: bool,
    timeout: int,
    auth: tuple[str, ...],
    interactive: bool | None,
    output_format: str,
) -> None:
    """Report newer tags for IMAGES, or for every running container.

    Each image is reported once: skipped with a reason, up to date, or with
    the list of newer versions.
    """
    if images:
        targets = [(image, None) for image in images]
    else:
        try:
            containers = list_running_containers()
        except ContainerListError as exc:
            raise click.ClickException(str(exc)) from exc
        if not containers:
            click.echo("No running containers")
            return
        targets = [(c.image, c.name) for c in containers]

    client = RegistryClient(timeout=timeout, insecure=insecure)
    resolver = TagResolver(client)
    authenticator = CredentialAuthenticator(client)
    store = ClassificationStore()
    skipped: list[tuple[str, str]] = []

    def on_skip(name: str, exc: TagCheckError | str) -> None:
        skipped.append((name, str(exc)))
        click.echo(format_skip(name, exc), err=True)

    # 1. Anonymous resolution, one image at a time.
    for image, container in targets:
        label = f"{image} [{container}]" if container else image
        click.echo(f"Checking {label}", err=True)
        resolver.check_images([image], store, on_skip=on_skip)

    # 2. Configured credentials, then the interactive prompt.
    if store.pending:
        _echo_failures(authenticator.authorize_from_sources(store, list(auth)))

    if interactive is None:
        interactive = sys.stdin.isatty()
    if interactive:
        collector = PromptCollector()
        while store.pending:
            batch = collector.collect(store.snapshot())
            if batch is None:
                break
            _echo_failures(authenticator.authenticate(store, batch))

    for entry in store.pending:
        on_skip(entry.reference.raw_name, "registry requires authentication")

    # 3. Compare versions and report.
    results, failures = check_images_for_newer_versions(store.resolved, all_versions)
    for name, exc in failures:
        on_skip(name, exc)

    if output_format.lower() == "json":
        try:
            report = build_report(results, skipped)
        except ReportError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(render_json(report))
        return

    click.echo(err=True)
    for result in results:
        click.echo(format_line(result))


@main.command()
@click.argument("image")
def parse(image: str) -> None:
    """Show how IMAGE is split into registry, namespace, name and tag."""
    try:
        ref = parse_image_reference(image)
    except TagCheckError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"registry:  {ref.registry}")
    click.echo(f"namespace: {ref.namespace}")
    click.echo(f"name:      {ref.name}")
    click.echo(f"tag:       {ref.tag}")


@main.command()
def version() -> None:
    """Show the installed tagcheck-cli version."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as dist_version

    try:
        installed = dist_version("tagcheck-cli")
    except PackageNotFoundError:
        installed = "unknown"
    click.echo(f"tagcheck-cli version {installed}")


if __name__ == "__main__":
    main()
