"""CLI: credx providers list|add|reset"""

import click
from rich.console import Console
from rich.table import Table

from credx.errors import MalformedIdentifierError
from credx.models.identifiers import AuthenticationDomain
from credx.providers import DEFAULT_KNOWN_PROVIDERS

console = Console()


def _load_config() -> dict:
    from credx.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from credx.cli.main import _save_config
    _save_config(cfg)


def _get_settings():
    from credx.cli.main import _get_settings
    return _get_settings()


@click.group()
def providers():
    """Recognised credential providers."""


@providers.command("list")
def providers_list():
    """List recognised providers."""
    settings = _get_settings()
    default = settings.default_provider_domain()
    extra = set(settings.extra_provider_domains())

    table = Table(title="Known providers")
    table.add_column("Application", style="bold", no_wrap=True)
    table.add_column("Source")
    table.add_column("Domain", overflow="fold")
    for d in sorted(DEFAULT_KNOWN_PROVIDERS | extra, key=lambda d: d.application_id if d.is_app_identity() else str(d)):
        source = "built-in" if d in DEFAULT_KNOWN_PROVIDERS else "added"
        if d == default:
            source += ", default"
        app_id = d.application_id if d.is_app_identity() else ""
        table.add_row(app_id, source, str(d))
    console.print(table)


@providers.command("add")
@click.argument("domain_uri")
def providers_add(domain_uri):
    """Recognise another provider by its app identity domain."""
    try:
        parsed = AuthenticationDomain(domain_uri)
    except MalformedIdentifierError as e:
        console.print(f"[red]Invalid domain: {e}[/red]")
        raise SystemExit(1)
    if not parsed.is_app_identity():
        console.print("[red]Providers are identified by app-id:// domains[/red]")
        raise SystemExit(1)

    cfg = _load_config()
    saved = cfg.get("extra_known_providers", [])
    if domain_uri not in saved:
        saved.append(domain_uri)
    cfg["extra_known_providers"] = saved
    _save_config(cfg)
    console.print(f"[green]Added {parsed.application_id}[/green]")


@providers.command("reset")
def providers_reset():
    """Forget every added provider."""
    cfg = _load_config()
    cfg.pop("extra_known_providers", None)
    _save_config(cfg)
    console.print("[green]Known providers reset to defaults[/green]")
