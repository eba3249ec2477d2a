"""
credx CLI: `credx` command.

Commands:
  credx password generate     Generate passwords for a specification
  credx password check PW     Check a password against a specification
  credx domain derive APP F   Derive an app identity domain from a signing credential
  credx domain check URI      Validate and classify an authentication domain
  credx providers <cmd>       Manage recognised providers
"""

import json
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from credx.config import ExchangeSettings
from credx.constants import VERSION

console = Console()
CONFIG_FILE = Path.home() / ".credx" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _get_settings() -> ExchangeSettings:
    """Environment settings with the saved CLI choices merged over them."""
    saved = _load_config().get("extra_known_providers", [])
    if not isinstance(saved, list):
        saved = [saved]
    try:
        settings = ExchangeSettings()
        if not saved:
            return settings
        merged = list(dict.fromkeys(settings.extra_known_providers + saved))
        return ExchangeSettings(extra_known_providers=merged)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {e.errors(include_url=False)[0]['msg']}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option(VERSION)
def main():
    """credx CLI: credential exchange protocol tools."""


# Register subcommands from separate modules
from credx.cli.domain import domain
from credx.cli.password import password
from credx.cli.providers import providers

main.add_command(password)
main.add_command(domain)
main.add_command(providers)


if __name__ == "__main__":
    main()
