"""CLI: credx domain derive|check"""

import base64
import binascii

import click
from rich.console import Console

from credx.errors import InvalidArgumentError, MalformedIdentifierError
from credx.models.identifiers import AuthenticationDomain

console = Console()


@click.group()
def domain():
    """Authentication domains."""


@domain.command("derive")
@click.argument("app_id")
@click.argument("credential_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--base64", "is_base64", is_flag=True, help="The file holds base64 text, not raw bytes.")
def domain_derive(app_id, credential_file, is_base64):
    """Derive the app identity domain for APP_ID signed with CREDENTIAL_FILE."""
    with open(credential_file, "rb") as f:
        data = f.read()
    if is_base64:
        text = b"".join(data.split())
        try:
            data = base64.b64decode(text + b"=" * (-len(text) % 4), validate=True)
        except binascii.Error as e:
            console.print(f"[red]Not valid base64: {e}[/red]")
            raise SystemExit(1)
    try:
        derived = AuthenticationDomain.for_application(app_id, data)
    except InvalidArgumentError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    click.echo(str(derived))


@domain.command("check")
@click.argument("uri")
def domain_check(uri):
    """Validate URI as an authentication domain."""
    try:
        parsed = AuthenticationDomain(uri)
    except MalformedIdentifierError as e:
        console.print(f"[red]Invalid domain: {e}[/red]")
        raise SystemExit(1)

    if parsed.is_app_identity():
        console.print(f"[green]App identity[/green] {parsed.application_id}")
    elif parsed.is_web_domain():
        console.print(f"[green]Web domain[/green] {parsed.authority}")
    else:
        console.print(f"[yellow]Other domain[/yellow] scheme={parsed.scheme}")
