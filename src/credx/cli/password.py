"""CLI: credx password generate|check"""

import click
from rich.console import Console
from rich.table import Table

from credx.errors import InvalidSpecificationError
from credx.models.password import (
    ConformanceFlag,
    PasswordSpecification,
    PasswordSpecificationBuilder,
    check_result_for_error,
)

console = Console()


def _parse_requirement(value: str) -> tuple[str, int]:
    chars, sep, count = value.rpartition(":")
    if not sep or not chars:
        raise click.BadParameter(f"expected CHARS:COUNT, got {value!r}")
    try:
        return chars, int(count)
    except ValueError:
        raise click.BadParameter(f"count in {value!r} is not a number")


def _build_spec(min_length, max_length, allow, require) -> PasswordSpecification:
    if min_length is None and max_length is None and not allow and not require:
        return PasswordSpecification.DEFAULT
    default = PasswordSpecification.DEFAULT
    builder = PasswordSpecificationBuilder().of_length(
        min_length if min_length is not None else default.min_length,
        max_length if max_length is not None else default.max_length,
    )
    for chars in allow:
        builder.allow(chars)
    for requirement in require:
        chars, count = _parse_requirement(requirement)
        builder.require(chars, count)
    return builder.build()


def spec_options(f):
    f = click.option("--require", multiple=True, metavar="CHARS:COUNT", help="Required characters and count.")(f)
    f = click.option("--allow", multiple=True, metavar="CHARS", help="Allowed characters.")(f)
    f = click.option("--max", "max_length", type=int, default=None, help="Maximum length.")(f)
    f = click.option("--min", "min_length", type=int, default=None, help="Minimum length.")(f)
    return f


def _spec_or_exit(min_length, max_length, allow, require) -> PasswordSpecification:
    try:
        return _build_spec(min_length, max_length, allow, require)
    except InvalidSpecificationError as e:
        console.print(f"[red]Invalid specification: {e}[/red]")
        raise SystemExit(2)


@click.group()
def password():
    """Password specifications."""


@password.command("generate")
@spec_options
@click.option("--count", "-n", default=1, type=click.IntRange(min=1), help="Number of passwords.")
def password_generate(min_length, max_length, allow, require, count):
    """Generate passwords conforming to a specification."""
    spec = _spec_or_exit(min_length, max_length, allow, require)
    for _ in range(count):
        click.echo(spec.generate())


@password.command("check")
@click.argument("candidate")
@spec_options
def password_check(candidate, min_length, max_length, allow, require):
    """Check a password against a specification."""
    spec = _spec_or_exit(min_length, max_length, allow, require)
    result = spec.check_conformance(candidate)
    if result == ConformanceFlag.CONFORMS:
        console.print("[green]Password conforms[/green]")
        return

    table = Table(title="Conformance problems")
    table.add_column("Problem", style="bold")
    for flag in (
        ConformanceFlag.LENGTH_MISMATCH,
        ConformanceFlag.REQUIRED_CHARACTER_MISSING,
        ConformanceFlag.DISALLOWED_CHARACTER,
    ):
        if check_result_for_error(result, flag):
            table.add_row(flag.name)
    console.print(table)
    raise SystemExit(1)
