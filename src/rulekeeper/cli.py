"""rulekeeper CLI entry point."""

# rulekeeper:service=cli

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from rulekeeper import __version__
from rulekeeper.engine.syntax import DEFAULT_DIALECT, dialect_for_extension, supported_dialects


# rulekeeper:service=cli
@click.group()
@click.version_option(version=__version__, prog_name="rulekeeper")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """rulekeeper - check exercise submissions against a rules document."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    elif quiet:
        logging.basicConfig(level=logging.ERROR)


def _read_source(source: str) -> tuple[str, str]:
    """Return ``(code, display_name)``; ``-`` reads stdin."""
    if source == "-":
        return sys.stdin.read(), "<stdin>"
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8"), path.name
    except OSError as exc:
        click.echo(f"Error: cannot read {source}: {exc.strerror}", err=True)
        sys.exit(2)


# rulekeeper:domain=engine
@main.command()
@click.argument("source", type=str)
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Rules document (.json, .yml or .yaml).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 if violations found.",
)
@click.option(
    "--language",
    "dialect",
    type=click.Choice(sorted(supported_dialects())),
    default=None,
    help="Grammar to parse with (default: from the file extension, else typescript).",
)
@click.pass_context
def check(
    ctx: click.Context,
    source: str,
    *,
    rules_path: Path,
    fmt: str | None,
    strict: bool,
    dialect: str | None,
) -> None:
    """Check SOURCE (a file, or - for stdin) against a rules document.

    Exit codes: 0 = clean or violations without --strict,
    1 = violations with --strict, 2 = configuration error.
    """
    from rulekeeper.checker import CheckError, check_file, format_json, format_porcelain, format_rich

    code, source_name = _read_source(source)
    if dialect is None:
        dialect = DEFAULT_DIALECT if source == "-" else dialect_for_extension(Path(source).suffix)

    # Resolve output format: explicit flag > TTY detection.
    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = check_file(code, rules_path, source_name=source_name, dialect=dialect)
    except CheckError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    if result.syntax_error_lines and fmt != "rich" and not quiet:
        lines = ", ".join(str(n) for n in result.syntax_error_lines)
        click.echo(f"Warning: syntax errors on line(s) {lines}", err=True)

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if strict and result.violations:
        sys.exit(1)


# rulekeeper:domain=engine
@main.command("show-rules")
@click.argument("rules_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show_rules(*, rules_path: Path) -> None:
    """Validate a rules document and print the constraints it activates."""
    from rich.console import Console
    from rich.table import Table

    from rulekeeper.engine.rules import RulesError, load_rules

    try:
        rules = load_rules(rules_path)
    except RulesError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    table = Table(title=str(rules_path.name), show_header=True)
    table.add_column("Rule", style="cyan")
    table.add_column("Setting")

    data = rules.to_dict()
    if not data:
        click.echo("No constraints: every submission passes.")
        return
    for key, values in data.items():
        table.add_row(key, ", ".join(values) if values else "(empty)")

    Console().print(table)


# rulekeeper:domain=tui
@main.command()
@click.option(
    "--code",
    "code_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Load initial code from a file.",
)
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Load initial rules JSON from a file (default: a sample document).",
)
def ui(*, code_path: Path | None, rules_path: Path | None) -> None:
    """Launch the interactive rule checker.

    Edit code and rules side by side; feedback updates on every change.
    Requires textual: pip install rulekeeper[tui]
    """
    try:
        from rulekeeper.tui import launch
    except ImportError:
        click.echo(
            "Error: TUI requires 'textual'. Install with: pip install rulekeeper[tui]",
            err=True,
        )
        sys.exit(1)

    code = code_path.read_text(encoding="utf-8") if code_path is not None else ""
    rules = rules_path.read_text(encoding="utf-8") if rules_path is not None else None

    try:
        launch(code=code, rules=rules)
    except ImportError:
        click.echo(
            "Error: TUI requires 'textual'. Install with: pip install rulekeeper[tui]",
            err=True,
        )
        sys.exit(1)
