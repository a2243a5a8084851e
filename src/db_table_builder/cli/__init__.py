"""CLI module for declarative table management.

Provides commands to list profiles and namespace tables, show a live
table as column definitions, and generate (optionally save) the migration
for a column definition file.

Usage:
    DB_PROFILE=local db-table-builder tables
    db-table-builder --profile local show acme_posts
    db-table-builder --profile local generate acme_posts --columns posts.json
    db-table-builder --profile local generate acme_posts --columns posts.json --write

Commands:
    profiles  - List available profiles
    tables    - List the namespace's tables
    show      - Show a table's columns as column definitions
    generate  - Generate the create-or-update migration for a table
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from db_table_builder.config.loader import load_db_config
from db_table_builder.context import BuilderContext, get_active_profile_name
from db_table_builder.errors import NotFoundError, TableBuilderError, ValidationError
from db_table_builder.schema.codegen import NO_CHANGES
from db_table_builder.table_model import TableModel

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _load_columns(columns_file: str | Path) -> list[dict[str, Any]]:
    """Read column definitions from a JSON file.

    Accepts either a list of column objects or an object with a
    ``columns`` list.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not contain a list of columns.
    """
    path = Path(columns_file)
    if not path.exists():
        raise FileNotFoundError(f"Columns file not found: {path}")

    data = json.loads(path.read_text())
    if isinstance(data, dict):
        data = data.get("columns")
    if not isinstance(data, list):
        raise ValueError(f"{path.name} must contain a list of column definitions")
    return data


def _context(args: argparse.Namespace) -> BuilderContext:
    """Build the context for the selected profile.

    Raises:
        FileNotFoundError: If db.toml does not exist.
        ProfileNotFoundError: If no profile is selected or it is unknown.
    """
    config = load_db_config(args.config)
    profile = args.profile or get_active_profile_name(args.env_prefix)
    base_dir = Path(args.config).parent if args.config else None
    context = BuilderContext.from_config(config, profile, base_dir=base_dir)
    if args.namespace:
        context.namespace = args.namespace
    return context


def _print_validation_error(error: ValidationError) -> None:
    console.print("[bold red]x[/bold red] Table definition is invalid:")
    for field_name, messages in error.messages().items():
        for message in messages:
            console.print(f"  [cyan]{field_name}[/cyan]: {message}")


# ============================================================================
# Commands
# ============================================================================


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles.

    Returns:
        0 on success, 1 if db.toml cannot be loaded.
    """
    try:
        config = load_db_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("Profile", style="cyan")
    table.add_column("Description")
    for name, profile in config.profiles.items():
        table.add_row(name, profile.description)
    console.print(table)

    if config.builder.namespace:
        console.print(f"Namespace: [bold]{config.builder.namespace}[/bold]")
    return 0


def cmd_tables(args: argparse.Namespace) -> int:
    """List the namespace's tables.

    Returns:
        0 on success, 1 on configuration errors.
    """
    try:
        model = TableModel(_context(args))
        names = model.list_tables()
    except (FileNotFoundError, ValueError, TableBuilderError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if not names:
        console.print("[yellow]No tables found.[/yellow]")
        return 0

    for name in names:
        console.print(f"  {name}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Show a live table as column definitions.

    Returns:
        0 on success, 1 if the table does not exist, has a column type
        with no canonical counterpart, or configuration fails.
    """
    try:
        model = TableModel(_context(args))
        model.load(args.table)
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    except (FileNotFoundError, ValueError, TableBuilderError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if args.json:
        columns = [column.model_dump(exclude={"id", "unobserved"}) for column in model.columns]
        print(json.dumps(columns, indent=2))
        return 0

    table = Table(title=model.name, show_header=True, header_style="bold")
    for heading in ("Column", "Type", "Length", "Unsigned", "Null", "AI", "PK", "Default"):
        table.add_column(heading)
    for column in model.columns:
        table.add_row(
            column.name,
            column.type,
            column.length or "",
            "yes" if column.unsigned else "",
            "yes" if column.allow_null else "",
            "yes" if column.auto_increment else "",
            "yes" if column.primary_key else "",
            column.default if column.default is not None else "",
        )
    console.print(table)
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate the create-or-update migration for a table.

    Returns:
        0 on success (including "no changes"), 1 on invalid input,
        configuration errors or when the migration cannot be saved.
    """
    try:
        columns = _load_columns(args.columns)
        model = TableModel(_context(args))
        if model.table_exists(args.table):
            model.load(args.table)
        model.validate(columns, name=args.table)
        result = model.generate_create_or_update_migration()
    except ValidationError as e:
        _print_validation_error(e)
        return 1
    except (FileNotFoundError, ValueError, TableBuilderError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if result is NO_CHANGES:
        console.print(
            f"[bold green]v[/bold green] Table [cyan]{args.table}[/cyan] is up to date"
        )
        return 0

    console.print(
        f"[bold]{result.description}[/bold] [dim](version {result.version})[/dim]"
    )
    console.print(Syntax(result.code, "python"))

    if not args.write:
        console.print()
        console.print("[dim]To save the migration, add[/dim] [cyan]--write[/cyan] [dim]flag.[/dim]")
        return 0

    try:
        path = model.save_migration(result)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    console.print(f"[bold green]v[/bold green] Saved to [cyan]{path}[/cyan]")
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-table-builder",
        description="Declarative table definitions to reviewable migrations",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to db.toml (default: ./db.toml)",
    )
    parser.add_argument(
        "--profile",
        "-p",
        default=None,
        help="Profile to use (default: DB_PROFILE environment variable)",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--namespace",
        default=None,
        help="Table namespace prefix (overrides [builder] namespace)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    p_tables = subparsers.add_parser("tables", help="List the namespace's tables")
    p_tables.set_defaults(func=cmd_tables)

    p_show = subparsers.add_parser("show", help="Show a table's columns")
    p_show.add_argument("table", help="Table name")
    p_show.add_argument(
        "--json",
        action="store_true",
        help="Print column definitions as JSON (usable with generate --columns)",
    )
    p_show.set_defaults(func=cmd_show)

    p_generate = subparsers.add_parser(
        "generate",
        help="Generate the create-or-update migration for a table",
    )
    p_generate.add_argument("table", help="Table name")
    p_generate.add_argument(
        "--columns",
        required=True,
        help="Path to JSON file with the column definitions",
    )
    p_generate.add_argument(
        "--write",
        action="store_true",
        help="Save the migration to the migrations directory",
    )
    p_generate.set_defaults(func=cmd_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
