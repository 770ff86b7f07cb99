"""Engros database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Ensure the Standard discount group exists
"""

import argparse
import sys

from rich.console import Console

console = Console()


def _domain():
    from ordering.domain import ordering

    console.print("Initializing ordering domain...")
    ordering.init()
    return ordering


def setup_database():
    from ordering.utils.db import setup_db

    domain = _domain()
    console.print("Creating ordering database schema...")
    setup_db(domain)
    console.print("[green]  schema ready.[/green]")


def drop_database():
    from ordering.utils.db import drop_db

    domain = _domain()
    console.print("Dropping ordering database schema...")
    drop_db(domain)
    console.print("[yellow]  schema dropped.[/yellow]")


def seed():
    from ordering.discount.discount_group import DiscountGroup

    domain = _domain()
    with domain.domain_context():
        group = domain.repository_for(DiscountGroup).standard()
    console.print(f"Standard discount group: [bold]{group.id}[/bold]")


def main():
    from ordering.utils.logging import configure_logging

    parser = argparse.ArgumentParser(description="Engros database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Create the Standard discount group if missing")

    args = parser.parse_args()
    configure_logging(log_dir=None)

    commands = {"setup-db": setup_database, "drop-db": drop_database, "seed": seed}
    try:
        commands[args.command]()
    except Exception as exc:
        console.print(f"[red]{args.command} failed:[/red] {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
