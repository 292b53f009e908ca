from __future__ import annotations

import click
from flask import Flask, current_app


def register_commands(app: Flask) -> None:
    @app.cli.command("show-round")
    def show_round():
        """Print every assignment of the active round."""
        rows = current_app.extensions["round_store"].all_rows()
        if not rows:
            click.echo("No round has been generated yet.")
            return
        for row in rows:
            click.echo(f"{row.participant} -> {row.recipient} ({row.price_tier})")

    @app.cli.command("reset-round")
    def reset_round_command():
        """Delete the active round without an admin token."""
        store = current_app.extensions["round_store"]
        with store.writer():
            deleted = store.delete_all()
        click.echo(f"Deleted {deleted} assignments.")
