"""Notekeep CLI — register, log in, and manage your notes.

Usage:
    notekeep register you@example.com "Your Name"   # Create an account
    notekeep login you@example.com                    # Print an access token
    export NOTEKEEP_TOKEN=...                          # Use it for later calls
    notekeep whoami                                   # Who the token belongs to
    notekeep notes list                               # Your notes, newest first
    notekeep notes add -t "Shopping" -c "milk, eggs"  # Create a note
    notekeep notes edit <id> --category Work          # Change only the category
    notekeep notes tag <id> errand                    # Add a tag (no duplicates)
    notekeep notes rm <id>                            # Delete a note

The token is always passed per command (--token or NOTEKEEP_TOKEN); the
CLI keeps no login state of its own.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click

from notekeep import __version__
from notekeep.cli.client import DEFAULT_API_URL, ApiError, NotekeepClient

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def _api_url() -> str:
    return os.environ.get("NOTEKEEP_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> NotekeepClient:
    """Build an API client pointed at the Notekeep backend."""
    return NotekeepClient(base_url=_api_url())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when a loop is already running (e.g. tests).
    API errors are printed and turned into exit code 1.
    """
    try:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()
    except ApiError as e:
        click.secho(f"Error ({e.status_code}): {_format_detail(e.detail)}", fg="red", err=True)
        sys.exit(1)


def _format_detail(detail) -> str:
    if isinstance(detail, dict) and "field" in detail:
        return f"{detail['field']}: {detail.get('message', '')}"
    if isinstance(detail, (dict, list)):
        return json.dumps(detail, default=str)
    return str(detail)


def _format_tags(tags: list[str]) -> str:
    return ", ".join(f"#{t}" for t in tags) if tags else "—"


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _print_note(note: dict):
    click.secho(note["title"], bold=True)
    click.echo(f"  id:       {note['id']}")
    click.echo(f"  category: {note['category']}")
    click.echo(f"  tags:     {_format_tags(note['tags'])}")
    click.echo(f"  updated:  {note['updated_at']}")
    click.echo()
    click.echo(note["content"])


token_option = click.option(
    "--token",
    envvar="NOTEKEEP_TOKEN",
    required=True,
    help="Access token (or set NOTEKEEP_TOKEN)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="notekeep")
def main():
    """Notekeep — personal notes from the command line."""


@main.command()
@click.argument("email")
@click.argument("name")
@click.password_option()
def register(email: str, name: str, password: str):
    """Create an account."""

    async def _impl():
        async with _client() as c:
            return await c.register(email, name, password)

    user = _run(_impl())
    click.secho(f"Registered {user['email']} ({user['id']})", fg="green")


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print an access token."""

    async def _impl():
        async with _client() as c:
            return await c.login(email, password)

    tokens = _run(_impl())
    click.echo(tokens["access_token"])
    click.secho(f"Expires at {tokens['expires_at']}", fg="yellow", err=True)


@main.command()
@token_option
def whoami(token: str):
    """Show the account the token belongs to."""

    async def _impl():
        async with _client() as c:
            return await c.me(token)

    user = _run(_impl())
    click.echo(f"{user['name']} <{user['email']}> ({user['id']})")


# ---------------------------------------------------------------------------
# notekeep notes ...
# ---------------------------------------------------------------------------


@main.group()
def notes():
    """Create, read, update and delete your notes."""


@notes.command("list")
@token_option
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_notes(token: str, as_json: bool):
    """List your notes, most recently updated first."""

    async def _impl():
        async with _client() as c:
            return await c.list_notes(token)

    rows = _run(_impl())
    if as_json:
        click.echo(json.dumps(rows, indent=2, default=str))
        return
    if not rows:
        click.echo("No notes yet.")
        return
    for row in rows:
        row["tag_list"] = _format_tags(row["tags"])
    _print_table(rows, [
        ("ID", "id", 36),
        ("Title", "title", 30),
        ("Category", "category", 12),
        ("Tags", "tag_list", 24),
    ])


@notes.command("show")
@token_option
@click.argument("note_id")
def show_note(token: str, note_id: str):
    """Show one note."""

    async def _impl():
        async with _client() as c:
            return await c.get_note(token, note_id)

    _print_note(_run(_impl()))


@notes.command("add")
@token_option
@click.option("--title", "-t", required=True)
@click.option("--content", "-c", required=True)
@click.option("--category")
@click.option("--tag", "tags", multiple=True, help="Repeat for several tags")
def add_note(token: str, title: str, content: str, category: Optional[str], tags: tuple):
    """Create a note."""
    unique_tags = list(dict.fromkeys(tags))

    async def _impl():
        async with _client() as c:
            return await c.create_note(
                token, title, content, category=category, tags=unique_tags
            )

    note = _run(_impl())
    click.secho(f"Created note {note['id']}", fg="green")


@notes.command("edit")
@token_option
@click.argument("note_id")
@click.option("--title", "-t")
@click.option("--content", "-c")
@click.option("--category")
@click.option("--tag", "tags", multiple=True, help="Replaces all tags; repeat for several")
def edit_note(token: str, note_id: str, title: Optional[str], content: Optional[str],
              category: Optional[str], tags: tuple):
    """Change only the fields given; everything else stays as it is."""
    changes: dict = {}
    if title is not None:
        changes["title"] = title
    if content is not None:
        changes["content"] = content
    if category is not None:
        changes["category"] = category
    if tags:
        changes["tags"] = list(dict.fromkeys(tags))
    if not changes:
        click.secho("Nothing to change.", fg="yellow")
        return

    async def _impl():
        async with _client() as c:
            return await c.update_note(token, note_id, **changes)

    note = _run(_impl())
    click.secho(f"Updated note {note['id']}", fg="green")


@notes.command("tag")
@token_option
@click.argument("note_id")
@click.argument("tag")
def tag_note(token: str, note_id: str, tag: str):
    """Add a tag to a note, unless it is already there."""

    async def _impl():
        async with _client() as c:
            return await c.add_tag(token, note_id, tag)

    note = _run(_impl())
    click.echo(f"Tags: {_format_tags(note['tags'])}")


@notes.command("rm")
@token_option
@click.argument("note_id")
@click.confirmation_option(prompt="Delete this note permanently?")
def delete_note(token: str, note_id: str):
    """Delete a note."""

    async def _impl():
        async with _client() as c:
            return await c.delete_note(token, note_id)

    _run(_impl())
    click.secho(f"Deleted note {note_id}", fg="green")


if __name__ == "__main__":
    main()
