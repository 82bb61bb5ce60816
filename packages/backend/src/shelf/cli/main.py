"""Shelf CLI — sign up, sign in, and manage bookmarks from the terminal.

Usage:
    shelf signup you@example.com                 # Create account, print token
    shelf signin you@example.com                 # Print a fresh access token
    export SHELF_TOKEN=$(shelf signin you@example.com --quiet)
    shelf me                                     # Who am I?
    shelf bookmarks                              # List my bookmarks
    shelf add "FastAPI docs" --link https://fastapi.tiangolo.com
    shelf show <id>                              # One bookmark as JSON
    shelf edit <id> --title "New title"          # Partial update
    shelf rm <id>                                # Delete
    shelf serve                                  # Run the API with uvicorn
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from shelf import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("SHELF_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Shelf API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _token_from_ctx(token: Optional[str]) -> str:
    """Resolve the access token from --token or SHELF_TOKEN."""
    tok = token or os.environ.get("SHELF_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set SHELF_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> httpx.Response:
    """Exit with the server's error detail on any 4xx/5xx."""
    if r.is_success:
        return r
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    if not isinstance(detail, str):
        detail = json.dumps(detail)
    click.secho(f"Error ({r.status_code}): {detail}", fg="red", err=True)
    sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


token_option = click.option(
    "--token", "-k", help="Access token (or set SHELF_TOKEN)"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="shelf")
def main():
    """Shelf — bookmarks behind stateless bearer-token auth."""


# ---------------------------------------------------------------------------
# shelf signup / signin
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option()
@click.option("--quiet", "-q", is_flag=True, help="Print only the token")
def signup(email: str, password: str, quiet: bool):
    """Create an account and print its first access token."""
    _run(_auth_impl("/auth/signup", email, password, quiet))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
@click.option("--quiet", "-q", is_flag=True, help="Print only the token")
def signin(email: str, password: str, quiet: bool):
    """Sign in and print a fresh access token."""
    _run(_auth_impl("/auth/signin", email, password, quiet))


async def _auth_impl(path: str, email: str, password: str, quiet: bool):
    async with _client() as c:
        r = _check(await c.post(path, json={"email": email, "password": password}))
        data = r.json()

    if quiet:
        click.echo(data["access_token"])
        return
    minutes = data.get("expires_in", 0) // 60
    click.secho(f"Signed in as {email}", fg="green")
    click.echo(f"Token (expires in {minutes} min):")
    click.echo(data["access_token"])


# ---------------------------------------------------------------------------
# shelf me
# ---------------------------------------------------------------------------


@main.command()
@token_option
def me(token: Optional[str]):
    """Show the account the token belongs to."""
    _run(_me_impl(_token_from_ctx(token)))


async def _me_impl(token: str):
    async with _client(token) as c:
        r = _check(await c.get("/users/me"))
    click.echo(_pretty_json(r.json()))


# ---------------------------------------------------------------------------
# shelf bookmarks / add / show / edit / rm
# ---------------------------------------------------------------------------


@main.command()
@token_option
def bookmarks(token: Optional[str]):
    """List your bookmarks."""
    _run(_bookmarks_impl(_token_from_ctx(token)))


async def _bookmarks_impl(token: str):
    async with _client(token) as c:
        r = _check(await c.get("/bookmarks"))
    rows = r.json()

    if not rows:
        click.echo("No bookmarks yet.")
        return

    click.secho(f"Bookmarks ({len(rows)}):", bold=True)
    click.echo()
    _print_table(rows, [
        ("ID", "id", 36),
        ("Title", "title", 30),
        ("Link", "link", 40),
    ])


@main.command()
@click.argument("title")
@click.option("--link", "-l", help="URL to save")
@click.option("--description", "-d", help="Free-form notes")
@token_option
def add(title: str, link: Optional[str], description: Optional[str], token: Optional[str]):
    """Save a new bookmark."""
    _run(_add_impl(_token_from_ctx(token), title, link, description))


async def _add_impl(token: str, title: str, link: Optional[str], description: Optional[str]):
    body: dict = {"title": title}
    if link:
        body["link"] = link
    if description:
        body["description"] = description

    async with _client(token) as c:
        r = _check(await c.post("/bookmarks", json=body))
    bookmark = r.json()
    click.secho(f"Saved bookmark {bookmark['id']}", fg="green")


@main.command()
@click.argument("bookmark_id")
@token_option
def show(bookmark_id: str, token: Optional[str]):
    """Show one bookmark."""
    _run(_show_impl(_token_from_ctx(token), bookmark_id))


async def _show_impl(token: str, bookmark_id: str):
    async with _client(token) as c:
        r = _check(await c.get(f"/bookmarks/{bookmark_id}"))
    click.echo(_pretty_json(r.json()))


@main.command()
@click.argument("bookmark_id")
@click.option("--title", "-t", help="New title")
@click.option("--link", "-l", help="New URL")
@click.option("--description", "-d", help="New notes")
@token_option
def edit(bookmark_id: str, title: Optional[str], link: Optional[str],
         description: Optional[str], token: Optional[str]):
    """Change fields of a bookmark. Omitted fields stay as they are."""
    changes = {
        k: v for k, v in
        {"title": title, "link": link, "description": description}.items()
        if v is not None
    }
    if not changes:
        click.secho("Nothing to change.", fg="yellow", err=True)
        sys.exit(1)
    _run(_edit_impl(_token_from_ctx(token), bookmark_id, changes))


async def _edit_impl(token: str, bookmark_id: str, changes: dict):
    async with _client(token) as c:
        r = _check(await c.patch(f"/bookmarks/{bookmark_id}", json=changes))
    click.echo(_pretty_json(r.json()))


@main.command()
@click.argument("bookmark_id")
@token_option
def rm(bookmark_id: str, token: Optional[str]):
    """Delete a bookmark."""
    _run(_rm_impl(_token_from_ctx(token), bookmark_id))


async def _rm_impl(token: str, bookmark_id: str):
    async with _client(token) as c:
        _check(await c.delete(f"/bookmarks/{bookmark_id}"))
    click.secho(f"Deleted bookmark {bookmark_id}", fg="green")


# ---------------------------------------------------------------------------
# shelf serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: SHELF_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: SHELF_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server under uvicorn."""
    import uvicorn

    from shelf.config import settings

    uvicorn.run(
        "shelf.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
