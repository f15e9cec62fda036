"""Command line front end for searching the catalog and running admin imports."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import typer

from pokeshelf.config import Settings
from pokeshelf.errors import PokeShelfError
from pokeshelf.logging_config import setup_logging
from pokeshelf.models.session import UserSession
from pokeshelf.state import open_app_state

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pokeshelf.state import AppState

app = typer.Typer(help="Search the Pokémon catalog and manage it from the terminal.")


def _run(action: Callable[[AppState], Awaitable[Any]]) -> Any:
    settings = Settings()
    setup_logging(settings.logging)

    async def _main() -> Any:
        async with open_app_state(settings) as state:
            return await action(state)

    try:
        return asyncio.run(_main())
    except PokeShelfError as exc:
        typer.echo(json.dumps(exc.to_dict(), indent=2, ensure_ascii=False), err=True)
        raise typer.Exit(code=1) from exc


def _session(user_id: str | None, token: str | None) -> UserSession | None:
    if user_id is None:
        return None
    return UserSession(user_id=user_id, access_token=token)


@app.command()
def search(query: str = typer.Argument(..., help="Free-text name query; typos are tolerated.")) -> None:
    """Run a live search and print the matching entries."""

    async def action(state: AppState) -> None:
        await state.search.refresh_index()
        state.search.set_query(query)
        await state.search.wait_idle()
        if not state.search.results:
            typer.echo("No Pokémon found.")
            return
        for entry in state.search.results:
            typer.echo(f"{entry.id:>5}  {entry.name}")

    _run(action)


@app.command()
def suggest(query: str = typer.Argument(..., help="Partial name to complete.")) -> None:
    """Print type-ahead suggestions for QUERY."""

    async def action(state: AppState) -> None:
        await state.search.refresh_index()
        for name in state.search.suggest(query):
            typer.echo(name)

    _run(action)


@app.command()
def show(entry_id: int = typer.Argument(..., min=1, help="Catalog entry id.")) -> None:
    """Print one catalog entry as JSON."""

    async def action(state: AppState) -> None:
        entry = await state.catalog.get_by_id(entry_id)
        if entry is None:
            typer.echo(f"Pokémon {entry_id} not found.", err=True)
            raise typer.Exit(code=1)
        typer.echo(json.dumps(entry.model_dump(mode="json"), indent=2, ensure_ascii=False))

    _run(action)


@app.command(name="import")
def import_range(
    start: int = typer.Argument(1, help="First id to import."),
    end: int = typer.Argument(100, help="Last id to import (inclusive)."),
    user_id: str | None = typer.Option(None, "--user-id", help="Administrator user id."),
    token: str | None = typer.Option(
        None, "--token", help="Administrator access token.", envvar="POKESHELF_TOKEN"
    ),
) -> None:
    """Import catalog entries START..END through the backend import function."""

    async def action(state: AppState) -> None:
        session = _session(user_id, token)
        if session is not None:
            state.backend.set_access_token(session.access_token)
        result = await state.functions.import_range(session, start, end)
        typer.echo(result.message or f"Imported {result.imported} entries")

    _run(action)


def main() -> None:
    """Execute the Typer application."""

    app()
