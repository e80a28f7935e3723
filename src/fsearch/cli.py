"""Typer CLI for fsearch: search, suggest and ingest commands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import TypeAdapter, ValidationError

from fsearch.config import Config
from fsearch.models.files import IndexedFile
from fsearch.models.search import FilterSet, SortDirection, SortKey, StrategyId
from fsearch.models.session import SessionState

app = typer.Typer(
    name="fsearch",
    help="File search with semantic, keyword, local-index and offline fallbacks.",
    no_args_is_help=True,
)

_MANIFEST = TypeAdapter(list[IndexedFile])

BackendUrlOption = Annotated[
    str,
    typer.Option("--backend-url", help="Base URL of the search backend. Empty disables it."),
]
CacheDirOption = Annotated[
    Path | None,
    typer.Option("--cache-dir", help="Directory holding the local file index"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")]


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Free-text query; empty lists all files")] = "",
    page: Annotated[int, typer.Option("--page", min=1)] = 1,
    per_page: Annotated[int, typer.Option("--per-page", min=1)] = 20,
    sort: Annotated[SortKey, typer.Option("--sort")] = SortKey.RELEVANCE,
    direction: Annotated[SortDirection, typer.Option("--direction")] = SortDirection.DESC,
    file_types: Annotated[
        list[str] | None, typer.Option("--type", help="Restrict to an extension")
    ] = None,
    tags: Annotated[
        list[str] | None, typer.Option("--tag", help="Require any of these tags")
    ] = None,
    hybrid: Annotated[bool, typer.Option("--hybrid", help="Try the hybrid backend first")] = False,
    no_fallback: Annotated[
        bool, typer.Option("--no-fallback", help="Disable synthetic offline results")
    ] = False,
    backend_url: BackendUrlOption = "",
    cache_dir: CacheDirOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Run a search and print the ranked page."""
    _configure_logging(verbose)
    config = _build_config(
        backend_url,
        cache_dir,
        items_per_page=per_page,
        enable_synthetic_fallback=not no_fallback,
    )
    filters = FilterSet(file_types=file_types or None, tags=tags or None)
    prefer = StrategyId.HYBRID if hybrid else None
    asyncio.run(_do_search(config, query, filters, page, sort, direction, prefer))


@app.command()
def suggest(
    partial: Annotated[str, typer.Argument(help="Partial query text")],
    backend_url: BackendUrlOption = "",
    cache_dir: CacheDirOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print completions for a partial query."""
    _configure_logging(verbose)
    asyncio.run(_do_suggest(_build_config(backend_url, cache_dir), partial))


@app.command()
def ingest(
    manifest: Annotated[Path, typer.Argument(help="JSON list of file records", exists=True)],
    cache_dir: CacheDirOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Load file records into the local index."""
    _configure_logging(verbose)
    try:
        files = _MANIFEST.validate_json(manifest.read_bytes())
    except ValidationError as exc:
        typer.echo(f"Invalid manifest {manifest}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    asyncio.run(_do_ingest(_build_config("", cache_dir), files))


async def _do_search(
    config: Config,
    query: str,
    filters: FilterSet,
    page: int,
    sort: SortKey,
    direction: SortDirection,
    prefer: StrategyId | None,
) -> None:
    from fsearch.services.container import ServiceContainer

    container = await ServiceContainer.create(config)
    try:
        session = container.session
        session.set_sorting(sort, direction)
        state = await session.search(query, filters, prefer=prefer)
        if page > 1:
            state = await session.go_to_page(page)
            if state.current_page != page:
                typer.echo(
                    f"Page {page} is out of range (1-{max(1, state.max_page)}), "
                    f"showing page {state.current_page}",
                    err=True,
                )
        _print_state(state)
    finally:
        await container.close()


async def _do_suggest(config: Config, partial: str) -> None:
    from fsearch.services.container import ServiceContainer

    container = await ServiceContainer.create(config)
    try:
        for suggestion in await container.session.get_suggestions(partial):
            typer.echo(suggestion)
    finally:
        await container.close()


async def _do_ingest(config: Config, files: list[IndexedFile]) -> None:
    from fsearch.data.db import Database
    from fsearch.data.file_index import LocalFileIndex

    async with Database(config.db_path) as db:
        index = LocalFileIndex(db)
        written = await index.upsert_files(files)
        total = await index.count()
    typer.echo(f"Indexed {written} files ({total} in {config.db_path})")


def _print_state(state: SessionState) -> None:
    if state.last_error:
        typer.echo(state.last_error, err=True)
    elapsed = state.outcome.elapsed_ms if state.outcome else 0
    typer.echo(
        f"[{state.last_strategy or StrategyId.NONE}] {state.total} results, "
        f"page {state.current_page}/{max(1, state.max_page)} ({elapsed} ms)"
    )
    for item in state.results:
        typer.echo(f"  {item.score:.2f}  {item.file.name}  {item.file.path}")


def _build_config(backend_url: str, cache_dir: Path | None, **overrides: object) -> Config:
    defaults = Config()
    return Config(
        cache_dir=cache_dir or defaults.cache_dir,
        backend_url=backend_url,
        **overrides,  # type: ignore[arg-type]
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )
