"""SlangBucket Command Line Interface.

Entry point for the ``slangbucket`` CLI tool. Every command prints its result as
JSON on stdout; failures print the error as JSON on stderr and exit with 1.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Awaitable, Callable

import anyio
import typer
from pydantic import ValidationError

from slangbucket import __version__
from slangbucket.config import StoreSettings
from slangbucket.derive import is_content_id
from slangbucket.errors import BucketError
from slangbucket.log import configure_logging
from slangbucket.slangbucket import BucketStore

app = typer.Typer(
    name="slangbucket",
    help="SlangBucket: content-addressed buckets with pronounceable aliases.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"slangbucket version {__version__}")
        raise typer.Exit()


def _open_store(settings: StoreSettings) -> BucketStore:
    return BucketStore.from_settings(settings)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    redis_url: str | None = typer.Option(
        None,
        "--redis-url",
        help="Redis URL. Overrides REDIS_ADDR.",
    ),
) -> None:
    """SlangBucket CLI."""
    try:
        settings = StoreSettings.from_env()
        if redis_url is not None:
            settings = StoreSettings.model_validate(
                {**settings.model_dump(), "redis_url": redis_url}
            )
    except ValidationError as exc:
        typer.secho(f"Error: invalid settings: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from exc

    configure_logging(json_output=settings.log_json, level=settings.log_level)
    ctx.obj = settings


def _run(ctx: typer.Context, operation: Callable[[BucketStore], Awaitable[Any]]) -> None:
    store = _open_store(ctx.obj)
    try:
        result = anyio.run(operation, store)
    except BucketError as exc:
        typer.echo(json.dumps(exc.to_dict()), err=True)
        raise typer.Exit(1) from exc
    finally:
        store.close()

    typer.echo(json.dumps(result.to_dict(), indent=2))


def _require_id(checksum: str) -> str:
    if not is_content_id(checksum):
        typer.secho(
            f"Error: {checksum!r} is not a 64 character lowercase hex id",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(2)
    return checksum


@app.command()
def create(
    ctx: typer.Context,
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to store."),
    mime: str = typer.Option("text/plain", "--mime", "-m", help="Content type of the data."),
    rsa: str | None = typer.Option(None, "--rsa", help="Public key to keep with the bucket."),
) -> None:
    """Store a file and print its id and aliases."""
    try:
        data = source.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        typer.secho(
            f"Error: {source} is not UTF-8 text: {exc.reason}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(2) from exc
    _run(ctx, lambda store: store.create(data, mime, rsa))


@app.command()
def context(ctx: typer.Context, slang: str = typer.Argument(..., help="Alias to resolve.")) -> None:
    """Print the data and mime a slang resolves to."""
    _run(ctx, lambda store: store.query_context(slang))


@app.command()
def meta(ctx: typer.Context, slang: str = typer.Argument(..., help="Alias to resolve.")) -> None:
    """Print the id, aliases and rsa a slang resolves to."""
    _run(ctx, lambda store: store.query_meta(slang))


@app.command("add-slang")
def add_slang(
    ctx: typer.Context,
    checksum: str = typer.Argument(..., metavar="ID", help="Bucket id."),
    slang: str = typer.Argument(..., help="Alias to add."),
) -> None:
    """Bind an additional slang to a bucket."""
    _require_id(checksum)
    _run(ctx, lambda store: store.add_alias(checksum, slang))


@app.command("drop-slang")
def drop_slang(
    ctx: typer.Context,
    checksum: str = typer.Argument(..., metavar="ID", help="Bucket id."),
    slang: str = typer.Argument(..., help="Alias to remove."),
) -> None:
    """Unbind a slang from a bucket. The last slang cannot be dropped."""
    _require_id(checksum)
    _run(ctx, lambda store: store.remove_alias(checksum, slang))


@app.command()
def delete(
    ctx: typer.Context,
    checksum: str = typer.Argument(..., metavar="ID", help="Bucket id."),
) -> None:
    """Delete a bucket and all of its slangs."""
    _require_id(checksum)
    _run(ctx, lambda store: store.delete(checksum))


if __name__ == "__main__":
    app()
