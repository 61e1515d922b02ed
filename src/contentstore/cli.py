# src/contentstore/cli.py
"""contentstore Command Line Interface.

Entry point for the contentstore CLI tool. Operates on the LFS content
store described by the settings file (or CONTENTSTORE_* environment).
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import typer
from pydantic import ValidationError

from contentstore import __version__
from contentstore.contracts import (
    ContentStoreError,
    HashMismatchError,
    KeyCollisionError,
    ObjectDescriptor,
    SizeMismatchError,
)
from contentstore.core.config import load_settings
from contentstore.core.content_store import ContentStore
from contentstore.core.integrity import hash_stream
from contentstore.core.keys import transform_key
from contentstore.core.storage import Storage

__all__ = ["app"]

app = typer.Typer(
    name="contentstore",
    help="contentstore: verified content-addressable storage for LFS objects.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"contentstore version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If an explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


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
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (defaults plus CONTENTSTORE_* environment if omitted).",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """contentstore: verified content-addressable storage for LFS objects."""
    from contentstore.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)

    ctx.obj = {"settings_path": settings}


def _get_store(ctx: typer.Context) -> ContentStore:
    """Load settings and build the LFS store, exiting with a message on bad config."""
    settings_path: Path | None = ctx.obj["settings_path"]
    try:
        settings = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    try:
        return Storage.from_settings(settings).lfs
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _descriptor(oid: str, size: int) -> ObjectDescriptor:
    try:
        return ObjectDescriptor(oid=oid, size=size)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def key(
    oid: str = typer.Argument(..., help="Object identifier (hex SHA-256)."),
) -> None:
    """Print the sharded storage key for an object identifier."""
    typer.echo(transform_key(oid))


@app.command()
def put(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File to store, or '-' for stdin (requires --oid and --size)."),
    oid: str | None = typer.Option(None, "--oid", help="Declared SHA-256; computed from the file if omitted."),
    size: int | None = typer.Option(None, "--size", help="Declared size in bytes; taken from the file if omitted."),
) -> None:
    """Store a file, verifying it against its declared identity before commit."""
    use_stdin = str(file) == "-"
    if not use_stdin and not file.is_file():
        typer.echo(f"Error: File not found: {file}", err=True)
        raise typer.Exit(1)

    if oid is None or size is None:
        if use_stdin:
            typer.echo("Error: reading from stdin requires both --oid and --size", err=True)
            raise typer.Exit(1)
        with file.open("rb") as f:
            verifier = hash_stream(f)
        descriptor = _descriptor(
            oid if oid is not None else verifier.hexdigest(),
            size if size is not None else verifier.byte_count,
        )
    else:
        descriptor = _descriptor(oid, size)
    store = _get_store(ctx)

    try:
        if use_stdin:
            store.put(descriptor, typer.get_binary_stream("stdin"))
        else:
            with file.open("rb") as f:
                store.put(descriptor, f)
    except (SizeMismatchError, HashMismatchError, KeyCollisionError) as e:
        typer.echo(f"Rejected: {e}", err=True)
        raise typer.Exit(1) from None
    except (ContentStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"{descriptor.oid} {descriptor.size}")


@app.command()
def get(
    ctx: typer.Context,
    oid: str = typer.Argument(..., help="Object identifier (hex SHA-256)."),
    size: int = typer.Argument(..., help="Declared size in bytes."),
    from_byte: int = typer.Option(0, "--from-byte", help="First byte to return."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
) -> None:
    """Stream a stored object to stdout or a file."""
    descriptor = _descriptor(oid, size)
    store = _get_store(ctx)

    try:
        reader = store.get(descriptor, from_byte)
    except (ContentStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    # The backend can fail mid-stream, after the object was opened
    try:
        with reader:
            if output is not None:
                with output.open("wb") as out:
                    _copy(reader, out, store.chunk_size)
            else:
                stdout = typer.get_binary_stream("stdout")
                _copy(reader, stdout, store.chunk_size)
                stdout.flush()
    except (ContentStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _copy(reader: BinaryIO, out: BinaryIO, chunk_size: int) -> None:
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        out.write(chunk)


@app.command()
def exists(
    ctx: typer.Context,
    oid: str = typer.Argument(..., help="Object identifier (hex SHA-256)."),
    size: int = typer.Argument(..., help="Declared size in bytes."),
) -> None:
    """Print 'true' if the object is stored (exit 0), 'false' otherwise (exit 1)."""
    descriptor = _descriptor(oid, size)
    store = _get_store(ctx)
    try:
        found = store.exists(descriptor)
    except (ContentStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo("true" if found else "false")
    if not found:
        raise typer.Exit(1)


@app.command()
def verify(
    ctx: typer.Context,
    oid: str = typer.Argument(..., help="Object identifier (hex SHA-256)."),
    size: int = typer.Argument(..., help="Declared size in bytes."),
    full: bool = typer.Option(
        False,
        "--full",
        help="Re-hash stored content even if verify_content_hash is off.",
    ),
) -> None:
    """Check a stored object against its declared size (and optionally hash)."""
    descriptor = _descriptor(oid, size)
    store = _get_store(ctx)
    try:
        ok = store.verify(descriptor, full=True if full else None)
    except (ContentStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo("ok" if ok else "mismatch")
    if not ok:
        raise typer.Exit(1)


@app.command()
def delete(
    ctx: typer.Context,
    oid: str = typer.Argument(..., help="Object identifier (hex SHA-256)."),
    size: int = typer.Argument(..., help="Declared size in bytes."),
) -> None:
    """Delete a stored object. Deleting an absent object succeeds."""
    descriptor = _descriptor(oid, size)
    store = _get_store(ctx)
    try:
        store.delete(descriptor)
    except (ContentStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Deleted {descriptor.oid}")


if __name__ == "__main__":
    app()
