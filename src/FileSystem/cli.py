import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from Configuration.ConfigLoader import ConfigLoader
from Configuration.Validator import validate_config
from FileSystem.base import FileSystem
from FileSystem.registry import create_filesystem
from Utils.errors import FilesystemError
from Utils.logging import setup_logging

# FILESYSTEM_* variables may come from a .env file
load_dotenv()

# Create a Typer app instance
app = typer.Typer(
    name="fsctl",
    help="Inspect and manipulate a local or S3 filesystem through the unified filesystem API.",
    add_completion=False
)

# Get a logger instance for this module
logger = logging.getLogger(__name__)


def _load_config(ctx: typer.Context) -> Dict[str, Any]:
    config_file: Optional[Path] = ctx.obj.get("config")
    if config_file is not None:
        return ConfigLoader.from_yaml(config_file)
    return ConfigLoader.from_env()


def _open_filesystem(ctx: typer.Context) -> FileSystem:
    try:
        return create_filesystem(_load_config(ctx))
    except FilesystemError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


def _run(coroutine) -> Any:
    try:
        return asyncio.run(coroutine)
    except FilesystemError as e:
        logger.error(f"Operation failed: {e}")
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Optional[Path], typer.Option(
        help="YAML configuration file. FILESYSTEM_* environment variables are used when omitted.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel="Filesystem Configuration"
    )] = None,
    log_dir: Annotated[Optional[Path], typer.Option(
        help="Directory to store log files. Will be created if it doesn't exist.",
        file_okay=False,
        dir_okay=True,
        writable=True,
        resolve_path=True,
        rich_help_panel="Logging Configuration"
    )] = None,
    log_level: Annotated[str, typer.Option(
        help="Set the logging level (e.g., DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        case_sensitive=False,
        rich_help_panel="Logging Configuration"
    )] = "WARNING"
):
    """Configure logging and remember the configuration source for the command."""
    numeric_log_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_log_level, int):
        print(f"Warning: Invalid log level '{log_level}'. Defaulting to WARNING.", file=sys.stderr)
        numeric_log_level = logging.WARNING

    setup_logging(log_dir=str(log_dir) if log_dir else None, log_level=numeric_log_level)
    logger.debug(f"Logging initialized. Level: {logging.getLevelName(numeric_log_level)}")

    ctx.obj = {"config": config}


@app.command()
def validate(ctx: typer.Context):
    """Validate the filesystem configuration and print every problem found."""
    try:
        raw = _load_config(ctx)
    except FilesystemError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    result = validate_config(raw)
    if not result.is_valid:
        for error in result.errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Configuration is valid ({result.config.type})")


@app.command()
def ls(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Directory to list.")] = "/"
):
    """List a directory."""
    filesystem = _open_filesystem(ctx)
    for name in _run(filesystem.readdir(path)):
        typer.echo(name)


@app.command()
def cat(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="File to print.")],
    encoding: Annotated[str, typer.Option(help="Text encoding of the file.")] = "utf-8"
):
    """Print the content of a file."""
    filesystem = _open_filesystem(ctx)
    typer.echo(_run(filesystem.read_file(path, encoding=encoding)), nl=False)


@app.command()
def stat(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="File or directory to inspect.")]
):
    """Show the metadata of a file or directory."""
    filesystem = _open_filesystem(ctx)
    stats = _run(filesystem.stat(path))
    kind = "directory" if stats.is_directory() else "symlink" if stats.is_symbolic_link() else "file"
    typer.echo(f"path: {stats.path}")
    typer.echo(f"type: {kind}")
    typer.echo(f"size: {stats.size}")
    typer.echo(f"mode: {oct(stats.mode & 0o7777)}")
    typer.echo(f"modified: {stats.mtime.isoformat()}")


@app.command()
def put(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(
        help="Local file to upload.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True
    )],
    destination: Annotated[str, typer.Argument(help="Destination path in the filesystem.")]
):
    """Copy a local file into the filesystem."""
    filesystem = _open_filesystem(ctx)
    _run(filesystem.write_file(destination, source.read_bytes()))
    logger.info(f"Uploaded {source} to {destination}")
    typer.echo(f"Wrote {destination}")


@app.command()
def rm(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="File or directory to remove.")],
    recursive: Annotated[bool, typer.Option("--recursive", "-r", help="Remove directories and their content.")] = False
):
    """Remove a file, or a directory with --recursive."""
    filesystem = _open_filesystem(ctx)

    async def remove():
        stats = await filesystem.stat(path)
        if stats.is_directory():
            await filesystem.rmdir(path, recursive=recursive)
        else:
            await filesystem.unlink(path)

    _run(remove())
    typer.echo(f"Removed {path}")


if __name__ == "__main__":
    app()
