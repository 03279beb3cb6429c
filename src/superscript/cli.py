"""CLI entry point for Superscript."""

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from superscript.config.loader import load_config
from superscript.models.config import Config
from superscript.services.exceptions import SuperscriptError
from superscript.services.root_directory import RootDirectoryStore, peek_startup_root
from superscript.services.session import EditorSession
from superscript.utils.logging import configure_logging, get_logger
from superscript.utils.paths import display_name


logger = get_logger(__name__)
console = Console()


def _load(ctx: click.Context) -> Config:
    try:
        return load_config(ctx.obj["config_path"])
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _run(coro):
    """Run a coroutine, turning coordinator errors into CLI errors."""
    try:
        return asyncio.run(coro)
    except SuperscriptError as e:
        logger.error("cli_command_failed", error=str(e))
        raise click.ClickException(str(e)) from e


async def _session(ctx: click.Context) -> EditorSession:
    session = await EditorSession.start(_load(ctx), store=RootDirectoryStore())
    if session.root_dir is None:
        raise click.ClickException(
            "No notes folder selected.\n"
            "Run: superscript folder set PATH"
        )
    return session


def _resolve(session: EditorSession, name: str) -> str:
    """Accept a full path or a document name from the notes folder."""
    path = Path(name).expanduser()
    if path.is_absolute():
        return path.as_posix()
    extensions = session.settings.extensions
    for candidate in session.files:
        if display_name(candidate, extensions) == name or candidate.endswith(f"/{name}"):
            return candidate
    raise click.ClickException(f"No document named '{name}' in {session.root_dir}")


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/superscript/config.yaml)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Superscript - plain-file notes with autosave and automatic naming."""
    if verbose:
        os.environ["SUPERSCRIPT_LOG_LEVEL"] = "DEBUG"
    configure_logging()

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.group()
def folder():
    """Show or change the notes folder."""


@folder.command("show")
@click.pass_context
def folder_show(ctx: click.Context):
    """Print the notes folder that would be opened."""
    root_dir = _run(peek_startup_root(RootDirectoryStore(), _load(ctx)))
    if root_dir is None:
        console.print("[yellow]No notes folder selected[/yellow]")
        return
    click.echo(root_dir)


@folder.command("set")
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
@click.option("--create", is_flag=True, help="Create the folder if it does not exist")
@click.pass_context
def folder_set(ctx: click.Context, directory: Path, create: bool):
    """Remember DIRECTORY as the notes folder."""
    directory = directory.expanduser().resolve()
    if create:
        directory.mkdir(parents=True, exist_ok=True)

    async def _switch() -> list[str]:
        session = EditorSession(_load(ctx), store=RootDirectoryStore())
        return await session.switch_root(directory.as_posix())

    files = _run(_switch())
    console.print(f"[green]✓[/green] Notes folder set to {directory} ({len(files)} documents)")


@cli.command("list")
@click.option("--query", "-q", default="", help="Only show documents whose name contains this text")
@click.pass_context
def list_documents(ctx: click.Context, query: str):
    """List documents, most recently edited first."""
    async def _list():
        session = await _session(ctx)
        return await session.find(query)

    entries = _run(_list())
    if not entries:
        console.print("[dim]No documents found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Modified")
    for entry in entries:
        table.add_row(entry.name, entry.kind, entry.modified_at.astimezone().strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@cli.command()
@click.argument("text", required=False)
@click.pass_context
def new(ctx: click.Context, text: Optional[str]):
    """Create a note from TEXT (or standard input), named after its first line."""
    if text is None:
        text = sys.stdin.read()
    if not text.strip():
        raise click.ClickException("Nothing to save: the note is empty")

    async def _create() -> Optional[str]:
        session = await _session(ctx)
        session.edit(text)
        await session.aclose()
        return session.document.path

    path = _run(_create())
    console.print(f"[green]✓[/green] Saved {path}")


@cli.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str):
    """Print the content of a document."""
    async def _show() -> str:
        session = await _session(ctx)
        document = await session.open(_resolve(session, name))
        return document.content

    click.echo(_run(_show()), nl=False)


@cli.command()
@click.argument("name")
@click.argument("new_name")
@click.pass_context
def rename(ctx: click.Context, name: str, new_name: str):
    """Rename a document. Use 'Untitled' as NEW_NAME to name it after its first line."""
    async def _rename():
        session = await _session(ctx)
        await session.open(_resolve(session, name))
        return await session.rename(new_name)

    result = _run(_rename())
    if result.committed:
        console.print(f"[green]✓[/green] Renamed to {result.identity.path}")
    elif result.status == "unchanged":
        console.print("[dim]Name unchanged[/dim]")
    else:
        raise click.ClickException(result.message or f"Rename {result.status}")


@cli.command()
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, name: str, yes: bool):
    """Delete a document and show which one would be displayed next."""
    async def _delete():
        session = await _session(ctx)
        path = _resolve(session, name)
        if not yes:
            click.confirm(f"Delete {path}?", abort=True)
        await session.open(path)
        document = await session.delete()
        if document is None or not document.path:
            return path, None
        return path, display_name(document.path, session.settings.extensions)

    path, next_name = _run(_delete())
    console.print(f"[green]✓[/green] Deleted {path}")
    console.print(f"Next: {next_name or 'new draft'}")


def main():
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
