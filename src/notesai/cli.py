"""CLI entry point for notesai."""

import asyncio
from pathlib import Path
from typing import Iterable, Optional

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from notesai.config.loader import load_config
from notesai.editor.editor import BlockEditor
from notesai.editor.palette import filter_entries
from notesai.export.markdown import export_filename, render_markdown
from notesai.models.block import BlockType
from notesai.models.config import Configuration
from notesai.models.document import Document
from notesai.services.document_store import DocumentStore
from notesai.services.exceptions import NotesAIError
from notesai.utils.logging import configure_logging


logger = structlog.get_logger()
console = Console()

BLOCK_TYPES = [t.value for t in BlockType]


def resolve_id(candidates: Iterable[str], prefix: str, kind: str) -> str:
    """
    Resolve a full id from a unique prefix.

    Args:
        candidates: Known ids
        prefix: Full id or unique prefix typed by the user
        kind: "document" or "block", for error messages

    Returns:
        The matching full id

    Raises:
        click.ClickException: If nothing or more than one id matches
    """
    candidates = list(candidates)
    if prefix in candidates:
        return prefix
    matches = [c for c in candidates if c.startswith(prefix)]
    if not matches:
        raise click.ClickException(f"No {kind} matches id: {prefix}")
    if len(matches) > 1:
        raise click.ClickException(f"Ambiguous {kind} id {prefix!r} matches {len(matches)} {kind}s")
    return matches[0]


def build_properties(type_: str, level: Optional[int], language: Optional[str]) -> Optional[dict]:
    """Properties for a block created or converted from the command line."""
    if type_ == BlockType.HEADING.value:
        return {"level": level or 1}
    if type_ == BlockType.TODO.value:
        return {"checked": False}
    if type_ == BlockType.CODE.value and language:
        return {"language": language}
    return None


class Session:
    """Per-invocation state shared by all subcommands."""

    def __init__(self, config: Configuration, data_dir: Optional[Path] = None) -> None:
        self.config = config
        self.store = DocumentStore(data_dir or Path(config.storage.data_dir))

    def open_editor(self, document_prefix: str) -> BlockEditor:
        document_id = resolve_id(self.store.document_ids(), document_prefix, "document")
        document = self.store.load(document_id)
        return BlockEditor(document, save=self.store.save, config=self.config)

    def save(self, editor: BlockEditor) -> None:
        asyncio.run(editor.handle_save())

    def block_id(self, editor: BlockEditor, prefix: str) -> str:
        return resolve_id((b.id for b in editor.blocks), prefix, "block")


def render_blocks(editor: BlockEditor, title: Optional[str] = None) -> Table:
    """Build a rich table of the visible blocks."""
    table = Table(title=title or editor.title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Content")

    collapsed = editor.session.collapsed_heading_ids
    positions = {block.id: index for index, block in enumerate(editor.blocks)}
    for block in editor.visible_blocks():
        type_label = block.type.value
        if block.type == BlockType.HEADING:
            type_label = f"h{block.heading_level}"
        elif block.type == BlockType.TODO:
            type_label = "todo [x]" if (block.properties or {}).get("checked") else "todo [ ]"
        content = escape(block.content)
        if block.id in collapsed:
            content = f"{content} [dim](collapsed)[/dim]"
        table.add_row(str(positions[block.id]), block.id[:8], type_label, content)
    return table


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/notesai/config.yaml)",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding documents (overrides storage.data_dir)",
)
@click.version_option(package_name="notesai", prog_name="notesai")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], data_dir: Optional[Path]) -> None:
    """notesai - block-based notes from the command line."""
    try:
        config = load_config(config_path)
    except ValueError as e:
        # No usable logging settings, fall back to the default log file
        configure_logging()
        logger.error("config_validation_error", error=str(e))
        raise click.ClickException(f"Configuration validation failed:\n{e}")

    configure_logging(config.logging)
    logger.debug("cli_started", command=ctx.invoked_subcommand, data_dir=str(data_dir or config.storage.data_dir))
    ctx.obj = Session(config, data_dir)


pass_session = click.make_pass_decorator(Session)


def _run(action):
    """Turn notesai errors into click errors."""
    try:
        return action()
    except NotesAIError as e:
        logger.error("cli_command_failed", error=str(e))
        raise click.ClickException(str(e))


@cli.command("new")
@click.argument("title", default="Untitled")
@pass_session
def new_document(session: Session, title: str) -> None:
    """Create a new document."""
    document = _run(lambda: session.store.create(title))
    console.print(f"[green]✓[/green] Created [bold]{document.title}[/bold] ({document.id})")


@cli.command("list")
@pass_session
def list_documents(session: Session) -> None:
    """List documents, newest first."""
    documents = _run(session.store.list_documents)
    if not documents:
        console.print("No documents yet. Create one with [bold]notesai new[/bold].")
        return

    table = Table(title="Documents")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Blocks", justify="right")
    table.add_column("Updated", style="dim")
    for document in documents:
        table.add_row(
            document.id[:8],
            escape(document.title),
            str(len(document.blocks)),
            document.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@cli.command("show")
@click.argument("document")
@click.option("--collapse", "collapse", multiple=True, help="Heading id to collapse (repeatable)")
@pass_session
def show_document(session: Session, document: str, collapse: tuple[str, ...]) -> None:
    """Show a document's blocks."""

    def action():
        editor = session.open_editor(document)
        for prefix in collapse:
            editor.toggle_collapse(session.block_id(editor, prefix))
        console.print(render_blocks(editor))

    _run(action)


@cli.command("add")
@click.argument("document")
@click.argument("text", default="")
@click.option("--after", "after", help="Block id to insert after (default: last block)")
@click.option("--type", "type_", type=click.Choice(BLOCK_TYPES), default="text", show_default=True)
@click.option("--level", type=click.IntRange(1, 3), help="Heading level")
@click.option("--language", help="Code block language")
@pass_session
def add_block(
    session: Session,
    document: str,
    text: str,
    after: Optional[str],
    type_: str,
    level: Optional[int],
    language: Optional[str],
) -> None:
    """Add a block to a document."""

    def action():
        editor = session.open_editor(document)
        anchor = session.block_id(editor, after) if after else editor.blocks[-1].id
        new_id = editor.insert_block_after(anchor, type_, build_properties(type_, level, language), text)
        session.save(editor)
        console.print(f"[green]✓[/green] Added {type_} block {new_id[:8]}")

    _run(action)


@cli.command("remove")
@click.argument("document")
@click.argument("block")
@pass_session
def remove_block(session: Session, document: str, block: str) -> None:
    """Delete a block (the last block of a document is kept)."""

    def action():
        editor = session.open_editor(document)
        block_id = session.block_id(editor, block)
        if editor.delete_block(block_id) is None:
            raise click.ClickException("Refusing to delete the only block in a document")
        session.save(editor)
        console.print(f"[green]✓[/green] Deleted block {block_id[:8]}")

    _run(action)


@cli.command("move")
@click.argument("document")
@click.argument("block")
@click.argument("direction", type=click.Choice(["up", "down"]))
@pass_session
def move_block(session: Session, document: str, block: str, direction: str) -> None:
    """Move a block one position up or down."""

    def action():
        editor = session.open_editor(document)
        block_id = session.block_id(editor, block)
        mover = editor.move_block_up if direction == "up" else editor.move_block_down
        if not mover(block_id):
            console.print(f"Block {block_id[:8]} is already at the {'top' if direction == 'up' else 'bottom'}")
            return
        session.save(editor)
        console.print(f"[green]✓[/green] Moved block {block_id[:8]} {direction}")

    _run(action)


@cli.command("convert")
@click.argument("document")
@click.argument("block")
@click.argument("type_", metavar="TYPE", type=click.Choice(BLOCK_TYPES))
@click.option("--level", type=click.IntRange(1, 3), help="Heading level")
@click.option("--language", help="Code block language")
@pass_session
def convert_block(
    session: Session,
    document: str,
    block: str,
    type_: str,
    level: Optional[int],
    language: Optional[str],
) -> None:
    """Change a block's type (its properties are replaced)."""

    def action():
        editor = session.open_editor(document)
        block_id = session.block_id(editor, block)
        editor.change_block_type(block_id, type_, build_properties(type_, level, language))
        session.save(editor)
        console.print(f"[green]✓[/green] Converted block {block_id[:8]} to {type_}")

    _run(action)


@cli.command("duplicate")
@click.argument("document")
@click.argument("block")
@pass_session
def duplicate_block(session: Session, document: str, block: str) -> None:
    """Duplicate a block right below itself."""

    def action():
        editor = session.open_editor(document)
        block_id = session.block_id(editor, block)
        copy_id = editor.duplicate_block(block_id)
        session.save(editor)
        console.print(f"[green]✓[/green] Duplicated block {block_id[:8]} as {copy_id[:8]}")

    _run(action)


@cli.command("palette")
@click.argument("query", default="")
def palette(query: str) -> None:
    """List block types matching a search, as the slash menu would."""
    entries = filter_entries(query)
    if not entries:
        console.print(f'No blocks found matching "{query}"')
        return
    table = Table(title="Block types")
    table.add_column("Label", style="bold")
    table.add_column("Type", style="magenta")
    table.add_column("Description", style="dim")
    for entry in entries:
        table.add_row(entry.label, entry.type.value, entry.description)
    console.print(table)


@cli.command("export")
@click.argument("document")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: title-based name in the current directory)",
)
@pass_session
def export_document(session: Session, document: str, output: Optional[Path]) -> None:
    """Export a document as Markdown."""

    def action():
        document_id = resolve_id(session.store.document_ids(), document, "document")
        doc: Document = session.store.load(document_id)
        target = output or Path(export_filename(doc.title))
        target.write_text(render_markdown(doc), encoding="utf-8")
        logger.info("document_exported", document_id=doc.id, path=str(target))
        console.print(f"[green]✓[/green] Exported to {target}")

    _run(action)


@cli.command("delete")
@click.argument("document")
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@pass_session
def delete_document(session: Session, document: str, yes: bool) -> None:
    """Delete a document."""

    def action():
        document_id = resolve_id(session.store.document_ids(), document, "document")
        doc = session.store.load(document_id)
        if not yes and not click.confirm(f'Delete "{doc.title}"? This cannot be undone.'):
            console.print("Cancelled")
            return
        session.store.delete(document_id)
        console.print(f"[green]✓[/green] Deleted {doc.title}")

    _run(action)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
