"""Command palette (slash menu): block-type catalog, filtering, navigation and placement."""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import structlog

from notesai.models.block import BlockType

logger = structlog.get_logger()

SLASH_TRIGGER = "/"


@dataclass(frozen=True)
class PaletteEntry:
    """One choice in the palette."""

    type: BlockType
    label: str
    description: str
    keywords: tuple[str, ...] = ()
    properties: Optional[dict[str, Any]] = None

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on label, description or any keyword."""
        needle = query.lower()
        return (
            needle in self.label.lower()
            or needle in self.description.lower()
            or any(needle in keyword.lower() for keyword in self.keywords)
        )


DEFAULT_CATALOG: tuple[PaletteEntry, ...] = (
    PaletteEntry(
        type=BlockType.TEXT,
        label="Text",
        description="Plain text block",
        keywords=("paragraph", "plain", "text", "normal"),
    ),
    PaletteEntry(
        type=BlockType.HEADING,
        label="Heading 1",
        description="Large section heading",
        keywords=("h1", "title", "header", "large"),
        properties={"level": 1},
    ),
    PaletteEntry(
        type=BlockType.HEADING,
        label="Heading 2",
        description="Medium section heading",
        keywords=("h2", "subtitle", "header", "medium"),
        properties={"level": 2},
    ),
    PaletteEntry(
        type=BlockType.HEADING,
        label="Heading 3",
        description="Small section heading",
        keywords=("h3", "subtitle", "header", "small"),
        properties={"level": 3},
    ),
    PaletteEntry(
        type=BlockType.LIST,
        label="Bulleted List",
        description="Simple bullet list",
        keywords=("bullet", "list", "unordered", "ul"),
    ),
    PaletteEntry(
        type=BlockType.CODE,
        label="Code",
        description="Code with syntax highlighting",
        keywords=("code", "programming", "syntax", "dev"),
    ),
    PaletteEntry(
        type=BlockType.TODO,
        label="To-do List",
        description="To-do checklist",
        keywords=("todo", "checkbox", "task", "check"),
    ),
    PaletteEntry(
        type=BlockType.AUDIO,
        label="Voice Note",
        description="Record audio",
        keywords=("voice", "audio", "record", "sound", "mic"),
    ),
)


def filter_entries(query: str, catalog: Sequence[PaletteEntry] = DEFAULT_CATALOG) -> list[PaletteEntry]:
    """
    Filter the catalog, preserving declared order.

    Args:
        query: Search text; empty returns the whole catalog
        catalog: Entries to search

    Returns:
        Matching entries
    """
    if not query:
        return list(catalog)
    return [entry for entry in catalog if entry.matches(query)]


# Geometry


@dataclass(frozen=True)
class Rect:
    """Screen rectangle of the block that triggered the palette."""

    left: float
    top: float
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def clamp_position(
    anchor: Rect,
    menu_size: Optional[Size],
    viewport: Size,
    margin: float = 20,
    fallback_size: Size = Size(272, 300),
) -> Point:
    """
    Place the palette below-left of its anchor, pulled back inside the viewport.

    When the menu would overflow the right edge it is shifted left so its
    right side sits ``margin`` inside the viewport; likewise upward for
    the bottom edge. Neither coordinate goes below zero.

    Args:
        anchor: Rectangle of the triggering block
        menu_size: Measured menu size (None or zero-sized -> fallback_size)
        viewport: Visible area size
        margin: Gap kept from the right/bottom edge after clamping
        fallback_size: Size assumed for an unmeasured menu

    Returns:
        Top-left corner for the menu
    """
    width = menu_size.width if menu_size and menu_size.width else fallback_size.width
    height = menu_size.height if menu_size and menu_size.height else fallback_size.height

    x = anchor.left
    y = anchor.bottom

    if x + width > viewport.width:
        x = max(0, viewport.width - width - margin)
    if y + height > viewport.height:
        y = max(0, viewport.height - height - margin)

    return Point(x, y)


# State machine


@dataclass
class CommandPalette:
    """
    Open/closed palette state with a filter and a wrapping selection cursor.

    Example:
        >>> palette = CommandPalette()
        >>> palette.open("block-1", Rect(10, 20, 300, 24))
        >>> palette.handle_key("ArrowDown")
        >>> palette.handle_key("Enter").label
        'Heading 1'
    """

    catalog: Sequence[PaletteEntry] = DEFAULT_CATALOG
    is_open: bool = False
    target_block_id: Optional[str] = None
    anchor: Optional[Rect] = None
    query: str = ""
    selected_index: int = 0
    _entries: list[PaletteEntry] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._entries = filter_entries(self.query, self.catalog)

    @property
    def entries(self) -> list[PaletteEntry]:
        """Entries matching the current query."""
        return list(self._entries)

    @property
    def selected(self) -> Optional[PaletteEntry]:
        if not self._entries:
            return None
        return self._entries[self.selected_index]

    def open(self, target_block_id: str, anchor: Optional[Rect] = None) -> None:
        """Open for a block with an empty filter."""
        self.is_open = True
        self.target_block_id = target_block_id
        self.anchor = anchor
        self.set_query("")
        logger.debug("palette_opened", target=target_block_id)

    def close(self) -> None:
        """Close without committing."""
        self.is_open = False
        self.target_block_id = None
        self.anchor = None
        self.set_query("")

    def set_query(self, query: str) -> None:
        """Change the filter; the selection returns to the first entry."""
        self.query = query
        self._entries = filter_entries(query, self.catalog)
        self.selected_index = 0

    def move_down(self) -> None:
        if self._entries:
            self.selected_index = (self.selected_index + 1) % len(self._entries)

    def move_up(self) -> None:
        if self._entries:
            self.selected_index = (self.selected_index - 1 + len(self._entries)) % len(self._entries)

    def commit(self) -> Optional[PaletteEntry]:
        """
        Take the selected entry and close.

        Returns:
            The selected entry, or None when nothing matches the filter
            (the palette then stays open)
        """
        entry = self.selected
        if entry is None:
            return None
        self.close()
        return entry

    def handle_key(self, key: str) -> Optional[PaletteEntry]:
        """
        Dispatch a navigation key.

        Args:
            key: ``ArrowDown``, ``ArrowUp``, ``Enter`` or ``Escape``; other
                 keys are ignored

        Returns:
            The committed entry on ``Enter``, otherwise None
        """
        if not self.is_open:
            return None
        if key == "ArrowDown":
            self.move_down()
        elif key == "ArrowUp":
            self.move_up()
        elif key == "Enter":
            return self.commit()
        elif key == "Escape":
            self.close()
        return None


def is_slash_trigger(key: str, content: str) -> bool:
    """Whether a key-up of ``/`` left the block containing only the slash."""
    return key == SLASH_TRIGGER and content == SLASH_TRIGGER
