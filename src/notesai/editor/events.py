"""Events the editor emits for the rendering layer."""

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class FocusRequested:
    """The rendering layer should move input focus to this block."""

    block_id: str
    reason: str


FocusListener = Callable[[FocusRequested], None]
