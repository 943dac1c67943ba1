"""Inkscape layers: a named <g> group holding placeholder objects."""
from __future__ import annotations

from typing import Iterator, List, Optional

from .log import get_logger
from .markup import EndEvent, Event, StartEvent
from .objects import STYLE, Image, PlaceholderObject, Rectangle

GROUP = b"g"
LABEL = b"inkscape:label"
HIDDEN_STYLE = b"display:none"

logger = get_logger(__name__)


class Layer:
    def __init__(
        self,
        id: str,
        name: str,
        header: StartEvent,
        content: List[PlaceholderObject],
        footer: EndEvent,
        leading: Optional[List[Event]] = None,
    ) -> None:
        self._id = id
        self._name = name
        self.header = header
        self.content = content
        self.footer = footer
        # whitespace and markup between the previous layer and this one
        self.leading = leading if leading is not None else []

    def __repr__(self) -> str:
        return f"Layer(id={self._id!r}, name={self._name!r}, objects={len(self.content)})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def hidden(self) -> bool:
        return self.header.element.get(STYLE) == HIDDEN_STYLE

    def set_visible(self) -> None:
        """Make the layer visible by dropping its style attribute."""
        self.header.element.remove(STYLE)
        logger.info("showing layer %s", self._name)

    def set_hidden(self) -> None:
        """Hide the layer with a trailing style="display:none"."""
        self.header.element.remove(STYLE)
        self.header.element.append(STYLE, HIDDEN_STYLE)
        logger.info("hiding layer %s", self._name)

    def placeholders(self) -> Iterator[PlaceholderObject]:
        for obj in self.content:
            if isinstance(obj, (Rectangle, Image)):
                yield obj
