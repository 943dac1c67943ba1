"""Inkscape documents: lookup, image assignment and byte-exact serialization."""
from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Iterator, List, Tuple, Union

from .errors import MissingId, MissingLayer, SerializeError
from .layer import Layer
from .log import get_logger
from .markup import Event, EventWriter, read_events
from .objects import Image, Payload, Rectangle
from .parse import segment

logger = get_logger(__name__)

Source = Union[bytes, bytearray, BinaryIO]


class Document:
    """A parsed SVG split into leading events, layers and trailing events.

    Only the layers are modelled; everything before the first layer and after
    the last one is kept as raw events and written back unchanged.
    """

    def __init__(self, leading_events: List[Event], layers: List[Layer], trailing_events: List[Event]) -> None:
        self.leading_events = leading_events
        self.layers = layers
        self.trailing_events = trailing_events

    def __repr__(self) -> str:
        return f"Document(layers={self.layers!r})"

    @classmethod
    def parse(cls, source: Source) -> "Document":
        return cls(*segment(read_events(source)))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Document":
        with open(path, "rb") as fh:
            return cls.parse(fh)

    def layer(self, name: str) -> Layer:
        for layer in self.layers:
            if layer.name == name:
                return layer
        raise MissingLayer(name)

    def find_by_id(self, id: str) -> Union[Rectangle, Image]:
        for layer in self.layers:
            for obj in layer.placeholders():
                if obj.id == id:
                    return obj
        raise MissingId(id)

    def assign_image(self, id: str, payload: Payload) -> None:
        """Fill the placeholder ``id`` with ``payload``.

        A rectangle is replaced in place by an image element; an existing
        image just gets its data swapped.
        """
        for layer in self.layers:
            for idx, obj in enumerate(layer.content):
                if isinstance(obj, Rectangle) and obj.id == id:
                    layer.content[idx] = obj.to_image(payload)
                    logger.info("replaced rectangle %s in layer %s with an image", id, layer.name)
                    return
                if isinstance(obj, Image) and obj.id == id:
                    obj.update_image(payload)
                    logger.info("updated image %s in layer %s", id, layer.name)
                    return
        raise MissingId(id)

    def dimensions(self, id: str) -> Tuple[float, float]:
        identity = self.find_by_id(id).identity
        return identity.width, identity.height

    def object_ids(self) -> Iterator[str]:
        for layer in self.layers:
            for obj in layer.placeholders():
                yield obj.id

    def write_svg(self, sink: BinaryIO) -> None:
        writer = EventWriter(sink)

        def emit(phase: str, event: Event) -> None:
            try:
                writer.write_event(event)
            except (OSError, ValueError, TypeError) as exc:
                raise SerializeError(phase, event, exc) from exc

        for event in self.leading_events:
            emit("leading", event)

        for layer in self.layers:
            for event in layer.leading:
                emit("header", event)
            emit("header", layer.header)
            for obj in layer.content:
                emit("body", obj.to_event())
            emit("footer", layer.footer)

        for event in self.trailing_events:
            emit("trailing", event)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write_svg(buffer)
        return buffer.getvalue()

    def write_path(self, path: Union[str, Path]) -> None:
        with open(path, "wb") as fh:
            self.write_svg(fh)


def parse_svg(source: Source) -> Document:
    return Document.parse(source)
