"""Placeholder objects found inside layers and the classifier that builds them."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

from .encoding import EncodedImage
from .errors import IdentifierDecodeError, IdentifierParseError, MissingIdentifier
from .markup import Element, EmptyEvent, Event

RECT = b"rect"
IMAGE = b"image"
STYLE = b"style"
HREF = b"xlink:href"

_WIDTH = b"width"
_HEIGHT = b"height"
_ID = b"id"

_NUMBER_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

Payload = Union[str, bytes, EncodedImage]


def payload_bytes(payload) -> bytes:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return str(payload).encode("utf-8")


@dataclass(frozen=True)
class Identity:
    id: str
    width: float
    height: float

    @classmethod
    def from_element(cls, element: Element) -> "Identity":
        found: Dict[bytes, object] = {}
        for attribute in element.attributes:
            key = attribute.key
            if key not in (_WIDTH, _HEIGHT, _ID):
                continue
            field = key.decode("ascii")
            try:
                text = attribute.value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise IdentifierDecodeError(field, element, exc) from exc
            if key == _ID:
                found[key] = text
            elif _NUMBER_RE.fullmatch(text):
                found[key] = float(text)
            else:
                raise IdentifierParseError(field, element, text)

        width: Optional[float] = found.get(_WIDTH)  # type: ignore[assignment]
        height: Optional[float] = found.get(_HEIGHT)  # type: ignore[assignment]
        id: Optional[str] = found.get(_ID)  # type: ignore[assignment]
        if width is None or height is None or id is None:
            raise MissingIdentifier(element, width, height, id)
        return cls(id=id, width=width, height=height)


@dataclass
class Image:
    """An embedded image; the picture itself lives in the xlink:href attribute."""

    identity: Identity
    element: Element

    @property
    def id(self) -> str:
        return self.identity.id

    def update_image(self, payload: Payload) -> None:
        self.element.remove(HREF)
        self.element.append(HREF, payload_bytes(payload))

    def to_event(self) -> EmptyEvent:
        return EmptyEvent(self.element)


@dataclass
class Rectangle:
    """An unfilled placeholder rectangle."""

    identity: Identity
    element: Element

    @property
    def id(self) -> str:
        return self.identity.id

    def to_image(self, payload: Payload) -> Image:
        element = self.element.copy()
        element.name = IMAGE
        element.remove(STYLE)
        element.append(HREF, payload_bytes(payload))
        return Image(self.identity, element)

    def to_event(self) -> EmptyEvent:
        return EmptyEvent(self.element)


@dataclass
class Other:
    """Anything inside a layer that is not a placeholder: text, markup, comments."""

    event: Event

    def to_event(self) -> Event:
        return self.event


PlaceholderObject = Union[Rectangle, Image, Other]


def classify(event: EmptyEvent) -> PlaceholderObject:
    name = event.element.name
    if name == IMAGE:
        return Image(Identity.from_element(event.element), event.element)
    if name == RECT:
        return Rectangle(Identity.from_element(event.element), event.element)
    return Other(event)
