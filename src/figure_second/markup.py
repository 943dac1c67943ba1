"""Lexical events for SVG documents with exact byte capture.

Every byte of the input ends up in exactly one event, and writing an
unmodified event reproduces the bytes it was read from. Elements keep their
attributes as an ordered list so attribute order, duplicate keys, quoting and
the whitespace between attributes survive a round trip.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Optional, Union

from .errors import MarkupError

_TOKEN_RE = re.compile(
    rb"(?P<comment><!--.*?-->)"
    rb"|(?P<cdata><!\[CDATA\[.*?\]\]>)"
    rb"|(?P<pi><\?.*?\?>)"
    rb"|(?P<doctype><!DOCTYPE[^\[>]*(?:\[[^\]]*\])?\s*>)"
    rb"|(?P<end></(?P<end_name>[^\s/>]+)(?P<end_tail>\s*)>)"
    rb"|(?P<tag><(?P<name>[^\s/>!?][^\s/>]*)"
    rb"(?P<attrs>(?:\s+[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*)"
    rb"(?P<tail>\s*)(?P<empty>/?)>)"
    rb"|(?P<text>[^<]+)",
    re.DOTALL,
)

_ATTR_RE = re.compile(
    rb"(?P<spacing>\s+)(?P<key>[^\s=/>]+)(?P<separator>\s*=\s*)(?P<quote>[\"'])(?P<value>.*?)(?P=quote)",
    re.DOTALL,
)

_RAW_KINDS = ("comment", "cdata", "pi", "doctype", "text")


@dataclass
class Attribute:
    key: bytes
    value: bytes
    spacing: bytes = b" "
    separator: bytes = b"="
    quote: bytes = b'"'

    def to_bytes(self) -> bytes:
        return self.spacing + self.key + self.separator + self.quote + self.value + self.quote


@dataclass
class Element:
    """Tag name plus ordered attributes of an open or self-closing tag."""

    name: bytes
    attributes: List[Attribute] = field(default_factory=list)
    tail: bytes = b""

    def get(self, key: bytes) -> Optional[bytes]:
        for attribute in self.attributes:
            if attribute.key == key:
                return attribute.value
        return None

    def keys(self) -> List[bytes]:
        return [attribute.key for attribute in self.attributes]

    def remove(self, key: bytes) -> None:
        self.attributes = [attribute for attribute in self.attributes if attribute.key != key]

    def append(self, key: bytes, value: bytes) -> None:
        quote = b'"'
        if b'"' in value:
            if b"'" in value:
                value = value.replace(b'"', b"&quot;")
            else:
                quote = b"'"
        self.attributes.append(Attribute(key, value, quote=quote))

    def copy(self) -> "Element":
        return Element(
            self.name,
            [Attribute(a.key, a.value, a.spacing, a.separator, a.quote) for a in self.attributes],
            self.tail,
        )

    def to_bytes(self, empty: bool = False) -> bytes:
        closing = b"/>" if empty else b">"
        return b"<" + self.name + b"".join(a.to_bytes() for a in self.attributes) + self.tail + closing


@dataclass
class StartEvent:
    element: Element

    @property
    def name(self) -> bytes:
        return self.element.name

    def to_bytes(self) -> bytes:
        return self.element.to_bytes(empty=False)


@dataclass
class EmptyEvent:
    element: Element

    @property
    def name(self) -> bytes:
        return self.element.name

    def to_bytes(self) -> bytes:
        return self.element.to_bytes(empty=True)


@dataclass
class EndEvent:
    name: bytes
    tail: bytes = b""

    def to_bytes(self) -> bytes:
        return b"</" + self.name + self.tail + b">"


@dataclass
class RawEvent:
    """Text, comment, CDATA, processing instruction or doctype, kept verbatim."""

    payload: bytes
    kind: str = "text"

    def to_bytes(self) -> bytes:
        return self.payload


Event = Union[StartEvent, EmptyEvent, EndEvent, RawEvent]


def _parse_element(name: bytes, attrs: bytes, tail: bytes) -> Element:
    attributes = [
        Attribute(
            match.group("key"),
            match.group("value"),
            match.group("spacing"),
            match.group("separator"),
            match.group("quote"),
        )
        for match in _ATTR_RE.finditer(attrs)
    ]
    return Element(name, attributes, tail)


def iter_events(data: bytes) -> Iterator[Event]:
    pos = 0
    end = len(data)
    while pos < end:
        match = _TOKEN_RE.match(data, pos)
        if match is None:
            raise MarkupError(pos, data[pos : pos + 40])
        kind = match.lastgroup
        if kind == "end":
            yield EndEvent(match.group("end_name"), match.group("end_tail"))
        elif kind == "tag":
            element = _parse_element(match.group("name"), match.group("attrs"), match.group("tail"))
            if match.group("empty"):
                yield EmptyEvent(element)
            else:
                yield StartEvent(element)
        else:
            yield RawEvent(match.group(kind), kind)
        pos = match.end()


def read_events(source: Union[bytes, bytearray, BinaryIO]) -> Iterator[Event]:
    """Read a whole byte source into memory and tokenize it."""
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        data = source.read()
    return iter_events(data)


class EventWriter:
    """Writes events to a binary sink."""

    def __init__(self, sink: BinaryIO) -> None:
        self.sink = sink

    def write_event(self, event: Event) -> None:
        self.sink.write(event.to_bytes())
