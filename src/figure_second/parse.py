"""Split an SVG event stream into leading events, layers and trailing events."""
from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .errors import IdentifierError, MissingLayerAttribute, MissingLayerEnd, ObjectParseError
from .layer import GROUP, LABEL, Layer
from .log import get_logger
from .markup import EmptyEvent, EndEvent, Event, StartEvent
from .objects import Other, PlaceholderObject, classify

logger = get_logger(__name__)


def _is_group_start(event: Event) -> bool:
    return isinstance(event, StartEvent) and event.element.name == GROUP


def leading_events(events: Iterator[Event]) -> Tuple[List[Event], Optional[StartEvent]]:
    out: List[Event] = []
    for event in events:
        if _is_group_start(event):
            return out, event
        out.append(event)
    return out, None


def layers(events: Iterator[Event], first_layer_start: StartEvent) -> Tuple[List[Layer], List[Event]]:
    """Parse the first layer and every layer after it.

    Events found between two layers become the ``leading`` events of the
    second one. Whatever follows the last layer is returned as the trailing
    events.
    """
    out = [group(first_layer_start, events)]
    pending: List[Event] = []
    for event in events:
        if _is_group_start(event):
            out.append(group(event, events, leading=pending))
            pending = []
        else:
            pending.append(event)
    return out, pending


def _required_attribute(start_event: StartEvent, key: bytes, field: str) -> str:
    value = start_event.element.get(key)
    if value is None:
        raise MissingLayerAttribute(field, start_event.element)
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MissingLayerAttribute(field, start_event.element) from exc


def group(
    start_event: StartEvent,
    events: Iterator[Event],
    leading: Optional[List[Event]] = None,
) -> Layer:
    """Parse everything up to and including the ``</g>`` closing a layer."""
    layer_id = _required_attribute(start_event, b"id", "id")
    layer_name = _required_attribute(start_event, LABEL, "name")
    name = start_event.element.name

    content: List[PlaceholderObject] = []
    depth = 0
    for event in events:
        if isinstance(event, EmptyEvent):
            try:
                content.append(classify(event))
            except IdentifierError as exc:
                raise ObjectParseError(exc, layer_name) from exc
        elif isinstance(event, EndEvent) and event.name == name:
            if depth == 0:
                return Layer(layer_id, layer_name, start_event, content, event, leading)
            depth -= 1
            content.append(Other(event))
        else:
            if isinstance(event, StartEvent) and event.element.name == name:
                depth += 1
            content.append(Other(event))

    raise MissingLayerEnd(layer_id, layer_name)


def segment(events: Iterator[Event]) -> Tuple[List[Event], List[Layer], List[Event]]:
    events = iter(events)
    leading, first_group = leading_events(events)
    if first_group is None:
        logger.debug("no layers found after %d leading events", len(leading))
        return leading, [], []

    parsed, trailing = layers(events, first_group)
    logger.debug(
        "segmented document: %d leading events, %d layers, %d trailing events",
        len(leading),
        len(parsed),
        len(trailing),
    )
    return leading, parsed, trailing
