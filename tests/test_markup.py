from __future__ import annotations

import io
import sys
import time
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from figure_second.errors import MarkupError
from figure_second.markup import (
    EmptyEvent,
    EndEvent,
    EventWriter,
    RawEvent,
    StartEvent,
    iter_events,
    read_events,
)


def _replay(data: bytes) -> bytes:
    sink = io.BytesIO()
    writer = EventWriter(sink)
    for event in iter_events(data):
        writer.write_event(event)
    return sink.getvalue()


class MarkupEventTests(unittest.TestCase):
    def test_event_kinds(self) -> None:
        data = b'<?xml version="1.0"?><!-- c --><svg a="1"><rect id="r"/>text<![CDATA[<x>]]></svg>'
        events = list(iter_events(data))
        self.assertIsInstance(events[0], RawEvent)
        self.assertEqual(events[0].kind, "pi")
        self.assertEqual(events[1].kind, "comment")
        self.assertIsInstance(events[2], StartEvent)
        self.assertEqual(events[2].name, b"svg")
        self.assertIsInstance(events[3], EmptyEvent)
        self.assertEqual(events[3].element.get(b"id"), b"r")
        self.assertEqual(events[4], RawEvent(b"text", "text"))
        self.assertEqual(events[5].kind, "cdata")
        self.assertEqual(events[6], EndEvent(b"svg"))
        self.assertEqual(len(events), 7)

    def test_attribute_order_duplicates_and_quoting_survive(self) -> None:
        data = b"<g\n   b='2'  a = \"1\"\ta=\"3\"   >"
        (event,) = list(iter_events(data))
        self.assertEqual(event.element.keys(), [b"b", b"a", b"a"])
        self.assertEqual(event.element.get(b"a"), b"1")
        self.assertEqual(event.to_bytes(), data)

    def test_attribute_values_may_contain_angle_brackets(self) -> None:
        data = b'<text label="a > b" />'
        (event,) = list(iter_events(data))
        self.assertIsInstance(event, EmptyEvent)
        self.assertEqual(event.element.get(b"label"), b"a > b")
        self.assertEqual(event.to_bytes(), data)

    def test_doctype_with_internal_subset(self) -> None:
        data = b'<!DOCTYPE svg [\n<!ENTITY ns "http://x">\n]>\n<svg/>'
        events = list(iter_events(data))
        self.assertEqual(events[0].kind, "doctype")
        self.assertEqual(_replay(data), data)

    def test_round_trip_sample_document(self) -> None:
        data = (TESTS_DIR / "data" / "three_layers.svg").read_bytes()
        self.assertEqual(_replay(data), data)

    def test_non_utf8_bytes_round_trip(self) -> None:
        data = b'<svg><text id="\xff\xfe">caf\xe9</text></svg>'
        self.assertEqual(_replay(data), data)

    def test_append_and_remove(self) -> None:
        (event,) = list(iter_events(b'<g style="x" id="a" style="y">'))
        event.element.remove(b"style")
        event.element.append(b"style", b"display:none")
        self.assertEqual(event.to_bytes(), b'<g id="a" style="display:none">')

    def test_append_switches_quote_for_values_with_double_quotes(self) -> None:
        (event,) = list(iter_events(b"<g/>"))
        event.element.append(b"title", b'say "hi"')
        self.assertEqual(event.to_bytes(), b"<g title='say \"hi\"'/>")

    def test_append_escapes_values_with_both_quote_kinds(self) -> None:
        (event,) = list(iter_events(b"<g/>"))
        event.element.append(b"title", b"a\"b'c")
        rendered = event.to_bytes()
        self.assertEqual(rendered, b"<g title=\"a&quot;b'c\"/>")

        (reparsed,) = list(iter_events(rendered))
        self.assertEqual(reparsed.element.get(b"title"), b"a&quot;b'c")

    def test_copy_is_independent(self) -> None:
        (event,) = list(iter_events(b'<rect id="a"/>'))
        clone = event.element.copy()
        clone.remove(b"id")
        self.assertEqual(event.element.get(b"id"), b"a")
        self.assertIsNone(clone.get(b"id"))

    def test_malformed_markup_reports_offset(self) -> None:
        with self.assertRaises(MarkupError) as ctx:
            list(iter_events(b"<svg>< broken</svg>"))
        self.assertEqual(ctx.exception.offset, 5)

    def test_unterminated_doctype_fails_fast(self) -> None:
        data = b"<!DOCTYPE x " + b"[]" * 60
        started = time.monotonic()
        with self.assertRaises(MarkupError) as ctx:
            list(iter_events(data))
        self.assertLess(time.monotonic() - started, 1.0)
        self.assertEqual(ctx.exception.offset, 0)

    def test_unquoted_attribute_is_rejected(self) -> None:
        with self.assertRaises(MarkupError):
            list(iter_events(b"<rect width=10/>"))

    def test_read_events_accepts_files_and_bytes(self) -> None:
        data = b'<svg><rect id="a" width="1" height="2"/></svg>'
        self.assertEqual(list(read_events(io.BytesIO(data))), list(read_events(data)))


if __name__ == "__main__":
    unittest.main()
