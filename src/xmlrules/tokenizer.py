"""Pull-style XML event source on top of expat.

expat is a push parser: it calls back for every piece of markup found in
the data it is fed. ``XMLTokenizer`` feeds it one buffer at a time,
queues the callbacks as events and hands them out one per ``next()``
call, so the rule parser can drive the loop and stop at any event.

Adjacent character data is coalesced into a single TEXT event, including
text split across buffers, CDATA sections, entity references and text
interrupted by comments or processing instructions.
"""

from __future__ import annotations

import codecs
import io
from collections import deque
from typing import Any
from xml.parsers import expat

from .errors import InputError, StreamError, XMLSyntaxError

DEFAULT_BUFSIZE = 64 * 1024

# Separator expat puts between namespace URI and local name
_NS_SEP = "}"


class XMLTokenizer:
    START_TAG = 0
    TEXT = 1
    END_TAG = 2
    END_DOCUMENT = 3

    EVENT_NAMES = ("START_TAG", "TEXT", "END_TAG", "END_DOCUMENT")

    SUPPORTS_VALIDATION = False

    __slots__ = (
        "_bufsize",
        "_decoder",
        "_eof",
        "_events",
        "_parser",
        "_source",
        "attributes",
        "column",
        "event",
        "line",
        "name",
        "namespace",
        "namespaces",
        "text",
    )

    def __init__(self, namespaces: bool = True, bufsize: int = DEFAULT_BUFSIZE) -> None:
        self.namespaces = bool(namespaces)
        self._bufsize = bufsize
        self._parser: Any = None
        self._source: Any = None
        self._decoder: codecs.IncrementalDecoder | None = None
        self._events: deque[list[Any]] = deque()
        self._eof = True
        self._reset_current(None)

    def _reset_current(self, event: int | None) -> None:
        self.event = event
        self.name: str | None = None
        self.namespace: str | None = None
        self.text: str | None = None
        self.attributes: dict[str, str] = {}
        self.line: int | None = None
        self.column: int | None = None

    @property
    def event_name(self) -> str | None:
        if self.event is None:
            return None
        return self.EVENT_NAMES[self.event]

    def set_input(self, source: Any, encoding: str | None = None) -> None:
        """Start tokenizing ``source``.

        ``source`` is a file-like object with ``read()`` (binary or text)
        or a bytes/str document. ``encoding`` must already be normalized;
        when given, bytes are decoded with it instead of letting expat
        honour the document's own declaration.
        """
        if source is None:
            raise InputError("missing-source")
        if isinstance(source, (bytes, bytearray, memoryview)):
            if not len(source):
                raise InputError("empty-source")
            source = io.BytesIO(bytes(source))
        elif isinstance(source, str):
            if not source:
                raise InputError("empty-source")
            source = io.StringIO(source)
        elif not callable(getattr(source, "read", None)):
            raise InputError("unreadable-source", type(source).__name__)

        # With an explicit encoding expat only ever sees our decoded text,
        # so its input encoding is pinned before the first Parse() call
        protocol_encoding = "utf-8" if encoding else None
        if self.namespaces:
            parser = expat.ParserCreate(encoding=protocol_encoding, namespace_separator=_NS_SEP)
        else:
            parser = expat.ParserCreate(encoding=protocol_encoding)
        parser.StartElementHandler = self._handle_start
        parser.EndElementHandler = self._handle_end
        parser.CharacterDataHandler = self._handle_characters

        self._parser = parser
        self._source = source
        self._decoder = codecs.getincrementaldecoder(encoding)() if encoding else None
        self._events.clear()
        self._eof = False
        self._reset_current(None)

    def _position(self) -> tuple[int, int]:
        parser = self._parser
        return parser.CurrentLineNumber, parser.CurrentColumnNumber + 1

    def _split_name(self, name: str) -> tuple[str | None, str]:
        if self.namespaces:
            uri, sep, local = name.rpartition(_NS_SEP)
            if sep:
                return uri or None, local
        return None, name

    def _handle_start(self, name: str, attributes: dict[str, str]) -> None:
        namespace, local = self._split_name(name)
        line, column = self._position()
        self._events.append([self.START_TAG, local, namespace, attributes, line, column])

    def _handle_end(self, name: str) -> None:
        namespace, local = self._split_name(name)
        line, column = self._position()
        self._events.append([self.END_TAG, local, namespace, None, line, column])

    def _handle_characters(self, data: str) -> None:
        events = self._events
        if events and events[-1][0] == self.TEXT:
            events[-1][3].append(data)
            return
        line, column = self._position()
        self._events.append([self.TEXT, None, None, [data], line, column])

    def _feed(self) -> None:
        parser = self._parser
        try:
            chunk = self._source.read(self._bufsize)
        except OSError as exc:
            line, column = self._position()
            raise StreamError("stream-read-failed", str(exc), line=line, column=column) from exc
        except UnicodeDecodeError as exc:
            line, column = self._position()
            raise XMLSyntaxError("invalid-byte-sequence", str(exc), line=line, column=column) from exc

        final = not chunk
        try:
            decoder = self._decoder
            if decoder is not None and not isinstance(chunk, str):
                chunk = decoder.decode(bytes(chunk or b""), final)
                if not chunk and not final:
                    # Partial multi-byte sequence, nothing to hand to expat yet
                    return
            elif isinstance(chunk, (bytearray, memoryview)):
                chunk = bytes(chunk)
            parser.Parse(chunk or b"", final)
        except UnicodeDecodeError as exc:
            line, column = self._position()
            raise XMLSyntaxError("invalid-byte-sequence", str(exc), line=line, column=column) from exc
        except expat.ExpatError as exc:
            raise XMLSyntaxError(
                "malformed-xml",
                expat.ErrorString(exc.code),
                line=exc.lineno,
                column=exc.offset + 1,
            ) from exc

        if final:
            self._eof = True
            line, column = self._position()
            self._events.append([self.END_DOCUMENT, None, None, None, line, column])

    def next(self) -> int:
        """Advance to the next event and return its type.

        Once END_DOCUMENT has been returned every further call returns it
        again.
        """
        if self._parser is None:
            raise RuntimeError("set_input() must be called before next()")

        events = self._events
        # A trailing TEXT event may still grow with the next buffer
        while not self._eof and (not events or (len(events) == 1 and events[0][0] == self.TEXT)):
            self._feed()

        if not events:
            self._reset_current(self.END_DOCUMENT)
            return self.END_DOCUMENT

        kind, name, namespace, payload, line, column = events.popleft()
        self._reset_current(kind)
        self.line = line
        self.column = column
        if kind == self.START_TAG:
            self.name = name
            self.namespace = namespace
            self.attributes = payload
        elif kind == self.END_TAG:
            self.name = name
            self.namespace = namespace
        elif kind == self.TEXT:
            self.text = "".join(payload)
        return kind

    def get_attribute_value(self, namespace: str | None, local_name: str) -> str | None:
        """Value of an attribute of the current start tag, or None if absent."""
        if namespace:
            return self.attributes.get(f"{namespace}{_NS_SEP}{local_name}")
        return self.attributes.get(local_name)
