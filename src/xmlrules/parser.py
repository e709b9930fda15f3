"""Rule-driven XML parser entry point."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Any

from .config import ParserConfig, default_config
from .encoding import normalize_encoding
from .errors import ConfigurationError, InputError, RuleSpecError, StreamError, XMLSyntaxError
from .location import Location
from .rules import RuleTable
from .tokenizer import DEFAULT_BUFSIZE, XMLTokenizer

if TYPE_CHECKING:
    from collections.abc import Callable

    from .rules import Rule

logger = logging.getLogger(__name__)


class ParserState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class RuleParser:
    """Stream an XML document and hand matching values to rules.

    Rules are indexed once, when the parser is built. Each ``parse()`` call
    then walks the document event by event, tracking the current element
    path and calling the rules registered for exactly that path:

    - on a start tag, every AttributeRule for the path receives the values
      of its attributes, in the order the rule lists them;
    - on text, every CharacterRule for the path receives the text.

    Rules may call ``stop()`` on the parser they are given; parsing ends
    once the current event has been fully handled. Instances can parse any
    number of documents one after the other, but not concurrently.
    """

    __slots__ = (
        "_continue",
        "_location",
        "_repr",
        "_state",
        "config",
        "debug",
        "on_end_document",
        "rules",
        "tokenizer",
    )

    config: ParserConfig
    debug: bool
    on_end_document: Callable[[RuleParser], Any] | None
    rules: RuleTable
    tokenizer: XMLTokenizer

    def __init__(
        self,
        *rules: Rule,
        config: ParserConfig | None = None,
        on_end_document: Callable[[RuleParser], Any] | None = None,
        bufsize: int = DEFAULT_BUFSIZE,
    ) -> None:
        if not rules:
            raise ConfigurationError("no-rules")

        self.config = config if config is not None else default_config()
        self.debug = self.config.debug
        self.on_end_document = on_end_document

        if self.config.validation and not XMLTokenizer.SUPPORTS_VALIDATION:
            raise ConfigurationError("validation-unsupported")

        self.rules = RuleTable(rules)
        self.tokenizer = XMLTokenizer(namespaces=self.config.namespaces, bufsize=bufsize)
        self._location = Location()
        self._continue = True
        self._state = ParserState.IDLE
        self._repr: str | None = None

        if self.debug:
            logger.debug(
                "Parser configured [namespaces=%s, validation=%s]",
                self.config.namespaces,
                self.config.validation,
            )
            logger.debug(
                "Initialized %d ATTRIBUTE paths and %d CHARACTER paths from %d rules.",
                self.rules.attribute_path_count,
                self.rules.character_path_count,
                len(self.rules),
            )

    def __repr__(self) -> str:
        # Rules are immutable after construction
        if self._repr is None:
            self._repr = f"{type(self).__name__}({self.rules!r})"
        return self._repr

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def location(self) -> str:
        """Canonical path of the element currently being processed."""
        return self._location.path

    def stop(self) -> None:
        """Ask the parser to stop after the current event's rules have run.

        A later ``parse()`` call starts over as usual.
        """
        self._continue = False

    def parse(self, source: Any, encoding: str | None = None) -> None:
        """Parse ``source``, running every matching rule.

        ``source`` is a binary or text file-like object, or the document
        itself as bytes or str. The caller keeps ownership of file objects;
        they are not closed. ``encoding`` names the charset of byte input;
        when omitted or blank, expat detects it from the document.

        Raises InputError, EncodingError, RuleSpecError, StreamError or
        XMLSyntaxError. Exceptions raised by rules propagate unchanged.
        """
        if self._state is ParserState.RUNNING:
            raise RuntimeError("parse() cannot be called while this parser is already parsing")
        if source is None:
            raise InputError("missing-source")

        codec = normalize_encoding(encoding)
        self.tokenizer.set_input(source, codec)

        if self.debug:
            logger.debug("Tokenizer input set [type=%s, encoding=%s (None is OK)]", type(source).__name__, codec)

        self._do_parse()

    def _do_parse(self) -> None:
        self._location.clear()
        self._continue = True
        self._state = ParserState.RUNNING

        debug = self.debug
        if debug:
            logger.debug("Parsing starting...")
        started = time.perf_counter()

        try:
            while self._continue:
                event = self._next_event()
                if event == XMLTokenizer.START_TAG:
                    self._start_element()
                elif event == XMLTokenizer.TEXT:
                    self._text()
                elif event == XMLTokenizer.END_TAG:
                    self._end_element()
                else:
                    self._continue = False
                    self._end_document()
        finally:
            self._state = ParserState.STOPPED

        if debug:
            elapsed = time.perf_counter() - started
            logger.debug("Parse COMPLETE, elapsed time: %.3fms", elapsed * 1000)

    def _next_event(self) -> int:
        try:
            return self.tokenizer.next()
        except (StreamError, XMLSyntaxError) as exc:
            exc.path = self._location.path
            exc.event = "next"
            if self.debug:
                logger.debug("Tokenizer failed at %s: %s", exc.path, exc)
            raise

    def _start_element(self) -> None:
        tokenizer = self.tokenizer
        location = self._location
        location.push(tokenizer.name, tokenizer.namespace)
        path = location.path

        if self.debug:
            logger.debug("START_TAG: %s", path)

        entries = self.rules.attribute_entries(path)
        if not entries:
            return

        if self.debug:
            logger.debug("\t%d rules found for START_TAG...", len(entries))

        for entry in entries:
            rule = entry.rule
            if self.debug:
                logger.debug("\t\tRunning Rule: %r", rule)
            try:
                names = entry.resolve()
            except RuleSpecError as exc:
                exc.path = path
                exc.event = "START_TAG"
                raise
            for index, (namespace, local_name) in enumerate(names):
                rule.func(self, index, tokenizer.get_attribute_value(namespace, local_name))

    def _text(self) -> None:
        path = self._location.path

        if self.debug:
            logger.debug("TEXT: %s", path)

        rules = self.rules.character_rules(path)
        if not rules:
            return

        if self.debug:
            logger.debug("\t%d rules found for TEXT...", len(rules))

        text = self.tokenizer.text
        for rule in rules:
            if self.debug:
                logger.debug("\t\tRunning Rule: %r", rule)
            rule.func(self, text)

    def _end_element(self) -> None:
        self._location.pop()

        if self.debug:
            logger.debug("END_TAG: %s", self._location.path)

    def _end_document(self) -> None:
        if self.debug:
            logger.debug("END_DOCUMENT, Parsing COMPLETE")
        if self.on_end_document is not None:
            self.on_end_document(self)
