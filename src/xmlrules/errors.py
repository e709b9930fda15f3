"""Exception types and the central error message table.

Every error raised by xmlrules carries a kebab-case ``code``. The
human-readable message for a code lives in one table here so the parser
and the rule layer never hard-code prose.
"""

from __future__ import annotations

from typing import Any

_MESSAGES: dict[str, str] = {
    # ================================================================
    # CONFIGURATION ERRORS
    # ================================================================
    "no-rules": "At least one rule must be provided, otherwise parsing would do nothing",
    "unsupported-rule": "Rules must be AttributeRule or CharacterRule instances",
    "empty-path": "Rule path cannot be empty",
    "path-not-absolute": "Rule path must start with '/'",
    "path-trailing-slash": "Rule path cannot end with '/' (only the root path '/' may)",
    "path-empty-segment": "Rule path contains an empty segment",
    "path-unterminated-namespace": "Rule path contains a '[' without a matching ']'",
    "path-empty-namespace": "Rule path contains an empty '[]' namespace, which no element can match",
    "missing-attributes": "Attribute rules need at least one attribute name",
    "unexpected-attributes": "Character rules do not take attribute names",
    "invalid-attribute-name": "Attribute names must be strings",
    "validation-unsupported": "DTD/schema validation is not supported by the expat tokenizer",
    "invalid-flag": "Feature flag environment variable has an unrecognised value",
    # ================================================================
    # INPUT ERRORS
    # ================================================================
    "missing-source": "Source cannot be None",
    "empty-source": "Source cannot be empty",
    "unreadable-source": "Source must be a file-like object, bytes or str",
    # ================================================================
    # ENCODING ERRORS
    # ================================================================
    "unknown-encoding": "Encoding is not a charset known to this Python runtime",
    "forbidden-encoding": "UTF-7 is not accepted as a document encoding",
    # ================================================================
    # DISPATCH ERRORS
    # ================================================================
    "incomplete-namespace-uri": "Namespace URI in attribute name looks to be incomplete or empty",
    "missing-local-name": "Local name in attribute name looks to be missing",
    "stream-read-failed": "Reading from the source failed",
    "malformed-xml": "The XML document is malformed",
    "invalid-byte-sequence": "The source contains bytes that are invalid for the given encoding",
}


def generate_error_message(code: str, detail: str | None = None) -> str:
    """Return the message for ``code``, optionally followed by ``detail``.

    Unknown codes fall back to the code itself.
    """
    message = _MESSAGES.get(code, code)
    if detail:
        return f"{message}: {detail}"
    return message


class XMLRulesError(Exception):
    """Base class for every xmlrules error.

    Context attributes are optional and only set where the raiser knows
    them: the offending ``rule``, the canonical ``path`` being processed,
    the tokenizer ``event`` being fetched and the source ``line``/``column``.
    """

    code: str
    message: str
    rule: Any
    path: str | None
    event: str | None
    line: int | None
    column: int | None

    def __init__(
        self,
        code: str,
        detail: str | None = None,
        *,
        rule: Any = None,
        path: str | None = None,
        event: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.code = code
        self.message = generate_error_message(code, detail)
        self.rule = rule
        self.path = path
        self.event = event
        self.line = line
        self.column = column
        super().__init__(self.message)

    def __str__(self) -> str:
        context: list[str] = []
        if self.line is not None and self.column is not None:
            context.append(f"line {self.line}, column {self.column}")
        if self.event is not None:
            context.append(f"event={self.event}")
        if self.path is not None:
            context.append(f"path={self.path}")
        if self.rule is not None:
            context.append(f"rule={self.rule!r}")
        if context:
            return f"{self.code} - {self.message} [{', '.join(context)}]"
        return f"{self.code} - {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r})"


class ConfigurationError(XMLRulesError, ValueError):
    """Bad rule or parser construction arguments."""


class InputError(XMLRulesError, ValueError):
    """The source handed to ``parse()`` is missing, empty or unreadable."""


class EncodingError(XMLRulesError, LookupError):
    """The requested charset is unknown or refused."""


class RuleSpecError(XMLRulesError, ValueError):
    """A rule's attribute name could not be decoded during dispatch."""


class StreamError(XMLRulesError, OSError):
    """Reading the source failed."""


class XMLSyntaxError(XMLRulesError, SyntaxError):
    """The tokenizer reported malformed XML.

    Inherits from SyntaxError so the line number shows up in tracebacks.
    """

    def __init__(self, code: str, detail: str | None = None, **context: Any) -> None:
        super().__init__(code, detail, **context)
        self.lineno = self.line
        self.offset = self.column
        self.msg = self.message

    __str__ = XMLRulesError.__str__
