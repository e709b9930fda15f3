"""Rule definitions, attribute name decoding and the path-keyed rule table.

A rule pairs an exact element path with a callback:

    CharacterRule("/library/book/title", on_title)
    AttributeRule("/imdb/category", ["name"], on_category)

Path segments and attribute names may be namespace-qualified with a
bracketed URI, e.g. ``/[http://purl.org/rss/1.0/]channel`` or
``[http://www.w3.org/1999/02/22-rdf-syntax-ns#]about``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, NamedTuple, Union

from .errors import ConfigurationError, RuleSpecError

if TYPE_CHECKING:
    from typing import Protocol

    from .parser import RuleParser

    class AttributeCallback(Protocol):
        def __call__(self, parser: RuleParser, index: int, value: str | None) -> None: ...

    class CharacterCallback(Protocol):
        def __call__(self, parser: RuleParser, text: str) -> None: ...


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class RuleType(_StrEnum):
    ATTRIBUTE = "attribute"
    CHARACTER = "character"


class AttributeName(NamedTuple):
    namespace: str | None
    local_name: str


def decode_attribute_spec(spec: str) -> AttributeName:
    """Split ``[namespaceURI]localName`` (or a bare ``localName``).

    Raises RuleSpecError when the bracketed namespace is shorter than two
    characters or unterminated, or when the local name is empty.
    """
    namespace = None
    start = 0
    if spec[:1] == "[":
        end = spec.find("]")
        # ']' missing or fewer than two characters between the brackets
        if end <= 2:
            raise RuleSpecError("incomplete-namespace-uri", repr(spec))
        namespace = spec[1:end]
        start = end + 1

    if len(spec) - start < 1:
        raise RuleSpecError("missing-local-name", repr(spec))

    return AttributeName(namespace, spec[start:])


def validate_path(path: object) -> str:
    """Check ``path`` against the rule path grammar and return it.

    ``path := "/" | ("/" segment)+`` with
    ``segment := ["[" namespaceURI "]"] localName``.
    """
    if not isinstance(path, str) or not path:
        raise ConfigurationError("empty-path", repr(path))
    if path == "/":
        return path
    if path[0] != "/":
        raise ConfigurationError("path-not-absolute", repr(path))
    if path[-1] == "/":
        raise ConfigurationError("path-trailing-slash", repr(path))

    pos = 0
    length = len(path)
    while pos < length:
        # path[pos] is always a '/' separator here
        pos += 1
        if pos < length and path[pos] == "[":
            end = path.find("]", pos)
            if end == -1:
                raise ConfigurationError("path-unterminated-namespace", repr(path))
            if end == pos + 1:
                raise ConfigurationError("path-empty-namespace", repr(path))
            pos = end + 1
        next_sep = path.find("/", pos)
        if next_sep == -1:
            next_sep = length
        if next_sep == pos:
            raise ConfigurationError("path-empty-segment", repr(path))
        pos = next_sep
    return path


@dataclass(frozen=True, slots=True)
class AttributeRule:
    """Hand the values of ``attributes`` to ``func`` when ``path`` is entered.

    ``func(parser, index, value)`` is called once per attribute name, with
    ``index`` being the position in ``attributes``. ``value`` is None when
    the element does not carry that attribute.
    """

    path: str
    attributes: tuple[str, ...]
    func: AttributeCallback

    type: ClassVar[RuleType] = RuleType.ATTRIBUTE

    def __init__(self, path: str, attributes: Iterable[str], func: AttributeCallback) -> None:
        if isinstance(attributes, str):
            attributes = (attributes,)
        names = tuple(attributes) if attributes is not None else ()
        validate_path(path)
        if not names:
            raise ConfigurationError("missing-attributes", repr(path))
        for name in names:
            if not isinstance(name, str):
                raise ConfigurationError("invalid-attribute-name", repr(name))
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "attributes", names)
        object.__setattr__(self, "func", func)

    def __repr__(self) -> str:
        return f"AttributeRule(path={self.path!r}, attributes={list(self.attributes)!r})"


@dataclass(frozen=True, slots=True)
class CharacterRule:
    """Hand the text content found directly at ``path`` to ``func(parser, text)``."""

    path: str
    func: CharacterCallback

    type: ClassVar[RuleType] = RuleType.CHARACTER

    def __init__(self, path: str, func: CharacterCallback, attributes: Iterable[str] | None = None) -> None:
        validate_path(path)
        if attributes:
            raise ConfigurationError("unexpected-attributes", repr(path))
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "func", func)

    @property
    def attributes(self) -> tuple[str, ...]:
        return ()

    def __repr__(self) -> str:
        return f"CharacterRule(path={self.path!r})"


Rule = Union[AttributeRule, CharacterRule]


class _CompiledAttributeRule:
    """Attribute rule entry in the table; decoded names are cached after first use."""

    __slots__ = ("names", "rule")

    def __init__(self, rule: AttributeRule) -> None:
        self.rule = rule
        self.names: tuple[AttributeName, ...] | None = None

    def resolve(self) -> tuple[AttributeName, ...]:
        names = self.names
        if names is None:
            try:
                names = tuple(decode_attribute_spec(spec) for spec in self.rule.attributes)
            except RuleSpecError as exc:
                exc.rule = self.rule
                raise
            self.names = names
        return names

    def __repr__(self) -> str:
        return repr(self.rule)


class RuleTable:
    """Rules indexed by exact path, split by type, in registration order."""

    __slots__ = ("_attribute", "_character", "_count")

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._attribute: dict[str, list[_CompiledAttributeRule]] = {}
        self._character: dict[str, list[CharacterRule]] = {}
        self._count = 0

        for rule in rules:
            if isinstance(rule, AttributeRule):
                self._attribute.setdefault(rule.path, []).append(_CompiledAttributeRule(rule))
            elif isinstance(rule, CharacterRule):
                self._character.setdefault(rule.path, []).append(rule)
            else:
                raise ConfigurationError("unsupported-rule", type(rule).__name__)
            self._count += 1

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"RuleTable(attribute_rules={self._attribute!r}, character_rules={self._character!r})"

    @property
    def attribute_path_count(self) -> int:
        return len(self._attribute)

    @property
    def character_path_count(self) -> int:
        return len(self._character)

    def attribute_entries(self, path: str) -> list[_CompiledAttributeRule]:
        return self._attribute.get(path, [])

    def attribute_rules(self, path: str) -> list[AttributeRule]:
        return [entry.rule for entry in self._attribute.get(path, ())]

    def character_rules(self, path: str) -> list[CharacterRule]:
        return self._character.get(path, [])

    def lookup(self, rule_type: RuleType, path: str) -> list[Rule]:
        if rule_type is RuleType.ATTRIBUTE:
            return list(self.attribute_rules(path))
        return list(self.character_rules(path))
