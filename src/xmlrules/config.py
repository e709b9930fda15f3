"""Parser feature configuration.

Three knobs control how documents are tokenized: debug logging,
namespace-aware tokenization and DTD/schema validation. They live in an
immutable value handed to each parser so behavior is deterministic per
instance. ``default_config()`` reads the process environment once and is
what parsers use when no explicit config is given:

    XMLRULES_DEBUG=1        enable debug logging (default off)
    XMLRULES_NAMESPACES=0   disable namespace processing (default on)
    XMLRULES_VALIDATION=1   request validation (default off)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from .errors import ConfigurationError

ENV_DEBUG = "XMLRULES_DEBUG"
ENV_NAMESPACES = "XMLRULES_NAMESPACES"
ENV_VALIDATION = "XMLRULES_VALIDATION"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError("invalid-flag", f"{name}={raw!r} (expected one of 1/0, true/false, yes/no, on/off)")


@dataclass(frozen=True, slots=True)
class ParserConfig:
    debug: bool = False
    namespaces: bool = True
    validation: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ParserConfig:
        """Build a config from ``XMLRULES_*`` variables (``os.environ`` by default)."""
        if environ is None:
            environ = os.environ
        return cls(
            debug=_env_flag(environ, ENV_DEBUG, False),
            namespaces=_env_flag(environ, ENV_NAMESPACES, True),
            validation=_env_flag(environ, ENV_VALIDATION, False),
        )


@lru_cache(maxsize=1)
def default_config() -> ParserConfig:
    """Process-wide config, read from the environment on first use and fixed thereafter."""
    return ParserConfig.from_env()
