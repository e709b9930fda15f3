from .config import ParserConfig, default_config
from .errors import (
    ConfigurationError,
    EncodingError,
    InputError,
    RuleSpecError,
    StreamError,
    XMLRulesError,
    XMLSyntaxError,
)
from .location import Location
from .parser import ParserState, RuleParser
from .rules import AttributeName, AttributeRule, CharacterRule, Rule, RuleTable, RuleType, decode_attribute_spec

__all__ = [
    "AttributeName",
    "AttributeRule",
    "CharacterRule",
    "ConfigurationError",
    "EncodingError",
    "InputError",
    "Location",
    "ParserConfig",
    "ParserState",
    "Rule",
    "RuleParser",
    "RuleSpecError",
    "RuleTable",
    "RuleType",
    "StreamError",
    "XMLRulesError",
    "XMLSyntaxError",
    "decode_attribute_spec",
    "default_config",
]
