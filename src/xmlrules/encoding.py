"""Validation of caller-supplied charset names."""

from __future__ import annotations

import codecs

from .errors import EncodingError

_UTF7_LABELS = frozenset({"utf-7", "utf7", "x-utf-7", "unicode-1-1-utf-7"})


def normalize_encoding(label: str | bytes | None) -> str | None:
    """Return the canonical codec name for ``label``.

    None, empty and blank labels mean "let the tokenizer detect it" and
    return None. Labels the codec registry does not know raise
    EncodingError, as does UTF-7.
    """
    if label is None:
        return None

    if isinstance(label, bytes):
        label = label.decode("ascii", "ignore")

    s = str(label).strip()
    if not s:
        return None

    if s.lower() in _UTF7_LABELS:
        raise EncodingError("forbidden-encoding", repr(label))

    try:
        info = codecs.lookup(s)
    except LookupError as exc:
        raise EncodingError("unknown-encoding", repr(label)) from exc

    if info.name == "utf-7":
        raise EncodingError("forbidden-encoding", repr(label))
    if not getattr(info, "_is_text_encoding", True):
        # bytes-to-bytes codecs such as "base64" or "zlib"
        raise EncodingError("unknown-encoding", repr(label))
    return info.name
