"""Plain-text extraction from Gemini responses of varying shape.

A response may carry its text as:

- a ``text`` string,
- a zero-argument ``text`` accessor,
- either of the above under a nested ``response``,
- ``candidates[0].content.parts[*].text`` fragments.

Both SDK objects and plain dicts are accepted. Each extractor returns ``""``
when its shape does not apply, so ``extract_text`` tries them in order and
falls back to ``""`` when none produces text.
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


def _field(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    try:
        return getattr(obj, key, None)
    except Exception:
        # SDK properties such as .text may raise when the response has no candidates
        logger.debug("Reading %r from %s raised", key, type(obj).__name__, exc_info=True)
        return None


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if callable(value):
        try:
            result = value()
        except Exception:
            logger.debug("Text accessor raised", exc_info=True)
            return ""
        return result if isinstance(result, str) else ""
    return ""


def _direct_text(obj: Any) -> str:
    return _as_text(_field(obj, "text"))


def _candidate_text(obj: Any) -> str:
    candidates = _field(obj, "candidates")
    if not isinstance(candidates, (list, tuple)) or not candidates:
        return ""
    parts = _field(_field(candidates[0], "content"), "parts")
    if not isinstance(parts, (list, tuple)):
        return ""
    fragments = [_field(part, "text") for part in parts]
    return "\n".join(f for f in fragments if isinstance(f, str) and f)


def _nested_direct_text(obj: Any) -> str:
    return _direct_text(_field(obj, "response"))


def _nested_candidate_text(obj: Any) -> str:
    return _candidate_text(_field(obj, "response"))


_EXTRACTORS: tuple[Callable[[Any], str], ...] = (
    _direct_text,
    _nested_direct_text,
    _nested_candidate_text,
    _candidate_text,
)


def extract_text(raw: Any) -> str:
    """Return the textual output of a generation response, or ``""`` if there is none."""
    for extractor in _EXTRACTORS:
        text = extractor(raw)
        if text:
            return text
    return ""
