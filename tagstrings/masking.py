"""
Placeholder round-tripping for `${...}` substitution spans.

Machine translation rewrites text freely: it reorders words, translates or
drops punctuation, and has no idea that `${count}` must come back untouched.
Before a literal goes to a translation provider, each span is swapped for a
numeric sentinel (`77<i>77`), which providers pass through almost always.
Afterwards the sentinels are swapped back by ordinal.

Design:
- Sentinels are assigned left to right, so ordinal i is the i-th span
- Restoration matches only registered sentinels, longest first, so ordinals
  such as 7 and 77 cannot be confused
- A translation that loses, duplicates or invents spans is rejected and the
  original text is kept (marked as not translated)

Usage:
    result = round_trip("Total: ${count}", lambda text: translator.translate(text, "de"))
    if result.translated:
        print(result.text)
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable

from tagstrings.config import SENTINEL_PREFIX, SENTINEL_SUFFIX
from tagstrings.errors import TranslationError

logger = logging.getLogger(__name__)

# A ${...} substitution span
SPAN_PATTERN = re.compile(r"\$\{.*?\}")


def sentinel(ordinal: int) -> str:
    return f"{SENTINEL_PREFIX}{ordinal}{SENTINEL_SUFFIX}"


@dataclass
class MaskRegistry:
    """Stores the original span for every sentinel handed out.

    This registry tracks the spans of one text, allowing reliable
    restoration after translation.
    """
    originals: list[str] = field(default_factory=list)

    def register(self, original: str) -> str:
        """Register a span and return its sentinel."""
        placeholder = sentinel(len(self.originals))
        self.originals.append(original)
        return placeholder

    def restore(self, text: str) -> str:
        """Replace every registered sentinel in text with its original span."""
        if not self.originals:
            return text
        lookup = {sentinel(i): original for i, original in enumerate(self.originals)}
        pattern = re.compile("|".join(re.escape(s) for s in sorted(lookup, key=len, reverse=True)))
        return pattern.sub(lambda m: lookup[m.group(0)], text)

    def clear(self) -> None:
        self.originals.clear()

    def __len__(self) -> int:
        return len(self.originals)


def protect(text: str, registry: MaskRegistry | None = None) -> tuple[str, MaskRegistry]:
    """Swap every ${...} span for a sentinel.

    Returns:
        (masked text, registry needed to restore it)
    """
    if registry is None:
        registry = MaskRegistry()
    masked = SPAN_PATTERN.sub(lambda m: registry.register(m.group(0)), text)
    return masked, registry


def restore(text: str, registry: MaskRegistry) -> str:
    """Put the original spans back in place of their sentinels."""
    return registry.restore(text)


def extract_spans(text: str) -> list[str]:
    return SPAN_PATTERN.findall(text)


def validate_spans(source: str, translated: str) -> list[str]:
    """Check that the translated text carries exactly the spans of the source.

    Returns:
        Spans missing from (or extra in) the translation; empty if they match
    """
    expected = Counter(extract_spans(source))
    actual = Counter(extract_spans(translated))
    missing = expected - actual
    extra = actual - expected
    return sorted(missing.elements()) + sorted(extra.elements())


@dataclass
class RoundTripResult:
    """Outcome of protect -> translate -> restore for one text."""
    text: str
    source_text: str
    translated: bool
    error: str | None = None


def round_trip(text: str, translate: Callable[[str], str]) -> RoundTripResult:
    """Translate text while keeping its ${...} spans byte-exact.

    Provider failures are not raised: the original text comes back with
    translated=False and the error message.
    """
    masked, registry = protect(text)
    try:
        translated = translate(masked)
    except TranslationError as e:
        logger.debug(f"Translation failed for {text!r}: {e}")
        return RoundTripResult(text=text, source_text=text, translated=False, error=str(e))

    restored = registry.restore(translated)
    mismatched = validate_spans(text, restored)
    if mismatched:
        message = f"placeholders damaged in translation: {', '.join(mismatched)}"
        logger.debug(f"{message} ({text!r} -> {translated!r})")
        return RoundTripResult(text=text, source_text=text, translated=False, error=message)

    return RoundTripResult(text=restored, source_text=text, translated=True)
