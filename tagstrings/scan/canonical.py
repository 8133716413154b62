"""
Key canonicalization.

A canonical key is a pure function of a template's literal skeleton: the
head text, then for every slot its ordinal followed by the literal chunk
after it. Renaming a substituted variable keeps the key; touching any
literal character or adding/removing a slot changes it.

    canonical_key("Total: ", ["", " items"])  ->  "Total: ${0}${1} items"

Document catalogs need identifier-safe keys; document_identifier() derives
them from the literal ("Total: ${count}" -> "TotalCount").
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

SLOT_OPEN = "${"
SLOT_CLOSE = "}"

# A ${...} substitution span (non-greedy, no nesting)
SLOT_PATTERN = re.compile(r"\$\{(.*?)\}")

_STRING_PREFIX = re.compile(r"^[rRbBuUfFtT]{0,2}(?=['\"`])")
_QUOTES = ("'''", '"""', "'", '"', "`")
_WORD = re.compile(r"[^\W_]+")
_ALPHA_RUN = re.compile(r"[^\W\d_]{2,}")


def slot(marker: object) -> str:
    """Render a substitution marker: slot(0) -> '${0}'."""
    return f"{SLOT_OPEN}{marker}{SLOT_CLOSE}"


def canonical_key(head: str, tails: Sequence[str]) -> str:
    """Build the canonical key from the head text and each slot's trailing text."""
    parts = [head]
    for ordinal, tail in enumerate(tails):
        parts.append(slot(ordinal))
        parts.append(tail)
    return "".join(parts)


def literal_text(head: str, spans: Iterable[tuple[str, str]]) -> str:
    """Build the translatable literal from (parameter name, trailing text) pairs."""
    parts = [head]
    for name, tail in spans:
        parts.append(slot(name))
        parts.append(tail)
    return "".join(parts)


def unquote(text: str) -> str:
    """Strip one level of matching quote delimiters (and a string prefix).

    >>> unquote("`Hello`")
    'Hello'
    >>> unquote("f'Total: {n}'")
    'Total: {n}'
    """
    stripped = _STRING_PREFIX.sub("", text, count=1)
    for quote in _QUOTES:
        if len(stripped) >= 2 * len(quote) and stripped.startswith(quote) and stripped.endswith(quote):
            return stripped[len(quote):-len(quote)]
    return text


def slot_names(text: str) -> list[str]:
    """Contents of every ${...} span, left to right."""
    return SLOT_PATTERN.findall(text)


def positional_text(text: str) -> str:
    """Replace named spans with positional ones: 'Hi ${name}' -> 'Hi ${0}'."""
    counter = iter(range(len(slot_names(text))))
    return SLOT_PATTERN.sub(lambda _: slot(next(counter)), text)


def has_translatable_content(text: str) -> bool:
    """True when the text outside slots has an alphabetic run of length >= 2."""
    return _ALPHA_RUN.search(SLOT_PATTERN.sub(" ", text)) is not None


def document_identifier(literal: str) -> str | None:
    """Derive an identifier-safe document key from a literal.

    Slots contribute their parameter name, every other non-identifier
    character separates words, and each word's first letter is upper-cased.

    Returns:
        The identifier, or None when the text carries no translatable content
    """
    if not has_translatable_content(literal):
        return None
    text = SLOT_PATTERN.sub(lambda m: f" {m.group(1)} ", literal)
    words = _WORD.findall(text)
    identifier = "".join(word[0].upper() + word[1:] for word in words)
    if identifier[:1].isdigit():
        identifier = f"_{identifier}"
    return identifier or None
