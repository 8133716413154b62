"""
Author annotations attached to translator call sites.

Grammar of one annotation (a trailing comment):

    # @key free text     -> explicit key "key", note "free text"
    # free text          -> note "free text"

The @key token may be quoted (`# @"welcome banner" shown on login`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tagstrings.scan.canonical import unquote

COMMENT_DELIMITER = "#"
OVERRIDE_MARKER = "@"


@dataclass(frozen=True)
class Annotation:
    """A parsed annotation: optional explicit key plus free text."""
    override_key: str | None = None
    text: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.override_key is None and self.text is None


def strip_delimiters(comment: str) -> str:
    """Remove leading comment markers and surrounding whitespace."""
    return comment.strip().lstrip(COMMENT_DELIMITER).strip()


def _take_token(body: str) -> tuple[str, str]:
    """Split off the first token; quoted tokens may contain spaces."""
    if body[:1] in ("'", '"', "`"):
        closing = body.find(body[0], 1)
        if closing > 0:
            return body[: closing + 1], body[closing + 1:]
    for index, char in enumerate(body):
        if char.isspace():
            return body[:index], body[index:]
    return body, ""


def parse_annotation(comment: str) -> Annotation:
    """Tokenize one comment into (override key, free text)."""
    body = strip_delimiters(comment)
    if not body:
        return Annotation()

    if body.startswith(OVERRIDE_MARKER):
        token, rest = _take_token(body[len(OVERRIDE_MARKER):])
        key = unquote(token).strip()
        if key:
            return Annotation(override_key=key, text=rest.strip() or None)

    return Annotation(text=body)


def combine(annotations: Iterable[Annotation]) -> Annotation:
    """Merge several comment lines: the first override wins, texts are joined."""
    override: str | None = None
    texts: list[str] = []
    for annotation in annotations:
        if override is None and annotation.override_key:
            override = annotation.override_key
        if annotation.text:
            texts.append(annotation.text)
    return Annotation(override_key=override, text=" ".join(texts) or None)
