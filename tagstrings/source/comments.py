"""Comment index for a Python source file, built with tokenize."""

from __future__ import annotations

import io
import logging
import tokenize
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# (line, column), the same coordinates ast uses (1-based lines, 0-based columns)
Position = tuple[int, int]


@dataclass(frozen=True)
class Comment:
    """A single `#` comment and where it starts."""
    line: int
    col: int
    text: str

    @property
    def position(self) -> Position:
        return (self.line, self.col)


class CommentIndex:
    """All comments of one file, in source order."""

    def __init__(self, comments: list[Comment] | None = None) -> None:
        self.comments = sorted(comments or [], key=lambda c: c.position)

    @classmethod
    def from_source(cls, source: str) -> CommentIndex:
        comments: list[Comment] = []
        reader = io.StringIO(source).readline
        try:
            for token in tokenize.generate_tokens(reader):
                if token.type == tokenize.COMMENT:
                    line, col = token.start
                    comments.append(Comment(line, col, token.string))
        except (tokenize.TokenError, SyntaxError) as e:
            # ast accepted the file, so this only loses annotations
            logger.debug(f"Comment scan stopped early: {e}")
        return cls(comments)

    def between(self, start: Position, end: Position) -> list[Comment]:
        """Comments starting inside the half-open range [start, end)."""
        return [c for c in self.comments if start <= c.position < end]

    def trailing(self, end: Position) -> Comment | None:
        """The comment that follows `end` on the same line, if any."""
        line, col = end
        for comment in self.comments:
            if comment.line == line and comment.col >= col:
                return comment
            if comment.line > line:
                break
        return None

    def __len__(self) -> int:
        return len(self.comments)
