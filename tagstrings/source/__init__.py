"""
Source model for tagstrings: parsed files, comments, symbols and types.
"""

from tagstrings.source.comments import Comment, CommentIndex
from tagstrings.source.project import SourceFile, SourceProject
from tagstrings.source.symbols import ImportTable, TypeResolver

__all__ = [
    "Comment",
    "CommentIndex",
    "ImportTable",
    "SourceFile",
    "SourceProject",
    "TypeResolver",
]
