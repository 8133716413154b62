"""
String extraction: translator-call scanning, canonical keys and notes.
"""

from tagstrings.scan.canonical import canonical_key, document_identifier, literal_text, unquote
from tagstrings.scan.notes import Annotation, parse_annotation
from tagstrings.scan.scanner import TemplateScanner, find_translator, resolve_target, scan_project

__all__ = [
    "Annotation",
    "TemplateScanner",
    "canonical_key",
    "document_identifier",
    "find_translator",
    "literal_text",
    "parse_annotation",
    "resolve_target",
    "scan_project",
    "unquote",
]
