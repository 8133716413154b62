"""
Module catalogs: one importable Python module per language.

    # i18n/de.py
    from collections.abc import Callable

    translations: dict[str, Callable[..., str]] = {
        # autotranslated using azure via tagstrings (Hello)
        "Hello": lambda: "Hallo",
        # to translate (Total: ${count})
        # params: count: int
        "Total: ${0}": lambda count: f"Total: {count}",
    }

The module is edited as text: new entries are spliced in before the closing
brace of the `translations` literal, so everything already in the file
(hand-written entries, comments, formatting) is left exactly as it was.
"""

from __future__ import annotations

import ast
import json
import logging
import re
from pathlib import Path

from tagstrings.catalog.base import CatalogStrategy, SyncContext, SyncReport, write_if_changed
from tagstrings.config import LANGUAGES, MODULE_MAPPING_NAME
from tagstrings.errors import CatalogError
from tagstrings.models import StringTable, TemplateRecord
from tagstrings.scan.canonical import SLOT_PATTERN

logger = logging.getLogger(__name__)

INDENT = "    "

# Line breaks as the tokenizer counts them
_LINE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+$")

MODULE_TEMPLATE = '''"""Translations for '{language}' ({name}).

Maps each string key to a function of the string's parameters.
"""

from collections.abc import Callable

{mapping}: dict[str, Callable[..., str]] = {{
}}
'''


def new_module(language: str) -> str:
    """Source of an empty catalog module for a language."""
    return MODULE_TEMPLATE.format(
        language=language,
        name=LANGUAGES.get(language, language),
        mapping=MODULE_MAPPING_NAME,
    )


def quote(text: str) -> str:
    """Python string literal for text (double-quoted, non-ASCII kept as is)."""
    return json.dumps(text, ensure_ascii=False)


def comment_text(text: str) -> str:
    """Keep a comment on one line."""
    return text.replace("\r", "\\r").replace("\n", "\\n")


def render_body(text: str, params: list[str]) -> str:
    """Render a catalog body as a plain string or an f-string.

    Spans naming a parameter become f-string fields; every other character,
    braces included, stays literal.
    """
    if not params:
        return quote(text)

    pieces = []
    position = 0
    for match in SLOT_PATTERN.finditer(text):
        pieces.append(_escape_braces(text[position:match.start()]))
        name = match.group(1)
        if name in params:
            pieces.append(f"{{{name}}}")
        else:
            pieces.append(_escape_braces(match.group(0)))
        position = match.end()
    pieces.append(_escape_braces(text[position:]))
    return f"f{quote(''.join(pieces))}"


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def find_mapping(tree: ast.Module, name: str = MODULE_MAPPING_NAME) -> ast.Dict | None:
    """The dict literal assigned to `name` at module level, if any."""
    for stmt in tree.body:
        if isinstance(stmt, ast.AnnAssign):
            targets = [stmt.target]
        elif isinstance(stmt, ast.Assign):
            targets = stmt.targets
        else:
            continue
        if any(isinstance(t, ast.Name) and t.id == name for t in targets):
            if isinstance(stmt.value, ast.Dict):
                return stmt.value
    return None


def existing_keys(mapping: ast.Dict) -> set[str]:
    return {
        key.value for key in mapping.keys
        if isinstance(key, ast.Constant) and isinstance(key.value, str)
    }


def _offset(lines: list[str], lineno: int, byte_col: int) -> int:
    """Character offset in the joined source of an ast (line, byte column)."""
    line = lines[lineno - 1]
    col = len(line.encode("utf-8")[:byte_col].decode("utf-8", errors="replace"))
    return sum(len(l) for l in lines[:lineno - 1]) + col


def _has_comma(segment: str) -> bool:
    """True if the text between the last value and the closing brace has a comma."""
    return any("," in line.split("#", 1)[0] for line in segment.splitlines())


def splice_entries(source: str, mapping: ast.Dict, entries: list[list[str]]) -> str:
    """Insert entry lines before the closing brace of a dict literal.

    Args:
        source: Module source the dict was parsed from
        mapping: The dict node
        entries: Lines of each entry (comments, then the key: value line)

    Returns:
        The new module source
    """
    lines = _LINE.findall(source)
    close = _offset(lines, mapping.end_lineno, mapping.end_col_offset) - 1
    if source[close] != "}":
        raise CatalogError(f"unexpected end of '{MODULE_MAPPING_NAME}' literal")

    if mapping.values:
        last = mapping.values[-1]
        last_end = _offset(lines, last.end_lineno, last.end_col_offset)
        if not _has_comma(source[last_end:close]):
            source = f"{source[:last_end]},{source[last_end:]}"
            close += 1

    block = "".join(f"{INDENT}{line}\n" for entry in entries for line in entry)
    line_start = source.rfind("\n", 0, close) + 1
    if not source[line_start:close].strip():
        return source[:line_start] + block + source[line_start:]
    return f"{source[:close]}\n{block}{source[close:]}"


class ModuleCatalog(CatalogStrategy):
    """Python module catalog strategy."""

    name = "module"

    def path_for(self, ctx: SyncContext, language: str) -> Path:
        return ctx.output_dir / f"{language}.py"

    def languages(self, ctx: SyncContext) -> list[str]:
        if not ctx.output_dir.is_dir():
            return []
        return sorted(
            path.stem for path in ctx.output_dir.glob("*.py")
            if not path.name.startswith("_")
        )

    def render_entry(self, record: TemplateRecord, language: str, ctx: SyncContext) -> tuple[list[str], bool]:
        """Translate one record and render its catalog lines.

        Returns:
            (lines, translated)
        """
        result = ctx.entries.translate(record.literal, language)
        literal = comment_text(record.literal)
        if result.translated:
            lines = [f"# autotranslated using {ctx.entries.backend_name} via tagstrings ({literal})"]
        else:
            lines = [f"# to translate ({literal})"]

        if record.has_params:
            lines.append("# params: " + ", ".join(p.signature() for p in record.params))
        full_note = record.notes.get(TemplateRecord.FULL_NOTE)
        if full_note:
            lines.append(f"# note: {comment_text(full_note)}")
        for param in record.params:
            note = record.notes.get(param.name)
            if note:
                lines.append(f"# {param.name}: {comment_text(note)}")

        names = record.param_names
        arguments = f" {', '.join(names)}" if names else ""
        body = render_body(result.text, names)
        lines.append(f"{quote(record.catalog_key)}: lambda{arguments}: {body},")
        return lines, result.translated

    def sync_language(self, table: StringTable, language: str, ctx: SyncContext, report: SyncReport,
                      create: bool = False) -> None:
        path = self.path_for(ctx, language)
        source = new_module(language) if create else path.read_text(encoding="utf-8")
        try:
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as e:
            report.error(f"{path}: cannot parse catalog module ({e.msg}, line {e.lineno}); skipped")
            return

        mapping = find_mapping(tree)
        if mapping is None:
            report.warn(f"{path}: no '{MODULE_MAPPING_NAME}' dict literal found; skipped")
            return

        present = existing_keys(mapping)
        missing = [record for record in table if record.catalog_key not in present]
        if not missing and not create:
            logger.debug(f"{path}: up to date")
            return

        entries = []
        for record in missing:
            lines, translated = self.render_entry(record, language, ctx)
            entries.append(lines)
            if not translated:
                report.pending += 1

        try:
            updated = splice_entries(source, mapping, entries) if entries else source
            ast.parse(updated, filename=str(path))
        except (CatalogError, SyntaxError) as e:
            report.error(f"{path}: generated catalog does not parse ({e}); not saved")
            return

        if write_if_changed(path, updated):
            report.updated(path)
        report.added += len(entries)

    def sync(self, table: StringTable, ctx: SyncContext) -> SyncReport:
        report = SyncReport(strategy=self.name)
        existing = self.languages(ctx)

        for language in ctx.add_languages:
            if language in existing:
                report.warn(f"{self.path_for(ctx, language)} already exists; not regenerating it")
                continue
            logger.info(f"Creating module catalog for '{language}'")
            self.sync_language(table, language, ctx, report, create=True)

        for language in existing:
            self.sync_language(table, language, ctx, report)
        return report
