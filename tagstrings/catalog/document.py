"""
Document catalogs: flat JSON files keyed by identifier-safe names.

    i18n/messages.json       {"TotalCount": "Total: ${0}"}
    i18n/messages.de.json    {"TotalCount": "Gesamt: ${0}"}

The base document holds the source-language text of every identifier; each
language document holds the translations. Both use positional `${n}`
markers.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from tagstrings.catalog.base import CatalogStrategy, SyncContext, SyncReport, write_if_changed
from tagstrings.config import DOCUMENT_BASE_NAME
from tagstrings.errors import CatalogError
from tagstrings.models import StringTable, TemplateRecord
from tagstrings.scan.canonical import document_identifier

logger = logging.getLogger(__name__)


def load_document(path: Path) -> dict[str, str]:
    """Read a document; a missing file is an empty document.

    Raises:
        CatalogError: If the file is not a flat JSON object of strings
    """
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CatalogError(f"invalid JSON: {e}", path=path) from e
    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise CatalogError("expected a flat object of strings", path=path)
    return data


def dump_document(document: dict[str, str]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def record_identifier(record: TemplateRecord) -> str | None:
    """Document identifier of a record: the explicit key, else derived from the literal."""
    if record.explicit_key:
        return record.explicit_key
    return document_identifier(record.literal)


class DocumentCatalog(CatalogStrategy):
    """JSON document catalog strategy."""

    name = "document"

    def base_path(self, ctx: SyncContext) -> Path:
        return ctx.output_dir / f"{DOCUMENT_BASE_NAME}.json"

    def path_for(self, ctx: SyncContext, language: str) -> Path:
        return ctx.output_dir / f"{DOCUMENT_BASE_NAME}.{language}.json"

    def languages(self, ctx: SyncContext) -> list[str]:
        if not ctx.output_dir.is_dir():
            return []
        prefix = f"{DOCUMENT_BASE_NAME}."
        languages = []
        for path in ctx.output_dir.glob(f"{DOCUMENT_BASE_NAME}.*.json"):
            language = path.name[len(prefix):-len(".json")]
            if language and "." not in language:
                languages.append(language)
        return sorted(languages)

    def merge_base(self, table: StringTable, base: dict[str, str], report: SyncReport) -> None:
        """Add every new identifier of the table to the base document."""
        seen: dict[str, str] = {}
        for record in table:
            identifier = record_identifier(record)
            if identifier is None:
                logger.debug(f"No translatable content in {record.literal!r}; skipped")
                report.skipped += 1
                continue

            text = record.canonical_key
            first = seen.get(identifier, base.get(identifier))
            if first is not None and first != text:
                report.warn(
                    f"Identifier '{identifier}' already maps to {first!r}; ignoring {text!r} "
                    f"({', '.join(record.locations)})"
                )
                continue
            seen[identifier] = text
            if identifier not in base:
                base[identifier] = text
                report.added += 1

    def sync_language(self, base: dict[str, str], language: str, ctx: SyncContext, report: SyncReport) -> None:
        path = self.path_for(ctx, language)
        try:
            document = load_document(path)
        except CatalogError as e:
            report.error(f"{path}: {e}; skipped")
            return

        before = dump_document(document) if path.exists() else None
        for identifier, text in base.items():
            if identifier in document:
                continue
            result = ctx.entries.translate(text, language)
            document[identifier] = result.text
            if not result.translated:
                report.pending += 1

        content = dump_document(document)
        if content != before and write_if_changed(path, content):
            report.updated(path)

    def sync(self, table: StringTable, ctx: SyncContext) -> SyncReport:
        report = SyncReport(strategy=self.name)
        base_path = self.base_path(ctx)
        try:
            base = load_document(base_path)
        except CatalogError as e:
            report.error(f"{base_path}: {e}; document catalogs not updated")
            return report

        before = dump_document(base) if base_path.exists() else None
        self.merge_base(table, base, report)
        content = dump_document(base)
        if content != before and write_if_changed(base_path, content):
            report.updated(base_path)

        languages = self.languages(ctx)
        for language in ctx.add_languages:
            if language in languages:
                report.warn(f"{self.path_for(ctx, language)} already exists; not regenerating it")
            else:
                logger.info(f"Creating document catalog for '{language}'")
                languages.append(language)

        for language in languages:
            self.sync_language(base, language, ctx, report)
        return report
