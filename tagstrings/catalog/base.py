"""
Shared contract of the catalog synchronizers.

A catalog maps key -> (parameters, body) for one language. Every strategy
follows the same merge rules:

- Only keys missing from a catalog are added; existing bodies are never
  modified, whatever the source says now
- Missing entries are translated one at a time, in table order
- A translation failure degrades to an untranslated entry, never to a
  missing one
- A file is written only when its content changed
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tagstrings.masking import RoundTripResult, round_trip
from tagstrings.models import StringTable
from tagstrings.translate.base import Translator

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """What one strategy did during a run."""
    strategy: str
    updated_files: list[Path] = field(default_factory=list)
    added: int = 0
    pending: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def error(self, message: str) -> None:
        logger.error(message)
        self.errors.append(message)

    def updated(self, path: Path) -> None:
        self.updated_files.append(path)
        logger.info(f"Updated {self.strategy} catalog: {path}")


class EntryTranslator:
    """Runs the placeholder round trip for one (text, language) pair at a time.

    Without a translator every entry passes through untranslated.
    """

    def __init__(self, translator: Optional[Translator] = None):
        self.translator = translator

    @property
    def enabled(self) -> bool:
        return self.translator is not None

    @property
    def backend_name(self) -> str:
        return self.translator.name if self.translator else "none"

    def translate(self, text: str, target_lang: str) -> RoundTripResult:
        if self.translator is None:
            return RoundTripResult(text=text, source_text=text, translated=False)
        translator = self.translator
        result = round_trip(text, lambda masked: translator.translate(masked, target_lang))
        if result.error:
            logger.warning(f"Could not translate {text!r} to {target_lang}: {result.error}")
        return result


@dataclass
class SyncContext:
    """Run-scoped inputs of the synchronization phase.

    Attributes:
        output_dir: Folder holding the catalogs
        entries: Round-trip translator shared by all strategies
        add_languages: Validated languages to create catalogs for
    """
    output_dir: Path
    entries: EntryTranslator = field(default_factory=EntryTranslator)
    add_languages: list[str] = field(default_factory=list)


class CatalogStrategy(ABC):
    """One physical catalog format."""

    name: str = "catalog"

    @abstractmethod
    def languages(self, ctx: SyncContext) -> list[str]:
        """Languages that already have a catalog in the output folder."""

    @abstractmethod
    def sync(self, table: StringTable, ctx: SyncContext) -> SyncReport:
        """Add every missing entry of `table` to every catalog."""


def write_if_changed(path: Path, content: str) -> bool:
    """Write content unless the file already holds exactly that text."""
    if path.exists() and path.read_text(encoding="utf-8") == content:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return True
