"""
Main synchronization pipeline for tagstrings.

This module orchestrates one complete run:
1. Validate the project root
2. Build the translation provider and fetch its language list (once)
3. Drop requested languages the provider does not support
4. Load and parse the project sources
5. Resolve the translator function and scan every file into a string table
6. Run each selected catalog strategy against the frozen table

Design Philosophy:
- Only configuration problems abort a run (ConfigurationError)
- Everything else degrades to a reported warning or error in the result
- Translation requests are issued strictly one after another
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from tagstrings.catalog import STRATEGIES, CatalogStrategy, EntryTranslator, SyncContext, SyncReport
from tagstrings.config import DEFAULT_BACKEND, DEFAULT_OUTPUT_DIR, EXCLUDED_DIRS, KEYED_BACKENDS, LANGUAGES
from tagstrings.errors import ConfigurationError
from tagstrings.keys import KeyManager
from tagstrings.models import ScanContext, StringTable
from tagstrings.scan.scanner import scan_project
from tagstrings.source.project import SourceProject
from tagstrings.translate.base import Translator, create_translator

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
ProgressCallback = Callable[[str, float], None]


@dataclass
class SyncConfig:
    """Configuration of one synchronization run."""
    project_root: Path
    output_dir: Optional[Path] = None  # defaults to <project>/i18n
    add_languages: list[str] = field(default_factory=list)

    # Output strategies; module catalogs when neither is set
    module: bool = False
    document: bool = False

    # Translation settings
    translate: bool = True
    backend: str = DEFAULT_BACKEND
    api_key: Optional[str] = None
    translator_kwargs: dict = field(default_factory=dict)

    exclude_dirs: set[str] = field(default_factory=lambda: set(EXCLUDED_DIRS))

    @property
    def root(self) -> Path:
        return Path(self.project_root).resolve()

    @property
    def output(self) -> Path:
        if self.output_dir:
            return Path(self.output_dir).resolve()
        return self.root / DEFAULT_OUTPUT_DIR

    @property
    def strategies(self) -> list[str]:
        selected = [name for name, on in (("module", self.module), ("document", self.document)) if on]
        return selected or ["module"]

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging."""
        return {
            "project_root": str(self.root),
            "output_dir": str(self.output),
            "add_languages": list(self.add_languages),
            "strategies": self.strategies,
            "translate": self.translate,
            "backend": self.backend,
        }


@dataclass
class PipelineResult:
    """Result of a synchronization run."""
    table: StringTable
    scan: Optional[ScanContext] = None
    reports: list[SyncReport] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def updated_files(self) -> list[Path]:
        return [path for report in self.reports for path in report.updated_files]

    @property
    def warnings(self) -> list[str]:
        scan_warnings = self.scan.warnings if self.scan else []
        return scan_warnings + [w for report in self.reports for w in report.warnings]

    @property
    def all_errors(self) -> list[str]:
        return self.errors + [e for report in self.reports for e in report.errors]

    @property
    def success(self) -> bool:
        return not self.all_errors

    @property
    def stats(self) -> dict:
        return {
            "strings": len(self.table),
            "files_updated": len(self.updated_files),
            "entries_added": sum(r.added for r in self.reports),
            "entries_pending": sum(r.pending for r in self.reports),
        }


class SyncPipeline:
    """Scan a project and bring its catalogs up to date.

    Usage:
        config = SyncConfig(project_root=Path("myapp"), add_languages=["de"])
        result = SyncPipeline(config).run()
        print(len(result.updated_files))
    """

    def __init__(
        self,
        config: SyncConfig,
        translator: Optional[Translator] = None,
        key_manager: Optional[KeyManager] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.keys = key_manager or KeyManager()
        self.progress_callback = progress_callback or (lambda msg, pct: None)
        self._translator = translator

    def build_translator(self) -> Optional[Translator]:
        """The configured provider, or None when translation is switched off.

        Raises:
            ConfigurationError: If the backend needs a key and none is configured
        """
        if not self.config.translate:
            return None
        if self._translator is not None:
            return self._translator

        backend = self.config.backend.lower()
        kwargs = dict(self.config.translator_kwargs)
        if backend in KEYED_BACKENDS:
            kwargs["api_key"] = self.keys.require_key(backend, self.config.api_key)
        try:
            return create_translator(backend, **kwargs)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def validate_languages(self, translator: Optional[Translator], errors: list[str]) -> list[str]:
        """Keep the requested languages the provider supports, in request order."""
        requested = list(dict.fromkeys(self.config.add_languages))
        if not requested:
            return []

        supported = translator.supported_languages() if translator else LANGUAGES
        provider = translator.name if translator else "tagstrings"
        languages = []
        for language in requested:
            if language in supported:
                languages.append(language)
            else:
                message = f"Language '{language}' is not supported by {provider}; skipped"
                logger.error(message)
                errors.append(message)
        return languages

    def run(self) -> PipelineResult:
        """Run the complete synchronization.

        Raises:
            ConfigurationError: Invalid project root, missing key, unknown backend
        """
        root = self.config.root
        if not root.is_dir():
            raise ConfigurationError(f"{root} should be a project folder")
        logger.debug(f"Sync config: {self.config.to_dict()}")

        errors: list[str] = []
        self.progress_callback("Preparing translator", 0.0)
        translator = self.build_translator()
        languages = self.validate_languages(translator, errors)

        self.progress_callback("Scanning sources", 0.1)
        project = SourceProject.load(root, self.config.exclude_dirs, self.config.output)
        scan = scan_project(project)

        ctx = SyncContext(
            output_dir=self.config.output,
            entries=EntryTranslator(translator),
            add_languages=languages,
        )
        result = PipelineResult(table=scan.table, scan=scan, languages=languages, errors=errors)

        names = self.config.strategies
        for index, name in enumerate(names):
            self.progress_callback(f"Updating {name} catalogs", 0.3 + 0.7 * index / len(names))
            strategy: CatalogStrategy = STRATEGIES[name]()
            result.reports.append(strategy.sync(scan.table, ctx))

        self.progress_callback("Done", 1.0)
        logger.info(
            f"{result.stats['strings']} strings, {result.stats['entries_added']} entries added, "
            f"{result.stats['entries_pending']} pending translation"
        )
        return result
