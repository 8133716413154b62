"""
Data models for tagstrings.

This module defines the core data structures shared by the scanner and the
catalog synchronizers:

- NodeKind: the node categories the scanner cares about
- NamedType / UnknownType: best-effort static type of a template slot
- ParameterDescriptor: one substitution slot of a template
- TemplateRecord: one translatable string, identified by its canonical key
- StringTable: run-scoped, deduplicated mapping of catalog key -> record
- TranslatorTarget: the translator function call sites are matched against
- ScanContext: explicit per-run state threaded through the scanner

Design:
- Records are created once per scan pass and never persisted directly;
  catalogs only store projections of them.
- The string table is frozen when scanning ends; synchronizers only read it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    """Syntax node categories relevant to string extraction."""
    TAGGED_CALL = "tagged_call"            # i(<template>)
    LITERAL_TEMPLATE = "literal_template"  # "Hello"
    SLOT_TEMPLATE = "slot_template"        # f"Total: {count}"
    IDENTIFIER = "identifier"              # count
    EXPRESSION = "expression"              # len(items), user.name, ...
    OTHER = "other"


@dataclass(frozen=True)
class NamedType:
    """A resolved static type, spelled as source text (e.g. 'int', 'list[str]')."""
    text: str

    @property
    def is_unknown(self) -> bool:
        return False

    def render(self, fallback: str = "Any") -> str:
        return self.text


class UnknownType:
    """Type that could not be resolved. Use the UNKNOWN singleton."""

    _instance: UnknownType | None = None

    def __new__(cls) -> UnknownType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def is_unknown(self) -> bool:
        return True

    def render(self, fallback: str = "Any") -> str:
        return fallback

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = UnknownType()

TypeDescriptor = Union[NamedType, UnknownType]


@dataclass(frozen=True)
class ParameterDescriptor:
    """A substitution slot of a template.

    Attributes:
        name: Identifier of the substituted variable, or a synthesized
            positional name (p0, p1, ...) for any other expression
        type: Resolved static type, or UNKNOWN
        source_text: The substituted expression as written; documentation only,
            never part of the key
    """
    name: str
    type: TypeDescriptor = UNKNOWN
    source_text: str = ""

    def signature(self, fallback: str = "Any") -> str:
        return f"{self.name}: {self.type.render(fallback)}"


@dataclass
class TemplateRecord:
    """One translatable string.

    Attributes:
        canonical_key: Parameter-agnostic identity ("Total: ${0}")
        literal: Translatable payload with parameter names inlined ("Total: ${count}")
        params: Slots in order of appearance
        notes: Author annotations; FULL_NOTE holds the call-level one,
            parameter names hold per-parameter ones
        explicit_key: Key pinned by an @key annotation, if any
        locations: "path:line" of every call site seen
    """
    canonical_key: str
    literal: str
    params: list[ParameterDescriptor] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)
    explicit_key: str | None = None
    locations: list[str] = field(default_factory=list)

    FULL_NOTE = "full"

    @property
    def catalog_key(self) -> str:
        """Identity used in catalogs: the explicit override, else the canonical key."""
        return self.explicit_key or self.canonical_key

    @property
    def has_params(self) -> bool:
        return len(self.params) > 0

    @property
    def param_names(self) -> list[str]:
        return [p.name for p in self.params]

    def merge(self, other: TemplateRecord) -> None:
        """Fold a repeated occurrence into this record (earlier notes win)."""
        for slot, text in other.notes.items():
            self.notes.setdefault(slot, text)
        for location in other.locations:
            if location not in self.locations:
                self.locations.append(location)


class StringTable:
    """Ordered, deduplicated mapping of catalog key -> TemplateRecord.

    Built by the scanner, then frozen; catalog synchronizers only read it.
    """

    def __init__(self) -> None:
        self._records: dict[str, TemplateRecord] = {}
        self._frozen = False

    def add(self, record: TemplateRecord) -> TemplateRecord:
        """Add a record, merging it into an existing one with the same key.

        Returns:
            The record stored in the table
        """
        if self._frozen:
            raise RuntimeError("string table is frozen; scanning has already finished")

        key = record.catalog_key
        existing = self._records.get(key)
        if existing is None:
            self._records[key] = record
            return record

        if existing.canonical_key != record.canonical_key:
            logger.warning(
                "Key '%s' is used for different strings (%r and %r); keeping the first",
                key, existing.literal, record.literal,
            )
        existing.merge(record)
        return existing

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, key: str) -> TemplateRecord | None:
        return self._records.get(key)

    def keys(self) -> list[str]:
        return list(self._records)

    def records(self) -> list[TemplateRecord]:
        return list(self._records.values())

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[TemplateRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


@dataclass(frozen=True)
class TranslatorTarget:
    """The function whose calls mark translatable templates.

    A target without a path is the permissive fallback: any callee with
    the fallback name matches, wherever it was declared.
    """
    name: str
    module: str | None = None
    path: Path | None = None
    return_type: TypeDescriptor = UNKNOWN

    @property
    def is_fallback(self) -> bool:
        return self.path is None


@dataclass
class ScanContext:
    """Run-scoped state threaded through the scanner."""
    target: TranslatorTarget
    table: StringTable = field(default_factory=StringTable)
    warnings: list[str] = field(default_factory=list)
    files_scanned: int = 0
    calls_found: int = 0
    nodes_skipped: int = 0

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
