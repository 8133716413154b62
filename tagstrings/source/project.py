"""
Source model provider: a parsed, queryable view of a project's Python files.

This module handles:
- Discovering source files under a project root (skipping excluded folders
  and the catalog output folder)
- Loading the catalog output folder separately, so a translator function
  defined there is still found without its catalogs being scanned
- Parsing each file into an ast tree plus a comment index
- Deriving dotted module names and following re-exported names across modules

Usage:
    project = SourceProject.load(Path("myapp"), output_dir=Path("myapp/i18n"))
    for source_file in project.files:
        print(source_file.module, len(source_file.comments))
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Iterable

from tagstrings.config import EXCLUDED_DIRS
from tagstrings.errors import ConfigurationError
from tagstrings.source.comments import CommentIndex, Position
from tagstrings.source.symbols import ImportTable, TypeResolver

logger = logging.getLogger(__name__)

# Layout folders that are not part of dotted module names
SOURCE_ROOTS = ("src",)


@dataclass
class SourceFile:
    """One parsed Python file."""
    path: Path
    relpath: str
    module: str
    is_package: bool
    source: str
    tree: ast.Module
    comments: CommentIndex = field(default_factory=CommentIndex)

    @classmethod
    def parse(cls, path: Path, root: Path) -> SourceFile:
        source = path.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(path))
        relative = path.relative_to(root)
        module, is_package = module_name(relative)
        return cls(
            path=path,
            relpath=relative.as_posix(),
            module=module,
            is_package=is_package,
            source=source,
            tree=tree,
            comments=CommentIndex.from_source(source),
        )

    @cached_property
    def lines(self) -> list[str]:
        return self.source.splitlines(keepends=True)

    @cached_property
    def imports(self) -> ImportTable:
        return ImportTable.build(self.tree, self.module, self.is_package)

    def type_resolver(self) -> TypeResolver:
        return TypeResolver(self.tree)

    def segment(self, node: ast.AST) -> str:
        """Source text of a node ('' when positions are missing)."""
        return ast.get_source_segment(self.source, node) or ""

    def char_position(self, line: int, byte_col: int) -> Position:
        """Convert an ast (line, utf-8 byte offset) to (line, character offset)."""
        if 1 <= line <= len(self.lines):
            prefix = self.lines[line - 1].encode("utf-8")[:byte_col]
            return (line, len(prefix.decode("utf-8", errors="replace")))
        return (line, byte_col)

    def start(self, node: ast.AST) -> Position:
        return self.char_position(node.lineno, node.col_offset)

    def end(self, node: ast.AST) -> Position:
        return self.char_position(node.end_lineno, node.end_col_offset)

    def location(self, node: ast.AST) -> str:
        return f"{self.relpath}:{node.lineno}"


def module_name(relative: Path) -> tuple[str, bool]:
    """Dotted module name for a path relative to the project root.

    Returns:
        (module name, whether the file is a package __init__)
    """
    parts = list(relative.with_suffix("").parts)
    if len(parts) > 1 and parts[0] in SOURCE_ROOTS:
        parts = parts[1:]
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def is_excluded(path: Path, root: Path, exclude_dirs: set[str]) -> bool:
    relative = path.relative_to(root)
    return any(part in exclude_dirs for part in relative.parts[:-1])


class SourceProject:
    """All parsable Python files of a project."""

    def __init__(
        self,
        root: Path,
        files: Iterable[SourceFile],
        skipped: Iterable[Path] = (),
        catalog_files: Iterable[SourceFile] = (),
    ) -> None:
        self.root = root
        self.files = list(files)
        self.skipped = list(skipped)
        # modules of the catalog folder: searched for the translator, never scanned
        self.catalog_files = list(catalog_files)
        self.by_module = {f.module: f for f in self.catalog_files + self.files}

    @property
    def all_files(self) -> list[SourceFile]:
        """Scanned and catalog-folder files, in path order."""
        return sorted(self.files + self.catalog_files, key=lambda f: f.relpath)

    @classmethod
    def load(
        cls,
        root: Path,
        exclude_dirs: set[str] | None = None,
        output_dir: Path | None = None,
    ) -> SourceProject:
        """Discover and parse every Python file under `root`.

        Raises:
            ConfigurationError: If root is not a directory
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise ConfigurationError(f"{root} should be a project folder")

        if exclude_dirs is None:
            exclude_dirs = EXCLUDED_DIRS
        if output_dir is not None:
            output_dir = Path(output_dir).resolve()

        files: list[SourceFile] = []
        catalog_files: list[SourceFile] = []
        skipped: list[Path] = []
        for path in sorted(root.rglob("*.py")):
            if is_excluded(path, root, exclude_dirs):
                continue
            in_catalog = output_dir is not None and path.is_relative_to(output_dir)
            try:
                source_file = SourceFile.parse(path, root)
            except (SyntaxError, UnicodeDecodeError, ValueError) as e:
                if in_catalog:
                    logger.debug(f"Ignoring catalog folder file {path} (cannot parse: {e})")
                    continue
                logger.warning(f"Skipping {path} (cannot parse: {e})")
                skipped.append(path)
                continue
            if in_catalog:
                catalog_files.append(source_file)
            else:
                files.append(source_file)

        logger.info(f"Loaded {len(files)} source files from {root}")
        return cls(root, files, skipped, catalog_files)

    def resolve(self, dotted: str, _depth: int = 0) -> str:
        """Follow re-exports: `pkg.i` -> `pkg.i18n.i` when pkg imports i from pkg.i18n."""
        if _depth > 10 or "." not in dotted:
            return dotted
        module, _, attr = dotted.rpartition(".")
        source_file = self.by_module.get(module)
        if source_file is None:
            return dotted
        imported = source_file.imports.names.get(attr)
        if imported is not None:
            base, name = imported
            return self.resolve(f"{base}.{name}" if base else name, _depth + 1)
        if attr in source_file.imports.modules:
            return self.resolve(source_file.imports.modules[attr], _depth + 1)
        return dotted

    def __len__(self) -> int:
        return len(self.files)
