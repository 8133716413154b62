"""
Translator-call scanner.

Walks every source file of a project, finds calls to the designated
translator function whose argument is a string template, and records one
TemplateRecord per canonical key in the run's StringTable.

Recognized call sites (`i` being the translator function):

    i("Hello")                      # no-substitution template
    i(f"Total: {count}")            # template with substitutions
    i(t"Total: {count}")            # template string (Python 3.14+)

Design:
- The translator function is resolved once, before scanning: the first
  module-level function whose docstring carries @translator. Without one,
  every callee named `i` is accepted (with a warning).
- Nodes are classified into NodeKind categories and handled by dispatch
  on that category.
- A failure on one call site is logged and skipped; it never aborts the scan.
"""

from __future__ import annotations

import ast
import logging
from typing import Callable

from tagstrings.config import FALLBACK_TRANSLATOR_NAME, TRANSLATOR_TAG
from tagstrings.models import (
    NodeKind,
    ParameterDescriptor,
    ScanContext,
    TemplateRecord,
    TranslatorTarget,
)
from tagstrings.scan.canonical import canonical_key, literal_text
from tagstrings.scan.notes import Annotation, combine, parse_annotation
from tagstrings.source.comments import Comment, Position
from tagstrings.source.project import SourceFile, SourceProject
from tagstrings.source.symbols import TEMPLATE_STR, annotation_type

logger = logging.getLogger(__name__)

_TEMPLATE_NODES: tuple[type, ...] = (ast.JoinedStr,) + ((TEMPLATE_STR,) if TEMPLATE_STR else ())


def find_translator(project: SourceProject) -> TranslatorTarget | None:
    """Find the first module-level function documented with @translator.

    Modules of the catalog folder are searched too, though they are never
    scanned for calls.
    """
    for source_file in project.all_files:
        for node in source_file.tree.body:
            if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                continue
            docstring = ast.get_docstring(node)
            if docstring and TRANSLATOR_TAG in docstring:
                logger.info(f"Translator function: {source_file.module}.{node.name} ({source_file.relpath})")
                return TranslatorTarget(
                    name=node.name,
                    module=source_file.module,
                    path=source_file.path,
                    return_type=annotation_type(node.returns),
                )
    return None


def resolve_target(project: SourceProject) -> tuple[TranslatorTarget, str | None]:
    """Pick the translator target for this run.

    Returns:
        (target, warning) where warning is set when falling back to the
        name-only heuristic
    """
    target = find_translator(project)
    if target is not None:
        return target, None
    warning = (
        "Unable to find the translator function. "
        f"Assuming all {FALLBACK_TRANSLATOR_NAME}(...) calls are translator calls. "
        f"Mark the real one with a '{TRANSLATOR_TAG}' docstring tag to be precise."
    )
    return TranslatorTarget(name=FALLBACK_TRANSLATOR_NAME), warning


def is_template(node: ast.AST) -> bool:
    if isinstance(node, ast.Constant):
        return isinstance(node.value, str)
    return isinstance(node, _TEMPLATE_NODES)


def template_parts(template: ast.expr) -> list[ast.expr]:
    if isinstance(template, ast.Constant):
        return [template]
    return list(template.values)


def is_slot(part: ast.expr) -> bool:
    return not isinstance(part, ast.Constant)


class TemplateScanner(ast.NodeVisitor):
    """AST visitor that extracts translator templates from one file."""

    def __init__(self, source_file: SourceFile, ctx: ScanContext, project: SourceProject | None = None) -> None:
        self.file = source_file
        self.ctx = ctx
        self.project = project
        self.types = source_file.type_resolver()
        self._handlers: dict[NodeKind, Callable[[ast.Call, ast.expr], TemplateRecord]] = {
            NodeKind.LITERAL_TEMPLATE: self._literal_record,
            NodeKind.SLOT_TEMPLATE: self._slot_record,
        }
        self._call_ends: list[Position] = []

    def scan(self) -> None:
        if len(self.file.comments):
            self._call_ends = self._tagged_call_ends()
        self.visit(self.file.tree)
        self.ctx.files_scanned += 1

    def _tagged_call_ends(self) -> list[Position]:
        ends = []
        for node in ast.walk(self.file.tree):
            if not isinstance(node, ast.Call):
                continue
            try:
                if self.classify(node) is NodeKind.TAGGED_CALL:
                    ends.append(self.file.end(node))
            except Exception as e:
                logger.debug(f"Cannot classify call at {self.file.location(node)}: {e}")
        return sorted(ends)

    # -- classification ----------------------------------------------------

    def classify(self, node: ast.AST) -> NodeKind:
        if isinstance(node, ast.Call):
            if len(node.args) == 1 and is_template(node.args[0]) and self.matches_target(node.func):
                return NodeKind.TAGGED_CALL
            return NodeKind.EXPRESSION
        if is_template(node):
            parts = template_parts(node)
            return NodeKind.SLOT_TEMPLATE if any(is_slot(p) for p in parts) else NodeKind.LITERAL_TEMPLATE
        if isinstance(node, ast.Name):
            return NodeKind.IDENTIFIER
        if isinstance(node, ast.expr):
            return NodeKind.EXPRESSION
        return NodeKind.OTHER

    def matches_target(self, func: ast.expr) -> bool:
        target = self.ctx.target
        if target.is_fallback:
            if isinstance(func, ast.Name):
                return func.id == target.name
            if isinstance(func, ast.Attribute):
                return func.attr == target.name
            return False

        dotted = self.file.imports.qualify(func)
        if dotted is None:
            return False
        if self.project is not None:
            dotted = self.project.resolve(dotted)
        return dotted == f"{target.module}.{target.name}"

    # -- traversal ---------------------------------------------------------

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_scope(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_scope(node)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self._visit_scope(node)

    def _visit_scope(self, node: ast.AST) -> None:
        self.types.push(node)
        try:
            self.generic_visit(node)
        finally:
            self.types.pop()

    def visit_Call(self, node: ast.Call) -> None:
        try:
            if self.classify(node) is NodeKind.TAGGED_CALL:
                self._track(node)
        except Exception as e:
            self.ctx.nodes_skipped += 1
            logger.debug(f"Skipping call at {self.file.location(node)}: {e}", exc_info=True)
        self.generic_visit(node)

    # -- records -----------------------------------------------------------

    def _track(self, call: ast.Call) -> None:
        template = call.args[0]
        handler = self._handlers.get(self.classify(template))
        if handler is None:
            return
        record = handler(call, template)
        record.locations.append(self.file.location(call))
        self._attach_notes(call, template, record)
        self.ctx.table.add(record)
        self.ctx.calls_found += 1
        logger.debug(f"Found translatable string {record.canonical_key!r} at {self.file.location(call)}")

    def _literal_record(self, call: ast.Call, template: ast.expr) -> TemplateRecord:
        text = "".join(part.value for part in template_parts(template))
        return TemplateRecord(canonical_key=text, literal=text)

    def _slot_record(self, call: ast.Call, template: ast.expr) -> TemplateRecord:
        chunks = [""]
        slots: list[ast.expr] = []
        for part in template_parts(template):
            if is_slot(part):
                slots.append(part)
                chunks.append("")
            else:
                chunks[-1] += part.value

        head, tails = chunks[0], chunks[1:]
        used: set[str] = set()
        params = [self._parameter(ordinal, slot.value, used) for ordinal, slot in enumerate(slots)]
        return TemplateRecord(
            canonical_key=canonical_key(head, tails),
            literal=literal_text(head, zip((p.name for p in params), tails)),
            params=params,
        )

    def _parameter(self, ordinal: int, expr: ast.expr, used: set[str]) -> ParameterDescriptor:
        if self.classify(expr) is NodeKind.IDENTIFIER:
            name = expr.id
            type_ = self.types.resolve_name(expr.id)
        else:
            name = f"p{ordinal}"
            type_ = self.types.infer(expr)
            if type_.is_unknown:
                # fall back to the type of the whole call's result
                type_ = self.ctx.target.return_type

        if name in used:
            name = f"p{ordinal}"
        while name in used:
            name += "_"
        used.add(name)
        return ParameterDescriptor(name=name, type=type_, source_text=self.file.segment(expr))

    # -- annotations -------------------------------------------------------

    def _attach_notes(self, call: ast.Call, template: ast.expr, record: TemplateRecord) -> None:
        comments = self.file.comments
        if not len(comments):
            return

        slot_spans = self._slot_spans(template)
        call_comments: list[Comment] = []
        param_comments: dict[int, list[Comment]] = {}

        for comment in comments.between(self.file.start(call), self.file.end(call)):
            index = next(
                (i for i, (start, end) in slot_spans if start <= comment.position < end),
                None,
            )
            if index is None:
                call_comments.append(comment)
            else:
                param_comments.setdefault(index, []).append(comment)

        end = self.file.end(call)
        trailing = comments.trailing(end)
        if trailing is not None and trailing not in call_comments and self._owns_trailing(end, trailing):
            call_comments.append(trailing)

        call_note = combine(parse_annotation(c.text) for c in call_comments)
        self._apply_call_note(record, call_note)

        for index, found in param_comments.items():
            note = combine(parse_annotation(c.text) for c in found)
            if note.text and index < len(record.params):
                record.notes.setdefault(record.params[index].name, note.text)

    def _owns_trailing(self, end: Position, comment: Comment) -> bool:
        """Only the last translator call before an end-of-line comment gets it."""
        return not any(end < other <= comment.position for other in self._call_ends)

    def _apply_call_note(self, record: TemplateRecord, note: Annotation) -> None:
        if note.override_key:
            record.explicit_key = note.override_key
        if note.text:
            record.notes.setdefault(TemplateRecord.FULL_NOTE, note.text)

    def _slot_spans(self, template: ast.expr) -> list[tuple[int, tuple[tuple[int, int], tuple[int, int]]]]:
        spans = []
        slots = [part for part in template_parts(template) if is_slot(part)]
        for index, part in enumerate(slots):
            # before 3.12, f-string parts carry the position of the whole string
            if (part.lineno, part.col_offset) == (template.lineno, template.col_offset):
                continue
            spans.append((index, (self.file.start(part), self.file.end(part))))
        return spans


def scan_project(project: SourceProject, ctx: ScanContext | None = None) -> ScanContext:
    """Scan every file of a project and freeze the resulting string table."""
    if ctx is None:
        target, warning = resolve_target(project)
        ctx = ScanContext(target=target)
        if warning:
            ctx.warn(warning)

    for source_file in project.files:
        TemplateScanner(source_file, ctx, project).scan()

    ctx.table.freeze()
    logger.info(
        f"Scanned {ctx.files_scanned} files, found {ctx.calls_found} translator calls "
        f"({len(ctx.table)} unique strings)"
    )
    return ctx
