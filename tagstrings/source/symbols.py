"""
Symbol and static type resolution over Python syntax trees.

Python has no static type checker in the standard library, so resolution is
best-effort and local to one file:

- ImportTable: which module/attribute a local name refers to
- TypeResolver: scope-aware lookup of the declared or inferable type of a name,
  plus inference for common expression shapes

Anything that cannot be resolved comes back as UNKNOWN.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field

from tagstrings.models import UNKNOWN, NamedType, TypeDescriptor

# Return types of builtins that are safe to assume
BUILTIN_RETURNS = {
    "ascii": "str",
    "bin": "str",
    "bool": "bool",
    "bytes": "bytes",
    "callable": "bool",
    "chr": "str",
    "dict": "dict",
    "float": "float",
    "format": "str",
    "frozenset": "frozenset",
    "hash": "int",
    "hex": "str",
    "id": "int",
    "int": "int",
    "isinstance": "bool",
    "issubclass": "bool",
    "len": "int",
    "list": "list",
    "oct": "str",
    "ord": "int",
    "repr": "str",
    "set": "set",
    "sorted": "list",
    "str": "str",
    "tuple": "tuple",
}

# str methods that return str
STR_METHODS = {
    "capitalize", "casefold", "center", "format", "join", "ljust", "lower",
    "lstrip", "removeprefix", "removesuffix", "replace", "rjust", "rstrip",
    "strip", "swapcase", "title", "upper", "zfill",
}

_NUMERIC = ("int", "float", "complex")

# ast.TemplateStr / ast.Interpolation only exist on Python 3.14+
TEMPLATE_STR = getattr(ast, "TemplateStr", None)

_SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)
_NESTED_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)


def resolve_relative(module: str | None, level: int, current: str, is_package: bool) -> str:
    """Resolve `from <dots><module> import ...` against the importing module."""
    if level == 0:
        return module or ""
    parts = current.split(".") if current else []
    if not is_package:
        parts = parts[:-1]
    if level > 1:
        parts = parts[: max(0, len(parts) - (level - 1))]
    if module:
        parts.append(module)
    return ".".join(parts)


@dataclass
class ImportTable:
    """Maps local names of one module to what they were imported as.

    Attributes:
        module: Dotted name of the module the table belongs to
        names: local name -> (source module, attribute) for `from x import y`
        modules: local name -> module for `import x` / `import x.y as z`
    """
    module: str
    names: dict[str, tuple[str, str]] = field(default_factory=dict)
    modules: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, tree: ast.Module, module: str, is_package: bool = False) -> ImportTable:
        table = cls(module=module)
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        table.modules[alias.asname] = alias.name
                    else:
                        first = alias.name.split(".")[0]
                        table.modules[first] = first
            elif isinstance(node, ast.ImportFrom):
                base = resolve_relative(node.module, node.level, module, is_package)
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    table.names[alias.asname or alias.name] = (base, alias.name)
        return table

    def qualify(self, expr: ast.expr) -> str | None:
        """Dotted path an expression refers to, e.g. `tr` -> `pkg.i18n.i`.

        Bare names that were not imported are taken to be bound in this module.
        """
        if isinstance(expr, ast.Name):
            if expr.id in self.names:
                base, attr = self.names[expr.id]
                return f"{base}.{attr}" if base else attr
            if expr.id in self.modules:
                return self.modules[expr.id]
            return f"{self.module}.{expr.id}" if self.module else expr.id
        if isinstance(expr, ast.Attribute):
            base = self.qualify(expr.value)
            if base is None:
                return None
            return f"{base}.{expr.attr}"
        return None


def annotation_type(annotation: ast.expr | None) -> TypeDescriptor:
    if annotation is None:
        return UNKNOWN
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        # string annotation: "int"
        return NamedType(annotation.value)
    return NamedType(ast.unparse(annotation))


def _iter_scope_body(statements: list[ast.stmt]):
    """Yield nodes of a scope without entering nested functions or classes."""
    stack: list[ast.AST] = list(reversed(statements))
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, _NESTED_NODES):
            continue
        stack.extend(reversed(list(ast.iter_child_nodes(node))))


@dataclass
class Scope:
    """Bindings of one function or module scope."""
    types: dict[str, TypeDescriptor] = field(default_factory=dict)

    def bind(self, name: str, type_: TypeDescriptor) -> None:
        current = self.types.get(name)
        if current is None or current.is_unknown:
            self.types[name] = type_


class TypeResolver:
    """Scope-aware static type lookup for one module.

    The scanner pushes a scope when it enters a function and pops it on the
    way out; class bodies are not enclosing scopes, as in Python itself.
    """

    def __init__(self, tree: ast.Module) -> None:
        self.functions: dict[str, TypeDescriptor] = {}
        self.classes: set[str] = set()
        for node in tree.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self.functions[node.name] = annotation_type(node.returns)
            elif isinstance(node, ast.ClassDef):
                self.classes.add(node.name)
        self._stack: list[Scope] = [Scope()]
        self._stack = [self._collect(tree.body)]

    def push(self, node: ast.AST) -> None:
        if not isinstance(node, _SCOPE_NODES):
            raise TypeError(f"not a scope node: {type(node).__name__}")
        scope = Scope()
        for name, type_ in self._arguments(node.args):
            scope.bind(name, type_)
        if isinstance(node, ast.Lambda):
            self._stack.append(scope)
            return
        body = self._collect(node.body)
        for name, type_ in body.types.items():
            scope.bind(name, type_)
        self._stack.append(scope)

    def pop(self) -> None:
        if len(self._stack) == 1:
            raise RuntimeError("cannot pop the module scope")
        self._stack.pop()

    @property
    def depth(self) -> int:
        return len(self._stack)

    def resolve_name(self, name: str) -> TypeDescriptor:
        for scope in reversed(self._stack):
            if name in scope.types:
                return scope.types[name]
        return UNKNOWN

    def is_bound(self, name: str) -> bool:
        return any(name in scope.types for scope in self._stack)

    def infer(self, expr: ast.expr) -> TypeDescriptor:
        """Best-effort static type of an expression."""
        if isinstance(expr, ast.Constant):
            return _constant_type(expr.value)
        if isinstance(expr, ast.JoinedStr):
            return NamedType("str")
        if TEMPLATE_STR is not None and isinstance(expr, TEMPLATE_STR):
            return NamedType("Template")
        if isinstance(expr, (ast.List, ast.ListComp)):
            return NamedType("list")
        if isinstance(expr, ast.Tuple):
            return NamedType("tuple")
        if isinstance(expr, (ast.Set, ast.SetComp)):
            return NamedType("set")
        if isinstance(expr, (ast.Dict, ast.DictComp)):
            return NamedType("dict")
        if isinstance(expr, ast.Compare):
            return NamedType("bool")
        if isinstance(expr, ast.UnaryOp):
            if isinstance(expr.op, ast.Not):
                return NamedType("bool")
            return self.infer(expr.operand)
        if isinstance(expr, ast.BinOp):
            return self._infer_binop(expr)
        if isinstance(expr, ast.BoolOp):
            return _agree([self.infer(v) for v in expr.values])
        if isinstance(expr, ast.IfExp):
            return _agree([self.infer(expr.body), self.infer(expr.orelse)])
        if isinstance(expr, ast.Name):
            return self.resolve_name(expr.id)
        if isinstance(expr, ast.Call):
            return self._infer_call(expr)
        return UNKNOWN

    def _infer_call(self, call: ast.Call) -> TypeDescriptor:
        func = call.func
        if isinstance(func, ast.Name):
            if any(func.id in scope.types for scope in self._stack[1:]):
                # shadowed by a local binding
                return UNKNOWN
            if func.id in self.functions:
                return self.functions[func.id]
            if func.id in self.classes:
                return NamedType(func.id)
            if func.id in BUILTIN_RETURNS:
                return NamedType(BUILTIN_RETURNS[func.id])
            return UNKNOWN
        if isinstance(func, ast.Attribute) and func.attr in STR_METHODS:
            receiver = self.infer(func.value)
            if isinstance(receiver, NamedType) and receiver.text == "str":
                return receiver
        return UNKNOWN

    def _infer_binop(self, expr: ast.BinOp) -> TypeDescriptor:
        left = self.infer(expr.left)
        if isinstance(expr.op, ast.Mod) and isinstance(left, NamedType) and left.text == "str":
            return left
        right = self.infer(expr.right)
        if not isinstance(left, NamedType) or not isinstance(right, NamedType):
            return UNKNOWN
        if left.text in _NUMERIC and right.text in _NUMERIC:
            if isinstance(expr.op, ast.Div):
                return NamedType("complex" if "complex" in (left.text, right.text) else "float")
            return NamedType(max(left.text, right.text, key=_NUMERIC.index))
        if left == right:
            return left
        return UNKNOWN

    def _arguments(self, args: ast.arguments) -> list[tuple[str, TypeDescriptor]]:
        result: list[tuple[str, TypeDescriptor]] = []
        positional = args.posonlyargs + args.args
        defaults: list[ast.expr | None] = [None] * (len(positional) - len(args.defaults))
        defaults += list(args.defaults)
        for arg, default in zip(positional, defaults):
            result.append((arg.arg, self._argument_type(arg, default)))
        for arg, default in zip(args.kwonlyargs, args.kw_defaults):
            result.append((arg.arg, self._argument_type(arg, default)))
        if args.vararg is not None:
            inner = annotation_type(args.vararg.annotation)
            result.append(
                (args.vararg.arg, NamedType(f"tuple[{inner.text}, ...]") if isinstance(inner, NamedType) else NamedType("tuple"))
            )
        if args.kwarg is not None:
            inner = annotation_type(args.kwarg.annotation)
            result.append(
                (args.kwarg.arg, NamedType(f"dict[str, {inner.text}]") if isinstance(inner, NamedType) else NamedType("dict"))
            )
        return result

    def _argument_type(self, arg: ast.arg, default: ast.expr | None) -> TypeDescriptor:
        if arg.annotation is not None:
            return annotation_type(arg.annotation)
        if isinstance(default, ast.Constant) and default.value is not None:
            return _constant_type(default.value)
        return UNKNOWN

    def _collect(self, statements: list[ast.stmt]) -> Scope:
        scope = Scope()
        for node in _iter_scope_body(statements):
            if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                scope.bind(node.target.id, annotation_type(node.annotation))
            elif isinstance(node, ast.Assign):
                value_type = self._literal_type(node.value)
                for target in node.targets:
                    for name in _target_names(target):
                        scope.bind(name, value_type if isinstance(target, ast.Name) else UNKNOWN)
            elif isinstance(node, (ast.For, ast.AsyncFor)):
                for name in _target_names(node.target):
                    scope.bind(name, UNKNOWN)
            elif isinstance(node, (ast.With, ast.AsyncWith)):
                for item in node.items:
                    if item.optional_vars is not None:
                        for name in _target_names(item.optional_vars):
                            scope.bind(name, UNKNOWN)
            elif isinstance(node, ast.NamedExpr):
                scope.bind(node.target.id, self._literal_type(node.value))
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                scope.bind(node.name, UNKNOWN)
        return scope

    def _literal_type(self, value: ast.expr) -> TypeDescriptor:
        # names are not followed here; scopes are still being built
        if isinstance(value, ast.Name):
            return UNKNOWN
        return self.infer(value)


def _constant_type(value: object) -> TypeDescriptor:
    if value is None:
        return NamedType("None")
    if value is Ellipsis:
        return UNKNOWN
    return NamedType(type(value).__name__)


def _agree(types: list[TypeDescriptor]) -> TypeDescriptor:
    if types and all(isinstance(t, NamedType) for t in types) and len(set(types)) == 1:
        return types[0]
    return UNKNOWN


def _target_names(target: ast.expr) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        names: list[str] = []
        for element in target.elts:
            names.extend(_target_names(element))
        return names
    if isinstance(target, ast.Starred):
        return _target_names(target.value)
    return []
