"""Build and print Python syntax trees for generated modules.

Converters produce `ast.stmt` nodes in declaration order; `render_module`
turns them into source text with a fixed header. Annotations are built from
type-expression strings so converters can reason about types as text.
"""

from __future__ import annotations

import ast
import keyword
import re
from collections.abc import Iterable, Sequence

__all__ = [
    "GENERATED_HEADER",
    "annotation",
    "assign_constant",
    "class_name",
    "enum_class",
    "optional",
    "render_module",
    "safe_identifier",
    "type_alias",
    "typed_dict",
]

GENERATED_HEADER = "Generated by bts-sync. Do not edit by hand."

_NON_WORD = re.compile(r"\W+")


def safe_identifier(name: str) -> str:
    """Turn an arbitrary name into a valid, non-keyword Python identifier."""
    ident = _NON_WORD.sub("_", name).strip("_") or "_"
    if ident[0].isdigit():
        ident = f"_{ident}"
    if keyword.iskeyword(ident):
        ident = f"{ident}_"
    return ident


def class_name(name: str) -> str:
    """PascalCase class name for a schema name ("pet-store.order" -> "PetStoreOrder")."""
    if name.isidentifier() and not keyword.iskeyword(name) and name[0].isupper():
        return name
    parts = [p for p in _NON_WORD.split(name) if p]
    joined = "".join(p[0].upper() + p[1:] for p in parts)
    return safe_identifier(joined or "Model")


def optional(expr: str) -> str:
    if expr == "Any" or expr == "None" or expr.endswith(" | None"):
        return expr
    return f"{expr} | None"


def annotation(expr: str) -> ast.expr:
    """Parse a type expression such as "list[Pet] | None"."""
    return ast.parse(expr, mode="eval").body


def _doc(text: str | None) -> list[ast.stmt]:
    if not text or not text.strip():
        return []
    return [ast.Expr(value=ast.Constant(value=text.strip()))]


def _class_key(key: str) -> bool:
    # "__typename" would be name-mangled inside a class body.
    mangled = key.startswith("__") and not key.endswith("__")
    return key.isidentifier() and not keyword.iskeyword(key) and not mangled


def typed_dict(
    name: str,
    fields: Sequence[tuple[str, str]],
    *,
    bases: Sequence[str] = (),
    total: bool = True,
    doc: str | None = None,
) -> ast.stmt:
    """A TypedDict definition.

    Uses class syntax when every key is an identifier and the functional
    form otherwise (keys like "first-name" are legal JSON). The functional
    form quotes value types since they are evaluated at import time.

    Raises:
        ValueError: Non-identifier keys combined with base classes.
    """
    keys_ok = all(_class_key(k) for k, _ in fields)
    keywords = [] if total else [ast.keyword(arg="total", value=ast.Constant(value=False))]

    if keys_ok:
        body: list[ast.stmt] = _doc(doc)
        for key, expr in fields:
            body.append(
                ast.AnnAssign(
                    target=ast.Name(id=key, ctx=ast.Store()),
                    annotation=annotation(expr),
                    simple=1,
                )
            )
        if not body:
            body = [ast.Pass()]
        return ast.ClassDef(
            name=name,
            bases=[ast.Name(id=b, ctx=ast.Load()) for b in (*bases, "TypedDict")],
            keywords=keywords,
            body=body,
            decorator_list=[],
            type_params=[],
        )

    if bases:
        raise ValueError(
            f"{name}: cannot combine inheritance with non-identifier property names"
        )

    mapping = ast.Dict(
        keys=[ast.Constant(value=k) for k, _ in fields],
        values=[ast.Constant(value=expr) for _, expr in fields],
    )
    call = ast.Call(
        func=ast.Name(id="TypedDict", ctx=ast.Load()),
        args=[ast.Constant(value=name), mapping],
        keywords=keywords,
    )
    return ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=call)


def enum_class(name: str, members: Iterable[tuple[str, object]], *, doc: str | None = None) -> ast.stmt:
    """A `(str, Enum)` class; member names are made safe, values kept."""
    body: list[ast.stmt] = _doc(doc)
    seen: set[str] = set()
    for member, value in members:
        ident = safe_identifier(member)
        while ident in seen:
            ident = f"{ident}_"
        seen.add(ident)
        body.append(
            ast.Assign(
                targets=[ast.Name(id=ident, ctx=ast.Store())],
                value=ast.Constant(value=value),
            )
        )
    if not body:
        body = [ast.Pass()]
    return ast.ClassDef(
        name=name,
        bases=[ast.Name(id="str", ctx=ast.Load()), ast.Name(id="Enum", ctx=ast.Load())],
        keywords=[],
        body=body,
        decorator_list=[],
        type_params=[],
    )


def type_alias(name: str, expr: str) -> ast.stmt:
    """`type Name = expr`; the value is evaluated lazily, so order does not matter."""
    return ast.TypeAlias(
        name=ast.Name(id=name, ctx=ast.Store()),
        type_params=[],
        value=annotation(expr),
    )


def assign_constant(name: str, value: object) -> ast.stmt:
    return ast.Assign(
        targets=[ast.Name(id=name, ctx=ast.Store())],
        value=ast.Constant(value=value),
    )


def render_module(body: Sequence[ast.stmt], *, imports: str) -> str:
    """Serialize statements in declaration order, after the header and imports."""
    module = ast.Module(
        body=[
            ast.Expr(value=ast.Constant(value=GENERATED_HEADER)),
            *ast.parse(imports).body,
            *body,
        ],
        type_ignores=[],
    )
    ast.fix_missing_locations(module)
    return ast.unparse(module) + "\n"
