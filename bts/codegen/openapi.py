"""OpenAPI document -> Python type definitions.

`OpenApiConverter` turns the component schemas of an OpenAPI 3.x (or
Swagger 2 `definitions`) document into syntax-tree statements:

- object schemas become `TypedDict` classes (`allOf` references become base
  classes, properties missing from `required` are `NotRequired`);
- enums become `Literal[...]` aliases;
- everything else becomes a `type` alias.

`convert_spec` is the generator step around it: read the document from the
checkout, convert, render, write.
"""

from __future__ import annotations

import ast
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import ArtifactWriteError, ConversionError, SpecNotFoundError
from bts.platform.files import atomic_write_text

from .render import class_name, optional, render_module, type_alias, typed_dict

__all__ = ["OpenApiConverter", "SpecConverter", "convert_spec"]

_IMPORTS = """\
from __future__ import annotations
from typing import Any, Literal, NotRequired, TypedDict
"""

_REF_PREFIXES = ("#/components/schemas/", "#/definitions/")

_PRIMITIVES = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "null": "None",
}


class SpecConverter(Protocol):
    """Converts OpenAPI document text into statements, in declaration order."""

    def convert(self, document: str) -> Sequence[ast.stmt]: ...


def _load_document(document: str) -> Mapping[str, Any]:
    # JSON documents are valid YAML, one loader handles both.
    yaml = YAML(typ="safe")
    try:
        data = yaml.load(document)
    except YAMLError as e:
        raise ValueError(f"not valid YAML/JSON: {e}") from e
    if not isinstance(data, Mapping):
        raise ValueError("document root must be a mapping")
    if "openapi" not in data and "swagger" not in data:
        raise ValueError("not an OpenAPI document (missing 'openapi' or 'swagger' key)")
    return data


class _Schemas:
    """Conversion state for one document."""

    def __init__(self, schemas: Mapping[str, Any]) -> None:
        self.schemas = {str(k): v for k, v in schemas.items()}
        self.names: dict[str, str] = {}
        self._taken: set[str] = set()
        for key in self.schemas:
            name = class_name(key)
            while name in self._taken:
                name = f"{name}_"
            self._taken.add(name)
            self.names[key] = name

        self.nodes: list[ast.stmt] = []
        self._emitted: set[str] = set()
        self._in_progress: set[str] = set()

    def fresh(self, hint: str) -> str:
        """Unused class name for an inline object schema."""
        name = hint
        while name in self._taken:
            name = f"{name}_"
        self._taken.add(name)
        return name

    # Type expressions

    def ref_name(self, ref: str) -> str:
        for prefix in _REF_PREFIXES:
            if ref.startswith(prefix):
                key = ref[len(prefix) :].replace("~1", "/").replace("~0", "~")
                if key not in self.names:
                    raise ValueError(f"unresolved $ref: {ref}")
                return self.names[key]
        raise ValueError(f"unsupported $ref (only local component refs): {ref}")

    def ref_key(self, ref: str) -> str:
        name = self.ref_name(ref)
        return next(k for k, v in self.names.items() if v == name)

    def type_expr(self, schema: object, hint: str) -> str:
        if not isinstance(schema, Mapping):
            return "Any"

        expr = self._base_expr(schema, hint)
        if schema.get("nullable") is True:
            expr = optional(expr)
        return expr

    def _base_expr(self, schema: Mapping[str, Any], hint: str) -> str:
        if "$ref" in schema:
            return self.ref_name(str(schema["$ref"]))

        if "enum" in schema:
            return _literal(schema["enum"])

        for combinator in ("oneOf", "anyOf"):
            if combinator in schema:
                members = schema[combinator]
                if not isinstance(members, list) or not members:
                    raise ValueError(f"{hint}: {combinator} must be a non-empty list")
                return _union(
                    self.type_expr(m, f"{hint}Option{i}") for i, m in enumerate(members, start=1)
                )

        if "allOf" in schema:
            members = schema["allOf"]
            if isinstance(members, list) and len(members) == 1:
                return self.type_expr(members[0], hint)
            name = self.fresh(hint)
            self.nodes.append(self._object_node(name, schema))
            return name

        raw_type = schema.get("type")
        if isinstance(raw_type, list):
            return _union(self._single_type(str(t), schema, hint) for t in raw_type)
        if raw_type is None and "properties" in schema:
            raw_type = "object"
        if raw_type is None:
            return "Any"
        return self._single_type(str(raw_type), schema, hint)

    def _single_type(self, kind: str, schema: Mapping[str, Any], hint: str) -> str:
        if kind in _PRIMITIVES:
            return _PRIMITIVES[kind]
        if kind == "array":
            return f"list[{self.type_expr(schema.get('items'), f'{hint}Item')}]"
        if kind == "object":
            if schema.get("properties"):
                name = self.fresh(hint)
                self.nodes.append(self._object_node(name, schema))
                return name
            extra = schema.get("additionalProperties")
            if isinstance(extra, Mapping):
                return f"dict[str, {self.type_expr(extra, f'{hint}Value')}]"
            return "dict[str, Any]"
        raise ValueError(f"{hint}: unknown schema type {kind!r}")

    # Declarations

    def _is_class(self, schema: object) -> bool:
        if not isinstance(schema, Mapping):
            return False
        if "allOf" in schema:
            members = schema["allOf"]
            return not (isinstance(members, list) and len(members) == 1)
        if "$ref" in schema or "enum" in schema or "oneOf" in schema or "anyOf" in schema:
            return False
        return bool(schema.get("properties")) and schema.get("type", "object") == "object"

    def _object_node(self, name: str, schema: Mapping[str, Any]) -> ast.stmt:
        bases: list[str] = []
        properties: dict[str, Any] = {}
        required: set[str] = set()

        parts: list[Mapping[str, Any]] = [schema]
        members = schema.get("allOf")
        if isinstance(members, list):
            parts = []
            for member in members:
                if isinstance(member, Mapping) and "$ref" in member:
                    key = self.ref_key(str(member["$ref"]))
                    if not self._is_class(self.schemas[key]):
                        raise ValueError(f"{name}: allOf member {member['$ref']} is not an object schema")
                    self.emit(key)
                    bases.append(self.names[key])
                elif isinstance(member, Mapping):
                    parts.append(member)
            parts.append({k: v for k, v in schema.items() if k != "allOf"})

        for part in parts:
            props = part.get("properties") or {}
            if isinstance(props, Mapping):
                properties.update({str(k): v for k, v in props.items()})
            req = part.get("required") or []
            if isinstance(req, list):
                required.update(str(r) for r in req)

        fields: list[tuple[str, str]] = []
        for prop, prop_schema in properties.items():
            expr = self.type_expr(prop_schema, name + class_name(prop))
            fields.append((prop, expr if prop in required else f"NotRequired[{expr}]"))

        description = schema.get("description")
        return typed_dict(
            name,
            fields,
            bases=bases,
            doc=description if isinstance(description, str) else None,
        )

    def emit(self, key: str) -> None:
        """Append the declaration for component `key`, bases first."""
        if key in self._emitted:
            return
        if key in self._in_progress:
            raise ValueError(f"circular allOf inheritance through {key}")
        self._in_progress.add(key)

        name = self.names[key]
        schema = self.schemas[key]
        if self._is_class(schema):
            node = self._object_node(name, schema)
        else:
            node = type_alias(name, self.type_expr(schema, name))
        self.nodes.append(node)

        self._in_progress.discard(key)
        self._emitted.add(key)


def _literal(values: object) -> str:
    if not isinstance(values, list) or not values:
        raise ValueError("enum must be a non-empty list")
    literals = [repr(v) for v in values if v is not None]
    expr = f"Literal[{', '.join(literals)}]" if literals else "None"
    if None in values and literals:
        expr = optional(expr)
    return expr


def _union(exprs: Iterable[str]) -> str:
    unique: list[str] = []
    for expr in exprs:
        if expr not in unique:
            unique.append(expr)
    if "Any" in unique:
        return "Any"
    non_null = [e for e in unique if e != "None"]
    joined = " | ".join(non_null) if non_null else "None"
    return optional(joined) if "None" in unique and non_null else joined


class OpenApiConverter:
    """Default spec-to-types engine."""

    def convert(self, document: str) -> list[ast.stmt]:
        """Convert OpenAPI text into statements.

        Raises:
            ValueError: The document is not a convertible OpenAPI document.
        """
        data = _load_document(document)
        components = data.get("components")
        schemas: object = {}
        if isinstance(components, Mapping):
            schemas = components.get("schemas") or {}
        elif "definitions" in data:
            schemas = data.get("definitions") or {}
        if not isinstance(schemas, Mapping):
            raise ValueError("component schemas must be a mapping")

        state = _Schemas(schemas)
        for key in state.schemas:
            state.emit(key)
        return state.nodes


def convert_spec(
    spec_path: Path,
    output_path: Path,
    *,
    converter: SpecConverter,
) -> Result[Path, SpecNotFoundError | ConversionError | ArtifactWriteError]:
    """Read `spec_path`, convert it and write the rendered module to `output_path`."""
    if not spec_path.is_file():
        return Err(SpecNotFoundError(path=spec_path))

    try:
        document = spec_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConversionError(source=spec_path, reason=str(e)))

    try:
        nodes = converter.convert(document)
        content = render_module(nodes, imports=_IMPORTS)
    except (ValueError, SyntaxError) as e:
        return Err(ConversionError(source=spec_path, reason=str(e)))

    try:
        atomic_write_text(output_path, content)
    except OSError as e:
        return Err(ArtifactWriteError(path=output_path, reason=str(e)))
    return Ok(output_path)
