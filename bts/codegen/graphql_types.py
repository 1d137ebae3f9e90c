"""GraphQL schema -> Python type definitions.

Two flavours share the schema part (scalars, enums, input and object types,
unions):

- client types: plus, for every named operation under the operations
  directory, a `<Name><Kind>Variables` TypedDict, a `<Name><Kind>` TypedDict
  of the selected root fields (`GetPetQuery`, `AdoptMutation`) and a
  `<NAME>_DOCUMENT` string;
- server types: plus a resolver `Protocol` per root operation type and a
  `Resolvers` mapping of them.
"""

from __future__ import annotations

import ast
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    GraphQLEnumType,
    GraphQLError,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLUnionType,
    OperationDefinitionNode,
    build_schema,
    is_introspection_type,
    parse,
    print_ast,
    type_from_ast,
    validate,
)
from graphql.pyutils import Undefined

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import ArtifactWriteError, ConversionError, SpecNotFoundError
from bts.platform.files import atomic_write_text

from .render import (
    assign_constant,
    enum_class,
    optional,
    render_module,
    safe_identifier,
    type_alias,
    typed_dict,
)

__all__ = [
    "Operation",
    "client_type_nodes",
    "convert_client",
    "convert_with_resolvers",
    "load_operations",
    "server_type_nodes",
]

_CLIENT_IMPORTS = """\
from __future__ import annotations
from enum import Enum
from typing import Any, NotRequired, TypedDict
"""

_SERVER_IMPORTS = """\
from __future__ import annotations
from collections.abc import Awaitable
from enum import Enum
from typing import TYPE_CHECKING, Any, NotRequired, Protocol, TypedDict
if TYPE_CHECKING:
    from graphql import GraphQLResolveInfo
"""

_BUILTIN_SCALARS = {
    "ID": "str",
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
}

_CAMEL = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class Operation:
    """A named operation and the document text a client sends for it."""

    name: str
    node: OperationDefinitionNode
    document: str
    source: Path


def _type_expr(gql_type: object) -> str:
    """Python annotation for a GraphQL output or input type."""
    if isinstance(gql_type, GraphQLNonNull):
        return _type_expr(gql_type.of_type).removesuffix(" | None")
    if isinstance(gql_type, GraphQLList):
        return optional(f"list[{_type_expr(gql_type.of_type)}]")
    if isinstance(gql_type, GraphQLScalarType):
        return optional(_BUILTIN_SCALARS.get(gql_type.name, safe_identifier(gql_type.name)))
    name = getattr(gql_type, "name", None)
    if not isinstance(name, str):
        return "Any"
    return optional(safe_identifier(name))


def _named_types(schema: GraphQLSchema) -> list[object]:
    return [
        t
        for name, t in sorted(schema.type_map.items())
        if not is_introspection_type(t) and name not in _BUILTIN_SCALARS
    ]


def _root_types(schema: GraphQLSchema) -> list[GraphQLObjectType]:
    return [t for t in (schema.query_type, schema.mutation_type, schema.subscription_type) if t]


def _schema_nodes(schema: GraphQLSchema, *, client: bool) -> list[ast.stmt]:
    """Declarations for every named type of the schema, sorted by name.

    Client object types are `total=False` since a query selects a subset of
    fields; root operation types are left out of the client module.
    """
    roots = {t.name for t in _root_types(schema)}
    nodes: list[ast.stmt] = []
    for gql_type in _named_types(schema):
        if isinstance(gql_type, GraphQLScalarType):
            nodes.append(type_alias(safe_identifier(gql_type.name), "Any"))
        elif isinstance(gql_type, GraphQLEnumType):
            nodes.append(
                enum_class(
                    safe_identifier(gql_type.name),
                    ((name, name) for name in gql_type.values),
                    doc=gql_type.description,
                )
            )
        elif isinstance(gql_type, GraphQLInputObjectType):
            fields: list[tuple[str, str]] = []
            for name, field in gql_type.fields.items():
                expr = _type_expr(field.type)
                required = isinstance(field.type, GraphQLNonNull) and field.default_value is Undefined
                fields.append((name, expr if required else f"NotRequired[{expr}]"))
            nodes.append(typed_dict(safe_identifier(gql_type.name), fields, doc=gql_type.description))
        elif isinstance(gql_type, (GraphQLObjectType, GraphQLInterfaceType)):
            if client and gql_type.name in roots:
                continue
            fields = [(name, _type_expr(field.type)) for name, field in gql_type.fields.items()]
            if client:
                fields.insert(0, ("__typename", "str"))
            nodes.append(
                typed_dict(
                    safe_identifier(gql_type.name),
                    fields,
                    total=not client,
                    doc=gql_type.description,
                )
            )
        elif isinstance(gql_type, GraphQLUnionType):
            members = " | ".join(safe_identifier(t.name) for t in gql_type.types) or "Any"
            nodes.append(type_alias(safe_identifier(gql_type.name), members))
    return nodes


def _constant_name(name: str) -> str:
    return safe_identifier(_CAMEL.sub("_", name).upper())


def _root_for(schema: GraphQLSchema, node: OperationDefinitionNode) -> GraphQLObjectType | None:
    kind = node.operation.value
    if kind == "query":
        return schema.query_type
    if kind == "mutation":
        return schema.mutation_type
    return schema.subscription_type


def _operation_nodes(schema: GraphQLSchema, operation: Operation) -> list[ast.stmt]:
    node = operation.node
    name = safe_identifier(operation.name) + node.operation.value.capitalize()

    variables: list[tuple[str, str]] = []
    for definition in node.variable_definitions or ():
        var_type = type_from_ast(schema, definition.type)
        expr = _type_expr(var_type)
        required = isinstance(var_type, GraphQLNonNull) and definition.default_value is None
        variables.append((definition.variable.name.value, expr if required else f"NotRequired[{expr}]"))

    root = _root_for(schema, node)
    result: list[tuple[str, str]] = []
    for selection in node.selection_set.selections:
        if not isinstance(selection, FieldNode):
            continue
        key = selection.alias.value if selection.alias else selection.name.value
        if selection.name.value == "__typename":
            result.append((key, "str"))
        elif root is not None and selection.name.value in root.fields:
            result.append((key, _type_expr(root.fields[selection.name.value].type)))

    return [
        assign_constant(f"{_constant_name(operation.name)}_DOCUMENT", operation.document),
        typed_dict(f"{name}Variables", variables),
        typed_dict(name, result),
    ]


def _declared_name(node: ast.stmt) -> str:
    match node:
        case ast.ClassDef(name=name):
            return name
        case ast.TypeAlias(name=ast.Name(id=name)):
            return name
        case ast.Assign(targets=[ast.Name(id=name)]):
            return name
    return ""


def client_type_nodes(schema: GraphQLSchema, operations: Sequence[Operation]) -> list[ast.stmt]:
    """Schema declarations followed by each operation's declarations.

    Raises:
        ValueError: An operation's generated name clashes with another name.
    """
    nodes = _schema_nodes(schema, client=True)
    declared = {_declared_name(node) for node in nodes}
    for operation in operations:
        operation_nodes = _operation_nodes(schema, operation)
        for node in operation_nodes:
            name = _declared_name(node)
            if name in declared:
                raise ValueError(f"operation {operation.name!r}: generated name {name!r} is already declared")
            declared.add(name)
        nodes.extend(operation_nodes)
    return nodes


# Positional parameters of every resolver; arguments with these names go to **kwargs.
_RESOLVER_PARAMS = frozenset({"self", "parent", "info"})


def _keyword_safe(arg_name: str) -> bool:
    return safe_identifier(arg_name) == arg_name and arg_name not in _RESOLVER_PARAMS


def _resolver_method(field_name: str, field: object) -> ast.stmt:
    args = getattr(field, "args", {})
    params = ["self", "parent: Any", "info: GraphQLResolveInfo"]
    if args and all(_keyword_safe(a) for a in args):
        params.append("*")
        for arg_name, arg in args.items():
            expr = _type_expr(arg.type)
            if isinstance(arg.type, GraphQLNonNull) and arg.default_value is Undefined:
                params.append(f"{arg_name}: {expr}")
            else:
                params.append(f"{arg_name}: {optional(expr)} = None")
    elif args:
        params.append("**kwargs: Any")
    result = _type_expr(getattr(field, "type", None))
    source = (
        f"def {safe_identifier(field_name)}({', '.join(params)}) -> "
        f"{result} | Awaitable[{result}]: ..."
    )
    return ast.parse(source).body[0]


def server_type_nodes(schema: GraphQLSchema) -> list[ast.stmt]:
    nodes = _schema_nodes(schema, client=False)
    protocols: list[tuple[str, str]] = []
    for root in _root_types(schema):
        class_name = f"{safe_identifier(root.name)}Resolvers"
        body = [_resolver_method(name, field) for name, field in root.fields.items()] or [ast.Pass()]
        nodes.append(
            ast.ClassDef(
                name=class_name,
                bases=[ast.Name(id="Protocol", ctx=ast.Load())],
                keywords=[],
                body=body,
                decorator_list=[],
                type_params=[],
            )
        )
        protocols.append((root.name, class_name))
    nodes.append(typed_dict("Resolvers", protocols, total=False))
    return nodes


def _load_schema(schema_path: Path) -> Result[GraphQLSchema, SpecNotFoundError | ConversionError]:
    if not schema_path.is_file():
        return Err(SpecNotFoundError(path=schema_path))
    try:
        text = schema_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConversionError(source=schema_path, reason=str(e)))
    if not text.strip():
        return Ok(GraphQLSchema())
    try:
        return Ok(build_schema(text))
    except GraphQLError as e:
        return Err(ConversionError(source=schema_path, reason=e.message))
    except TypeError as e:
        return Err(ConversionError(source=schema_path, reason=str(e)))


def load_operations(
    schema: GraphQLSchema,
    operations_dir: Path,
) -> Result[list[Operation], ConversionError]:
    """Parse and validate every operation document under `operations_dir`.

    Each document may hold several named operations and the fragments they
    use. Operation names must be unique across all documents.
    """
    if not operations_dir.is_dir():
        return Ok([])

    operations: list[Operation] = []
    seen: dict[str, Path] = {}
    for path in sorted(operations_dir.rglob("*.graphql")):
        try:
            document = parse(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            return Err(ConversionError(source=path, reason=str(e)))
        except GraphQLError as e:
            return Err(ConversionError(source=path, reason=e.message))

        try:
            errors = validate(schema, document)
        except TypeError as e:
            return Err(ConversionError(source=path, reason=f"schema cannot run operations: {e}"))
        if errors:
            return Err(ConversionError(source=path, reason="; ".join(err.message for err in errors)))

        fragments = [d for d in document.definitions if isinstance(d, FragmentDefinitionNode)]
        for definition in document.definitions:
            if not isinstance(definition, OperationDefinitionNode):
                continue
            if definition.name is None:
                return Err(ConversionError(source=path, reason="anonymous operations are not supported"))
            name = definition.name.value
            if name in seen:
                return Err(
                    ConversionError(
                        source=path,
                        reason=f"operation {name!r} is also defined in {seen[name]}",
                    )
                )
            seen[name] = path
            text = print_ast(DocumentNode(definitions=(definition, *fragments)))
            operations.append(Operation(name=name, node=definition, document=text, source=path))
    return Ok(operations)


def _write(output_path: Path, content: str) -> Result[Path, ArtifactWriteError]:
    try:
        atomic_write_text(output_path, content)
    except OSError as e:
        return Err(ArtifactWriteError(path=output_path, reason=str(e)))
    return Ok(output_path)


def convert_client(
    operations_dir: Path,
    output_path: Path,
    *,
    schema_path: Path,
) -> Result[Path, SpecNotFoundError | ConversionError | ArtifactWriteError]:
    """Client types for the stitched schema and the operation documents."""
    loaded = _load_schema(schema_path)
    if isinstance(loaded, Err):
        return loaded
    schema = loaded.value

    operations = load_operations(schema, operations_dir)
    if isinstance(operations, Err):
        return operations

    try:
        content = render_module(client_type_nodes(schema, operations.value), imports=_CLIENT_IMPORTS)
    except (ValueError, SyntaxError) as e:
        return Err(ConversionError(source=schema_path, reason=str(e)))
    return _write(output_path, content)


def convert_with_resolvers(
    schema_path: Path,
    output_path: Path,
) -> Result[Path, SpecNotFoundError | ConversionError | ArtifactWriteError]:
    """Server types and resolver protocols for the stitched schema."""
    loaded = _load_schema(schema_path)
    if isinstance(loaded, Err):
        return loaded

    try:
        content = render_module(server_type_nodes(loaded.value), imports=_SERVER_IMPORTS)
    except (ValueError, SyntaxError) as e:
        return Err(ConversionError(source=schema_path, reason=str(e)))
    return _write(output_path, content)
