"""Schema stitching: many GraphQL fragment files -> one canonical SDL file.

Fragments are collected from the source directory itself and from its
first-level subdirectories only. A type defined in more than one fragment
must be defined identically each time; any other duplicate is an error. The
combined document must then pass SDL validation and is printed in canonical
form. Nothing is written when stitching fails.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from graphql import (
    DefinitionNode,
    DirectiveDefinitionNode,
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    TypeDefinitionNode,
    build_ast_schema,
    parse,
    print_ast,
    print_schema,
)

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import ArtifactWriteError, SchemaStitchError
from bts.output.console import ConsoleProtocol, Style
from bts.platform.files import atomic_write_text

__all__ = [
    "FRAGMENT_SUFFIX",
    "collect_fragments",
    "merge_fragments",
    "stitch_fragments",
    "stitch_schema",
]

FRAGMENT_SUFFIX = ".graphql"


def _is_fragment(path: Path) -> bool:
    return path.is_file() and path.suffix == FRAGMENT_SUFFIX


def collect_fragments(source_dir: Path) -> list[Path]:
    """Fragment files directly in `source_dir` or one directory below it.

    Entries are visited in sorted order; a subdirectory's fragments take the
    subdirectory's place in that order. Hidden directories (such as `.git`)
    are skipped. A missing directory yields no fragments.
    """
    if not source_dir.is_dir():
        return []

    fragments: list[Path] = []
    for entry in sorted(source_dir.iterdir()):
        if entry.is_dir():
            if entry.name.startswith("."):
                continue
            fragments.extend(child for child in sorted(entry.iterdir()) if _is_fragment(child))
        elif _is_fragment(entry):
            fragments.append(entry)
    return fragments


def _kind(node: TypeDefinitionNode | DirectiveDefinitionNode) -> str:
    return node.kind.removesuffix("_definition").replace("_", " ")


def merge_fragments(documents: Sequence[DocumentNode]) -> DocumentNode:
    """Combine parsed fragments into one document.

    A type or directive may be defined in several fragments only when every
    definition is identical; the repeats are dropped. Definitions keep the
    position of their first occurrence. Extensions and schema definitions
    pass through unchanged.

    Raises:
        ValueError: A name defined twice with different definitions.
    """
    definitions: list[DefinitionNode] = []
    named: dict[str, TypeDefinitionNode | DirectiveDefinitionNode] = {}

    for document in documents:
        for definition in document.definitions:
            if not isinstance(definition, TypeDefinitionNode | DirectiveDefinitionNode):
                definitions.append(definition)
                continue
            name = definition.name.value
            if isinstance(definition, DirectiveDefinitionNode):
                name = f"@{name}"
            existing = named.get(name)
            if existing is None:
                named[name] = definition
                definitions.append(definition)
            elif print_ast(existing) != print_ast(definition):
                raise ValueError(
                    f"duplicate definition of {_kind(definition)} {name!r} "
                    "differs from the first one"
                )

    return DocumentNode(definitions=tuple(definitions))


def _relative(path: Path, source_dir: Path) -> str:
    try:
        return str(path.relative_to(source_dir))
    except ValueError:
        return str(path)


def stitch_fragments(source_dir: Path, fragments: list[Path]) -> Result[str, SchemaStitchError]:
    """Merge, validate and canonically print the given fragments."""

    def failure(reason: str) -> Err[SchemaStitchError]:
        return Err(SchemaStitchError(source_dir=source_dir, fragments=tuple(fragments), reason=reason))

    documents: list[DocumentNode] = []
    for path in fragments:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return failure(f"{_relative(path, source_dir)}: {e}")
        if not text.strip():
            continue
        try:
            documents.append(parse(text))
        except GraphQLError as e:
            return failure(f"{_relative(path, source_dir)}: {e.message}")

    if not documents:
        return Ok(print_schema(GraphQLSchema()))

    try:
        schema = build_ast_schema(merge_fragments(documents))
    except ValueError as e:
        return failure(str(e))
    except GraphQLError as e:
        return failure(e.message)
    except TypeError as e:
        # SDL validation reports every problem in one TypeError.
        return failure("; ".join(part.strip() for part in str(e).split("\n\n") if part.strip()))

    return Ok(print_schema(schema))


def stitch_schema(
    source_dir: Path,
    output_path: Path,
    *,
    console: ConsoleProtocol,
) -> Result[Path, SchemaStitchError | ArtifactWriteError]:
    """Stitch every fragment under `source_dir` into `output_path`."""
    fragments = collect_fragments(source_dir)
    if not fragments:
        console.warning(f"no {FRAGMENT_SUFFIX} fragments found in {source_dir}; writing an empty schema")
    else:
        console.print(f"stitching {len(fragments)} fragment(s) from {source_dir}", Style.DIM)

    stitched = stitch_fragments(source_dir, fragments)
    if isinstance(stitched, Err):
        return stitched

    content = stitched.value
    if content:
        content += "\n"
    try:
        atomic_write_text(output_path, content)
    except OSError as e:
        return Err(ArtifactWriteError(path=output_path, reason=str(e)))
    return Ok(output_path)
