"""Combined schema artifact for the server.

The stitched SDL only has to be well-formed; the server needs a schema that
is executable. Assembly runs full schema validation (root `Query` type,
interface conformance, argument and field types) and writes the
introspection result, which server tooling and clients both consume.
"""

from __future__ import annotations

import json
from pathlib import Path

from graphql import GraphQLError, build_schema, introspection_from_schema, validate_schema

from bts.core.result import Err, Ok, Result
from bts.core.sync_errors import ArtifactWriteError, SchemaValidationError, SpecNotFoundError
from bts.platform.files import atomic_write_text


def assemble_schema(
    schema_path: Path,
    output_path: Path,
) -> Result[Path, SpecNotFoundError | SchemaValidationError | ArtifactWriteError]:
    if not schema_path.is_file():
        return Err(SpecNotFoundError(path=schema_path))

    try:
        text = schema_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(SchemaValidationError(schema_path=schema_path, problems=(str(e),)))
    if not text.strip():
        return Err(SchemaValidationError(schema_path=schema_path, problems=("schema is empty",)))

    try:
        schema = build_schema(text)
    except GraphQLError as e:
        return Err(SchemaValidationError(schema_path=schema_path, problems=(e.message,)))
    except TypeError as e:
        return Err(SchemaValidationError(schema_path=schema_path, problems=(str(e),)))

    errors = validate_schema(schema)
    if errors:
        return Err(
            SchemaValidationError(
                schema_path=schema_path,
                problems=tuple(error.message for error in errors),
            )
        )

    payload = {"data": introspection_from_schema(schema)}
    try:
        atomic_write_text(output_path, json.dumps(payload, indent=2) + "\n")
    except OSError as e:
        return Err(ArtifactWriteError(path=output_path, reason=str(e)))
    return Ok(output_path)
