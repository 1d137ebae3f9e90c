from __future__ import annotations

import json
from pathlib import Path

from bts.codegen.assemble import assemble_schema
from bts.core.result import Err, Ok
from bts.core.sync_errors import SchemaValidationError, SpecNotFoundError


def _schema(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "schema.graphql"
    path.write_text(text, encoding="utf-8")
    return path


def test_writes_introspection_result(tmp_path: Path) -> None:
    schema = _schema(tmp_path, "type Query { pet(id: ID!): Pet }\ntype Pet { id: ID! }\n")
    output = tmp_path / "src" / "generated" / "schema.json"

    result = assemble_schema(schema, output)

    assert result == Ok(output)
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["data"]["__schema"]["queryType"]["name"] == "Query"
    names = {t["name"] for t in payload["data"]["__schema"]["types"]}
    assert {"Query", "Pet"} <= names


def test_schema_without_query_type(tmp_path: Path) -> None:
    schema = _schema(tmp_path, "type Pet { id: ID! }\n")

    result = assemble_schema(schema, tmp_path / "schema.json")

    assert isinstance(result, Err)
    assert isinstance(result.error, SchemaValidationError)
    assert any("Query" in problem for problem in result.error.problems)
    assert not (tmp_path / "schema.json").exists()


def test_interface_not_satisfied(tmp_path: Path) -> None:
    schema = _schema(
        tmp_path,
        "interface Node { id: ID! }\ntype Pet implements Node { name: String }\ntype Query { pet: Pet }\n",
    )

    result = assemble_schema(schema, tmp_path / "schema.json")

    assert isinstance(result, Err)
    assert any("Node.id" in problem for problem in result.error.problems)


def test_empty_schema(tmp_path: Path) -> None:
    result = assemble_schema(_schema(tmp_path, "\n"), tmp_path / "schema.json")

    assert isinstance(result, Err)
    assert result.error.problems == ("schema is empty",)


def test_missing_schema(tmp_path: Path) -> None:
    result = assemble_schema(tmp_path / "schema.graphql", tmp_path / "schema.json")

    assert result == Err(SpecNotFoundError(path=tmp_path / "schema.graphql"))
