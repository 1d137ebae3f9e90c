"""Tests for codegen/graphql_types.py."""

from __future__ import annotations

from pathlib import Path

import pytest
from graphql import build_schema

from bts.codegen.graphql_types import convert_client, convert_with_resolvers, load_operations
from bts.core.result import Err, Ok
from bts.core.sync_errors import ConversionError, SpecNotFoundError

SCHEMA = '''\
"""A pet."""
type Pet {
  id: ID!
  name: String
  tags: [String!]!
  status: Status
  owner: Owner
}

enum Status {
  AVAILABLE
  SOLD
}

scalar DateTime

interface Owner {
  id: ID!
}

type Person implements Owner {
  id: ID!
  born: DateTime
}

union SearchResult = Pet | Person

input PetFilter {
  status: Status!
  limit: Int = 10
  name: String
}

type Query {
  pet(id: ID!): Pet
  search(term: String!, filter: PetFilter): [SearchResult!]!
}

type Mutation {
  adopt(petId: ID!): Pet!
}
'''

GET_PET = """\
query GetPet($id: ID!) {
  pet(id: $id) {
    ...PetFields
  }
}

fragment PetFields on Pet {
  id
  name
}
"""

ADOPT = """\
mutation Adopt($petId: ID!) {
  adopted: adopt(petId: $petId) {
    id
  }
  __typename
}
"""

SEARCH = """\
query Search($term: String!, $filter: PetFilter) {
  search(term: $term, filter: $filter) {
    __typename
  }
}
"""


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    _write(tmp_path / "src" / "generated" / "schema.graphql", SCHEMA)
    _write(tmp_path / "operations" / "queries" / "pet.graphql", GET_PET)
    _write(tmp_path / "operations" / "mutations" / "adopt.graphql", ADOPT)
    _write(tmp_path / "operations" / "queries" / "search.graphql", SEARCH)
    return tmp_path


def _exec(text: str) -> dict[str, object]:
    namespace: dict[str, object] = {}
    exec(compile(text, "generated.py", "exec"), namespace)
    return namespace


class TestLoadOperations:
    def test_loads_named_operations_sorted_by_path(self, project: Path) -> None:
        result = load_operations(build_schema(SCHEMA), project / "operations")

        assert isinstance(result, Ok)
        assert [op.name for op in result.value] == ["Adopt", "GetPet", "Search"]

    def test_document_carries_its_fragments(self, project: Path) -> None:
        result = load_operations(build_schema(SCHEMA), project / "operations")

        assert isinstance(result, Ok)
        get_pet = result.value[1]
        assert "query GetPet" in get_pet.document
        assert "fragment PetFields on Pet" in get_pet.document

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert load_operations(build_schema(SCHEMA), tmp_path / "operations") == Ok([])

    def test_invalid_against_schema(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "ops" / "bad.graphql", "query Bad { nope }")

        result = load_operations(build_schema(SCHEMA), tmp_path / "ops")

        assert isinstance(result, Err)
        assert result.error.source == path
        assert "nope" in result.error.reason

    def test_anonymous_operation(self, tmp_path: Path) -> None:
        _write(tmp_path / "ops" / "anon.graphql", '{ pet(id: "1") { id } }')

        result = load_operations(build_schema(SCHEMA), tmp_path / "ops")

        assert isinstance(result, Err)
        assert "anonymous" in result.error.reason

    def test_duplicate_names_across_files(self, tmp_path: Path) -> None:
        _write(tmp_path / "ops" / "a.graphql", 'query Same { pet(id: "1") { id } }')
        _write(tmp_path / "ops" / "b.graphql", 'query Same { pet(id: "2") { name } }')

        result = load_operations(build_schema(SCHEMA), tmp_path / "ops")

        assert isinstance(result, Err)
        assert "Same" in result.error.reason


class TestConvertClient:
    def test_schema_declarations(self, project: Path) -> None:
        output = project / "src" / "generated" / "client_types.py"

        result = convert_client(
            project / "operations",
            output,
            schema_path=project / "src" / "generated" / "schema.graphql",
        )

        assert result == Ok(output)
        text = output.read_text(encoding="utf-8")
        assert "type DateTime = Any" in text
        assert "class Status(str, Enum):" in text
        assert "AVAILABLE = 'AVAILABLE'" in text
        assert "type SearchResult = Pet | Person" in text
        assert "Pet = TypedDict('Pet', {'__typename': 'str', 'id': 'str', 'name': 'str | None', 'tags': 'list[str]'" in text
        assert "class PetFilter(TypedDict):" in text
        assert "status: Status\n" in text
        assert "limit: NotRequired[int | None]" in text
        assert "Query" not in [line.split(" ")[0] for line in text.splitlines()]

    def test_operation_declarations(self, project: Path) -> None:
        output = project / "client_types.py"

        result = convert_client(
            project / "operations",
            output,
            schema_path=project / "src" / "generated" / "schema.graphql",
        )

        assert result == Ok(output)
        text = output.read_text(encoding="utf-8")
        assert "class GetPetQueryVariables(TypedDict):\n    id: str" in text
        assert "class GetPetQuery(TypedDict):\n    pet: Pet | None" in text
        assert "petId: str" in text
        assert "AdoptMutation = TypedDict('AdoptMutation', {'adopted': 'Pet', '__typename': 'str'})" in text
        assert "term: str\n" in text
        assert "filter: NotRequired[PetFilter | None]" in text
        assert "search: list[SearchResult]" in text

        namespace = _exec(text)
        assert "fragment PetFields on Pet" in str(namespace["GET_PET_DOCUMENT"])
        assert "mutation Adopt" in str(namespace["ADOPT_DOCUMENT"])

    def test_operation_name_clash(self, tmp_path: Path) -> None:
        schema = _write(tmp_path / "schema.graphql", "type Query { a: Int }\ntype AQuery { x: Int }\n")
        _write(tmp_path / "operations" / "a.graphql", "query A { a }")
        output = tmp_path / "client_types.py"

        result = convert_client(tmp_path / "operations", output, schema_path=schema)

        assert isinstance(result, Err)
        assert "AQuery" in result.error.reason
        assert not output.exists()

    def test_no_operations(self, tmp_path: Path) -> None:
        schema = _write(tmp_path / "schema.graphql", SCHEMA)
        output = tmp_path / "client_types.py"

        result = convert_client(tmp_path / "operations", output, schema_path=schema)

        assert result == Ok(output)
        assert "_DOCUMENT" not in output.read_text(encoding="utf-8")

    def test_missing_schema(self, tmp_path: Path) -> None:
        result = convert_client(tmp_path, tmp_path / "out.py", schema_path=tmp_path / "schema.graphql")

        assert result == Err(SpecNotFoundError(path=tmp_path / "schema.graphql"))

    def test_invalid_operation_leaves_no_output(self, project: Path) -> None:
        _write(project / "operations" / "queries" / "bad.graphql", "query Bad { pet { id } }")
        output = project / "client_types.py"

        result = convert_client(
            project / "operations",
            output,
            schema_path=project / "src" / "generated" / "schema.graphql",
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, ConversionError)
        assert not output.exists()

    def test_empty_schema_cannot_run_operations(self, project: Path) -> None:
        schema = _write(project / "empty.graphql", "")

        result = convert_client(project / "operations", project / "out.py", schema_path=schema)

        assert isinstance(result, Err)
        assert isinstance(result.error, ConversionError)


class TestConvertWithResolvers:
    def test_resolver_protocols(self, project: Path) -> None:
        output = project / "src" / "generated" / "server_types.py"

        result = convert_with_resolvers(project / "src" / "generated" / "schema.graphql", output)

        assert result == Ok(output)
        text = output.read_text(encoding="utf-8")
        assert "class QueryResolvers(Protocol):" in text
        assert (
            "def pet(self, parent: Any, info: GraphQLResolveInfo, *, id: str) -> "
            "Pet | None | Awaitable[Pet | None]:"
        ) in text
        assert "filter: PetFilter | None = None" in text
        assert "class MutationResolvers(Protocol):" in text
        assert "class Resolvers(TypedDict, total=False):" in text
        assert "Query: QueryResolvers" in text
        assert "Mutation: MutationResolvers" in text

    def test_server_object_types_are_total(self, project: Path) -> None:
        output = project / "server_types.py"

        convert_with_resolvers(project / "src" / "generated" / "schema.graphql", output)

        text = output.read_text(encoding="utf-8")
        assert "class Pet(TypedDict):" in text
        assert "A pet." in text
        assert "class Query(TypedDict):" in text
        namespace = _exec(text)
        assert {"Pet", "Person", "QueryResolvers", "Resolvers"} <= set(namespace)

    def test_empty_schema(self, tmp_path: Path) -> None:
        schema = _write(tmp_path / "schema.graphql", "")
        output = tmp_path / "server_types.py"

        result = convert_with_resolvers(schema, output)

        assert result == Ok(output)
        assert "class Resolvers(TypedDict, total=False):\n    pass" in output.read_text(encoding="utf-8")

    def test_invalid_schema(self, tmp_path: Path) -> None:
        schema = _write(tmp_path / "schema.graphql", "type Query { pet: Pet }")

        result = convert_with_resolvers(schema, tmp_path / "server_types.py")

        assert isinstance(result, Err)
        assert isinstance(result.error, ConversionError)

    @pytest.mark.parametrize("arg_name", ["info", "parent", "self"])
    def test_argument_named_like_a_resolver_parameter(self, tmp_path: Path, arg_name: str) -> None:
        schema = _write(
            tmp_path / "schema.graphql",
            f"type Query {{ search({arg_name}: String, limit: Int): String }}",
        )
        output = tmp_path / "server_types.py"

        result = convert_with_resolvers(schema, output)

        assert result == Ok(output)
        text = output.read_text(encoding="utf-8")
        assert (
            "def search(self, parent: Any, info: GraphQLResolveInfo, **kwargs: Any) -> "
            "str | None | Awaitable[str | None]:"
        ) in text
        assert "QueryResolvers" in _exec(text)
