"""Tagged dispatch over the generator variants.

Each `GenerationTarget` names one generator kind, what it reads and the one
file (or folder, for scaffolding) it produces. `run_target` is the only
place that maps a kind to its generator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bts.core.result import Err, Result
from bts.core.sync_errors import ConversionError, GenerationError
from bts.output.console import ConsoleProtocol

from .assemble import assemble_schema
from .graphql_types import convert_client, convert_with_resolvers
from .openapi import SpecConverter, convert_spec
from .scaffold import scaffold_operations
from .stitch import stitch_schema

__all__ = ["GenerationTarget", "GeneratorKind", "run_target"]


class GeneratorKind(str, Enum):
    SCAFFOLD = "scaffold"
    STITCH = "stitch"
    CONVERT_OPENAPI = "convert-openapi"
    CONVERT_CLIENT = "convert-client"
    CONVERT_WITH_RESOLVERS = "convert-with-resolvers"
    ASSEMBLE = "assemble"


_LABELS = {
    GeneratorKind.SCAFFOLD: "Scaffold operations folder",
    GeneratorKind.STITCH: "Stitch schema",
    GeneratorKind.CONVERT_OPENAPI: "Convert OpenAPI document",
    GeneratorKind.CONVERT_CLIENT: "Generate client types",
    GeneratorKind.CONVERT_WITH_RESOLVERS: "Generate server types",
    GeneratorKind.ASSEMBLE: "Assemble server schema",
}


@dataclass(frozen=True, slots=True)
class GenerationTarget:
    """One artifact-production step.

    Attributes:
        kind: Which generator runs
        source: What it reads (checkout folder, spec file, stitched schema,
            or the operations folder)
        output_path: What it writes
        schema_path: Stitched schema, for client type generation
    """

    kind: GeneratorKind
    source: Path
    output_path: Path
    schema_path: Path | None = None

    @property
    def label(self) -> str:
        return _LABELS[self.kind]


def run_target(
    target: GenerationTarget,
    *,
    console: ConsoleProtocol,
    converter: SpecConverter,
) -> Result[Path, GenerationError]:
    match target.kind:
        case GeneratorKind.SCAFFOLD:
            return scaffold_operations(target.source, console=console)
        case GeneratorKind.STITCH:
            return stitch_schema(target.source, target.output_path, console=console)
        case GeneratorKind.CONVERT_OPENAPI:
            return convert_spec(target.source, target.output_path, converter=converter)
        case GeneratorKind.CONVERT_CLIENT:
            if target.schema_path is None:
                return Err(ConversionError(source=target.source, reason="no schema to generate against"))
            return convert_client(target.source, target.output_path, schema_path=target.schema_path)
        case GeneratorKind.CONVERT_WITH_RESOLVERS:
            return convert_with_resolvers(target.source, target.output_path)
        case GeneratorKind.ASSEMBLE:
            return assemble_schema(target.source, target.output_path)
