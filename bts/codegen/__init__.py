"""Artifact generators: stitching, spec-to-types conversion, assembly."""

from bts.codegen.openapi import OpenApiConverter, SpecConverter
from bts.codegen.targets import GenerationTarget, GeneratorKind, run_target

__all__ = [
    "GenerationTarget",
    "GeneratorKind",
    "OpenApiConverter",
    "SpecConverter",
    "run_target",
]
