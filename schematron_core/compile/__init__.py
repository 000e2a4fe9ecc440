"""
Schema Compilation
==================

Three-stage ISO Schematron compiler producing CompiledCheckPrograms.
"""

from schematron_core.compile.compiler import (
    ABSTRACTION_EXPANDER,
    INCLUSION_EXPANDER,
    SKELETON_COMPILER,
    CompilationStageResult,
    CompiledCheckProgram,
    PreprocessorProgram,
    RuleSchema,
    SchemaCompiler,
    compile_schema,
)

__all__ = [
    "ABSTRACTION_EXPANDER",
    "INCLUSION_EXPANDER",
    "SKELETON_COMPILER",
    "CompilationStageResult",
    "CompiledCheckProgram",
    "PreprocessorProgram",
    "RuleSchema",
    "SchemaCompiler",
    "compile_schema",
]
