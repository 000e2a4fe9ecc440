"""
Schematron Core Library
=======================

ISO Schematron validation for XML documents:

- Resource resolution for schemas, fragments and preprocessor stylesheets
- Three-stage schema compilation (include, abstract expand, SVRL skeleton)
- Execution of compiled check programs against documents
- SVRL report parsing into errors and warnings
- A compile-once, validate-many validator with pipeline hooks

Architecture
------------

    schematron_core/
    ├── resources/     - Resource resolvers
    ├── transform/     - XSLT loading/application and diagnostics
    ├── compile/       - Schema compiler
    ├── execution/     - Check executor
    ├── validation/    - Reports, validator facade, pipeline hooks
    ├── config/        - Configuration management
    ├── xml/           - XML utilities
    └── cli.py         - schematron-validate command

Usage
-----

    from schematron_core import SchematronValidator, default_resolver

    validator = SchematronValidator("record.sch", default_resolver(Path("schemas")))
    report = validator.validate(xml_bytes)

"""

__version__ = "1.0.0"

from schematron_core.exceptions import (
    ExecutionError,
    ResourceNotFoundError,
    SchemaCompilationError,
    SchematronError,
    SchematronValidationError,
    StopProcessingError,
)

from schematron_core.resources.resolver import (
    ChainResolver,
    DirectoryResolver,
    MappingResolver,
    ResourceResolver,
    bundled_preprocessor_resolver,
    default_resolver,
)

from schematron_core.compile.compiler import (
    CompiledCheckProgram,
    RuleSchema,
    SchemaCompiler,
    compile_schema,
)

from schematron_core.execution.executor import (
    CheckExecutor,
    ExecutionOutput,
    execute,
)

from schematron_core.validation.report import (
    Assertion,
    ValidationReport,
    build_report,
)

from schematron_core.validation.schematron_validator import (
    SchematronValidator,
    ValidatorSettings,
)

from schematron_core.validation.pipeline import PreIngestHooks

from schematron_core.config.settings import (
    ValidatorConfig,
    load_config,
    save_config,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "ExecutionError",
    "ResourceNotFoundError",
    "SchemaCompilationError",
    "SchematronError",
    "SchematronValidationError",
    "StopProcessingError",
    # Resources
    "ChainResolver",
    "DirectoryResolver",
    "MappingResolver",
    "ResourceResolver",
    "bundled_preprocessor_resolver",
    "default_resolver",
    # Compilation
    "CompiledCheckProgram",
    "RuleSchema",
    "SchemaCompiler",
    "compile_schema",
    # Execution
    "CheckExecutor",
    "ExecutionOutput",
    "execute",
    # Validation
    "Assertion",
    "ValidationReport",
    "build_report",
    "SchematronValidator",
    "ValidatorSettings",
    "PreIngestHooks",
    # Config
    "ValidatorConfig",
    "load_config",
    "save_config",
]
