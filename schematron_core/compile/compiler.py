"""
Schema Compiler
===============

Compiles an ISO Schematron schema into an executable check program.

The compiler runs three preprocessing stages, each one an XSLT
transformation fetched through the resource resolver:

1. Inclusion expansion (``iso_dsdl_include.xsl``): assembles the schema
   from its included fragments.
2. Abstraction expansion (``iso_abstract_expand.xsl``): turns abstract
   patterns into concrete patterns.
3. Skeleton compilation (``iso_svrl_for_xslt1.xsl``): compiles the concrete
   schema into an XSLT stylesheet that emits an SVRL report.

The stylesheet produced by stage 3 is wrapped in an immutable
``CompiledCheckProgram`` that can be applied to any number of documents.

Example:
    resolver = default_resolver(schema_dir=Path("schemas"))
    program = compile_schema(RuleSchema("record.sch", resolver))
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import threading

from lxml import etree

from schematron_core.exceptions import ResourceNotFoundError, SchemaCompilationError
from schematron_core.resources.resolver import (
    LxmlResolverBridge,
    ResourceResolver,
    normalize_resource_path,
)
from schematron_core.transform.diagnostics import Diagnostic
from schematron_core.transform.xslt import (
    XSLTLoadError,
    XSLTRunError,
    apply_xslt_transform,
    load_xslt_transform,
    parse_with_bridge,
)

logger = logging.getLogger(__name__)

XSLT1_DIR = "iso-schematron-xslt1"


@dataclass(frozen=True)
class PreprocessorProgram:
    """A named preprocessing stylesheet, loaded through the resolver."""

    name: str
    path: str

    def load(self, resolver: ResourceResolver, bridge: LxmlResolverBridge) -> etree.XSLT:
        return load_xslt_transform(self.path, resolver, bridge)


INCLUSION_EXPANDER = PreprocessorProgram("inclusion-expander", f"{XSLT1_DIR}/iso_dsdl_include.xsl")
ABSTRACTION_EXPANDER = PreprocessorProgram("abstraction-expander", f"{XSLT1_DIR}/iso_abstract_expand.xsl")
SKELETON_COMPILER = PreprocessorProgram("skeleton-compiler", f"{XSLT1_DIR}/iso_svrl_for_xslt1.xsl")


@dataclass(frozen=True)
class RuleSchema:
    """
    A Schematron schema source and the resolver used to dereference it.

    Attributes:
        path: Relative resource path of the schema (also its identifier)
        resolver: Resolver for the schema and its included fragments
        data: Raw schema bytes; fetched from the resolver when None
    """

    path: str
    resolver: ResourceResolver
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_bytes(cls, data: bytes, path: str, resolver: ResourceResolver) -> 'RuleSchema':
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(path=path, resolver=resolver, data=data)

    @property
    def identifier(self) -> str:
        return normalize_resource_path(self.path)

    def load(self) -> bytes:
        if self.data is not None:
            return self.data
        return self.resolver.resolve(self.path)


@dataclass
class CompilationStageResult:
    """Output tree of one preprocessing stage and the warnings it produced."""

    program_name: str
    tree: etree._ElementTree
    warnings: List[Diagnostic] = field(default_factory=list)


@dataclass(frozen=True)
class CompiledCheckProgram:
    """
    The compiled check stylesheet of one schema.

    The stylesheet is kept as serialized bytes and never changes. Each
    thread gets its own ``etree.XSLT`` built from those bytes, so concurrent
    executions never share an lxml transformer or its error log.
    """

    schema_id: str
    stylesheet: bytes = field(repr=False)
    resolver: Optional[ResourceResolver] = field(default=None, repr=False, compare=False)
    _local: threading.local = field(default_factory=threading.local, init=False,
                                    repr=False, compare=False)

    def transformer(self) -> Tuple[etree.XSLT, LxmlResolverBridge]:
        """Return this thread's transformer and the bridge its lookups use."""
        cached = getattr(self._local, "transform", None)
        if cached is None:
            bridge = LxmlResolverBridge(self.resolver) if self.resolver else None
            parser = bridge.make_parser() if bridge else etree.XMLParser(resolve_entities=False)
            root = etree.fromstring(self.stylesheet, parser, base_url=self.schema_id)
            cached = (etree.XSLT(etree.ElementTree(root)), bridge)
            self._local.transform = cached
        return cached

    @property
    def text(self) -> str:
        return self.stylesheet.decode("utf-8")


class SchemaCompiler:
    """
    Three-stage Schematron compiler.

    Example:
        compiler = SchemaCompiler(compile_params={"phase": "#ALL"})
        program = compiler.compile(RuleSchema("record.sch", resolver))
    """

    def __init__(self,
                 inclusion: PreprocessorProgram = INCLUSION_EXPANDER,
                 abstraction: PreprocessorProgram = ABSTRACTION_EXPANDER,
                 skeleton: PreprocessorProgram = SKELETON_COMPILER,
                 compile_params: Optional[Dict[str, str]] = None):
        self.stages = (inclusion, abstraction, skeleton)
        self.compile_params = dict(compile_params or {})

    def compile(self, schema: RuleSchema,
                resolver: Optional[ResourceResolver] = None) -> CompiledCheckProgram:
        """
        Compile ``schema`` into a CompiledCheckProgram.

        Args:
            schema: Schema to compile
            resolver: Resolver for preprocessors and fragments (default: the schema's)

        Raises:
            SchemaCompilationError: On a missing resource, a malformed schema
                or an error/fatal diagnostic in any stage
        """
        resolver = resolver or schema.resolver
        schema_id = schema.identifier
        logger.info(f"Compiling Schematron schema: {schema_id}")

        tree = self._parse_schema(schema, resolver)

        stage_count = len(self.stages)
        total_warnings = 0
        for index, program in enumerate(self.stages, start=1):
            params = self.compile_params if index == stage_count else {}
            stage = self.perform_stage(schema_id, tree, program, resolver, **params)
            total_warnings += len(stage.warnings)
            tree = stage.tree

        stylesheet = etree.tostring(tree, encoding="UTF-8", xml_declaration=True)
        program = CompiledCheckProgram(schema_id=schema_id, stylesheet=stylesheet, resolver=resolver)

        # Compile once here so a broken stage 3 output fails initialization
        try:
            program.transformer()
        except (etree.XSLTParseError, etree.XMLSyntaxError) as e:
            logger.error(f"Compiled check program for {schema_id} is not a valid stylesheet: {e}")
            raise SchemaCompilationError(
                f"Error compiling Schematron schema {schema_id}: generated stylesheet is invalid: {e}",
                schema=schema_id,
                stage=self.stages[-1].name,
            ) from e

        logger.info(f"Compiled Schematron schema {schema_id} ({total_warnings} compile warning(s))")
        return program

    def perform_stage(self, schema_id: str, tree: etree._ElementTree,
                      program: PreprocessorProgram, resolver: ResourceResolver,
                      **params) -> CompilationStageResult:
        """
        Run one preprocessing stage on ``tree``.

        Warnings are collected into the returned result; the list is created
        for this call only.
        """
        logger.debug(f"Performing stage {program.name} with {program.path}")
        bridge = LxmlResolverBridge(resolver)

        try:
            transform = program.load(resolver, bridge)
        except ResourceNotFoundError as e:
            logger.error(f"Preprocessor {program.path} not found for stage {program.name}")
            raise SchemaCompilationError(
                f"Preprocessor resource not found: {e.path} - cannot perform stage {program.name}",
                schema=schema_id, stage=program.name, resource=e.path,
            ) from e
        except XSLTLoadError as e:
            resource = e.missing[0] if e.missing else None
            logger.error(f"Could not load preprocessor {program.path}: {e}")
            raise SchemaCompilationError(
                f"Error loading preprocessor {program.path} for stage {program.name}: {e}",
                schema=schema_id, stage=program.name, resource=resource,
                diagnostics=e.diagnostics,
            ) from e

        try:
            result = apply_xslt_transform(tree, transform, bridge, **params)
        except XSLTRunError as e:
            resource = e.missing[0] if e.missing else None
            logger.error(f"Stage {program.name} failed for {schema_id}: {e}")
            raise SchemaCompilationError(
                f"Error trying to compile Schematron schema {schema_id} "
                f"in stage {program.name}: {e}",
                schema=schema_id, stage=program.name, resource=resource,
                diagnostics=e.diagnostics,
            ) from e

        failures = result.failures
        if failures:
            logger.error(f"Stage {program.name} reported {len(failures)} error(s) for {schema_id}")
            raise SchemaCompilationError(
                f"Error trying to compile Schematron schema {schema_id} in stage "
                f"{program.name}: " + "; ".join(d.message for d in failures),
                schema=schema_id, stage=program.name, diagnostics=result.diagnostics,
            )

        warnings = result.warnings
        for warning in warnings:
            logger.warning(f"{program.name}: {warning.message}")

        return CompilationStageResult(program_name=program.name, tree=result.tree, warnings=warnings)

    def _parse_schema(self, schema: RuleSchema, resolver: ResourceResolver) -> etree._ElementTree:
        schema_id = schema.identifier
        try:
            data = schema.load()
        except ResourceNotFoundError as e:
            logger.error(f"Schematron schema not found: {e.path}")
            raise SchemaCompilationError(
                f"Schematron schema not found: {e.path}",
                schema=schema_id, resource=e.path,
            ) from e

        try:
            return parse_with_bridge(data, LxmlResolverBridge(resolver), base_url=schema_id)
        except etree.XMLSyntaxError as e:
            logger.error(f"Malformed Schematron schema {schema_id}: {e}")
            raise SchemaCompilationError(
                f"Error trying to compile Schematron schema {schema_id}: malformed schema: {e}",
                schema=schema_id,
            ) from e


def compile_schema(schema: RuleSchema,
                   resolver: Optional[ResourceResolver] = None) -> CompiledCheckProgram:
    """Compile ``schema`` with the default three ISO Schematron stages."""
    return SchemaCompiler().compile(schema, resolver)
