"""
Schema compiler tests

Run with: pytest tests/test_compiler.py -v
"""

import threading

import pytest
from lxml import etree

from schematron_core.compile.compiler import (
    ABSTRACTION_EXPANDER,
    INCLUSION_EXPANDER,
    SKELETON_COMPILER,
    CompiledCheckProgram,
    PreprocessorProgram,
    RuleSchema,
    SchemaCompiler,
    compile_schema,
)
from schematron_core.exceptions import SchemaCompilationError
from schematron_core.execution.executor import execute
from schematron_core.resources.resolver import (
    ChainResolver,
    DirectoryResolver,
    MappingResolver,
    bundled_preprocessor_resolver,
)
from schematron_core.transform.diagnostics import Severity
from schematron_core.validation.report import build_report

from conftest import EMPTY_RECORD, NO_DESCRIPTION_RECORD, NO_TITLE_RECORD, VALID_RECORD

XSL_NS = "http://www.w3.org/1999/XSL/Transform"

IDENTITY_WITH_MESSAGE = f"""<xsl:stylesheet version="1.0" xmlns:xsl="{XSL_NS}">
  <xsl:template match="/">
    <xsl:message>preprocessor note</xsl:message>
    <xsl:copy-of select="."/>
  </xsl:template>
</xsl:stylesheet>
"""

TERMINATING = f"""<xsl:stylesheet version="1.0" xmlns:xsl="{XSL_NS}">
  <xsl:template match="/">
    <xsl:message terminate="yes">schema is unusable</xsl:message>
  </xsl:template>
</xsl:stylesheet>
"""

IMPORTS_MISSING = f"""<xsl:stylesheet version="1.0" xmlns:xsl="{XSL_NS}">
  <xsl:import href="./missing.xsl"/>
</xsl:stylesheet>
"""


def _messages(report):
    return report.error_messages, report.warning_messages


class TestStages:
    """Tests for the preprocessing stage definitions."""

    def test_three_ordered_stages(self):
        """The default compiler runs include, abstract expansion, then skeleton."""
        compiler = SchemaCompiler()
        assert [stage.name for stage in compiler.stages] == [
            "inclusion-expander", "abstraction-expander", "skeleton-compiler",
        ]
        assert compiler.stages == (INCLUSION_EXPANDER, ABSTRACTION_EXPANDER, SKELETON_COMPILER)


class TestCompile:
    """Tests for compiling schemas end to end."""

    def test_compiles_to_program(self, resolver):
        """A well-formed schema compiles to an XSLT check program."""
        program = compile_schema(RuleSchema("record.sch", resolver))
        assert isinstance(program, CompiledCheckProgram)
        assert program.schema_id == "record.sch"
        root = etree.fromstring(program.stylesheet)
        assert root.tag == f"{{{XSL_NS}}}stylesheet"

    def test_schema_path_marker_stripped(self, resolver):
        """Schema references starting with ./ are resolved by bare path."""
        program = compile_schema(RuleSchema("./record.sch", resolver))
        assert program.schema_id == "record.sch"

    def test_compiling_twice_behaves_identically(self, resolver):
        """Two compilations of one schema give the same results for any document."""
        first = compile_schema(RuleSchema("record.sch", resolver))
        second = compile_schema(RuleSchema("record.sch", resolver))
        for document in (VALID_RECORD, NO_DESCRIPTION_RECORD, EMPTY_RECORD, NO_TITLE_RECORD):
            assert _messages(build_report(execute(first, document))) == \
                _messages(build_report(execute(second, document)))

    def test_from_bytes(self, resolver, schemas):
        """Schemas can be compiled from bytes already in memory."""
        data = schemas.resolve("record.sch")
        program = compile_schema(RuleSchema.from_bytes(data, "inline.sch", resolver))
        report = build_report(execute(program, EMPTY_RECORD))
        assert report.error_messages == ["title must be non-empty"]

    def test_abstract_patterns_expanded(self, resolver):
        """Abstract patterns are instantiated by the second stage."""
        program = compile_schema(RuleSchema("abstract.sch", resolver))
        assert build_report(execute(program, NO_TITLE_RECORD)).error_messages == ["required field is empty"]
        assert build_report(execute(program, VALID_RECORD)).error_messages == []

    def test_includes_expanded(self, tmp_path):
        """Included fragments are inlined by the first stage."""
        (tmp_path / "fragments").mkdir()
        (tmp_path / "fragments" / "description.sch").write_text(
            '<sch:pattern xmlns:sch="http://purl.oclc.org/dsdl/schematron" id="description">'
            '<sch:rule context="/record">'
            '<sch:assert test="normalize-space(description) != \'\'" role="warning">'
            'description should be non-empty</sch:assert>'
            '</sch:rule></sch:pattern>'
        )
        (tmp_path / "main.sch").write_text(
            '<sch:schema xmlns:sch="http://purl.oclc.org/dsdl/schematron">'
            '<sch:include href="./fragments/description.sch"/>'
            '</sch:schema>'
        )
        resolver = ChainResolver(DirectoryResolver(tmp_path), bundled_preprocessor_resolver())

        program = compile_schema(RuleSchema("main.sch", resolver))
        report = build_report(execute(program, NO_DESCRIPTION_RECORD))
        assert report.warning_messages == ["description should be non-empty"]

    def test_phase_parameter_accepted(self, resolver):
        """Skeleton parameters are passed to the last stage."""
        compiler = SchemaCompiler(compile_params={"phase": "#ALL"})
        program = compiler.compile(RuleSchema("record.sch", resolver))
        assert build_report(execute(program, EMPTY_RECORD)).error_messages == ["title must be non-empty"]


class TestCompileFailures:
    """Tests for SchemaCompilationError."""

    def test_missing_schema(self, resolver):
        """A schema the resolver cannot find fails compilation."""
        with pytest.raises(SchemaCompilationError) as excinfo:
            compile_schema(RuleSchema("nowhere.sch", resolver))
        assert excinfo.value.resource == "nowhere.sch"

    def test_malformed_schema(self, resolver):
        """A schema that is not well-formed XML fails compilation."""
        with pytest.raises(SchemaCompilationError, match="malformed"):
            compile_schema(RuleSchema("malformed.sch", resolver))

    @pytest.mark.parametrize("stage_index", [0, 1, 2])
    def test_missing_preprocessor_names_resource(self, schemas, stage_index):
        """A preprocessor missing in any stage fails, naming the resource."""
        stages = [INCLUSION_EXPANDER, ABSTRACTION_EXPANDER, SKELETON_COMPILER]
        stages[stage_index] = PreprocessorProgram(stages[stage_index].name, "./gone/stage.xsl")
        resolver = ChainResolver(schemas, bundled_preprocessor_resolver())

        with pytest.raises(SchemaCompilationError) as excinfo:
            SchemaCompiler(*stages).compile(RuleSchema("record.sch", resolver))

        assert excinfo.value.resource == "gone/stage.xsl"
        assert excinfo.value.stage == stages[stage_index].name
        assert "gone/stage.xsl" in str(excinfo.value)

    def test_missing_preprocessor_import(self, schemas):
        """A missing xsl:import of a preprocessor fails, naming the resource."""
        resolver = ChainResolver(
            schemas,
            MappingResolver({"custom/stage.xsl": IMPORTS_MISSING}),
            bundled_preprocessor_resolver(),
        )
        skeleton = PreprocessorProgram("skeleton-compiler", "custom/stage.xsl")

        with pytest.raises(SchemaCompilationError) as excinfo:
            SchemaCompiler(skeleton=skeleton).compile(RuleSchema("record.sch", resolver))

        assert excinfo.value.stage == "skeleton-compiler"
        assert excinfo.value.resource == "custom/missing.xsl"

    def test_terminating_message_aborts(self, schemas):
        """A fatal diagnostic during a stage aborts compilation."""
        resolver = ChainResolver(
            schemas,
            MappingResolver({"custom/terminate.xsl": TERMINATING}),
            bundled_preprocessor_resolver(),
        )
        abstraction = PreprocessorProgram("abstraction-expander", "custom/terminate.xsl")

        with pytest.raises(SchemaCompilationError) as excinfo:
            SchemaCompiler(abstraction=abstraction).compile(RuleSchema("record.sch", resolver))
        assert excinfo.value.stage == "abstraction-expander"


class TestCompileWarnings:
    """Tests for warning capture during stages."""

    @pytest.fixture
    def stage_resolver(self, schemas):
        return ChainResolver(
            schemas,
            MappingResolver({"custom/note.xsl": IDENTITY_WITH_MESSAGE}),
            bundled_preprocessor_resolver(),
        )

    def test_message_collected_as_warning(self, stage_resolver):
        """Non-terminating messages are collected as warnings and do not abort."""
        compiler = SchemaCompiler()
        tree = etree.ElementTree(etree.fromstring(stage_resolver.resolve("record.sch")))
        program = PreprocessorProgram("note", "custom/note.xsl")

        stage = compiler.perform_stage("record.sch", tree, program, stage_resolver)

        assert [w.message for w in stage.warnings] == ["preprocessor note"]
        assert all(w.severity is Severity.WARNING for w in stage.warnings)
        assert stage.tree.getroot().tag.endswith("schema")

    def test_warnings_scoped_to_stage(self, stage_resolver):
        """Each stage call starts with an empty warning list."""
        compiler = SchemaCompiler()
        tree = etree.ElementTree(etree.fromstring(stage_resolver.resolve("record.sch")))
        program = PreprocessorProgram("note", "custom/note.xsl")

        first = compiler.perform_stage("record.sch", tree, program, stage_resolver)
        second = compiler.perform_stage("record.sch", first.tree, program, stage_resolver)

        assert len(first.warnings) == 1
        assert len(second.warnings) == 1
        assert first.warnings is not second.warnings

    def test_warnings_do_not_fail_compilation(self, stage_resolver):
        """A stage that only warns still yields a working program."""
        inclusion = PreprocessorProgram("inclusion-expander", "custom/note.xsl")
        program = SchemaCompiler(inclusion=inclusion).compile(RuleSchema("record.sch", stage_resolver))
        report = build_report(execute(program, EMPTY_RECORD))
        assert report.error_messages == ["title must be non-empty"]


class TestCompiledProgram:
    """Tests for the compiled program artifact."""

    def test_program_is_frozen(self, resolver):
        """Compiled programs cannot be modified."""
        program = compile_schema(RuleSchema("record.sch", resolver))
        with pytest.raises(AttributeError):
            program.stylesheet = b""

    def test_transformer_per_thread(self, resolver):
        """Each thread gets its own transformer."""
        program = compile_schema(RuleSchema("record.sch", resolver))
        main_transform, _ = program.transformer()
        assert program.transformer()[0] is main_transform

        seen = []
        thread = threading.Thread(target=lambda: seen.append(program.transformer()[0]))
        thread.start()
        thread.join()
        assert seen and seen[0] is not main_transform
