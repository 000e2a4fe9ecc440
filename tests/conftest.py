"""
Shared fixtures: record schemas served from memory, chained with the ISO
Schematron preprocessors bundled with lxml.
"""

import pytest

from schematron_core.resources.resolver import (
    ChainResolver,
    MappingResolver,
    bundled_preprocessor_resolver,
)
from schematron_core.validation.schematron_validator import SchematronValidator


RECORD_SCHEMA = """<?xml version="1.0" encoding="UTF-8"?>
<sch:schema xmlns:sch="http://purl.oclc.org/dsdl/schematron">
  <sch:title>Record rules</sch:title>
  <sch:pattern id="record-checks">
    <sch:rule context="/record">
      <sch:assert test="normalize-space(title) != ''" role="error">title must be non-empty</sch:assert>
      <sch:assert test="normalize-space(description) != ''" role="warning">description should be non-empty</sch:assert>
    </sch:rule>
  </sch:pattern>
</sch:schema>
"""

ABSTRACT_SCHEMA = """<?xml version="1.0" encoding="UTF-8"?>
<sch:schema xmlns:sch="http://purl.oclc.org/dsdl/schematron">
  <sch:pattern abstract="true" id="required-field">
    <sch:rule context="$field">
      <sch:assert test="normalize-space(.) != ''" role="error">required field is empty</sch:assert>
    </sch:rule>
  </sch:pattern>
  <sch:pattern is-a="required-field" id="title-required">
    <sch:param name="field" value="/record/title"/>
  </sch:pattern>
</sch:schema>
"""

MALFORMED_SCHEMA = """<sch:schema xmlns:sch="http://purl.oclc.org/dsdl/schematron">
  <sch:pattern>
</sch:schema>
"""

VALID_RECORD = b"<record><title>Harbour survey</title><description>Soundings, 2019</description></record>"
NO_DESCRIPTION_RECORD = b"<record><title>Harbour survey</title><description/></record>"
EMPTY_RECORD = b"<record><title>  </title><description/></record>"
NO_TITLE_RECORD = b"<record><title/><description>Soundings, 2019</description></record>"


@pytest.fixture
def schemas():
    return MappingResolver({
        "record.sch": RECORD_SCHEMA,
        "abstract.sch": ABSTRACT_SCHEMA,
        "malformed.sch": MALFORMED_SCHEMA,
    })


@pytest.fixture
def resolver(schemas):
    return ChainResolver(schemas, bundled_preprocessor_resolver())


@pytest.fixture
def record_validator(resolver):
    return SchematronValidator("record.sch", resolver)
