import pytest

from conftest import build_document
from luxexport.document import Metadata
from luxexport.domain.models import MetadataRule
from luxexport.pipeline.generation import MetadataGenerator, VariableReplacer


def rule(metadata_type, expression, force=False, number_format=None):
    return MetadataRule(metadata_type=metadata_type, rule_expression=expression, force_creation=force,
                        number_format=number_format)


@pytest.fixture
def document():
    document = build_document()
    document.logical.metadata.append(Metadata("TitleDocMain", "Jean Dupont"))
    return document


def test_replacer_expands_placeholders(document):
    replacer = VariableReplacer(document, "1234", "dupont_jean")
    assert replacer.replace("{process.title}/{process.id}: {meta.TitleDocMain}") == "dupont_jean/1234: Jean Dupont"
    assert replacer.replace("{meta.Missing}x") == "x"
    assert replacer.replace(None) == ""


def test_replacer_formats_integers(document):
    replacer = VariableReplacer(document, "42", "t")
    assert replacer.replace("LUX-{process.id}", "06d") == "LUX-000042"
    assert replacer.replace("{process.title}", "06d") == "t"


def test_generator_adds_missing_metadata(document):
    problems = MetadataGenerator([rule("CatalogIDDigital", "lux_{process.id}")]).generate(
        document, VariableReplacer(document, "7", "t"))

    assert problems == []
    assert document.logical.first_value("CatalogIDDigital") == "lux_7"


def test_existing_metadata_needs_force(document):
    generator = MetadataGenerator([rule("TitleDocMain", "Generated")])
    generator.generate(document, VariableReplacer(document))
    assert [md.value for md in document.logical.metadata_by_type("TitleDocMain")] == ["Jean Dupont"]

    MetadataGenerator([rule("TitleDocMain", "Generated", force=True)]).generate(document, VariableReplacer(document))
    assert [md.value for md in document.logical.metadata_by_type("TitleDocMain")] == ["Jean Dupont", "Generated"]


def test_blank_expansion_is_not_added(document):
    MetadataGenerator([rule("CatalogIDDigital", "{meta.Missing}")]).generate(document, VariableReplacer(document))
    assert document.logical.metadata_by_type("CatalogIDDigital") == []


def test_unknown_type_is_skipped(document):
    problems = MetadataGenerator([rule("NotInRuleset", "x")]).generate(document, VariableReplacer(document))
    assert problems == []
    assert document.logical.metadata_by_type("NotInRuleset") == []


def test_rejected_attach_is_reported():
    document = build_document()
    document.ruleset.structure_types["Person"] = {"Published"}

    problems = MetadataGenerator([rule("CatalogIDDigital", "x")]).generate(document, VariableReplacer(document))

    assert problems == ["Error adding metadata of type CatalogIDDigital"]


def test_invalid_number_format_is_reported(document):
    problems = MetadataGenerator([rule("CatalogIDDigital", "{process.id}", number_format="zz")]).generate(
        document, VariableReplacer(document, "5"))
    assert problems == ["Error adding metadata of type CatalogIDDigital"]
