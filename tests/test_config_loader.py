import pytest

from luxexport.config.settings import Config, ConfigurationError, StorageConfig, VocabularyServiceConfig
from luxexport.config_loader import load_export_settings, load_ruleset, parse_export_settings

EXPORT_YAML = """
cleanupPagination: true
exportUnpublishedRecords: false
addEventLocationFromAgent: true
vocabularyBaseUrl: https://vocabulary.example.org/api/v1/records
metadata:
  - type: CatalogIDDigital
    force: true
    rule: "lux_{process.id}"
    numberFormat: "05d"
  - type: Incomplete
vocabulary:
  - metadataGroupType: Bibliography
    vocabularyId: 4
    recordIdentifierMetadata: VocabularyId
    enrich:
      - metadataType: Name
        vocabularyField: Title
  - metadataGroupType: Media
    recordIdentifierMetadata: VocabularyId
fileGroups:
  - name: PRESENTATION
    path: "https://viewer.example.org/{process.title}/"
    mimetype: image/jpeg
    suffix: jpg
    useOriginalFiles: true
  - name: PDF
    folder: pdf
"""

RULESET_YAML = """
metadataTypes: [Published, physPageNumber, logicalPageNumber, Name]
structureTypes:
  Person: [Published, Name]
groupTypes:
  Relationship: [Name]
"""


def test_export_settings_are_parsed(tmp_path):
    path = tmp_path / "export.yml"
    path.write_text(EXPORT_YAML, encoding="utf-8")

    settings = load_export_settings(path)

    assert settings.cleanup_pagination
    assert not settings.export_unpublished_records
    assert settings.add_event_location_from_agent
    assert settings.vocabulary_base_url == "https://vocabulary.example.org/api/v1/records"
    assert [rule.metadata_type for rule in settings.metadata_rules] == ["CatalogIDDigital"]
    assert settings.metadata_rules[0].force_creation
    assert settings.metadata_rules[0].number_format == "05d"
    assert [config.group_type for config in settings.vocabulary_configs] == ["Bibliography"]
    enrichment = settings.vocabulary_configs[0].enrichments[0]
    assert (enrichment.vocabulary_field_label, enrichment.target_metadata_type) == ("Title", "Name")
    assert [group.name for group in settings.file_groups] == ["PRESENTATION", "PDF"]
    assert settings.file_groups[0].use_original_files
    assert settings.file_groups[1].folder == "pdf"


def test_incomplete_rules_are_dropped_with_warning(caplog):
    settings = parse_export_settings({"metadata": [{"type": "X"}], "vocabulary": [{"vocabularyId": 1}]})
    assert settings.metadata_rules == []
    assert settings.vocabulary_configs == []
    assert "Skipping incomplete metadata rule" in caplog.text
    assert "Skipping incomplete vocabulary rule" in caplog.text


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    settings = load_export_settings(path)
    assert not settings.cleanup_pagination
    assert settings.metadata_rules == []


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_export_settings(tmp_path / "missing.yml")


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("metadata: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_export_settings(path)


def test_invalid_flag_raises():
    with pytest.raises(ConfigurationError):
        parse_export_settings({"cleanupPagination": "maybe"})


def test_ruleset_is_loaded(tmp_path):
    path = tmp_path / "ruleset.yml"
    path.write_text(RULESET_YAML, encoding="utf-8")

    ruleset = load_ruleset(path)

    assert ruleset.has_metadata_type("Name")
    assert not ruleset.has_metadata_type("Unknown")
    assert ruleset.structure_types == {"Person": {"Published", "Name"}}
    assert ruleset.group_types == {"Relationship": {"Name"}}


@pytest.mark.parametrize("content", ["- Name\n- Type\n", "just text\n"])
def test_ruleset_must_be_a_mapping(tmp_path, content):
    path = tmp_path / "ruleset.yml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_ruleset(path)


def test_environment_config(monkeypatch):
    monkeypatch.setenv("LUXEXPORT_VOCABULARY_API_URL", "https://vocabulary.example.org/api/v1")
    monkeypatch.setenv("LUXEXPORT_VOCABULARY_TIMEOUT", "5")
    monkeypatch.setenv("LUXEXPORT_METADATA_FOLDER", "/data/metadata")
    monkeypatch.setenv("LUXEXPORT_RULESET", "/data/ruleset.yml")

    config = Config()

    assert config.vocabulary.timeout == 5.0
    assert config.storage.metadata_folder == "/data/metadata"
    assert config.get_summary()["ruleset"] == "/data/ruleset.yml"
    client = config.create_vocabulary_client()
    assert client.api_url == "https://vocabulary.example.org/api/v1"
    client.close()


def test_missing_vocabulary_url_raises(monkeypatch):
    monkeypatch.delenv("LUXEXPORT_VOCABULARY_API_URL", raising=False)
    config = Config()
    with pytest.raises(ConfigurationError, match="LUXEXPORT_VOCABULARY_API_URL"):
        config.create_vocabulary_client()


def test_invalid_environment_raises(monkeypatch):
    monkeypatch.setenv("LUXEXPORT_VOCABULARY_API_URL", "vocabulary.example.org")
    with pytest.raises(ConfigurationError):
        Config()


def test_missing_env_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        Config(env_file=tmp_path / ".env.missing")


def test_section_validation():
    with pytest.raises(ValueError):
        VocabularyServiceConfig(api_url="https://x", timeout=0)
    with pytest.raises(ValueError):
        StorageConfig(ruleset_path="ruleset.xml")
