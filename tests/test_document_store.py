import json

import pytest

from conftest import build_document, group
from luxexport.document import Metadata
from luxexport.document_store import JsonDocumentStore, document_from_dict, document_to_dict
from luxexport.types import DocumentReadError


def test_write_then_read_keeps_structure(tmp_path, ruleset):
    document = build_document(["a.jpg", "b.jpg"], ruleset=ruleset)
    document.logical.groups.append(group("Relationship", ("Type", "organized"), groups=[group("Source")]))
    document.logical.metadata.append(Metadata("Location", "Lux", "geonames", "http://www.geonames.org/",
                                              "http://www.geonames.org/1"))
    store = JsonDocumentStore(tmp_path, ruleset)

    path = store.write(document, "1234")
    restored = store.read("1234")

    assert path == tmp_path / "1234" / "meta.json"
    assert restored.ruleset is ruleset
    assert [page.id for page in restored.children(restored.physical_id)] == ["PHYS_0001", "PHYS_0002"]
    assert [ref.target for ref in restored.references_to("LOG_ROOT")] == ["PHYS_0001", "PHYS_0002"]
    assert restored.image_name(restored.node("PHYS_0002")) == "b.jpg"
    assert restored.logical.groups[0].groups[0].type == "Source"
    location = restored.logical.metadata_by_type("Location")[0]
    assert location.authority_value == "http://www.geonames.org/1"


def test_json_layout(ruleset):
    payload = document_to_dict(build_document(["a.jpg"], ruleset=ruleset))
    assert set(payload) == {"logical", "physical", "files", "references"}
    assert payload["physical"]["children"][0]["contentFile"] == "FILE_0001"
    assert payload["references"] == [{"source": "LOG_ROOT", "target": "PHYS_0001", "type": "logical_physical"}]
    assert payload["logical"]["metadata"] == [{"type": "Published", "value": "Y"}]


def test_explicit_json_path_is_used(tmp_path):
    store = JsonDocumentStore(tmp_path / "root")
    target = tmp_path / "out" / "record.json"
    assert store.write(build_document(), str(target)) == target
    assert target.exists()


def test_missing_descriptor_raises(tmp_path):
    with pytest.raises(DocumentReadError, match="Cannot read metadata file"):
        JsonDocumentStore(tmp_path).read("missing")


def test_invalid_json_raises(tmp_path):
    (tmp_path / "1").mkdir()
    (tmp_path / "1" / "meta.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DocumentReadError):
        JsonDocumentStore(tmp_path).read("1")


@pytest.mark.parametrize("content", ["[]", "42", "\"text\""])
def test_non_object_descriptor_raises(tmp_path, content):
    (tmp_path / "1").mkdir()
    (tmp_path / "1" / "meta.json").write_text(content, encoding="utf-8")
    with pytest.raises(DocumentReadError, match="not an object"):
        JsonDocumentStore(tmp_path).read("1")


def test_dangling_reference_is_rejected(tmp_path):
    payload = document_to_dict(build_document(["a.jpg"]))
    payload["references"].append({"source": "LOG_ROOT", "target": "PHYS_9999", "type": "logical_physical"})
    (tmp_path / "1").mkdir()
    (tmp_path / "1" / "meta.json").write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(DocumentReadError, match="invalid descriptor"):
        JsonDocumentStore(tmp_path).read("1")


def test_document_from_dict_without_physical():
    document = document_from_dict({"logical": {"id": "L", "type": "Event"}})
    assert document.logical.type == "Event"
    assert document.physical is None
