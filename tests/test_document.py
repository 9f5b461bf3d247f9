import pytest

from conftest import build_document, group
from luxexport.document import ContentFile, Document, Metadata, MetadataGroup, Ruleset


def test_references_are_mirrored():
    document = build_document(["a.jpg", "b.jpg"])
    page = document.children(document.physical_id)[0]

    assert [ref.target for ref in document.references_to("LOG_ROOT")] == ["PHYS_0001", "PHYS_0002"]
    assert [ref.source for ref in document.references_from(page.id)] == ["LOG_ROOT"]


def test_detach_node_removes_inbound_references_on_both_sides():
    document = build_document(["a.jpg", "b.jpg"])
    document.add_reference("PHYS_0002", "PHYS_0001", "sibling")

    document.detach_node("PHYS_0001")

    assert [ref.target for ref in document.references_to("LOG_ROOT")] == ["PHYS_0002"]
    assert document.references_from("PHYS_0001") == []
    assert document.references_to("PHYS_0002") == []
    assert [child.id for child in document.children("PHYS_ROOT")] == ["PHYS_0002"]
    assert document.parent("PHYS_0001") is None


def test_add_child_rejects_second_parent():
    document = build_document(["a.jpg"])
    with pytest.raises(ValueError):
        document.add_child("LOG_ROOT", "PHYS_0001")


def test_create_node_rejects_duplicate_id():
    document = Document()
    document.create_node("page", "P1")
    with pytest.raises(ValueError):
        document.create_node("page", "P1")


def test_image_name_is_final_segment():
    document = build_document(["scan 01.tif"])
    page = document.node("PHYS_0001")
    assert document.image_name(page) == "scan 01.tif"
    assert document.image_name(document.logical) is None


def test_remove_content_file_clears_page_link():
    document = build_document(["a.jpg"])
    page = document.node("PHYS_0001")
    document.remove_content_file(document.content_file_of(page))
    assert len(document.file_set) == 0
    assert page.content_file is None


def test_new_content_file_ids_do_not_collide():
    document = build_document(["a.jpg"])
    document.file_set.add(ContentFile(id="FILE_0002"))
    content_file = document.new_content_file("file:///x.jpg")
    assert document.file_set.get(content_file.id) is None


def test_add_metadata_reports_unknown_type():
    document = build_document()
    result = document.add_metadata(document.logical, Metadata("NotInRuleset", "x"))
    assert not result.attached
    assert result.reason == "unknown metadata type"
    assert "NotInRuleset" in result.describe()
    assert document.logical.metadata_by_type("NotInRuleset") == []


def test_add_metadata_respects_container_restrictions():
    ruleset = Ruleset({"Name", "Type"}, structure_types={"Person": {"Name"}}, group_types={"Relationship": {"Type"}})
    document = build_document(published=None, ruleset=ruleset)
    relationship = MetadataGroup("Relationship")

    assert document.add_metadata(document.logical, Metadata("Name", "Ada")).attached
    rejected = document.add_metadata(document.logical, Metadata("Type", "x"))
    assert not rejected.attached
    assert rejected.reason == "type not allowed for structure 'Person'"
    assert document.add_metadata(relationship, Metadata("Type", "x")).attached
    assert not document.add_metadata(relationship, Metadata("Name", "x")).attached


def test_find_groups_searches_every_depth():
    inner = group("Source", ("Name", "deep"))
    outer = group("Bibliography", groups=[group("Container", groups=[inner]), group("Source")])
    assert len(outer.find_groups("Source")) == 2
    assert len(outer.groups_by_type("Source")) == 1


def test_add_metadata_group_attaches_a_copy():
    document = build_document()
    location = group("LocationGroup", ("Location", "Luxembourg"))
    attached = document.add_metadata_group(document.logical, location)
    attached.metadata[0].value = "Paris"
    assert location.metadata[0].value == "Luxembourg"
