"""Tests for semantic section grouping."""

import pytest

from pdf_walkthrough.presentation.models import (
    CanonicalBox,
    KeyValuePairElement,
    ParagraphElement,
    TableElement,
    TaxonomyEntry,
)
from pdf_walkthrough.presentation.sections import (
    categorize,
    group,
    match_score,
    rendered_sections,
    section_statistics,
)
from pdf_walkthrough.presentation.taxonomy import DEFAULT_TAXONOMY

TAXONOMY = [
    TaxonomyEntry(key="member", display_name="Member", keywords=["member name", "member id"]),
    TaxonomyEntry(key="owed", display_name="What You Owe", keywords=["you owe", "amount"]),
    TaxonomyEntry(key="services", display_name="Services", keywords=["service"]),
]


def paragraph(element_id: str, text: str) -> ParagraphElement:
    return ParagraphElement(element_id=element_id, text=text)


def box_at(center_y: float, x: float = 100) -> CanonicalBox:
    return CanonicalBox(x=x, y=center_y - 5, width=200, height=10)


class TestMatchScore:
    """Tests for keyword scoring."""

    def test_fraction_of_keywords(self):
        assert match_score("Member Name: Jane", ["member name", "member id"]) == 0.5

    def test_case_insensitive(self):
        assert match_score("AMOUNT YOU OWE", ["you owe", "amount"]) == 1.0

    def test_empty_text(self):
        assert match_score("", ["anything"]) == 0.0


class TestCategorize:
    """Tests for single-element categorization."""

    def test_first_match_wins(self):
        element = paragraph("p", "Member Name and the amount you owe")

        assert categorize(element, TAXONOMY) == "member"

    def test_below_threshold_unassigned(self):
        element = paragraph("p", "Thank you for your business")

        assert categorize(element, TAXONOMY) is None

    def test_threshold_is_strict(self):
        element = paragraph("p", "member name")

        assert categorize(element, TAXONOMY, threshold=0.5) is None

    def test_table_routed_to_table_section(self):
        table = TableElement(element_id="t", text="Date Code Billed Paid")

        assert categorize(table, TAXONOMY, table_section_key="services") == "services"

    def test_table_scored_when_no_table_section(self):
        table = TableElement(element_id="t", text="Amount you owe 25.00")

        assert categorize(table, TAXONOMY, table_section_key="missing") == "owed"

    def test_key_value_pair(self):
        kvp = KeyValuePairElement(element_id="k", text="Member ID 123", key="Member ID", value="123")

        assert categorize(kvp, TAXONOMY) == "member"

    def test_default_taxonomy_title(self):
        element = paragraph("p", "Explanation of Benefits - This is not a bill")

        assert categorize(element, DEFAULT_TAXONOMY) == "whatIsThis"


class TestGroup:
    """Tests for grouping elements into sections."""

    @pytest.fixture
    def elements(self):
        return [
            paragraph("p0", "Member Name: Jane Doe"),
            paragraph("p1", "Member ID: 12345"),
            paragraph("p2", "Amount you owe: $25"),
            paragraph("p3", "Page 1 of 2"),
            paragraph("p4", "Member Name (dependent): Sam Doe"),
        ]

    @pytest.fixture
    def boxes(self):
        return {
            "p0": box_at(100),
            "p1": box_at(150),
            "p2": box_at(600),
            "p3": box_at(1000),
            "p4": box_at(400),
        }

    def test_every_key_present_in_order(self, elements, boxes):
        sections = group(elements, TAXONOMY, boxes, proximity_threshold=72)

        assert list(sections) == ["member", "owed", "services"]

    def test_membership(self, elements, boxes):
        sections = group(elements, TAXONOMY, boxes, proximity_threshold=72)

        assert [e.element_id for e in sections["member"].elements] == ["p0", "p1", "p4"]
        assert [e.element_id for e in sections["owed"].elements] == ["p2"]

    def test_empty_section(self, elements, boxes):
        services = group(elements, TAXONOMY, boxes, proximity_threshold=72)["services"]

        assert services.is_empty
        assert services.bounding_box is None
        assert services.sub_sections == []

    def test_bounding_box_is_union(self, elements, boxes):
        member = group(elements, TAXONOMY, boxes, proximity_threshold=72)["member"]

        assert member.bounding_box == CanonicalBox(x=100, y=95, width=200, height=310)

    def test_sub_sections_split_on_gap(self, elements, boxes):
        member = group(elements, TAXONOMY, boxes, proximity_threshold=72)["member"]

        assert [[e.element_id for e in s.elements] for s in member.sub_sections] == [
            ["p0", "p1"],
            ["p4"],
        ]

    def test_sub_sections_partition_section(self, elements, boxes):
        sections = group(elements, TAXONOMY, boxes, proximity_threshold=72)

        for section in sections.values():
            ids = [e.element_id for s in section.sub_sections for e in s.elements]
            assert sorted(ids) == sorted(e.element_id for e in section.elements)

    def test_gap_measured_to_previous_element(self):
        elements = [paragraph(f"p{i}", "Member Name") for i in range(4)]
        boxes = {f"p{i}": box_at(100 + i * 60) for i in range(4)}

        member = group(elements, TAXONOMY, boxes, proximity_threshold=72)["member"]

        assert len(member.sub_sections) == 1

    def test_elements_without_box_skipped(self, elements, boxes):
        del boxes["p1"]

        member = group(elements, TAXONOMY, boxes, proximity_threshold=72)["member"]

        assert "p1" not in [e.element_id for e in member.elements]

    def test_idempotent(self, elements, boxes):
        first = group(elements, TAXONOMY, boxes, proximity_threshold=72)
        second = group(elements, TAXONOMY, boxes, proximity_threshold=72)

        assert {k: s.model_dump() for k, s in first.items()} == {
            k: s.model_dump() for k, s in second.items()
        }

    def test_rendered_sections_hide_empty(self, elements, boxes):
        sections = group(elements, TAXONOMY, boxes, proximity_threshold=72)

        assert list(rendered_sections(sections)) == ["member", "owed"]

    def test_statistics(self, elements, boxes):
        stats = section_statistics(group(elements, TAXONOMY, boxes, proximity_threshold=72))

        assert stats["total_sections"] == 3
        assert stats["sections_with_elements"] == 2
        assert stats["total_elements"] == 4
        assert stats["section_breakdown"]["member"]["sub_section_count"] == 2
