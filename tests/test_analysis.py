"""Tests for the analysis-result adapter and PDF page geometry."""

import pytest
from pydantic import ValidationError

from pdf_walkthrough.presentation.analysis import (
    AnalysisResult,
    InvalidAnalysisResultError,
    apply_origin,
    extract_elements,
    flip_region_origin,
    page_dimensions,
    validate_analysis_result,
)
from pdf_walkthrough.presentation.coordinates import normalize
from pdf_walkthrough.presentation.models import (
    BoundingRegion,
    PageDimensions,
    ParagraphElement,
    Viewport,
)
from pdf_walkthrough.presentation.pdf_pages import read_page_dimensions

LETTER = PageDimensions(page_number=1, width=612, height=792)


class TestBoundingRegion:
    """Tests for polygon coercion."""

    def test_flat_polygon_is_paired(self):
        region = BoundingRegion(polygon=[1, 2, 3, 4, 5, 6, 7, 8])

        assert [(p.x, p.y) for p in region.polygon] == [(1, 2), (3, 4), (5, 6), (7, 8)]

    def test_point_objects_accepted(self):
        region = BoundingRegion(polygon=[{"x": 1, "y": 2}, {"x": 3, "y": 4}])

        assert len(region.polygon) == 2

    def test_odd_flat_polygon_rejected(self):
        with pytest.raises(ValidationError):
            BoundingRegion(polygon=[1, 2, 3])


class TestValidateAnalysisResult:
    """Tests for the caller-side precondition."""

    def test_empty_result_rejected(self):
        with pytest.raises(InvalidAnalysisResultError, match="no pages"):
            validate_analysis_result(AnalysisResult())

    def test_pages_without_content_rejected(self):
        result = AnalysisResult.model_validate({"pages": [{"pageNumber": 1}]})

        with pytest.raises(InvalidAnalysisResultError, match="no structured data"):
            validate_analysis_result(result)

    def test_is_a_value_error(self):
        assert issubclass(InvalidAnalysisResultError, ValueError)

    def test_valid_result_passes(self, eob_analysis):
        validate_analysis_result(AnalysisResult.model_validate(eob_analysis))


class TestPageDimensions:
    """Tests for page size conversion to points."""

    def test_inch_pages_converted(self, eob_analysis):
        pages = page_dimensions(AnalysisResult.model_validate(eob_analysis))

        assert pages == [PageDimensions(page_number=1, width=612, height=792)]

    def test_point_sized_pages_kept(self):
        result = AnalysisResult.model_validate(
            {"pages": [{"pageNumber": 1, "width": 612, "height": 792}]}
        )

        assert page_dimensions(result)[0].width == 612

    def test_bare_small_size_treated_as_inches(self):
        result = AnalysisResult.model_validate(
            {"pages": [{"pageNumber": 1, "width": 8.5, "height": 11}]}
        )

        assert page_dimensions(result)[0].height == pytest.approx(792)

    def test_pages_without_size_skipped(self):
        result = AnalysisResult.model_validate(
            {"pages": [{"pageNumber": 1}, {"pageNumber": 2, "width": 612, "height": 792}]}
        )

        assert [p.page_number for p in page_dimensions(result)] == [2]


class TestExtractElements:
    """Tests for flattening an analysis result into elements."""

    def test_element_ids_and_kinds(self, eob_analysis):
        elements = extract_elements(AnalysisResult.model_validate(eob_analysis))

        assert [(e.element_id, e.kind) for e in elements] == [
            ("paragraph-0", "paragraph"),
            ("paragraph-1", "paragraph"),
            ("paragraph-2", "paragraph"),
            ("paragraph-3", "paragraph"),
            ("paragraph-4", "paragraph"),
            ("table-0", "table"),
            ("table-0-cell-0", "tableCell"),
            ("table-0-cell-1", "tableCell"),
            ("kvp-0", "keyValuePair"),
        ]

    def test_ids_are_stable(self, eob_analysis):
        result = AnalysisResult.model_validate(eob_analysis)

        first = [e.element_id for e in extract_elements(result)]
        second = [e.element_id for e in extract_elements(result)]

        assert first == second

    def test_table_text_is_row_major(self, eob_analysis):
        elements = extract_elements(AnalysisResult.model_validate(eob_analysis))
        table = next(e for e in elements if e.element_id == "table-0")

        assert table.text == "Service Office Visit"
        assert (table.row_count, table.column_count) == (2, 2)

    def test_regions_carry_page_unit(self, eob_analysis):
        elements = extract_elements(AnalysisResult.model_validate(eob_analysis))

        assert elements[0].primary_region.unit == "inches"
        assert elements[0].role == "title"

    def test_key_value_pair_encloses_key_and_value(self, eob_analysis):
        elements = extract_elements(AnalysisResult.model_validate(eob_analysis))
        kvp = next(e for e in elements if e.element_id == "kvp-0")

        assert kvp.text == "Claim Number CLM-0001"
        assert (kvp.key, kvp.value) == ("Claim Number", "CLM-0001")
        assert kvp.confidence == pytest.approx(0.92)

        xs = [p.x for p in kvp.primary_region.polygon]
        ys = [p.y for p in kvp.primary_region.polygon]
        assert (min(xs), max(xs)) == (5, 8)
        assert (min(ys), max(ys)) == (1.5, 1.8)

    def test_plain_string_key_value(self):
        result = AnalysisResult.model_validate(
            {
                "pages": [{"pageNumber": 1, "width": 612, "height": 792}],
                "keyValuePairs": [{"key": "Group", "value": None}],
            }
        )

        kvp = extract_elements(result)[0]

        assert kvp.text == "Group"
        assert kvp.regions == []

    def test_invalid_polygon_dropped(self):
        result = AnalysisResult.model_validate(
            {
                "pages": [{"pageNumber": 1, "width": 612, "height": 792}],
                "paragraphs": [
                    {
                        "content": "Broken",
                        "boundingRegions": [{"pageNumber": 1, "polygon": [1, 2, 3]}],
                    }
                ],
            }
        )

        assert extract_elements(result)[0].regions == []


    def test_pixel_page_regions_keep_page_space(self):
        result = AnalysisResult.model_validate(
            {
                "pages": [{"pageNumber": 1, "width": 1700, "height": 2200, "unit": "pixel"}],
                "paragraphs": [
                    {
                        "content": "Member Name",
                        "boundingRegions": [
                            {"pageNumber": 1, "polygon": [100, 100, 400, 100, 400, 140, 100, 140]}
                        ],
                    }
                ],
            }
        )

        page = page_dimensions(result)[0]
        region = extract_elements(result)[0].primary_region
        box = normalize(region, page, Viewport(width=5000, height=5000))

        assert (page.width, page.height) == (1700, 2200)
        assert region.unit == "points"
        assert (box.x, box.y, box.width, box.height) == (100, 100, 300, 40)

class TestOrigin:
    """Tests for bottom-left origin conversion."""

    def test_flip_point_region(self):
        region = BoundingRegion(
            polygon=[100, 100, 200, 100, 200, 150, 100, 150], unit="points"
        )

        flipped = flip_region_origin(region, LETTER)
        box = normalize(flipped, LETTER, Viewport(width=1920, height=1080))

        assert box.y == pytest.approx(642)
        assert box.height == pytest.approx(50)

    def test_flip_pins_detected_unit(self):
        region = BoundingRegion(polygon=[0, 0.1, 1, 0.1, 1, 0.2, 0, 0.2])

        flipped = flip_region_origin(region, LETTER)

        assert flipped.unit == "normalized"
        assert sorted({p.y for p in flipped.polygon}) == pytest.approx([0.8, 0.9])

    def test_top_left_is_unchanged(self):
        elements = [ParagraphElement(element_id="p", text="x")]

        assert apply_origin(elements, [LETTER], "top-left") is elements

    def test_unknown_origin_rejected(self):
        with pytest.raises(ValueError, match="unknown origin"):
            apply_origin([], [LETTER], "center")


class TestReadPageDimensions:
    """Tests for reading page geometry with PyMuPDF."""

    def test_reads_each_page(self, letter_pdf_path):
        pages = read_page_dimensions(letter_pdf_path)

        assert [(p.page_number, p.width, p.height) for p in pages] == [
            (1, 612, 792),
            (2, 842, 595),
        ]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_page_dimensions(tmp_path / "missing.pdf")
