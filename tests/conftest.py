"""Shared fixtures: an analysed explanation-of-benefits page and its narration."""

from pathlib import Path

import fitz  # PyMuPDF
import pytest


def inch_box(x0: float, y0: float, x1: float, y1: float) -> list[float]:
    """Flat clockwise polygon for an axis-aligned rectangle."""
    return [x0, y0, x1, y0, x1, y1, x0, y1]


@pytest.fixture
def eob_analysis() -> dict:
    """Analysis result for a US Letter EOB page, coordinates in inches."""
    return {
        "pages": [{"pageNumber": 1, "width": 8.5, "height": 11, "unit": "inch"}],
        "paragraphs": [
            {
                "content": "Explanation of Benefits - This is not a bill",
                "role": "title",
                "boundingRegions": [
                    {"pageNumber": 1, "polygon": inch_box(0.5, 0.5, 8, 1)}
                ],
            },
            {
                "content": "Member Name: Jane Doe",
                "boundingRegions": [
                    {"pageNumber": 1, "polygon": inch_box(0.5, 1.5, 4, 1.8)}
                ],
            },
            {
                "content": "Member ID: ABC123456",
                "boundingRegions": [
                    {"pageNumber": 1, "polygon": inch_box(0.5, 1.9, 4, 2.2)}
                ],
            },
            {
                "content": "Amount you owe: $25.00",
                "boundingRegions": [
                    {"pageNumber": 1, "polygon": inch_box(0.5, 6, 4, 6.3)}
                ],
            },
            {
                "content": "Footer",
                "boundingRegions": [{"pageNumber": 1, "polygon": [1, 10, 2, 10.2]}],
            },
        ],
        "tables": [
            {
                "rowCount": 2,
                "columnCount": 2,
                "boundingRegions": [
                    {"pageNumber": 1, "polygon": inch_box(0.5, 3, 8, 5)}
                ],
                "cells": [
                    {
                        "rowIndex": 1,
                        "columnIndex": 0,
                        "content": "Office Visit",
                        "boundingRegions": [
                            {"pageNumber": 1, "polygon": inch_box(0.5, 4, 4, 5)}
                        ],
                    },
                    {
                        "rowIndex": 0,
                        "columnIndex": 0,
                        "content": "Service",
                        "boundingRegions": [
                            {"pageNumber": 1, "polygon": inch_box(0.5, 3, 4, 4)}
                        ],
                    },
                ],
            }
        ],
        "keyValuePairs": [
            {
                "key": {
                    "content": "Claim Number",
                    "boundingRegions": [
                        {"pageNumber": 1, "polygon": inch_box(5, 1.5, 6.5, 1.8)}
                    ],
                },
                "value": {
                    "content": "CLM-0001",
                    "boundingRegions": [
                        {"pageNumber": 1, "polygon": inch_box(6.6, 1.5, 8, 1.8)}
                    ],
                },
                "confidence": 0.92,
            }
        ],
    }


@pytest.fixture
def eob_steps() -> list[dict]:
    """Narration steps in the narration service's camelCase shape."""
    return [
        {
            "stepNumber": 1,
            "narrative": "This is your Explanation of Benefits.",
            "highlightText": "This is not a bill",
            "duration": 4.0,
        },
        {
            "stepNumber": 2,
            "narrative": "Here is who the claim is for.",
            "highlightText": "Member Name: Jane Doe",
            "duration": 3.0,
        },
        {
            "stepNumber": 3,
            "narrative": "This is what you owe.",
            "highlightText": "Amount you owe",
            "duration": 3.5,
        },
        {
            "stepNumber": 4,
            "narrative": "Drug coverage is listed separately.",
            "highlightText": "Prescription drug coverage tier",
            "duration": 2.0,
        },
    ]


@pytest.fixture(scope="module")
def letter_pdf_path(tmp_path_factory) -> Path:
    """Two-page PDF: US Letter portrait, then A4 landscape."""
    tmp_dir = tmp_path_factory.mktemp("pdfs")
    pdf_path = tmp_dir / "statement.pdf"

    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((72, 72), "Explanation of Benefits", fontsize=18)
    page2 = doc.new_page(width=842, height=595)
    page2.insert_text((72, 72), "Claim Details", fontsize=14)
    doc.save(pdf_path)
    doc.close()

    return pdf_path
