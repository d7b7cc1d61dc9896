"""Default section taxonomy for insurance explanation-of-benefits statements.

Order matters: the grouper assigns an element to the first entry whose
keyword score clears the threshold.
"""

import json
from pathlib import Path

from .models import TaxonomyEntry

DEFAULT_TAXONOMY: list[TaxonomyEntry] = [
    TaxonomyEntry(
        key="whatIsThis",
        display_name="1. What This Document Is",
        color="#ff6b6b",
        keywords=[
            "explanation of benefits", "eob", "this is not a bill", "not a bill",
            "explains how your insurance", "document explains", "insurance handled",
            "medical visit", "service",
        ],
    ),
    TaxonomyEntry(
        key="patientMemberInfo",
        display_name="2. Patient and Member Information",
        color="#4ecdc4",
        keywords=[
            "member name", "patient name", "address", "city", "state", "zip",
            "group", "group number", "subscriber number", "member id",
            "patient id", "date received", "statement date", "document number",
        ],
    ),
    TaxonomyEntry(
        key="serviceDescription",
        display_name="3. Service Description",
        color="#45b7d1",
        keywords=[
            "service description", "medical service", "doctor visit", "blood test",
            "physical therapy", "medical care", "service", "procedure", "treatment",
            "date of service", "line no",
        ],
    ),
    TaxonomyEntry(
        key="totalCharges",
        display_name="4. Total Charges",
        color="#f39c12",
        keywords=[
            "total charges", "provider charges", "total claim cost", "billed amount",
            "charges", "total", "provider billed", "amount charged",
        ],
    ),
    TaxonomyEntry(
        key="discountsAdjustments",
        display_name="5. Discounts / Adjustments",
        color="#9b59b6",
        keywords=[
            "discounts", "adjustments", "not your responsibility",
            "insurance adjustment", "plan discount", "contractual adjustment",
            "write-off", "adjustment",
        ],
    ),
    TaxonomyEntry(
        key="insurancePayment",
        display_name="6. Insurance Payment (Paid by Plan)",
        color="#27ae60",
        keywords=[
            "paid by insurer", "insurance payment", "paid by plan", "plan payment",
            "insurance covered", "allowed charges", "plan paid", "insurer paid",
        ],
    ),
    TaxonomyEntry(
        key="yourResponsibility",
        display_name="7. Your Responsibility (What You Owe)",
        color="#e74c3c",
        keywords=[
            "what you owe", "your responsibility", "deductible", "copay", "co-pay",
            "coinsurance", "co-insurance", "out of pocket", "patient responsibility",
            "you owe", "amount due",
        ],
    ),
    TaxonomyEntry(
        key="remarkCodes",
        display_name="8. Remark Codes or Notes",
        color="#f39c12",
        keywords=[
            "remark code", "remark codes", "notes", "special rules", "not covered",
            "denial", "explanation", "code", "remark", "reason", "why",
        ],
    ),
    TaxonomyEntry(
        key="whatToDoNext",
        display_name="9. What To Do Next",
        color="#34495e",
        keywords=[
            "what to do next", "next steps", "call your insurance", "contact",
            "appeals", "dispute", "questions", "customer service", "phone number",
            "appeal process", "disagreement",
        ],
    ),
]


def load_taxonomy(file_path: str | Path) -> list[TaxonomyEntry]:
    """Load an ordered taxonomy from a JSON file.

    The file holds a list of objects with ``key``, ``display_name``,
    optional ``color`` and ``keywords``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a non-empty list or has duplicate keys.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Taxonomy file not found: {file_path}")

    raw = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(raw, list) or not raw:
        raise ValueError("taxonomy file must contain a non-empty JSON list")

    entries = [TaxonomyEntry.model_validate(item) for item in raw]
    keys = [e.key for e in entries]
    if len(set(keys)) != len(keys):
        raise ValueError("taxonomy keys must be unique")
    return entries
