"""Shared test fixtures for template extractor tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def invoice_text() -> str:
    return "Dear John Smith, your invoice #4521 is due on 5 March, 2024."


@pytest.fixture
def letter_text() -> str:
    """Multi-line document with several template values."""
    return (
        "ACME Corporation\n"
        "12 Baker Street, London NW1 6XE\n"
        "\n"
        "Dear Jane Doe,\n"
        "\n"
        "Thank you for your order of $1,250.00 placed on 14 February, 2024.\n"
        "Please contact us at billing@acme.example or +44 20 7946 0958 with any questions.\n"
        "\n"
        "Kind regards,\n"
        "Peter Brown\n"
    )


@pytest.fixture
def invoice_fields_json() -> str:
    """Mock model answer for the invoice document."""
    return json.dumps([
        {
            "fieldName": "Customer Name",
            "currentValue": "John Smith",
            "fieldType": "name",
            "position": "5",
        },
        {
            "fieldName": "Invoice Number",
            "currentValue": "#4521",
            "fieldType": "identifier",
            "position": 30,
            "validationRules": ["must start with #"],
        },
        {
            "fieldName": "Due Date",
            "currentValue": "5 March, 2024",
            "fieldType": "Date",
            "position": "47",
            "dependencies": ["Invoice Number"],
            "format": "D Month, YYYY",
        },
    ])


@pytest.fixture
def mock_fenced_response(invoice_fields_json: str) -> str:
    """Mock model answer wrapped in a json code fence with preamble."""
    return f"Here are the template fields I found:\n\n```json\n{invoice_fields_json}\n```\n"


@pytest.fixture
def mock_prose_response() -> str:
    return "I could not find any fields that would change in this document."
