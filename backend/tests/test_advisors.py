"""
Advisor flows with the Groq client faked out.

Covers:
1. Staff snapshot keys (including employees that share a name)
2. Response validation for smart assignment
3. Data URI checks and response validation for invoice extraction
"""
import base64
import json

import pytest

from app.core import config
from app.core.exceptions import AdvisorError, ExtractionFailed, InvalidResponseShape, ValidationFailed
from app.schemas.task import TaskPriority
from ai.advisor_schema import InvoiceExtraction, SmartTaskOutput
from ai.invoice_extraction import extract_invoice_data, parse_data_uri
from ai.output_parser import parse_and_validate, strip_code_fence
from ai.smart_assignment import (
    build_request,
    build_staff_snapshot,
    resolve_suggestion,
    suggest_assignee,
)

EMPLOYEES = [
    {"id": "e1", "name": "Ravi Kumar", "workload": 3, "availability": True, "skills": ["plumbing"]},
    {"id": "e2", "name": "Asha", "workload": 0, "availability": False},
    {"id": "e3", "name": "Asha", "workload": 1, "availability": True},
]

PNG_URI = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake image bytes").decode()


def _request(description="Fix the leaking kitchen sink", snapshot=None):
    return build_request(description, TaskPriority.HIGH, "2024-02-01", snapshot or build_staff_snapshot(EMPLOYEES))


# ------------------------------------------------------------------------------
# Smart assignment
# ------------------------------------------------------------------------------

def test_snapshot_keys_disambiguate_shared_names():
    snapshot = build_staff_snapshot(EMPLOYEES)

    assert snapshot.workload == {"Ravi Kumar": 3, "Asha (e2)": 0, "Asha (e3)": 1}
    assert snapshot.availability == {"Ravi Kumar": True, "Asha (e2)": False, "Asha (e3)": True}


def test_request_payload_has_no_skills():
    payload = _request().model_dump(by_alias=True)

    assert set(payload) == {"taskDescription", "priority", "dueDate", "staffWorkload", "staffAvailability"}
    assert "skills" not in json.dumps(payload, default=str)


def test_short_description_is_rejected():
    with pytest.raises(ValidationFailed):
        _request(description="fix")


def test_suggestion_is_parsed_and_resolved(fake_groq):
    fake_groq.complete_json.return_value = json.dumps(
        {"suggestedStaff": "Asha (e3)", "reasoning": "Available and lightly loaded."}
    )
    snapshot = build_staff_snapshot(EMPLOYEES)

    result = suggest_assignee(_request(snapshot=snapshot), client=fake_groq)

    assert result.suggested_staff == "Asha (e3)"
    assert resolve_suggestion(snapshot, result)["id"] == "e3"
    sent = fake_groq.complete_json.call_args.args[0]
    assert json.loads(sent[1]["content"])["staffWorkload"]["Ravi Kumar"] == 3


def test_suggestion_resolution_is_case_insensitive_but_never_guesses():
    snapshot = build_staff_snapshot(EMPLOYEES)

    ravi = resolve_suggestion(snapshot, SmartTaskOutput(suggested_staff="ravi kumar", reasoning="x"))
    nobody = resolve_suggestion(snapshot, SmartTaskOutput(suggested_staff="Asha", reasoning="x"))

    assert ravi["id"] == "e1"
    assert nobody is None


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "not json at all",
        json.dumps(["Ravi Kumar"]),
        json.dumps({"suggestedStaff": "Ravi Kumar"}),
        json.dumps({"suggestedStaff": "", "reasoning": "blank name"}),
        json.dumps({"staff": "Ravi Kumar", "why": "wrong keys"}),
    ],
)
def test_malformed_suggestion_raises_invalid_response_shape(fake_groq, raw):
    fake_groq.complete_json.return_value = raw

    with pytest.raises(InvalidResponseShape):
        suggest_assignee(_request(), client=fake_groq)


def test_unconfigured_client_raises_advisor_error(fake_groq):
    fake_groq.is_available.return_value = False

    with pytest.raises(AdvisorError):
        suggest_assignee(_request(), client=fake_groq)
    fake_groq.complete_json.assert_not_called()


def test_code_fence_is_stripped():
    fenced = '```json\n{"suggestedStaff": "Ravi Kumar", "reasoning": "ok"}\n```'

    assert strip_code_fence(fenced).startswith("{")
    assert parse_and_validate(fenced, SmartTaskOutput).suggested_staff == "Ravi Kumar"


# ------------------------------------------------------------------------------
# Invoice extraction
# ------------------------------------------------------------------------------

def test_data_uri_accepts_images_and_pdf():
    pdf_uri = "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4").decode()

    assert parse_data_uri(PNG_URI).mime_type == "image/png"
    assert parse_data_uri(pdf_uri).size == len(b"%PDF-1.4")


@pytest.mark.parametrize(
    "uri",
    [
        "https://example.com/invoice.png",
        "data:text/plain;base64," + base64.b64encode(b"hello").decode(),
        "data:image/png;base64,not*valid*base64",
        "data:image/png;base64,",
    ],
)
def test_bad_data_uri_is_rejected(uri):
    with pytest.raises(ValidationFailed):
        parse_data_uri(uri)


def test_oversized_upload_is_rejected(monkeypatch):
    monkeypatch.setattr(config.settings, "MAX_UPLOAD_BYTES", 4)

    with pytest.raises(ValidationFailed):
        parse_data_uri(PNG_URI)


def test_extraction_returns_validated_fields(fake_groq):
    fake_groq.complete_json.return_value = json.dumps(
        {
            "invoiceNumber": "INV-2024-17",
            "customerName": "Meena Traders",
            "date": "2024-01-05",
            "aadhaarNumber": "",
            "items": [{"name": "AC Service", "quantity": 1, "price": 800, "total": 800}],
        }
    )

    result = extract_invoice_data(PNG_URI, client=fake_groq)

    assert isinstance(result, InvoiceExtraction)
    assert result.customer_name == "Meena Traders"
    assert result.aadhaar_number is None
    assert result.items[0].total == 800
    _, kwargs = fake_groq.complete_json.call_args
    assert kwargs["model"] == config.settings.GROQ_VISION_MODEL
    user_parts = fake_groq.complete_json.call_args.args[0][1]["content"]
    assert user_parts[1]["image_url"]["url"] == PNG_URI


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "{broken",
        json.dumps({"invoiceNumber": "1", "date": "2024-01-05", "items": []}),
        json.dumps({"customerName": "X", "date": "2024-01-05", "items": [{"name": "A"}]}),
    ],
)
def test_unusable_extraction_raises_extraction_failed(fake_groq, raw):
    fake_groq.complete_json.return_value = raw

    with pytest.raises(ExtractionFailed):
        extract_invoice_data(PNG_URI, client=fake_groq)


def test_invalid_upload_never_reaches_the_model(fake_groq):
    with pytest.raises(ValidationFailed):
        extract_invoice_data("data:image/png;base64,", client=fake_groq)
    fake_groq.complete_json.assert_not_called()
