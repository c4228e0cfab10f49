"""
Prompt templates for the advisor flows.

Both prompts ask for a single JSON object matching the schemas in
ai.advisor_schema; anything else is rejected by the caller.
"""

import json
from typing import Any, Dict, List

from .advisor_schema import SmartTaskInput

ASSIGNMENT_SYSTEM_PROMPT = """You are an assistant that suggests the most suitable staff member for a task.

Consider the task requirements, its priority and due date, each staff member's
current workload (number of open tasks) and availability.
Only suggest a staff member that appears in the workload map, using the exact key.

Respond with ONLY a JSON object:
{"suggestedStaff": "<exact staff key>", "reasoning": "<short explanation in markdown>"}"""


EXTRACTION_SYSTEM_PROMPT = """You are an expert data extraction specialist.
Extract information from the provided invoice image.

Fields:
- invoiceNumber: the invoice identifier (labels like "Invoice No.")
- customerName: the person or company billed (text under "Bill To" or "Ship To")
- date: the invoice date ("Invoice Date")
- aadhaarNumber: the customer's Aadhaar number, if present
- items: every line item with name, quantity, price (unit price) and total

If a field is not present, leave it empty. Respond with ONLY a JSON object:
{"invoiceNumber": "", "customerName": "", "date": "", "aadhaarNumber": "",
 "items": [{"name": "", "quantity": 0, "price": 0, "total": 0}]}"""


def build_assignment_messages(request: SmartTaskInput) -> List[Dict[str, Any]]:
    payload = request.model_dump(by_alias=True, mode="json")
    return [
        {"role": "system", "content": ASSIGNMENT_SYSTEM_PROMPT},
        {"role": "user", "content": json.dumps(payload, ensure_ascii=False, indent=2)},
    ]


def build_extraction_messages(data_uri: str) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "Extract the invoice fields from this document."},
                {"type": "image_url", "image_url": {"url": data_uri}},
            ],
        },
    ]
