"""AI Module for the Groq-backed advisor flows.

Both flows delegate all reasoning to the model and only validate the shape
of what comes back. They never touch the document store.
"""

from .invoice_extraction import extract_invoice_data, parse_data_uri
from .smart_assignment import build_staff_snapshot, resolve_suggestion, suggest_assignee

__all__ = [
    "extract_invoice_data",
    "parse_data_uri",
    "build_staff_snapshot",
    "resolve_suggestion",
    "suggest_assignee",
]
