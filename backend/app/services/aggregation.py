"""
Per-customer services view.

A customer's "services" are all line items across all of that customer's
invoices, each tagged with its invoice id/number and its slot index so an
edit can be addressed back through the status protocol. The view is derived
from the invoice collection on every change and never stored.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from app.schemas.invoice import ServiceLine
from app.services.status_service import current_status
from app.store.entity_store import EntityStore, Subscription

logger = logging.getLogger(__name__)


def services_for_customer(customer_id: str, invoices: Iterable[Dict[str, Any]]) -> List[ServiceLine]:
    """Flatten items of the customer's invoices, keeping invoice order then item order."""
    services: List[ServiceLine] = []
    for invoice in invoices:
        if invoice.get("customerId") != customer_id:
            continue
        for index, item in enumerate(invoice.get("items") or []):
            line = ServiceLine.model_validate(
                {
                    **item,
                    "invoiceId": invoice["id"],
                    "invoiceNumber": invoice.get("invoiceNumber"),
                    "originalIndex": index,
                }
            )
            # Older items carry history without the mirrored fields
            line.status, line.processed_date = current_status(line)
            services.append(line)
    return services


class CustomerServicesView:
    """
    Live services list for one customer.

    Subscribes to the invoices collection and recomputes services on every
    store notification or customer switch. Call close() when done.
    """

    def __init__(self, store: EntityStore, customer_id: str):
        self._customer_id = customer_id
        self._invoices: List[Dict[str, Any]] = []
        self.services: List[ServiceLine] = []
        self._subscription: Optional[Subscription] = store.watch("invoices", self._on_invoices)

    @property
    def customer_id(self) -> str:
        return self._customer_id

    def _recompute(self) -> None:
        self.services = services_for_customer(self._customer_id, self._invoices)

    def _on_invoices(self, invoices: List[Dict[str, Any]]) -> None:
        self._invoices = invoices
        self._recompute()
        logger.debug(f"Services for customer {self._customer_id}: {len(self.services)} items")

    def set_customer(self, customer_id: str) -> None:
        self._customer_id = customer_id
        self._recompute()

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
