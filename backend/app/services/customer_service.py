"""Customer records. Deleting a customer never touches their invoices."""
import logging
from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import ValidationFailed
from app.schemas.customer import SEARCHABLE_FIELDS, Customer, CustomerCreate, CustomerUpdate
from app.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

CUSTOMERS = "customers"


def next_avatar(existing_count: int) -> str:
    return f"avatar-{(existing_count % settings.AVATAR_POOL_SIZE) + 1}"


def create_customer(store: EntityStore, data: CustomerCreate) -> Customer:
    record = data.to_record()
    record["avatar"] = next_avatar(len(store.query(CUSTOMERS)))
    customer_id = store.create(CUSTOMERS, record)
    logger.info(f"Customer {customer_id} added")
    return Customer.model_validate(store.get(CUSTOMERS, customer_id))


def get_customer(store: EntityStore, customer_id: str) -> Customer:
    return Customer.model_validate(store.get(CUSTOMERS, customer_id))


def update_customer(store: EntityStore, customer_id: str, data: CustomerUpdate) -> Customer:
    changes = data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("Nothing to update")
    store.update(CUSTOMERS, customer_id, changes, merge=True)
    return get_customer(store, customer_id)


def delete_customer(store: EntityStore, customer_id: str) -> bool:
    # Invoices keep their customerId; orphaned references are tolerated
    return store.delete(CUSTOMERS, customer_id)


def list_customers(store: EntityStore, search: Optional[str] = None, search_by: str = "name") -> List[Customer]:
    if search_by not in SEARCHABLE_FIELDS:
        raise ValidationFailed(f"Cannot search customers by '{search_by}'")
    predicate = None
    if search:
        needle = search.strip().lower()
        predicate = lambda r: needle in str(r.get(search_by) or "").lower()  # noqa: E731
    return [Customer.model_validate(r) for r in store.query(CUSTOMERS, predicate)]


def find_customer_by_name(store: EntityStore, name: str) -> Optional[Customer]:
    """Case-insensitive exact name match; first match wins when names collide."""
    wanted = " ".join(name.split()).lower()
    for record in store.query(CUSTOMERS):
        if " ".join(str(record.get("name") or "").split()).lower() == wanted:
            return Customer.model_validate(record)
    return None
