from app.store.entity_store import (
    COLLECTIONS,
    DocumentSnapshot,
    EntityStore,
    Subscription,
)

__all__ = ["COLLECTIONS", "DocumentSnapshot", "EntityStore", "Subscription"]
