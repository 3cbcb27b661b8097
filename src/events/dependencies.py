from fastapi import Depends

from src.events.repository.event_store import EventStore, SqlEventStore
from src.events.repository.read_models import EventReadModel, StoreEventReadModel


def get_event_store() -> EventStore:
    """Factory for the event store. Override in tests."""
    return SqlEventStore()


def get_event_read_model(event_store: EventStore = Depends(get_event_store)) -> EventReadModel:
    return StoreEventReadModel(event_store)
