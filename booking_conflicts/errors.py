"""Exceptions raised by the conflict engine.

A slot that cannot be booked is never an exception; it is reported as a
``ConflictEntry``. These types cover genuine faults only.
"""


class BookingConflictError(Exception):
    """Base class for all engine faults."""


class StoreError(BookingConflictError):
    """A read against the booking store failed."""


class StoreUnavailableError(StoreError):
    """The booking store could not be reached."""


class EntityNotFoundError(StoreError):
    """A referenced vehicle or service type does not exist in the store."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id!r} not found")
