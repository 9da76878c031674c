"""Custom exceptions for the Kanban store."""


class StoreError(Exception):
    """Base exception for store errors."""


class NotFoundError(StoreError):
    """Entity with given ID does not exist."""


class BoardNotFoundError(NotFoundError):
    """Board with given ID does not exist."""


class ColumnNotFoundError(NotFoundError):
    """Column with given ID does not exist."""


class CardNotFoundError(NotFoundError):
    """Card with given ID does not exist."""


class BoardExistsError(StoreError):
    """Board with given name already exists."""


class ColumnExistsError(StoreError):
    """Column with given name already exists on the board."""


class OrderError(StoreError):
    """Requested order is not a permutation of the current order."""


class ValidationError(StoreError):
    """Entity values violate a model constraint."""
