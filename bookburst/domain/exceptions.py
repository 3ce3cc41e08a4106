"""Domain exceptions raised by services and translated by the API layer."""


class DomainError(Exception):
    """Base class for BookBurst domain errors."""


class InvalidOperation(DomainError):
    """The caller asked for something that can never succeed (e.g. self-follow)."""


class NotFoundError(DomainError):
    """A referenced user, book, or shelf entry does not exist."""


class DuplicateEntryError(DomainError):
    """The book is already on the user's shelf."""
