"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTransactionError(DomainException):
    """Transaction context is malformed and cannot be analyzed"""

    pass


class DependencyError(DomainException):
    """A collaborator the engine depends on failed"""

    pass


class IPReputationError(DependencyError):
    """IP reputation service returned an error or is unavailable"""

    pass


class StorageError(DependencyError):
    """Persistent store could not be read or written"""

    pass
