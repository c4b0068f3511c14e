"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class OrderNotFoundError(DomainException):
    """Order does not exist in order storage"""

    pass


class InvalidOrderError(DomainException):
    """Order exists but its total is missing or unreadable"""

    pass


class OrderStorageError(DomainException):
    """Order storage could not be read or written"""

    pass


class InvalidPayloadError(DomainException):
    """BR Code payload does not follow the TLV grammar"""

    pass


class PaymentProviderError(DomainException):
    """Payment provider failed during one stage of a dynamic charge"""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
