"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Input is malformed or outside the valid range (bad date, negative magnitude, empty month)"""

    pass


class StateStoreError(DomainException):
    """Balance state storage is unavailable or failed to read/write"""

    pass


class WebhookDeliveryError(DomainException):
    """Risk event could not be delivered to the configured webhook"""

    pass
