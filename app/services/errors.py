"""Domain errors raised by services and mapped to HTTP responses in main.py."""

from enum import Enum


class ErrorCode(Enum):
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_INACTIVE = "EVENT_INACTIVE"
    EVENT_IN_USE = "EVENT_IN_USE"
    NO_CURRENT_EVENT = "NO_CURRENT_EVENT"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    INVALID_REGISTRATION = "INVALID_REGISTRATION"
    TABLE_CAPACITY = "TABLE_CAPACITY"
    INVALID_PAYMENT_TRANSITION = "INVALID_PAYMENT_TRANSITION"
    INVALID_PAYMENT_AMOUNT = "INVALID_PAYMENT_AMOUNT"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.INVALID_REGISTRATION
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    code = ErrorCode.EVENT_NOT_FOUND
    status_code = 404

    def __init__(self, event_id: int) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class EventInactiveError(DomainError):
    code = ErrorCode.EVENT_INACTIVE

    def __init__(self, event_id: int) -> None:
        super().__init__("Inactive events cannot be made current")
        self.event_id = event_id


class EventInUseError(DomainError):
    code = ErrorCode.EVENT_IN_USE

    def __init__(self, event_id: int) -> None:
        super().__init__("Event has registrations and cannot be deleted")
        self.event_id = event_id


class NoCurrentEventError(DomainError):
    code = ErrorCode.NO_CURRENT_EVENT
    status_code = 404

    def __init__(self) -> None:
        super().__init__("No current event found")


class RegistrationNotFoundError(DomainError):
    code = ErrorCode.REGISTRATION_NOT_FOUND
    status_code = 404

    def __init__(self, registration_id: str) -> None:
        super().__init__("Registration not found")
        self.registration_id = registration_id


class RegistrationClosedError(DomainError):
    code = ErrorCode.REGISTRATION_CLOSED

    def __init__(self) -> None:
        super().__init__("Registration is not open for this event")


class InvalidRegistrationError(DomainError):
    code = ErrorCode.INVALID_REGISTRATION


class TableCapacityError(DomainError):
    code = ErrorCode.TABLE_CAPACITY

    def __init__(self, table_number: int) -> None:
        super().__init__(f"Table {table_number} does not have enough available seats.")
        self.table_number = table_number


class InvalidPaymentTransitionError(DomainError):
    code = ErrorCode.INVALID_PAYMENT_TRANSITION

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot change payment status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class InvalidPaymentAmountError(DomainError):
    code = ErrorCode.INVALID_PAYMENT_AMOUNT

    def __init__(self) -> None:
        super().__init__("Registration total is invalid")
