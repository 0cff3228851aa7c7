"""
Error taxonomy for ledger, purchase request and settlement operations.

Every failure is local to one operation and leaves prior state untouched.
The ``code`` attribute names the specific kind so callers (and the HTTP
layer) can branch on it without parsing messages.
"""


class MistockError(Exception):
    """Base class for all domain errors."""
    code = "MistockError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


# ===== VALIDATION (bad input) =====

class ValidationError(MistockError):
    code = "ValidationError"


class InvalidQuantity(ValidationError):
    code = "InvalidQuantity"


class InvalidDiscount(ValidationError):
    code = "InvalidDiscount"


class MissingReason(ValidationError):
    code = "MissingReason"


class InvalidAmount(ValidationError):
    code = "InvalidAmount"


class EmptyLedger(ValidationError):
    code = "EmptyLedger"


class Overpayment(ValidationError):
    code = "Overpayment"


class InsufficientPayment(ValidationError):
    code = "InsufficientPayment"


# ===== STATE (illegal transition) =====

class StateError(MistockError):
    code = "StateError"


class InvalidTransition(StateError):
    code = "InvalidTransition"


class NotUnlocked(StateError):
    code = "NotUnlocked"


class LedgerFinalized(StateError):
    code = "LedgerFinalized"


class ObligationSettled(StateError):
    code = "ObligationSettled"


class PermissionDenied(StateError):
    code = "PermissionDenied"


class ConcurrencyConflict(StateError):
    code = "ConcurrencyConflict"


# ===== CAPACITY / LOOKUP (user-recoverable) =====

class CapacityError(MistockError):
    code = "CapacityError"


class InsufficientAvailability(CapacityError):
    code = "InsufficientAvailability"


class NotFoundError(MistockError):
    code = "NotFoundError"
