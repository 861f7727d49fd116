"""Failures of the ticket redemption flow.

Every failure carries a stable ``reason`` so callers can map it to a user
facing message or status code without parsing text.
"""

from enum import Enum


class RedemptionFailureReason(str, Enum):
    BAD_FORMAT = "BAD_FORMAT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_USED = "ALREADY_USED"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"


class RedemptionError(Exception):
    reason: RedemptionFailureReason = RedemptionFailureReason.VALIDATION_FAILED
    default_message = "Redemption failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadFormat(RedemptionError):
    reason = RedemptionFailureReason.BAD_FORMAT
    default_message = "Reference must be exactly 6 digits"


class ValidationFailed(RedemptionError):
    reason = RedemptionFailureReason.VALIDATION_FAILED
    default_message = "Invalid request data"


class ReferenceNotFound(RedemptionError):
    reason = RedemptionFailureReason.NOT_FOUND
    default_message = "Reference not found"


class ReferenceAlreadyUsed(RedemptionError):
    reason = RedemptionFailureReason.ALREADY_USED
    default_message = "Reference has already been used"


class InsufficientCapacity(RedemptionError):
    reason = RedemptionFailureReason.INSUFFICIENT_CAPACITY
    default_message = "Not enough ticket numbers available"
