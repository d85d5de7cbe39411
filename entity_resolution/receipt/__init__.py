"""Receipt review flow"""

from entity_resolution.receipt.review import (
    ALLOWED_TRANSITIONS,
    InvalidTransition,
    ReceiptReviewSession,
    prepare_item,
)

__all__ = ["ReceiptReviewSession", "InvalidTransition", "ALLOWED_TRANSITIONS", "prepare_item"]
