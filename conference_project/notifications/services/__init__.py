"""
Notification service layer.

Each module corresponds to one kind of outbound notification
and records every attempt as a NotificationRecord. Delivery
problems are reported to the caller as data, never raised.
"""

# =====================================================
# REVIEW INVITATIONS
# =====================================================
from .invitation import (
    DELIVERY_FAILED_CODE,
    PARTIAL_FAILURE_CODE,
    PARTIAL_FAILURE_MESSAGE,
    DeliveryError,
    NotificationDispatcher,
)

# =====================================================
# RETRY
# =====================================================
from .retry import (
    NotificationRetryService,
)

# =====================================================
# PUBLIC EXPORTS
# =====================================================
__all__ = [
    # Review invitations
    "DELIVERY_FAILED_CODE",
    "PARTIAL_FAILURE_CODE",
    "PARTIAL_FAILURE_MESSAGE",
    "DeliveryError",
    "NotificationDispatcher",

    # Retry
    "NotificationRetryService",
]
