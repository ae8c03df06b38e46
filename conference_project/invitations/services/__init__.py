"""
Review invitation service layer.

Services take their collaborators explicitly. The ``build_*``
helpers wire the production collaborators (ORM gateway, wall
clock, logging audit sink) for the views and commands.
"""

from django.utils import timezone

# =====================================================
# AUTHORIZATION / AUDIT
# =====================================================
from .audit import SecurityAuditLog
from .authorization import AuthorizationGuard

# =====================================================
# EXPIRY
# =====================================================
from .expiry import InvitationExpirySweeper

# =====================================================
# READ PATH
# =====================================================
from .lifecycle import (
    FORBIDDEN,
    ReviewInvitationService,
)

# =====================================================
# WRITE PATH
# =====================================================
from .actions import (
    ActionResult,
    ReviewInvitationActionService,
)


def build_authorization_guard(gateway):
    return AuthorizationGuard(gateway=gateway, audit_log=SecurityAuditLog())


def build_review_invitation_service(gateway, clock=timezone.now):
    return ReviewInvitationService(
        gateway=gateway,
        sweeper=InvitationExpirySweeper(gateway=gateway, clock=clock),
        guard=build_authorization_guard(gateway),
    )


def build_review_invitation_action_service(gateway, clock=timezone.now):
    return ReviewInvitationActionService(
        gateway=gateway,
        guard=build_authorization_guard(gateway),
        clock=clock,
    )


# =====================================================
# PUBLIC EXPORTS
# =====================================================
__all__ = [
    "SecurityAuditLog",
    "AuthorizationGuard",
    "InvitationExpirySweeper",
    "FORBIDDEN",
    "ReviewInvitationService",
    "ActionResult",
    "ReviewInvitationActionService",
    "build_authorization_guard",
    "build_review_invitation_service",
    "build_review_invitation_action_service",
]
