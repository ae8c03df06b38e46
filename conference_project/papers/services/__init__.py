"""
Paper assignment service layer.
"""

from django.utils import timezone

from invitations.services import build_authorization_guard
from notifications.services import NotificationDispatcher

from .assigned_papers import AssignedPaperService
from .assignment import (
    AssignmentOrchestrator,
    AssignmentOutcome,
)


def build_assignment_orchestrator(gateway, clock=timezone.now):
    return AssignmentOrchestrator(
        gateway=gateway,
        dispatcher=NotificationDispatcher(gateway=gateway, clock=clock),
        clock=clock,
    )


def build_assigned_paper_service(gateway):
    return AssignedPaperService(
        gateway=gateway,
        guard=build_authorization_guard(gateway),
    )


__all__ = [
    "AssignedPaperService",
    "AssignmentOrchestrator",
    "AssignmentOutcome",
    "build_assignment_orchestrator",
    "build_assigned_paper_service",
]
