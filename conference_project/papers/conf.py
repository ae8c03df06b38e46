"""
Engine tunables, read from Django settings with the
conference defaults.
"""

from django.conf import settings


def reviewers_per_paper():
    return getattr(settings, "REVIEWERS_PER_PAPER", 3)


def reviewer_max_workload():
    return getattr(settings, "REVIEWER_MAX_WORKLOAD", 5)


def invitation_response_days():
    return getattr(settings, "REVIEW_INVITATION_RESPONSE_DAYS", 14)


def invitation_page_size():
    return getattr(settings, "REVIEW_INVITATION_PAGE_SIZE", 20)
