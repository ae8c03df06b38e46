"""
Structured errors raised by the persistence gateway.

Each error carries a stable ``code`` so callers can map
commit-time races onto the same validation errors they
would have produced at selection time.
"""


class GatewayError(Exception):
    code = "gateway_error"

    def __init__(self, message=None, **details):
        super().__init__(message or self.code)
        self.details = details


class InvalidPaperError(GatewayError):
    code = "invalid_paper"


class AlreadyAssignedError(GatewayError):
    code = "already_assigned"


class IneligibleReviewerError(GatewayError):
    code = "ineligible_reviewer"


class ReviewerWorkloadExceededError(GatewayError):
    code = "reviewer_workload_exceeded"
