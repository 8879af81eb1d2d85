"""
Trust service — domain-specific HTTP exceptions.

All exceptions use preset status codes and detail messages so that callers
never need to specify these at the call site.  Each one also carries a
``kind`` (validation_error, not_found, conflict, forbidden, policy_violation)
which the shared exception handler renders as ``error.code`` in the envelope.
"""
from fastapi import HTTPException, status


# ── Error kinds ───────────────────────────────────────────────────────────────

class TrustError(HTTPException):
    kind: str = "http_error"
    status_code_default: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request could not be processed."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.message,
        )


class ValidationFailed(TrustError):
    kind = "validation_error"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Request validation failed."


class NotFound(TrustError):
    kind = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND
    message = "Resource not found."


class Conflict(TrustError):
    kind = "conflict"
    status_code_default = status.HTTP_409_CONFLICT
    message = "Resource state conflict."


class Forbidden(TrustError):
    kind = "forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN
    message = "You are not allowed to perform this action."


class PolicyViolation(TrustError):
    kind = "policy_violation"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "This action is not allowed by moderation policy."


# ── Accounts ──────────────────────────────────────────────────────────────────

class AccountNotFound(NotFound):
    message = "Account not found."


class UserBanned(Forbidden):
    message = "This account has been banned."


class UserInactive(Forbidden):
    message = "This account has been deactivated."


class CannotModerateAdmin(Forbidden):
    message = "Administrators cannot be moderated."


class AdminAccessRequired(Forbidden):
    message = "Administrator access required."


class SuperAdminAccessRequired(Forbidden):
    message = "Super-administrator access required."


class UploadsDisabled(PolicyViolation):
    message = "Uploads are disabled for this account."


class AccountSuspended(PolicyViolation):
    message = "This account is suspended."


# ── Reports ───────────────────────────────────────────────────────────────────

class ReportNotFound(NotFound):
    message = "Report not found."


class ContentNotFound(NotFound):
    message = "Reported content not found."


class CannotReportOwnContent(Forbidden):
    message = "You cannot report your own content."


class DuplicateActiveReport(Conflict):
    message = "You already have an active report for this content."


class ContentAlreadyUnderInvestigation(Conflict):
    message = "This content is already under investigation."


class ReportNotActive(Conflict):
    message = "Only pending or in-review reports can be changed."


class ReportNotPending(Conflict):
    message = "Only pending reports can be opened."


class AlreadyResolved(Conflict):
    message = "This report has already been closed."


class InvalidAssignee(ValidationFailed):
    message = "Reports can only be assigned to an active administrator."


class ReportNotAssignedToYou(Forbidden):
    message = "This report is assigned to another administrator."


class ActionNotApplicable(PolicyViolation):
    message = "This action does not apply to the reported content type."


class NoSideEffectToRetry(Conflict):
    message = "This report has no failed side effect to retry."


# ── Social graph ──────────────────────────────────────────────────────────────

class CannotBlockSelf(ValidationFailed):
    message = "You cannot block yourself."


class CannotFollowSelf(ValidationFailed):
    message = "You cannot follow yourself."


class AlreadyBlocked(Conflict):
    message = "You have already blocked this user."


class BlockNotFound(NotFound):
    message = "There is no block between you and this user."


class NotBlocker(Forbidden):
    message = "Only the user who created the block can remove it."


class BlockedRelationship(Forbidden):
    message = "This action is not available between blocked users."


class AlreadyFollowing(Conflict):
    message = "You are already following this user."


class NotFollowing(NotFound):
    message = "You are not following this user."
