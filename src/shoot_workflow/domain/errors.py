"""Error taxonomy for workflow operations.

Every error carries a user-facing ``user_message`` and ``title`` so action
surfaces can show it without inspecting the type. ``retryable`` marks errors
the user may retry unchanged (no automatic retry is ever performed).
"""


class WorkflowError(Exception):
    """Base class for all workflow failures."""

    default_title = "Action Failed"
    default_message = "Something went wrong. Please try again."
    retryable = False

    def __init__(self, user_message: str | None = None, title: str | None = None):
        self.user_message = user_message or self.default_message
        self.title = title or self.default_title
        super().__init__(self.user_message)


class PreconditionFailed(WorkflowError):
    """Client-side check failed; no network call was made."""

    default_title = "Cannot Continue"


class AuthenticationMissing(PreconditionFailed):
    default_title = "Not Authenticated"
    default_message = "You must be signed in to perform this action."


class MissingIssueNotes(PreconditionFailed):
    default_title = "Notes Required"
    default_message = "Please provide notes about the issues found."


class InvalidRescheduleDate(PreconditionFailed):
    default_title = "Invalid Date"
    default_message = "Please select today or a future date."


class InvalidTimeSlot(PreconditionFailed):
    default_title = "Invalid Time"
    default_message = "Please select one of the available time slots."


class NothingToPay(PreconditionFailed):
    default_title = "No shoots selected"
    default_message = "Please select at least one shoot to pay for."


class SubmissionInProgress(PreconditionFailed):
    default_title = "Please Wait"
    default_message = "A previous action for this shoot is still in progress."


class RescheduleRequestNotFound(PreconditionFailed):
    default_title = "Request Not Found"
    default_message = "The reschedule request no longer exists."


class RescheduleAlreadyResolved(PreconditionFailed):
    default_title = "Already Resolved"
    default_message = "This reschedule request has already been resolved."


class TransitionNotAllowed(WorkflowError):
    """The role/state guard rejected the action locally."""

    default_title = "Not Allowed"
    default_message = "You are not allowed to perform this action on this shoot."


class TransportFailure(WorkflowError):
    """No response from the server."""

    default_title = "Connection Problem"
    default_message = "Unable to reach the server. Check your connection and try again."
    retryable = True


class RemoteError(WorkflowError):
    """The server answered with a failure."""

    retryable = True

    def __init__(
        self,
        user_message: str | None = None,
        title: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(user_message, title)
        self.status_code = status_code


class AuthorizationFailure(RemoteError):
    default_title = "Not Authorized"
    default_message = "You are not allowed to perform this action."
    retryable = False


class ValidationFailure(RemoteError):
    retryable = False


class InvalidShootPayload(WorkflowError):
    """Server data could not be mapped onto a shoot record."""

    default_title = "Unexpected Response"
    default_message = "The server returned shoot data that could not be read."


class RescheduleStorageFailure(WorkflowError):
    """The reschedule request could not be recorded."""

    default_title = "Reschedule Not Saved"
    default_message = "Your reschedule request could not be saved. Please try again."
    retryable = True
