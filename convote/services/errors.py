class ConvoteError(Exception):
    """Base class for request-rejection errors raised by the services.

    The app factory turns these into JSON error responses using
    ``status_code``; they are never retried by the server.
    """

    status_code = 400
    default_message = "Request could not be completed."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def code(self):
        return type(self).__name__


class ValidationError(ConvoteError):
    default_message = "Invalid request."


class NotFound(ConvoteError):
    status_code = 404
    default_message = "Resource not found."


class AuthenticationError(ConvoteError):
    status_code = 401
    default_message = "Authentication required."

    def __init__(self, message=None, error_code=None):
        super().__init__(message)
        self.error_code = error_code


class InvalidTransition(ConvoteError):
    default_message = "Invalid status transition."


class MotionLocked(ConvoteError):
    default_message = "Motion can no longer be modified after voting has started."


class VotingNotActive(ConvoteError):
    status_code = 409
    default_message = "This motion is not currently open for voting."


class ResultsNotAvailable(ConvoteError):
    default_message = (
        "Results are only available for completed motions (status: voting_complete)."
    )


class NotEligible(ConvoteError):
    status_code = 403
    default_message = "You are not eligible to vote on this motion."


class AlreadyVoted(ConvoteError):
    status_code = 409
    default_message = "You have already voted on this motion."


class InvalidChoiceSelection(ConvoteError):
    default_message = "Invalid choice selection."
