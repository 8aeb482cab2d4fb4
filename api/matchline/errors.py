"""
Domain errors raised by the allocation and conversation policies.

Every error here is a local validation failure: the request is rejected,
nothing is retried, and the caller has to change its input. Routes let
these propagate; ``main`` renders them as JSON with the matching status.
"""


class PolicyError(Exception):
    status_code = 400
    default_detail = "Request rejected"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def error_name(self) -> str:
        return type(self).__name__


class ProfileNotVerified(PolicyError):
    status_code = 403
    default_detail = "Profile must be verified"


class OpenerTooShort(PolicyError):
    status_code = 400
    default_detail = "Message must be at least 36 characters"


class Unauthorized(PolicyError):
    status_code = 403
    default_detail = "Unauthorized"


class ConversationEnded(PolicyError):
    status_code = 409
    default_detail = "Conversation has ended"


class NotFound(PolicyError):
    status_code = 404
    default_detail = "Not found"


class InvalidInput(PolicyError):
    status_code = 400
    default_detail = "Invalid input"
