from __future__ import annotations


class LinkHubError(Exception):
    status_code = 400
    default_message = "request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(LinkHubError):
    status_code = 400
    default_message = "invalid input"


class Unauthorized(LinkHubError):
    status_code = 403
    default_message = "you don't have permission to edit this profile"


class NotFound(LinkHubError):
    status_code = 404
    default_message = "not found"


class UsernameTaken(LinkHubError):
    status_code = 409
    default_message = "username already taken"


class RemoteCallFailed(LinkHubError):
    """The profile store could not complete a call; local state is untouched."""

    status_code = 503
    default_message = "profile store unavailable, please try again"


class VersionConflict(RemoteCallFailed):
    """The profile changed since it was loaded; reload before editing again."""

    status_code = 409
    default_message = "profile was changed elsewhere, reload and try again"
