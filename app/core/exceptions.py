"""Domain errors raised by services and mapped to HTTP responses in app.main."""


class AppError(Exception):
    """Base class for errors that map 1:1 to a client-facing status code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InternalError(AppError):
    """Unexpected storage or IO failure; detail is logged, never returned."""


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class MissingVersion(ValidationError):
    code = "MISSING_VERSION"
    default_message = "Missing version field"


class InvalidInviteCode(ValidationError):
    code = "INVALID_INVITE_CODE"
    default_message = "Invalid invite code"


class InviteCodeUsed(ValidationError):
    code = "INVITE_CODE_USED"
    default_message = "Invite code has already been used"


class InviteCodeExpired(ValidationError):
    code = "INVITE_CODE_EXPIRED"
    default_message = "Invite code has expired"


class UsernameTaken(ValidationError):
    code = "USERNAME_TAKEN"
    default_message = "Username already exists"


class AuthError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Not authenticated"


class NotAuthenticated(AuthError):
    code = "NOT_AUTHENTICATED"


class InvalidToken(AuthError):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpired(AuthError):
    code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class SessionSuperseded(AuthError):
    """The token's session epoch is stale: the account signed in elsewhere or was signed out."""

    code = "SESSION_SUPERSEDED"
    default_message = "Account signed in on another device"


class BadCredentials(AuthError):
    code = "BAD_CREDENTIALS"
    default_message = "Invalid username or password"


class UserNotFound(AuthError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class ForbiddenOperation(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Operation not allowed"


class AccountBanned(ForbiddenOperation):
    code = "ACCOUNT_BANNED"
    default_message = "Account has been banned"


class AdminRequired(ForbiddenOperation):
    code = "ADMIN_REQUIRED"
    default_message = "Admin access required"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class VersionConflict(AppError):
    """Raised when a write's expected version no longer matches the stored version."""

    status_code = 409
    code = "VERSION_CONFLICT"
    default_message = "Data conflict: the server has a newer version"

    def __init__(self, server_version: int, message: str | None = None) -> None:
        self.server_version = server_version
        super().__init__(message)
