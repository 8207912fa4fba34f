"""Custom exceptions for jd."""


class JdError(Exception):
    """Base exception for all jd errors."""

    exit_code: int = 1

    def __init__(self, message: str, hints: list[str] | None = None):
        super().__init__(message)
        self.hints = hints or []


class NotAGitRepositoryError(JdError):
    """Raised when a command needs a git repository."""

    def __init__(self, message: str = "Not in a git repository"):
        super().__init__(message)


class MissingDependencyError(JdError):
    """Raised when an external tool is not installed."""

    pass


class AuthenticationError(JdError):
    """Raised when an external tool is not authenticated."""

    pass


class CommandFailedError(JdError):
    """Raised when an external command exits non-zero."""

    def __init__(
        self,
        message: str,
        output: str = "",
        hints: list[str] | None = None,
    ):
        super().__init__(message, hints)
        self.output = output


class PreconditionError(JdError):
    """Raised when the repository is not in a state the command accepts."""

    pass


class SecretProvisioningError(CommandFailedError):
    """Raised when a secret cannot be read or uploaded."""

    pass


class KubernetesError(CommandFailedError):
    """Raised when a kubectl step fails."""

    pass
