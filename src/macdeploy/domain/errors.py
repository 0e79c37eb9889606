"""Domain-specific exception classes for device deployments."""


class DeploymentError(Exception):
    """Base class for all domain errors in macdeploy."""


class TransientNetworkError(DeploymentError):
    """Raised when a remote call fails in a way that is worth retrying.

    Covers transport failures and empty response bodies. The retry engine
    absorbs these up to its attempt limit.
    """


class PermanentConfigurationError(DeploymentError):
    """Raised when a required setting or local dependency is missing.

    Fatal: the process exits with status 1 without attempting any step.
    """


class RemoteRejectionError(DeploymentError):
    """Raised when a remote API was reachable but returned an unexpected result.

    Attributes:
        operation: Human-readable name of the rejected operation.
        response: The response body the API returned.
    """

    def __init__(self, operation: str, response: str) -> None:
        self.operation = operation
        self.response = response
        super().__init__(f"{operation} rejected by remote API: {response!r}")


class InterruptedByUserError(DeploymentError):
    """Raised at a cooperative interrupt point after a termination signal.

    Attributes:
        signal_name: Name of the signal that requested cancellation.
    """

    def __init__(self, signal_name: str = "SIGINT") -> None:
        self.signal_name = signal_name
        super().__init__(f"Deployment interrupted by {signal_name}")


class CommandError(DeploymentError):
    """Raised when a local command-line utility exits with a non-zero status.

    Attributes:
        command: The argv that was executed.
        returncode: The process exit status.
        output: Combined stdout/stderr text captured from the process.
    """

    def __init__(self, command: list[str], returncode: int, output: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command {' '.join(command)!r} exited with status {returncode}: {output.strip()}"
        )


class PrerequisiteTimeoutError(DeploymentError):
    """Raised when external state did not settle within its wait budget.

    Attributes:
        condition: Description of what was being waited for.
    """

    def __init__(self, condition: str) -> None:
        self.condition = condition
        super().__init__(f"Timed out waiting for {condition}")
