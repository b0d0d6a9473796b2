"""Exceptions raised by clustrz operations."""


class ClustrzError(Exception):
    """Base class for all clustrz errors."""


class TransportError(ClustrzError):
    """The transport to a node could not be used at all."""

    def __init__(self, host: str, original_error: BaseException):
        """Initialize transport error.

        Args:
            host: Host the transport was aimed at
            original_error: Underlying SSH, SCP or HTTP failure
        """
        self.host = host
        self.original_error = original_error
        super().__init__(f"Cannot reach {host}: {original_error}")


class RemoteCommandError(ClustrzError):
    """A remote command ran but exited with a non-zero status."""

    def __init__(self, host: str, command: str, exit_code: int, stderr: str):
        """Initialize remote command error.

        Args:
            host: Host the command ran on
            command: Command string as sent to the remote shell
            exit_code: Exit status reported by the remote shell
            stderr: Captured standard error
        """
        self.host = host
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        detail = stderr.strip() or "no stderr"
        super().__init__(
            f"Command on {host} exited with code {exit_code}: {detail}"
        )


class ParseError(ClustrzError, ValueError):
    """Remote output could not be parsed."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"{reason}: {text!r}")


class JMXError(ClustrzError):
    """The JMX agent answered with an error payload."""

    def __init__(self, host: str, message: str):
        self.host = host
        super().__init__(f"JMX error on {host}: {message}")
