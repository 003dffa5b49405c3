"""Errors surfaced to the operator. Every one of them ends the current command."""


class AppdockError(Exception):
    """Base class for user-facing failures."""


class ConfigMissing(AppdockError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Configuration file not found: {path}. Run 'appdock setup' first.")


class PortConflict(AppdockError):
    def __init__(self, port, listener=None):
        self.port = port
        self.listener = listener
        detail = f" ({listener})" if listener else ""
        super().__init__(
            f"Port {port} is being used by another service{detail}. "
            "Please stop the blocking service manually."
        )


class NotInstalled(AppdockError):
    def __init__(self, app_name):
        self.app_name = app_name
        super().__init__(f"Application {app_name} is not installed.")


class ArchiveNotFound(AppdockError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Backup file does not exist: {path}")


class InvalidArchive(AppdockError):
    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Backup file {path} cannot be restored: {reason}")


class EntropyUnavailable(AppdockError):
    def __init__(self, cause=None):
        super().__init__(f"Secure random source unavailable: {cause}")


class DriverInvocationFailed(AppdockError):
    def __init__(self, command, returncode):
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(command)}")


class UnknownApplication(AppdockError):
    def __init__(self, app_name, available=()):
        self.app_name = app_name
        self.available = tuple(available)
        super().__init__(
            f"Unknown application: {app_name}. Available applications: {', '.join(self.available)}"
        )


class InvalidConfig(AppdockError):
    def __init__(self, key, value):
        self.key = key
        self.value = value
        super().__init__(f"Invalid value for {key}: {value!r}. Expected a port number between 1 and 65535.")
