from typing import Optional


class NetworkError(Exception):
    """Base class for every failure surfaced by the network client"""

    default_message = "Network operation failed"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        if message is None:
            message = self.default_message
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class ServiceUnavailable(NetworkError):
    default_message = "NetworkManager not available"


class ActivationFailed(NetworkError):
    default_message = "Failed to activate connection"


class DeactivationFailed(NetworkError):
    default_message = "Failed to deactivate connection"


class ConnectivityCheckFailed(NetworkError):
    default_message = "Connectivity check failed"


class InitializationFailed(NetworkError):
    default_message = "Failed to initialize NetworkManager client"
