"""Error types surfaced to API clients as ``ERR <message>`` bodies."""

from fastapi import status


class MetricsError(Exception):
    """Base class for errors rendered to clients.

    Existing clients only look at the body text, so input errors keep
    status 200.
    """

    status_code: int = status.HTTP_200_OK

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputMissing(MetricsError):
    """A required request parameter is absent."""

    pass


class InputInvalid(MetricsError):
    """A request parameter is present but rejected."""

    pass


class InvalidPlugin(InputInvalid):
    def __init__(self, message: str = "Invalid plugin."):
        super().__init__(message)


class UnsupportedRange(InputInvalid):
    def __init__(self, message: str = "Not supported."):
        super().__init__(message)


class DataIntegrityError(MetricsError):
    """A row that must exist after a write could not be read back."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServerCreationError(DataIntegrityError):
    def __init__(self, guid: str, message: str = "Failed to create server for GUID."):
        super().__init__(message)
        self.guid = guid


class PluginCreationError(DataIntegrityError):
    def __init__(self, name: str, message: str = "Failed to create plugin."):
        super().__init__(message)
        self.name = name
