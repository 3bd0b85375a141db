class HotspotError(Exception):
    """
    Base exception for every failure surfaced to the operator.

    Attributes:
        message (str): The human-readable error message.
        code (str | None): An optional machine-readable error code for
                           specific error handling.
    """
    default_code: str | None = None

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code if code is not None else self.default_code

    def __str__(self) -> str:
        """Return the string representation of the error, including the code
        if present."""
        if self.code:
            return f"{super().__str__()} (code: {self.code})"
        return super().__str__()


class CommandError(HotspotError):
    """A system command or PowerShell script exited with an error."""
    default_code = 'COMMAND_FAILED'


class PrivilegeError(HotspotError):
    default_code = 'NOT_ADMIN'


class UnsupportedHardwareError(HotspotError):
    default_code = 'HOSTED_NETWORK_UNSUPPORTED'


class InvalidConfigError(HotspotError):
    default_code = 'INVALID_CONFIG'


class EnumerationError(HotspotError):
    default_code = 'ENUMERATION_FAILED'


class HotspotAdapterNotFoundError(HotspotError):
    default_code = 'HOTSPOT_ADAPTER_NOT_FOUND'


class NoUplinkCandidatesError(HotspotError):
    default_code = 'NO_UPLINK_CANDIDATES'


class StartFailedError(HotspotError):
    default_code = 'START_FAILED'


class StopFailedError(HotspotError):
    default_code = 'STOP_FAILED'


class SharingError(HotspotError):
    default_code = 'SHARING_FAILED'
