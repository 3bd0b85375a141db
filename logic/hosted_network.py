import enum
import logging
import re
from dataclasses import dataclass, field

from constants import KEY_MAX_LENGTH, KEY_MIN_LENGTH, SSID_MAX_LENGTH, SSID_MIN_LENGTH
from exceptions import CommandError, InvalidConfigError, StartFailedError, StopFailedError
from .command_utils import decode_output, run_system_command

logger = logging.getLogger(__name__)

# netsh answers in the Windows display language; English and Finnish are recognised.
_DRIVER_SUPPORT_LABELS = ("Hosted network supported", "Isännöidyn verkon tuki")
_YES_VALUES = ("yes", "kyllä")

# Fragments of netsh output that mean there is nothing to stop.
_ALREADY_STOPPED_MARKERS = (
    "not in the correct state",
    "hosted network stopped",
    "not started",
    "ei ole oikeassa tilassa",
)


class HostedNetworkState(enum.Enum):
    UNSUPPORTED = "Unsupported"
    DISALLOWED = "Disallowed"
    ALLOWED_STOPPED = "Allowed-Stopped"
    ALLOWED_STARTED = "Allowed-Started"


@dataclass(frozen=True)
class HotspotConfig:
    """SSID and pre-shared key for one 'start' run. Never written to disk."""
    ssid: str
    key: str = field(repr=False)

    def validate(self) -> "HotspotConfig":
        if not SSID_MIN_LENGTH <= len(self.ssid) <= SSID_MAX_LENGTH:
            raise InvalidConfigError(
                f"The network name must be {SSID_MIN_LENGTH}-{SSID_MAX_LENGTH} characters long.")
        if not KEY_MIN_LENGTH <= len(self.key) <= KEY_MAX_LENGTH:
            raise InvalidConfigError(
                f"The key must be {KEY_MIN_LENGTH}-{KEY_MAX_LENGTH} characters long.")
        return self


@dataclass(frozen=True)
class HostedNetworkStatus:
    mode: str | None
    ssid: str | None
    status: str | None
    clients: int | None
    raw: str

    @property
    def state(self) -> HostedNetworkState:
        if (self.status or '').lower() == 'not available':
            return HostedNetworkState.UNSUPPORTED
        if (self.mode or '').lower() != 'allowed':
            return HostedNetworkState.DISALLOWED
        if (self.status or '').lower() == 'started':
            return HostedNetworkState.ALLOWED_STARTED
        return HostedNetworkState.ALLOWED_STOPPED


def _field(output: str, label: str) -> str | None:
    match = re.search(rf"^\s*{label}\s*:\s*(.*?)\s*$", output, re.MULTILINE | re.IGNORECASE)
    return match.group(1) if match else None


def parse_hosted_network_status(output: str) -> HostedNetworkStatus:
    """Parses the output of 'netsh wlan show hostednetwork'."""
    ssid = _field(output, 'SSID name')
    clients = _field(output, 'Number of clients')
    return HostedNetworkStatus(
        mode=_field(output, 'Mode'),
        ssid=ssid.strip('"') if ssid else None,
        status=_field(output, 'Status'),
        clients=int(clients) if clients and clients.isdigit() else None,
        raw=output,
    )


def parse_driver_support(output: str) -> bool:
    """True if any wireless interface in 'netsh wlan show drivers' supports a hosted network."""
    labels = "|".join(re.escape(label) for label in _DRIVER_SUPPORT_LABELS)
    return any(value.lower().startswith(_YES_VALUES)
               for value in re.findall(rf"(?:{labels})\s*:\s*(\S+)", output, re.IGNORECASE))


class HostedNetworkController:
    """Drives the OS hosted network feature through 'netsh wlan'."""

    def __init__(self, run_command=run_system_command):
        self._run = run_command

    def _netsh(self, args: list[str], error_message: str) -> str:
        return decode_output(self._run(['netsh', 'wlan', *args], error_message))

    def check_support(self) -> bool:
        try:
            output = self._netsh(['show', 'drivers'], "Failed to query wireless drivers")
        except CommandError as e:
            if "no wireless interface" in str(e).lower():
                logger.warning("No wireless interface found while checking hosted network support.")
                return False
            raise
        supported = parse_driver_support(output)
        logger.info("Hosted network supported by driver: %s", supported)
        return supported

    def configure(self, config: HotspotConfig):
        """Stores SSID and key persistently and allows the hosted network."""
        config.validate()
        try:
            self._netsh(['set', 'hostednetwork', 'mode=allow', f'ssid={config.ssid}',
                         f'key={config.key}', 'keyUsage=persistent'],
                        "Failed to configure the hosted network")
        except CommandError as e:
            raise StartFailedError(str(e.args[0])) from e
        logger.info("Hosted network configured for SSID '%s'.", config.ssid)

    def start(self):
        try:
            self._netsh(['start', 'hostednetwork'], "The hosted network could not be started")
        except CommandError as e:
            raise StartFailedError(str(e.args[0])) from e
        logger.info("Hosted network started.")

    def stop(self):
        """Disallows and stops the hosted network. Safe to call when it is not running."""
        try:
            self._netsh(['set', 'hostednetwork', 'mode=disallow'], "Failed to disallow the hosted network")
        except CommandError as e:
            raise StopFailedError(str(e.args[0])) from e
        try:
            self._netsh(['stop', 'hostednetwork'], "The hosted network could not be stopped")
        except CommandError as e:
            if any(marker in str(e).lower() for marker in _ALREADY_STOPPED_MARKERS):
                logger.info("Hosted network was not running.")
                return
            raise StopFailedError(str(e.args[0])) from e
        logger.info("Hosted network stopped.")

    def show_status(self) -> str:
        return self._netsh(['show', 'hostednetwork'], "Failed to query the hosted network")

    def get_status(self) -> HostedNetworkStatus:
        return parse_hosted_network_status(self.show_status())
