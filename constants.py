from pathlib import Path

def _read_version():
    """Reads the version from the VERSION file."""
    try:
        version_path = Path(__file__).parent / "VERSION"
        return version_path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return "0.0.0-dev"

APP_NAME = "HostShare"
APP_VERSION = _read_version()

# Service name of the Microsoft Hosted Network Virtual Adapter miniport.
HOSTED_NETWORK_SERVICE_NAME = "vwifimp"

# Limits enforced by 'netsh wlan set hostednetwork'.
SSID_MIN_LENGTH = 3
SSID_MAX_LENGTH = 32
KEY_MIN_LENGTH = 8
KEY_MAX_LENGTH = 63
