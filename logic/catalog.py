import enum
import json
import logging
from dataclasses import dataclass

from exceptions import CommandError, EnumerationError
from .command_utils import run_external_ps_script

logger = logging.getLogger(__name__)

CATALOG_SCRIPT = 'Get-ConnectionCatalog.ps1'


class ConnectionStatus(enum.IntEnum):
    """Connection states as reported by the OS (NETCON_STATUS)."""
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    DISCONNECTING = 3
    HARDWARE_NOT_PRESENT = 4
    HARDWARE_DISABLED = 5
    HARDWARE_MALFUNCTION = 6
    MEDIA_DISCONNECTED = 7
    AUTHENTICATING = 8
    AUTHENTICATION_SUCCEEDED = 9
    AUTHENTICATION_FAILED = 10
    INVALID_ADDRESS = 11
    CREDENTIALS_REQUIRED = 12


class SharingRole(enum.Enum):
    """Which side of a shared connection an adapter is on."""
    NONE = None
    PUBLIC = 0
    PRIVATE = 1


@dataclass(frozen=True)
class AdapterRecord:
    """Snapshot of one network connection at enumeration time."""
    guid: str
    name: str
    device_name: str
    status: ConnectionStatus
    media_type: int = 0
    characteristics: int = 0
    sharing_enabled: bool = False
    sharing_role: SharingRole = SharingRole.NONE
    firewall_enabled: bool = False

    @property
    def is_connected(self) -> bool:
        return self.status == ConnectionStatus.CONNECTED

    def __str__(self) -> str:
        return f"{self.name} ({self.device_name})"


def normalize_guid(guid: str) -> str:
    """Brings a GUID into a comparable form: upper case, without braces."""
    return str(guid).strip().strip('{}').upper()


def _as_list(value) -> list:
    # ConvertTo-Json collapses a one-element array into a bare object.
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _build_record(connection: dict, sharing: dict) -> AdapterRecord:
    try:
        status = ConnectionStatus(int(connection['Status']))
    except ValueError as e:
        raise EnumerationError(
            f"Unknown connection status {connection['Status']!r} for '{connection['Name']}'.") from e

    sharing_enabled = bool(sharing['SharingEnabled'])
    role = SharingRole.NONE
    if sharing_enabled:
        try:
            role = SharingRole(int(sharing['SharingConnectionType']))
        except ValueError as e:
            raise EnumerationError(
                f"Unknown sharing type {sharing['SharingConnectionType']!r} "
                f"for '{connection['Name']}'.") from e

    return AdapterRecord(
        guid=connection['Guid'],
        name=connection['Name'],
        device_name=connection.get('DeviceName') or '',
        status=status,
        media_type=int(connection.get('MediaType') or 0),
        characteristics=int(connection.get('Characteristics') or 0),
        sharing_enabled=sharing_enabled,
        sharing_role=role,
        firewall_enabled=bool(sharing.get('InternetFirewallEnabled')),
    )


def parse_catalog(result_json: str) -> list[AdapterRecord]:
    """
    Joins the connection and sharing property sets emitted by the catalog
    script into AdapterRecords.

    Raises EnumerationError when the output is not JSON, a required field is
    missing, or the two sets do not describe the same connections.
    """
    if not result_json or not result_json.strip():
        return []
    try:
        payload = json.loads(result_json)
    except json.JSONDecodeError as e:
        raise EnumerationError(f"Connection catalog is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise EnumerationError("Connection catalog has an unexpected shape.")

    connections = _as_list(payload.get('Connections'))
    sharing_by_guid = {}
    for entry in _as_list(payload.get('Sharing')):
        if not isinstance(entry, dict) or 'Guid' not in entry:
            raise EnumerationError("Sharing entry without a connection GUID.")
        sharing_by_guid[normalize_guid(entry['Guid'])] = entry

    if len(connections) != len(sharing_by_guid):
        raise EnumerationError(
            f"Found {len(connections)} connections but {len(sharing_by_guid)} sharing configurations.")

    records = []
    for connection in connections:
        try:
            sharing = sharing_by_guid[normalize_guid(connection['Guid'])]
            records.append(_build_record(connection, sharing))
        except (KeyError, TypeError) as e:
            raise EnumerationError(f"Malformed connection entry: {e!r}") from e
    return records


def list_adapters() -> list[AdapterRecord]:
    """
    Enumerates every network connection the OS knows about, virtual adapters
    included, with its current sharing configuration.
    """
    try:
        result_json = run_external_ps_script(CATALOG_SCRIPT)
    except CommandError as e:
        raise EnumerationError(f"Could not enumerate network connections: {e}") from e
    records = parse_catalog(result_json)
    logger.info("Enumerated %d network connections.", len(records))
    for record in records:
        logger.debug("Connection %s: status=%s sharing=%s role=%s",
                     record, record.status.name, record.sharing_enabled, record.sharing_role.name)
    return records
