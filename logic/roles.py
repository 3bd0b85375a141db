import logging
from dataclasses import dataclass
from typing import Callable

from constants import HOSTED_NETWORK_SERVICE_NAME
from exceptions import CommandError, HotspotAdapterNotFoundError, InvalidConfigError
from .catalog import AdapterRecord, normalize_guid
from .command_utils import run_external_ps_script

logger = logging.getLogger(__name__)

LOOKUP_SCRIPT = 'Find-AdapterByService.ps1'


@dataclass(frozen=True)
class RetryPrompt:
    """A rejected uplink choice; the reason is shown before asking again."""
    reason: str


@dataclass(frozen=True)
class RolePair:
    """The uplink to share and the hosted network adapter to share it with."""
    uplink: AdapterRecord
    hotspot: AdapterRecord

    def __post_init__(self):
        if normalize_guid(self.uplink.guid) == normalize_guid(self.hotspot.guid):
            raise InvalidConfigError(
                f"'{self.uplink.name}' cannot be both the uplink and the hotspot adapter.")
        if not self.uplink.is_connected:
            raise InvalidConfigError(f"Uplink adapter '{self.uplink.name}' is not connected.")


def filter_connected_candidates(catalog: list[AdapterRecord],
                                exclude: AdapterRecord | None = None) -> list[AdapterRecord]:
    """Returns the connected adapters, in catalog order, that may act as uplink."""
    excluded_guid = normalize_guid(exclude.guid) if exclude else None
    return [record for record in catalog
            if record.is_connected and normalize_guid(record.guid) != excluded_guid]


def find_adapter_by_service_name(service_name: str) -> str | None:
    """
    Asks the adapter configuration store for the adapter backed by the given
    driver service and returns its GUID, or None if there is none.
    """
    try:
        output = run_external_ps_script(LOOKUP_SCRIPT, {'ServiceName': service_name})
    except CommandError as e:
        raise HotspotAdapterNotFoundError(
            f"Could not look up the adapter for service '{service_name}': {e}") from e
    guid = output.strip().splitlines()[0].strip() if output.strip() else ''
    return guid or None


def resolve_hotspot_adapter(catalog: list[AdapterRecord],
                            lookup: Callable[[str], str | None] = find_adapter_by_service_name) -> AdapterRecord:
    """
    Finds the catalog record of the hosted network's virtual miniport adapter.

    Raises HotspotAdapterNotFoundError if the adapter does not exist, which
    usually means the hosted network has never been started or the driver
    is missing.
    """
    guid = lookup(HOSTED_NETWORK_SERVICE_NAME)
    if not guid:
        raise HotspotAdapterNotFoundError(
            f"No network adapter uses the '{HOSTED_NETWORK_SERVICE_NAME}' service. "
            "Is the hosted network running?")

    wanted = normalize_guid(guid)
    for record in catalog:
        if normalize_guid(record.guid) == wanted:
            logger.info("Resolved hosted network adapter: %s", record)
            return record
    raise HotspotAdapterNotFoundError(
        f"The hosted network adapter {guid} is not among the enumerated connections.")


def validate_index(candidates: list[AdapterRecord], raw) -> AdapterRecord | RetryPrompt:
    """Checks one operator answer against the candidate list."""
    if isinstance(raw, bool):
        return RetryPrompt(f"'{raw}' is not a number.")
    if isinstance(raw, int):
        index = raw
    else:
        text = str(raw).strip()
        try:
            index = int(text)
        except ValueError:
            return RetryPrompt(f"'{text}' is not a number.")
    if not 0 <= index < len(candidates):
        return RetryPrompt(f"{index} is not between 0 and {len(candidates) - 1}.")
    return candidates[index]


def select_uplink(candidates: list[AdapterRecord], index: int) -> AdapterRecord:
    """Returns the candidate at index, raising InvalidConfigError when out of range."""
    result = validate_index(candidates, index)
    if isinstance(result, RetryPrompt):
        raise InvalidConfigError(result.reason)
    return result
