import logging

from exceptions import CommandError, HotspotError, SharingError
from .catalog import AdapterRecord, SharingRole
from .command_utils import run_external_ps_script

logger = logging.getLogger(__name__)

SHARING_SCRIPT = 'Set-ConnectionSharing.ps1'


class SharingService:
    """Interface to the OS connection sharing configuration."""

    def enable(self, guid: str, role: SharingRole):
        raise NotImplementedError

    def disable(self, guid: str):
        raise NotImplementedError


class IcsSharingService(SharingService):
    """Internet Connection Sharing through the HNetCfg.HNetShare COM object."""

    def enable(self, guid: str, role: SharingRole):
        try:
            run_external_ps_script(SHARING_SCRIPT, {'Guid': guid, 'Action': 'enable', 'Role': str(role.value)})
        except CommandError as e:
            raise SharingError(f"Failed to enable {role.name.lower()} sharing on {guid}: {e.args[0]}") from e

    def disable(self, guid: str):
        try:
            run_external_ps_script(SHARING_SCRIPT, {'Guid': guid, 'Action': 'disable'})
        except CommandError as e:
            raise SharingError(f"Failed to disable sharing on {guid}: {e.args[0]}") from e


class SharingController:
    def __init__(self, service: SharingService):
        self.service = service

    def enable_sharing(self, adapter: AdapterRecord, role: SharingRole):
        """
        Shares the adapter in the given role unless the fetched record says it
        is already shared.
        """
        if role is SharingRole.NONE:
            raise ValueError("Sharing role must be PUBLIC or PRIVATE.")
        if adapter.sharing_enabled:
            logger.info("Sharing already enabled on %s, leaving it as is.", adapter)
            return
        self.service.enable(adapter.guid, role)
        logger.info("Enabled %s sharing on %s.", role.name.lower(), adapter)

    def disable_sharing_all(self, catalog: list[AdapterRecord]) -> list[tuple[AdapterRecord, HotspotError]]:
        """
        Disables sharing on every shared adapter in the catalog. Every adapter
        is attempted; the ones that failed are returned with their error.
        """
        failures = []
        for adapter in catalog:
            if not adapter.sharing_enabled:
                continue
            try:
                self.service.disable(adapter.guid)
                logger.info("Disabled sharing on %s.", adapter)
            except HotspotError as e:
                logger.error("Could not disable sharing on %s: %s", adapter, e)
                failures.append((adapter, e))
        return failures
