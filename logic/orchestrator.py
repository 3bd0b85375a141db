"""
Sequencing of the start, stop and show operations.

Nothing here touches the OS directly: every OS service comes in through the
Environment, so the whole flow can be exercised with test doubles.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from exceptions import (CommandError, HotspotError, NoUplinkCandidatesError, PrivilegeError,
                        UnsupportedHardwareError)
from .catalog import AdapterRecord, SharingRole, list_adapters
from .hosted_network import HostedNetworkController, HotspotConfig
from .roles import (RolePair, filter_connected_candidates, find_adapter_by_service_name,
                    resolve_hotspot_adapter, select_uplink)
from .sharing import IcsSharingService, SharingController
from .system import is_admin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartResult:
    """What a successful 'start' applied: the credentials and the shared pair."""
    config: HotspotConfig
    roles: RolePair


@dataclass
class Environment:
    """Privilege state and OS service handles the orchestrator works with."""
    is_admin: bool
    hosted_network: HostedNetworkController
    sharing: SharingController
    list_adapters: Callable[[], list[AdapterRecord]]
    find_adapter_by_service_name: Callable[[str], str | None] = find_adapter_by_service_name

    @classmethod
    def from_system(cls) -> "Environment":
        return cls(
            is_admin=is_admin(),
            hosted_network=HostedNetworkController(),
            sharing=SharingController(IcsSharingService()),
            list_adapters=list_adapters,
        )


class Orchestrator:
    def __init__(self, env: Environment):
        self.env = env

    def _require_admin(self):
        if not self.env.is_admin:
            raise PrivilegeError("Administrator rights are required for this operation.")

    def show(self) -> str:
        return self.env.hosted_network.show_status()

    def stop(self) -> list[tuple[AdapterRecord, HotspotError]]:
        """
        Tears down every active share, then disallows and stops the hosted
        network. Returns the adapters whose sharing could not be disabled.
        """
        self._require_admin()
        catalog = self.env.list_adapters()
        failures = self.env.sharing.disable_sharing_all(catalog)
        if failures:
            logger.warning("Sharing could not be disabled on %d adapter(s).", len(failures))
        self.env.hosted_network.stop()
        return failures

    def start(self, ask_config: Callable[[], HotspotConfig],
              choose_uplink: Callable[[list[AdapterRecord]], int]) -> StartResult:
        """
        Configures and starts the hosted network, then shares the operator's
        chosen uplink with it. choose_uplink gets the candidates and returns
        the index of the one to share.

        Any failure aborts the run as is. Nothing that was already applied is
        rolled back; 'stop' resets the machine.
        """
        self._require_admin()
        hosted_network = self.env.hosted_network
        if not hosted_network.check_support():
            raise UnsupportedHardwareError("The wireless adapter does not support a hosted network.")

        config = ask_config().validate()
        hosted_network.configure(config)
        hosted_network.start()
        try:
            logger.info("Hosted network state: %s", hosted_network.get_status().state.value)
        except CommandError as e:
            logger.warning("Could not read the hosted network state after start: %s", e)

        # The virtual adapter only shows up in a catalog fetched after start.
        catalog = self.env.list_adapters()
        hotspot = resolve_hotspot_adapter(catalog, self.env.find_adapter_by_service_name)
        candidates = filter_connected_candidates(catalog, exclude=hotspot)
        if not candidates:
            raise NoUplinkCandidatesError("No connected network adapter is available to share.")

        uplink = select_uplink(candidates, choose_uplink(candidates))
        pair = RolePair(uplink=uplink, hotspot=hotspot)
        logger.info("Sharing %s through %s.", pair.uplink, pair.hotspot)
        self.env.sharing.enable_sharing(pair.uplink, SharingRole.PUBLIC)
        self.env.sharing.enable_sharing(pair.hotspot, SharingRole.PRIVATE)
        return StartResult(config=config, roles=pair)
