"""
discovery/registry.py - Venue registry.

Maps a protocol identifier to adapter metadata (VenueInfo). The executor
only reads it (resolve); the registry owner registers venues and toggles
them on and off.

Config-driven bootstrap:
1. Parse venues.yaml → list of VenueInfo
2. Register each venue in a VenueRegistry deployed on the ledger
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from core.constants import ErrorCode
from core.exceptions import ConfigError, StructuralError, VenueError
from core.ledger import Ledger
from core.logging import get_logger
from core.models import VenueInfo, VenueRegistered, VenueStatusChanged
from core.validators import normalize_address
from execution.access import OwnerAuth

logger = get_logger(__name__)


class VenueRegistry:
    """
    Registry of venue adapters keyed by protocol.

    Usage:
        registry = VenueRegistry(ledger, registry_address, owner)
        ledger.deploy(registry_address, registry)
        registry.register_venue(VenueInfo("UNISWAP_V2", adapter_address), caller=owner)
        info = registry.resolve("UNISWAP_V2")
    """

    def __init__(self, ledger: Ledger, address: str, owner: str):
        self.address = normalize_address(address)
        self._ledger = ledger
        self._auth = OwnerAuth(owner)
        self._venues: Dict[str, VenueInfo] = {}
        ledger.attach(self)

    @property
    def owner(self) -> str:
        return self._auth.owner

    def resolve(self, protocol: str) -> VenueInfo:
        """
        Raises:
            VenueError: VENUE_NOT_REGISTERED for unknown protocols
        """
        info = self._venues.get(str(protocol))
        if info is None:
            raise VenueError(
                f"No venue registered for {protocol}",
                ErrorCode.VENUE_NOT_REGISTERED,
                {"protocol": str(protocol)},
            )
        return info

    def venues(self) -> List[VenueInfo]:
        return sorted(self._venues.values(), key=lambda v: v.protocol)

    def register_venue(self, info: VenueInfo, caller: str) -> None:
        """Register or replace the venue for info.protocol."""
        self._auth.require_owner(caller)
        self._venues[str(info.protocol)] = info
        self._ledger.emit(VenueRegistered(
            protocol=str(info.protocol), adapter=info.adapter, version=info.version,
        ))
        logger.info(
            "Venue registered",
            extra={"context": {
                "protocol": str(info.protocol),
                "adapter": info.adapter,
                "version": info.version,
                "active": info.active,
            }},
        )

    def set_venue_active(self, protocol: str, active: bool, caller: str) -> None:
        self._auth.require_owner(caller)
        info = self.resolve(protocol)
        self._venues[str(protocol)] = VenueInfo(
            protocol=info.protocol,
            adapter=info.adapter,
            active=active,
            version=info.version,
            name=info.name,
        )
        self._ledger.emit(VenueStatusChanged(protocol=str(protocol), active=active))
        logger.info(
            "Venue status changed",
            extra={"context": {"protocol": str(protocol), "active": active}},
        )

    def remove_venue(self, protocol: str, caller: str) -> None:
        self._auth.require_owner(caller)
        self.resolve(protocol)
        del self._venues[str(protocol)]
        logger.info("Venue removed", extra={"context": {"protocol": str(protocol)}})

    def snapshot(self) -> Dict[str, VenueInfo]:
        return dict(self._venues)

    def restore(self, snapshot: Dict[str, VenueInfo]) -> None:
        self._venues = snapshot


def load_venue_infos(path: Union[str, Path]) -> List[VenueInfo]:
    """
    Parse venues.yaml.

    Format:
        venues:
          UNISWAP_V2:
            adapter: "0x..."
            version: 1
            name: "Uniswap V2"
            active: true
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Venue config not found: {path}", {"path": str(path)})

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    infos = []
    for protocol, entry in (data.get("venues") or {}).items():
        try:
            infos.append(VenueInfo.from_dict({"protocol": protocol, **entry}))
        except (KeyError, TypeError, ValueError, StructuralError) as exc:
            raise ConfigError(
                f"Invalid venue entry {protocol}: {exc}",
                {"protocol": protocol},
            ) from exc

    logger.info(f"Loaded {len(infos)} venues from {path.name}")
    return infos


def load_registry(
    ledger: Ledger,
    address: str,
    owner: str,
    venues_path: Optional[Union[str, Path]] = None,
) -> VenueRegistry:
    """
    Deploy a VenueRegistry on the ledger and register venues from YAML.

    Convenience function for executor bootstrap.
    """
    registry = VenueRegistry(ledger, address, owner)
    ledger.deploy(registry.address, registry)

    if venues_path is not None:
        for info in load_venue_infos(venues_path):
            registry.register_venue(info, caller=owner)

    return registry
