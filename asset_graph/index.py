"""
Asset Index — write-once lookup structures over an asset snapshot.

Built in a single pass at construction and never mutated afterwards. Every
map is exposed as a read-only ``MappingProxyType`` whose values are tuples,
so one index can serve any number of concurrent queries.
"""

from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from loguru import logger

from .ontology import Asset, Layer
from .tags import parse_tag


class AssetIndex:
    """
    Lookups over an immutable asset collection.

    - by_id:    asset id → asset
    - by_tag:   uppercased tag → asset
    - by_loop:  loop key (T-101) → assets sharing it, input order
    - by_area:  process area → assets
    - by_ip:    IP address → asset
    - by_vlan:  VLAN number → assets

    Assets without an id are skipped: relationship output is keyed by id.
    """

    def __init__(self, assets: Iterable[Asset]):
        by_id: dict[str, Asset] = {}
        by_tag: dict[str, Asset] = {}
        by_loop: dict[str, list] = defaultdict(list)
        by_area: dict[str, list] = defaultdict(list)
        by_ip: dict[str, Asset] = {}
        by_vlan: dict[int, list] = defaultdict(list)
        skipped = 0

        for asset in assets:
            if not asset.id:
                skipped += 1
                continue

            by_id[asset.id] = asset

            if asset.tag:
                by_tag[asset.tag.upper()] = asset
                parsed = parse_tag(asset.tag)
                if parsed:
                    by_loop[parsed.loop_key].append(asset)

            if asset.process_area:
                by_area[asset.process_area].append(asset)
            if asset.ip_address:
                by_ip[asset.ip_address] = asset
            if asset.vlan is not None:
                by_vlan[asset.vlan].append(asset)

        if skipped:
            logger.debug(f"Asset index skipped {skipped} assets without an id")

        self._by_id = MappingProxyType(by_id)
        self._by_tag = MappingProxyType(by_tag)
        self._by_loop = _freeze(by_loop)
        self._by_area = _freeze(by_area)
        self._by_ip = MappingProxyType(by_ip)
        self._by_vlan = _freeze(by_vlan)

    # ── Read accessors ───────────────────────────────

    @property
    def by_id(self) -> Mapping[str, Asset]:
        return self._by_id

    @property
    def by_tag(self) -> Mapping[str, Asset]:
        return self._by_tag

    @property
    def by_loop(self) -> Mapping[str, tuple]:
        return self._by_loop

    @property
    def by_area(self) -> Mapping[str, tuple]:
        return self._by_area

    @property
    def by_ip(self) -> Mapping[str, Asset]:
        return self._by_ip

    @property
    def by_vlan(self) -> Mapping[int, tuple]:
        return self._by_vlan

    def __len__(self) -> int:
        return len(self._by_id)

    def assets(self) -> list[Asset]:
        """All indexed assets in input order."""
        return list(self._by_id.values())

    def get(self, asset_id: str) -> Optional[Asset]:
        return self._by_id.get(asset_id)

    def get_by_tag(self, tag: str) -> Optional[Asset]:
        return self._by_tag.get(tag.upper()) if tag else None

    def in_layer(self, layer: Layer) -> list[Asset]:
        return [a for a in self._by_id.values() if a.layer == layer]

    def of_types(self, types) -> list[Asset]:
        return [a for a in self._by_id.values() if a.asset_type in types]

    def networked(self) -> list[Asset]:
        return [a for a in self._by_id.values() if a.is_networked]


def _freeze(groups: dict) -> Mapping:
    return MappingProxyType({key: tuple(members) for key, members in groups.items()})
