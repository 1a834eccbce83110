"""
Control-Loop Reconstructor
===========================
Groups assets sharing a loop key (variable letter + loop number) and picks
one representative per role:

  1. Function letters of the decomposed tag
       T / E / S → sensor,  C / Y → controller,  V / Z → actuator
  2. Asset-type substrings, for roles still empty after (1)
       sensor / transmitter → sensor
       controller / plc / dcs_controller → controller
       valve / motor / drive → actuator

Within each sweep members are visited in input order and the first candidate
for a role wins. Extra candidates (redundant or backup instruments) are not
merged; their tags are listed on ``ControlLoop.unassigned`` for review.
"""

from typing import Optional

from loguru import logger

from .index import AssetIndex
from .ontology import (
    Asset, ControlLoop, LoopMember, LoopRole, LoopStatus,
    CONTROLLER_TYPES, FUNCTION_TYPES, VARIABLE_TYPES,
)
from .tags import parse_tag


ROLE_ORDER = (LoopRole.SENSOR, LoopRole.CONTROLLER, LoopRole.ACTUATOR)


def roles_from_tag(tag: str) -> set:
    """Loop roles implied by a tag's function letters (empty if unparseable)."""
    parsed = parse_tag(tag)
    if not parsed:
        return set()
    roles = set()
    for letter in parsed.functions:
        _, role = FUNCTION_TYPES.get(letter, (None, None))
        if role is not None:
            roles.add(role)
    return roles


def roles_from_type(asset_type: str) -> set:
    """Loop roles implied by the asset-type string."""
    asset_type = (asset_type or "").lower()
    roles = set()
    if "sensor" in asset_type or "transmitter" in asset_type:
        roles.add(LoopRole.SENSOR)
    if "controller" in asset_type or asset_type in CONTROLLER_TYPES:
        roles.add(LoopRole.CONTROLLER)
    if "valve" in asset_type or "motor" in asset_type or "drive" in asset_type:
        roles.add(LoopRole.ACTUATOR)
    return roles


def loop_status(missing: list) -> LoopStatus:
    if not missing:
        return LoopStatus.COMPLETE
    if len(missing) < len(ROLE_ORDER):
        return LoopStatus.PARTIAL
    return LoopStatus.ORPHANED


def _member(asset: Optional[Asset]) -> Optional[LoopMember]:
    if asset is None:
        return None
    return LoopMember(id=asset.id, tag=asset.tag, asset_type=asset.asset_type)


def reconstruct_loop(loop_key: str, members) -> ControlLoop:
    """Build one ControlLoop from the ordered members sharing ``loop_key``."""
    variable, _, loop_number = loop_key.partition("-")
    chosen: dict[LoopRole, Asset] = {}

    for asset in members:
        for role in roles_from_tag(asset.tag):
            if role not in chosen:
                chosen[role] = asset

    for asset in members:
        for role in roles_from_type(asset.asset_type):
            if role not in chosen:
                chosen[role] = asset

    sensor = chosen.get(LoopRole.SENSOR)
    controller = chosen.get(LoopRole.CONTROLLER)
    actuator = chosen.get(LoopRole.ACTUATOR)
    representatives = [a for a in (sensor, controller, actuator) if a is not None]

    missing = [role.value for role in ROLE_ORDER if role not in chosen]
    picked_ids = {a.id for a in representatives}
    unassigned = [a.tag for a in members if a.id not in picked_ids]
    if unassigned:
        logger.debug(f"Loop {loop_key}: members not used as representatives: {unassigned}")

    process_area = next((a.process_area for a in representatives if a.process_area), None)

    return ControlLoop(
        id=loop_key,
        loop_number=loop_number,
        variable=variable,
        variable_name=VARIABLE_TYPES.get(variable, "Unknown"),
        process_area=process_area,
        sensor=_member(sensor),
        controller=_member(controller),
        actuator=_member(actuator),
        status=loop_status(missing),
        missing_elements=missing,
        network_connected=any(a.is_networked for a in representatives),
        unassigned=unassigned,
    )


def reconstruct_loops(index: AssetIndex) -> list[ControlLoop]:
    """One ControlLoop per loop key in the index, in first-seen order."""
    return [reconstruct_loop(key, members) for key, members in index.by_loop.items()]
