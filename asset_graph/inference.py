"""
Relationship Inference Passes
==============================
Six independent passes, each a pure function of the asset index (and, for
the control-loop pass, the reconstructed loops):

  1. control_loop_pass       sensor → controller → actuator
  2. network_topology_pass   VLAN member → switch, switch → firewall
  3. process_hierarchy_pass  instrument → equipment
  4. operator_access_pass    HMI / engineering workstation → controller
  5. safety_pass             safety asset → protected equipment
  6. remote_entry_pass       VPN / remote access → engineering workstation

Passes never see each other's output. Overlapping edges from different
passes are kept as-is; the union is a multigraph.
"""

from typing import Callable, Optional

from loguru import logger

from .config import DEFAULT_CONFIG, InferenceConfig
from .index import AssetIndex
from .ontology import (
    Asset, ControlLoop, InferenceMethod, Layer, Relationship, RelationshipType,
    FIREWALL_TYPES, HMI_TYPES, NETWORK_TYPES, REMOTE_ENTRY_TYPES,
    SAFETY_TYPES, SWITCH_TYPES, WORKSTATION_TYPES,
)
from .tags import parse_tag


def _edge(source, target, rel_type: RelationshipType, confidence: int,
          method: InferenceMethod, description: str) -> Relationship:
    return Relationship(
        source_id=source.id, source_tag=source.tag,
        target_id=target.id, target_tag=target.tag,
        relationship_type=rel_type, confidence=confidence,
        inference_method=method, description=description,
    )


def _same(a, b) -> bool:
    """Equality that never matches two absent values."""
    return a not in (None, "") and a == b


# ── 1. Control Loops ─────────────────────────────

def control_loop_pass(index: AssetIndex, loops: list[ControlLoop],
                      config: InferenceConfig = DEFAULT_CONFIG) -> list[Relationship]:
    relationships = []
    for loop in loops:
        sensor, controller, actuator = loop.sensor, loop.controller, loop.actuator

        # one asset may fill two roles (TCV, SIS logic solvers); no self-edges
        if sensor and controller and sensor.id != controller.id:
            relationships.append(_edge(
                sensor, controller, RelationshipType.MONITORS,
                config.control_loop_confidence, InferenceMethod.TAG_PATTERN,
                f"{sensor.tag} provides {loop.variable_name} measurement to {controller.tag}",
            ))
        if controller and actuator and controller.id != actuator.id:
            relationships.append(_edge(
                controller, actuator, RelationshipType.CONTROLS,
                config.control_loop_confidence, InferenceMethod.TAG_PATTERN,
                f"{controller.tag} controls {actuator.tag} for {loop.variable_name} control",
            ))
        if sensor and actuator and not controller:
            relationships.append(_edge(
                sensor, actuator, RelationshipType.DEPENDS_ON,
                config.incomplete_loop_confidence, InferenceMethod.TAG_PATTERN_INCOMPLETE,
                f"{sensor.tag} and {actuator.tag} appear to be in same loop but controller is missing",
            ))
    return relationships


# ── 2. Network Topology ──────────────────────────

def is_network_device(asset: Asset) -> bool:
    return asset.is_networked and (asset.layer == Layer.NETWORK or asset.asset_type in NETWORK_TYPES)


class AllSwitchesToAllFirewalls:
    """
    Firewall-traversal heuristic: once the plant spans more than one VLAN,
    every switch is assumed to route through every firewall.

    A known over-approximation, kept behind this interface so a real
    topology source can replace it without touching the passes.
    """

    method = InferenceMethod.NETWORK_TOPOLOGY

    def infer(self, index: AssetIndex, config: InferenceConfig = DEFAULT_CONFIG) -> list[Relationship]:
        if len(index.by_vlan) <= 1:
            return []
        devices = [a for a in index.assets() if is_network_device(a)]
        firewalls = [d for d in devices if d.asset_type in FIREWALL_TYPES]
        switches = [d for d in devices if d.asset_type in SWITCH_TYPES]

        relationships = []
        for firewall in firewalls:
            for switch in switches:
                if switch.id == firewall.id:
                    continue
                relationships.append(_edge(
                    switch, firewall, RelationshipType.CONNECTS_TO,
                    config.firewall_traversal_confidence, self.method,
                    f"{switch.tag} routes through {firewall.tag}",
                ))
        return relationships


def network_topology_pass(index: AssetIndex, loops: Optional[list] = None,
                          config: InferenceConfig = DEFAULT_CONFIG,
                          firewall_strategy=None) -> list[Relationship]:
    relationships = []

    for vlan, members in index.by_vlan.items():
        switch = next(
            (a for a in members if a.asset_type in SWITCH_TYPES and is_network_device(a)),
            None,
        )
        if switch is None:
            continue
        for asset in members:
            if asset.id == switch.id or is_network_device(asset):
                continue
            relationships.append(_edge(
                asset, switch, RelationshipType.CONNECTS_TO,
                config.vlan_membership_confidence, InferenceMethod.VLAN_MEMBERSHIP,
                f"{asset.tag} connected to {switch.tag} on VLAN {vlan}",
            ))

    strategy = firewall_strategy or AllSwitchesToAllFirewalls()
    relationships.extend(strategy.infer(index, config))
    return relationships


# ── 3. Process Hierarchy ─────────────────────────

def process_hierarchy_pass(index: AssetIndex, loops: Optional[list] = None,
                           config: InferenceConfig = DEFAULT_CONFIG) -> list[Relationship]:
    instruments = []
    for inst in index.in_layer(Layer.INSTRUMENTATION):
        parsed = parse_tag(inst.tag)
        if parsed:
            instruments.append((inst, parsed))

    relationships = []
    for equip in index.in_layer(Layer.PHYSICAL_PROCESS):
        equip_tag = parse_tag(equip.tag)
        if not equip_tag:
            continue
        for inst, inst_tag in instruments:
            if inst_tag.loop_number == equip_tag.loop_number or _same(inst.process_area, equip.process_area):
                relationships.append(_edge(
                    inst, equip, RelationshipType.MONITORS,
                    config.process_hierarchy_confidence, InferenceMethod.PROCESS_HIERARCHY,
                    f"{inst.tag} monitors {equip.tag}",
                ))
    return relationships


# ── 4. Operator Access ───────────────────────────

def operator_access_pass(index: AssetIndex, loops: Optional[list] = None,
                         config: InferenceConfig = DEFAULT_CONFIG) -> list[Relationship]:
    controllers = index.in_layer(Layer.CONTROL)
    relationships = []

    for hmi in index.of_types(HMI_TYPES):
        for controller in controllers:
            same_vlan = _same(hmi.vlan, controller.vlan)
            same_area = _same(hmi.process_area, controller.process_area)
            if not (same_vlan or same_area):
                continue
            relationships.append(_edge(
                hmi, controller, RelationshipType.ACCESSES,
                config.operator_full_match_confidence if same_vlan and same_area
                else config.operator_partial_match_confidence,
                InferenceMethod.NETWORK_PROXIMITY if same_vlan else InferenceMethod.PROCESS_AREA,
                f"{hmi.tag} provides operator access to {controller.tag}",
            ))

    for ws in index.of_types(WORKSTATION_TYPES):
        for controller in controllers:
            if _same(ws.vlan, controller.vlan):
                relationships.append(_edge(
                    ws, controller, RelationshipType.ACCESSES,
                    config.engineering_access_confidence, InferenceMethod.NETWORK_PROXIMITY,
                    f"{ws.tag} has engineering access to {controller.tag}",
                ))
    return relationships


# ── 5. Safety ────────────────────────────────────

def is_safety_asset(asset: Asset) -> bool:
    tag = (asset.tag or "").upper()
    asset_type = (asset.asset_type or "").lower()
    return bool(
        asset.engineering.sil_rating
        or asset_type in SAFETY_TYPES
        or asset_type.startswith("safety_")
        or "SIS" in tag
        or "SIF" in tag
    )


def safety_pass(index: AssetIndex, loops: Optional[list] = None,
                config: InferenceConfig = DEFAULT_CONFIG) -> list[Relationship]:
    equipment = index.in_layer(Layer.PHYSICAL_PROCESS)
    relationships = []
    for guard in index.assets():
        if not is_safety_asset(guard):
            continue
        for equip in equipment:
            if equip.id != guard.id and _same(equip.process_area, guard.process_area):
                relationships.append(_edge(
                    guard, equip, RelationshipType.PROTECTS,
                    config.safety_function_confidence, InferenceMethod.SAFETY_FUNCTION,
                    f"{guard.tag} provides safety protection for {equip.tag}",
                ))
    return relationships


# ── 6. Remote Entry ──────────────────────────────

def is_remote_entry(asset: Asset) -> bool:
    return asset.asset_type in REMOTE_ENTRY_TYPES or bool(asset.network.remote_access_exposure)


def remote_entry_pass(index: AssetIndex, loops: Optional[list] = None,
                      config: InferenceConfig = DEFAULT_CONFIG) -> list[Relationship]:
    workstations = [
        ws for ws in index.of_types(WORKSTATION_TYPES) if ws.layer != Layer.ENTERPRISE
    ]
    relationships = []
    for entry in index.assets():
        if not is_remote_entry(entry):
            continue
        for ws in workstations:
            if ws.id == entry.id:
                continue
            relationships.append(_edge(
                entry, ws, RelationshipType.ACCESSES,
                config.remote_access_confidence, InferenceMethod.REMOTE_ACCESS_PATH,
                f"{entry.tag} provides remote path to {ws.tag}",
            ))
    return relationships


# Fixed pass order for the union
PASSES: dict[str, Callable] = {
    "control_loop": control_loop_pass,
    "network_topology": network_topology_pass,
    "process_hierarchy": process_hierarchy_pass,
    "operator_access": operator_access_pass,
    "safety": safety_pass,
    "remote_entry": remote_entry_pass,
}


def run_passes(index: AssetIndex, loops: list[ControlLoop], config: InferenceConfig = DEFAULT_CONFIG,
               only: Optional[list] = None, firewall_strategy=None) -> list[Relationship]:
    """Run the selected passes (all by default) and concatenate their edges."""
    relationships = []
    for name, inference_pass in PASSES.items():
        if only is not None and name not in only:
            continue
        if inference_pass is network_topology_pass:
            edges = inference_pass(index, loops, config, firewall_strategy)
        else:
            edges = inference_pass(index, loops, config)
        logger.debug(f"Pass {name}: {len(edges)} relationships")
        relationships.extend(edges)
    return relationships
