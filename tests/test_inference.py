from asset_graph.index import AssetIndex
from asset_graph.inference import (
    AllSwitchesToAllFirewalls, control_loop_pass, network_topology_pass,
    operator_access_pass, process_hierarchy_pass, remote_entry_pass, run_passes,
    safety_pass,
)
from asset_graph.loops import reconstruct_loops
from asset_graph.ontology import InferenceMethod, RelationshipType


def _edges(rels):
    return {(r.source_tag, r.target_tag, r.relationship_type, r.confidence) for r in rels}


def _control(assets):
    index = AssetIndex(assets)
    return control_loop_pass(index, reconstruct_loops(index))


# ── Control loops ──

def test_complete_loop_edges(loop_101):
    rels = _control(loop_101)
    assert _edges(rels) == {
        ("TT-101", "TIC-101", RelationshipType.MONITORS, 90),
        ("TIC-101", "TV-101", RelationshipType.CONTROLS, 90),
    }
    assert all(r.inference_method == InferenceMethod.TAG_PATTERN for r in rels)


def test_missing_controller_yields_dependency(loop_101):
    rels = _control(loop_101[1:])
    assert len(rels) == 1
    rel = rels[0]
    assert (rel.source_tag, rel.target_tag) == ("TT-101", "TV-101")
    assert rel.relationship_type == RelationshipType.DEPENDS_ON
    assert rel.confidence == 60
    assert rel.inference_method == InferenceMethod.TAG_PATTERN_INCOMPLETE


def test_no_self_edges_for_dual_role_asset(make_asset):
    rels = _control([make_asset("tt", "TT-8"), make_asset("tcv", "TCV-8")])
    assert _edges(rels) == {("TT-8", "TCV-8", RelationshipType.MONITORS, 90)}


# ── Network ──

def _network_assets(make_asset):
    return [
        make_asset("sw1", "SW-1", "switch", 5, ip="10.0.10.1", vlan=10),
        make_asset("plc", "PLC-1", "plc", 3, ip="10.0.10.5", vlan=10),
        make_asset("sw1b", "SW-1B", "switch", 5, ip="10.0.10.2", vlan=10),
        make_asset("hmi", "HMI-1", "hmi", 4, ip="10.0.20.5", vlan=20),
        make_asset("sw2", "SW-2", "industrial_switch", 5, ip="10.0.20.1", vlan=20),
        make_asset("fw", "FW-1", "firewall", 5, ip="10.0.0.1"),
    ]


def test_vlan_members_connect_to_first_switch(make_asset):
    rels = network_topology_pass(AssetIndex(_network_assets(make_asset)))
    vlan_edges = {(r.source_tag, r.target_tag) for r in rels
                  if r.inference_method == InferenceMethod.VLAN_MEMBERSHIP}
    assert vlan_edges == {("PLC-1", "SW-1"), ("HMI-1", "SW-2")}
    assert all(r.confidence == 85 for r in rels if r.inference_method == InferenceMethod.VLAN_MEMBERSHIP)


def test_every_switch_routes_through_every_firewall(make_asset):
    rels = network_topology_pass(AssetIndex(_network_assets(make_asset)))
    fw_edges = {(r.source_tag, r.target_tag, r.confidence) for r in rels
                if r.inference_method == InferenceMethod.NETWORK_TOPOLOGY}
    assert fw_edges == {("SW-1", "FW-1", 70), ("SW-1B", "FW-1", 70), ("SW-2", "FW-1", 70)}


def test_single_vlan_has_no_firewall_edges(make_asset):
    assets = [a for a in _network_assets(make_asset) if a.vlan != 20]
    rels = network_topology_pass(AssetIndex(assets))
    assert not [r for r in rels if r.inference_method == InferenceMethod.NETWORK_TOPOLOGY]


def test_firewall_heuristic_is_swappable(make_asset):
    class NoFirewalls:
        def infer(self, index, config):
            return []

    index = AssetIndex(_network_assets(make_asset))
    rels = network_topology_pass(index, firewall_strategy=NoFirewalls())
    assert {r.inference_method for r in rels} == {InferenceMethod.VLAN_MEMBERSHIP}
    assert len(AllSwitchesToAllFirewalls().infer(index)) == 3


# ── Process hierarchy ──

def test_instruments_monitor_equipment_by_loop_number_or_area(make_asset):
    assets = [
        make_asset("r", "R-101", "reactor", 1, area="Reaction"),
        make_asset("tt", "TT-101", "temperature_sensor", 2),
        make_asset("pt", "PT-555", "pressure_sensor", 2, area="Reaction"),
        make_asset("ft", "FT-900", "flow_sensor", 2, area="Utilities"),
        make_asset("lt", "LT-901", "level_sensor", 2),
    ]
    rels = process_hierarchy_pass(AssetIndex(assets))
    assert _edges(rels) == {
        ("TT-101", "R-101", RelationshipType.MONITORS, 75),
        ("PT-555", "R-101", RelationshipType.MONITORS, 75),
    }


# ── Operator access ──

def test_operator_access_confidences(make_asset):
    assets = [
        make_asset("plc", "PLC-1", "plc", 3, area="A", vlan=10),
        make_asset("hmi-both", "HMI-1", "hmi", 4, area="A", vlan=10),
        make_asset("hmi-area", "HMI-2", "hmi", 4, area="A", vlan=30),
        make_asset("hmi-none", "HMI-3", "operator_station", 4, area="B"),
        make_asset("ews", "EWS-1", "engineering_workstation", 4, vlan=10),
        make_asset("ews-far", "EWS-2", "engineering_workstation", 4, area="A"),
    ]
    rels = operator_access_pass(AssetIndex(assets))
    got = {(r.source_tag, r.target_tag, r.confidence, r.inference_method) for r in rels}
    assert got == {
        ("HMI-1", "PLC-1", 90, InferenceMethod.NETWORK_PROXIMITY),
        ("HMI-2", "PLC-1", 70, InferenceMethod.PROCESS_AREA),
        ("EWS-1", "PLC-1", 85, InferenceMethod.NETWORK_PROXIMITY),
    }
    assert all(r.relationship_type == RelationshipType.ACCESSES for r in rels)


# ── Safety ──

def test_safety_assets_protect_equipment_in_same_area(make_asset):
    assets = [
        make_asset("r", "R-101", "reactor", 1, area="Reaction"),
        make_asset("tk", "TK-5", "tank", 1, area="Storage"),
        make_asset("sil", "PT-1", "pressure_sensor", 2, area="Reaction", sil="SIL2"),
        make_asset("typed", "XV-1", "safety_actuator", 2, area="Reaction"),
        make_asset("named", "SIF-22", "", 3, area="Storage"),
        make_asset("plain", "PT-2", "pressure_sensor", 2, area="Reaction"),
    ]
    rels = safety_pass(AssetIndex(assets))
    assert _edges(rels) == {
        ("PT-1", "R-101", RelationshipType.PROTECTS, 80),
        ("XV-1", "R-101", RelationshipType.PROTECTS, 80),
        ("SIF-22", "TK-5", RelationshipType.PROTECTS, 80),
    }


# ── Remote entry ──

def test_remote_entry_reaches_workstations_without_shared_network(make_asset):
    assets = [
        make_asset("vpn", "VPN-01", "vpn_concentrator", 6, vlan=99, area="DMZ"),
        make_asset("ews", "EWS-04", "engineering_workstation", 4),
    ]
    rels = remote_entry_pass(AssetIndex(assets))
    assert len(rels) == 1
    rel = rels[0]
    assert (rel.source_tag, rel.target_tag) == ("VPN-01", "EWS-04")
    assert rel.relationship_type == RelationshipType.ACCESSES
    assert rel.confidence == 75
    assert rel.inference_method == InferenceMethod.REMOTE_ACCESS_PATH


def test_remote_exposure_flag_marks_entry(make_asset):
    assets = [
        make_asset("modem", "GW-1", "cellular_gateway", 5, remote="4G modem"),
        make_asset("ews", "EWS-1", "engineering_workstation", 4),
    ]
    assert len(remote_entry_pass(AssetIndex(assets))) == 1


# ── Union ──

def test_passes_are_independent_and_selectable(reference_assets):
    index = AssetIndex(reference_assets)
    loops = reconstruct_loops(index)
    everything = run_passes(index, loops)
    only_safety = run_passes(index, loops, only=["safety"])

    assert only_safety == safety_pass(index, loops)
    assert len(everything) == sum(len(run_passes(index, loops, only=[name])) for name in (
        "control_loop", "network_topology", "process_hierarchy",
        "operator_access", "safety", "remote_entry",
    ))
