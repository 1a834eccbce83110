from asset_graph.index import AssetIndex
from asset_graph.loops import reconstruct_loops
from asset_graph.ontology import LoopStatus


def _loops(assets):
    return {loop.id: loop for loop in reconstruct_loops(AssetIndex(assets))}


def test_complete_loop(loop_101):
    loop = _loops(loop_101)["T-101"]
    assert loop.status == LoopStatus.COMPLETE
    assert loop.missing_elements == []
    assert loop.variable_name == "Temperature"
    assert (loop.sensor.tag, loop.controller.tag, loop.actuator.tag) == ("TT-101", "TIC-101", "TV-101")


def test_missing_controller_is_partial(loop_101):
    loop = _loops(loop_101[1:])["T-101"]
    assert loop.status == LoopStatus.PARTIAL
    assert loop.missing_elements == ["controller"]


def test_removing_any_role_never_leaves_loop_complete(loop_101):
    for i in range(3):
        remaining = loop_101[:i] + loop_101[i + 1:]
        loop = _loops(remaining)["T-101"]
        assert loop.status != LoopStatus.COMPLETE
        assert len(loop.missing_elements) == 1


def test_orphaned_loop(make_asset):
    loop = _loops([make_asset("h", "HI-7", "hmi")])["H-7"]
    assert loop.status == LoopStatus.ORPHANED
    assert loop.missing_elements == ["sensor", "controller", "actuator"]
    assert loop.variable_name == "Hand (manual)"


def test_asset_type_fallback_when_letters_inconclusive(make_asset):
    assets = [
        make_asset("a", "TI-5", "temperature_sensor"),
        make_asset("b", "TX-5", "dcs_controller"),
        make_asset("c", "TM-5", "motor"),
    ]
    loop = _loops(assets)["T-5"]
    assert loop.status == LoopStatus.COMPLETE
    assert (loop.sensor.id, loop.controller.id, loop.actuator.id) == ("a", "b", "c")


def test_tag_letters_take_priority_over_type(make_asset):
    assets = [
        make_asset("typed", "TI-9", "temperature_sensor"),
        make_asset("lettered", "TT-9", "analyzer"),
    ]
    assert _loops(assets)["T-9"].sensor.id == "lettered"


def test_first_candidate_wins_and_redundant_members_are_listed(make_asset):
    """Redundant transmitters are not merged: input order picks the sensor."""
    a = make_asset("tt-a", "TT-101A", "temperature_sensor")
    b = make_asset("tt-b", "TT-101B", "temperature_sensor")

    forward = _loops([a, b])["T-101"]
    backward = _loops([b, a])["T-101"]

    assert forward.sensor.id == "tt-a"
    assert forward.unassigned == ["TT-101B"]
    assert backward.sensor.id == "tt-b"
    assert backward.unassigned == ["TT-101A"]


def test_network_connected_and_area_from_representatives(make_asset):
    assets = [
        make_asset("tt", "TT-3", area="North"),
        make_asset("tic", "TIC-3", ip="10.1.1.1"),
    ]
    loop = _loops(assets)["T-3"]
    assert loop.network_connected
    assert loop.process_area == "North"

    assert not _loops([make_asset("tt", "TT-4")])["T-4"].network_connected


def test_one_asset_can_fill_two_roles(make_asset):
    loop = _loops([make_asset("tcv", "TCV-8")])["T-8"]
    assert loop.controller.id == loop.actuator.id == "tcv"
    assert loop.missing_elements == ["sensor"]

