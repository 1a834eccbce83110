import pytest

from asset_graph.ontology import (
    Asset, EngineeringContext, NetworkContext, SecurityContext,
)
from asset_graph.reference_plant import build_reference_plant


def _make_asset(asset_id, tag="", asset_type="", layer=None, area="", ip="", vlan=None,
                risk=None, sil="", consequence="", remote=""):
    return Asset(
        id=asset_id, tag=tag, name=tag, asset_type=asset_type, layer=layer,
        engineering=EngineeringContext(
            process_area=area, sil_rating=sil, consequence_of_failure=consequence,
        ),
        network=NetworkContext(ip_address=ip, vlan=vlan, remote_access_exposure=remote),
        security=SecurityContext(risk_tier=risk),
    )


@pytest.fixture
def make_asset():
    return _make_asset


@pytest.fixture
def loop_101(make_asset):
    """Scenario A: complete temperature loop T-101."""
    return [
        make_asset("tic", "TIC-101", "controller", 2),
        make_asset("tt", "TT-101", "temperature_sensor", 2),
        make_asset("tv", "TV-101", "control_valve", 2),
    ]


@pytest.fixture
def reference_assets():
    return build_reference_plant()
