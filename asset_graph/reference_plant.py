"""
Asset Graph — Reference Plant
==============================
A small exothermic reactor unit spanning all six layers, used as CLI demo
data and as the integration fixture for the test suite.

  Area "Reaction":   R-101 reactor, P-101 feed pump, E-101 cooler
                     T-101 loop (complete), P-102 loop (no controller),
                     L-103 loop (transmitter only), SIS-101 logic solver
  Control / ops:     PLC-01, HMI-01, EWS-01
  Network:           SW-01 (VLAN 10), SW-02 (VLAN 20), FW-01
  Enterprise:        VPN-01 vendor remote access
"""

from loguru import logger

from .ontology import (
    Asset, AssetType, EngineeringContext, Layer, NetworkContext, RiskTier,
    SecurityContext,
)


def _asset(asset_id, tag, name, asset_type, layer, area="", ip="", vlan=None,
           risk=None, sil="", consequence="", remote=""):
    return Asset(
        id=asset_id, tag=tag, name=name, asset_type=asset_type.value, layer=layer,
        engineering=EngineeringContext(
            process_area=area, sil_rating=sil, consequence_of_failure=consequence,
        ),
        network=NetworkContext(ip_address=ip, vlan=vlan, remote_access_exposure=remote),
        security=SecurityContext(risk_tier=risk),
    )


def build_reference_plant() -> list[Asset]:
    """Ordered asset list for the reference reactor unit."""
    area = "Reaction"
    assets = [
        # ── Layer 1: Physical process ──
        _asset("a-r101", "R-101", "CSTR Reactor", AssetType.REACTOR, Layer.PHYSICAL_PROCESS,
               area=area, risk=RiskTier.CRITICAL,
               consequence="Runaway reaction with potential vessel rupture"),
        _asset("a-p101", "P-101", "Reactor Feed Pump", AssetType.PUMP, Layer.PHYSICAL_PROCESS,
               area=area, risk=RiskTier.HIGH,
               consequence="Loss of feed, reactor starvation"),
        _asset("a-e101", "E-101", "Reactor Jacket Cooler", AssetType.HEAT_EXCHANGER,
               Layer.PHYSICAL_PROCESS, area=area, risk=RiskTier.HIGH),

        # ── Layer 2: Instrumentation ──
        _asset("a-tt101", "TT-101", "Reactor Temperature Transmitter", AssetType.TEMPERATURE_SENSOR,
               Layer.INSTRUMENTATION, area=area, risk=RiskTier.HIGH),
        _asset("a-tic101", "TIC-101", "Reactor Temperature Controller", AssetType.FIELD_CONTROLLER,
               Layer.INSTRUMENTATION, area=area, ip="10.10.10.21", vlan=10, risk=RiskTier.HIGH),
        _asset("a-tv101", "TV-101", "Cooling Water Valve", AssetType.CONTROL_VALVE,
               Layer.INSTRUMENTATION, area=area, risk=RiskTier.HIGH),
        _asset("a-pt102", "PT-102", "Reactor Pressure Transmitter", AssetType.PRESSURE_SENSOR,
               Layer.INSTRUMENTATION, area=area),
        _asset("a-pv102", "PV-102", "Vent Valve", AssetType.CONTROL_VALVE,
               Layer.INSTRUMENTATION, area=area),
        _asset("a-lt103", "LT-103", "Reactor Level Transmitter", AssetType.LEVEL_SENSOR,
               Layer.INSTRUMENTATION, area=area, risk=RiskTier.LOW),
        _asset("a-xv101", "XV-101-SIS", "Feed Shutdown Valve", AssetType.SHUTDOWN_VALVE,
               Layer.INSTRUMENTATION, area=area, sil="SIL2",
               consequence="Unable to isolate feed on high temperature"),

        # ── Layer 3: Control systems ──
        _asset("a-plc01", "PLC-01", "Unit PLC", AssetType.PLC, Layer.CONTROL,
               area=area, ip="10.10.10.10", vlan=10, risk=RiskTier.HIGH),
        _asset("a-sis101", "SIS-101", "Reactor SIS Logic Solver", AssetType.SIS_CONTROLLER,
               Layer.CONTROL, area=area, ip="10.10.10.11", vlan=10, sil="SIL2",
               risk=RiskTier.CRITICAL),

        # ── Layer 4: Operations ──
        _asset("a-hmi01", "HMI-01", "Control Room HMI", AssetType.HMI, Layer.OPERATIONS,
               area=area, ip="10.10.20.30", vlan=20, risk=RiskTier.MEDIUM),
        _asset("a-ews01", "EWS-01", "Engineering Workstation", AssetType.ENGINEERING_WORKSTATION,
               Layer.OPERATIONS, ip="10.10.10.40", vlan=10, risk=RiskTier.HIGH),

        # ── Layer 5: Network ──
        _asset("a-sw01", "SW-01", "Control Network Switch", AssetType.INDUSTRIAL_SWITCH,
               Layer.NETWORK, ip="10.10.10.1", vlan=10),
        _asset("a-sw02", "SW-02", "Operations Network Switch", AssetType.SWITCH,
               Layer.NETWORK, ip="10.10.20.1", vlan=20),
        _asset("a-fw01", "FW-01", "OT Perimeter Firewall", AssetType.FIREWALL,
               Layer.NETWORK, ip="10.10.0.1", risk=RiskTier.HIGH),

        # ── Layer 6: Enterprise ──
        _asset("a-vpn01", "VPN-01", "Vendor VPN Concentrator", AssetType.VPN_CONCENTRATOR,
               Layer.ENTERPRISE, ip="192.168.1.5", risk=RiskTier.HIGH,
               remote="Vendor support access"),
    ]
    logger.info(f"Reference plant built: {len(assets)} assets")
    return assets
