"""
Asset Graph — Ontology & Schema
================================
Defines the data model shared by every stage of the inference engine:

LAYER HIERARCHY:
  1 Physical Process → 2 Instrumentation → 3 Control → 4 Operations
  → 5 Network → 6 Enterprise

RELATIONSHIP TYPES:
  Control:   controls, monitors, depends_on
  Network:   connects_to, accesses
  Safety:    protects

DERIVED RECORDS:
  - TagComponents     (decomposed tag string)
  - ControlLoop       (sensor / controller / actuator grouping)
  - Relationship      (typed, confidence-scored, auditable edge)
  - ConsequenceChain  (ordered impact sequence from one trigger)
  - AttackPath        (remote entry → high-value target)
  - InferenceSummary  (dashboard counters)

Assets are read-only input. Every derived record is a plain value owned by
the analysis call that produced it.
"""

from __future__ import annotations
from enum import Enum
from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from loguru import logger


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ENUMERATIONS — Controlled Vocabularies
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Layer(int, Enum):
    """Ordinal plant layer, physical process up to enterprise."""
    PHYSICAL_PROCESS = 1
    INSTRUMENTATION = 2
    CONTROL = 3
    OPERATIONS = 4
    NETWORK = 5
    ENTERPRISE = 6


LAYER_NAMES = {
    Layer.PHYSICAL_PROCESS: "Physical Process",
    Layer.INSTRUMENTATION: "Instrumentation & Actuation",
    Layer.CONTROL: "Control Systems",
    Layer.OPERATIONS: "Operations & Monitoring",
    Layer.NETWORK: "Network Infrastructure",
    Layer.ENTERPRISE: "Enterprise Integration",
}


class AssetType(str, Enum):
    """Asset taxonomy, grouped by the layer each type normally lives in."""
    # Layer 1 - Physical process equipment
    REACTOR = "reactor"
    HEAT_EXCHANGER = "heat_exchanger"
    PUMP = "pump"
    COMPRESSOR = "compressor"
    TANK = "tank"
    COLUMN = "column"
    FURNACE = "furnace"
    VESSEL = "vessel"
    BOILER = "boiler"
    COOLING_TOWER = "cooling_tower"
    FLARE = "flare"
    BLOWER = "blower"
    FAN = "fan"
    FILTER = "filter"
    DRYER = "dryer"
    CONVEYOR = "conveyor"
    MIXER = "mixer"
    AGITATOR = "agitator"
    CENTRIFUGE = "centrifuge"
    STORAGE_VESSEL = "storage_vessel"
    SILO = "silo"
    RELIEF_HEADER = "relief_header"
    SCRUBBER = "scrubber"
    HEATER = "heater"
    COOLER = "cooler"
    # Layer 2 - Instrumentation & actuation
    TEMPERATURE_SENSOR = "temperature_sensor"
    PRESSURE_SENSOR = "pressure_sensor"
    FLOW_SENSOR = "flow_sensor"
    LEVEL_SENSOR = "level_sensor"
    ANALYTICAL_SENSOR = "analytical_sensor"
    ANALYZER = "analyzer"
    SPEED_SENSOR = "speed_sensor"
    VIBRATION_SENSOR = "vibration_sensor"
    CONTROL_VALVE = "control_valve"
    MOTOR = "motor"
    DRIVE = "drive"
    SAFETY_SENSOR = "safety_sensor"
    SAFETY_ACTUATOR = "safety_actuator"
    SHUTDOWN_VALVE = "shutdown_valve"
    BLOWDOWN_VALVE = "blowdown_valve"
    ISOLATION_VALVE = "isolation_valve"
    RELIEF_VALVE = "relief_valve"
    SAFETY_VALVE = "safety_valve"
    FIELD_CONTROLLER = "controller"
    # Layer 3 - Control systems
    PLC = "plc"
    DCS_CONTROLLER = "dcs_controller"
    RTU = "rtu"
    MOTION_CONTROLLER = "motion_controller"
    IO_MODULE = "io_module"
    SAFETY_PLC = "safety_plc"
    SAFETY_CONTROLLER = "safety_controller"
    SIS_CONTROLLER = "sis_controller"
    REMOTE_IO = "remote_io"
    MARSHALLING_CABINET = "marshalling_cabinet"
    # Layer 4 - Operations & monitoring
    HMI = "hmi"
    OPERATOR_STATION = "operator_station"
    HISTORIAN = "historian"
    ENGINEERING_WORKSTATION = "engineering_workstation"
    SCADA_MASTER = "scada_master"
    OPC_SERVER = "opc_server"
    DATA_DIODE = "data_diode"
    SERVER = "server"
    APPLICATION_SERVER = "application_server"
    BATCH_SERVER = "batch_server"
    # Layer 5 - Network infrastructure
    SWITCH = "switch"
    INDUSTRIAL_SWITCH = "industrial_switch"
    ROUTER = "router"
    FIREWALL = "firewall"
    WIRELESS_AP = "wireless_ap"
    WIRELESS_ACCESS_POINT = "wireless_access_point"
    CELLULAR_GATEWAY = "cellular_gateway"
    JUMP_SERVER = "jump_server"
    BASTION_HOST = "bastion_host"
    # Layer 6 - Enterprise integration
    ERP_CONNECTOR = "erp_connector"
    ERP_GATEWAY = "erp_gateway"
    CLOUD_GATEWAY = "cloud_gateway"
    VPN_CONCENTRATOR = "vpn_concentrator"
    REMOTE_ACCESS = "remote_access"
    MES_SERVER = "mes_server"


# Type groups used by the inference passes
SWITCH_TYPES = frozenset({AssetType.SWITCH.value, AssetType.INDUSTRIAL_SWITCH.value})
FIREWALL_TYPES = frozenset({AssetType.FIREWALL.value})
NETWORK_TYPES = frozenset({
    AssetType.SWITCH.value, AssetType.INDUSTRIAL_SWITCH.value, AssetType.ROUTER.value,
    AssetType.FIREWALL.value, AssetType.WIRELESS_AP.value,
    AssetType.WIRELESS_ACCESS_POINT.value, AssetType.CELLULAR_GATEWAY.value,
})
HMI_TYPES = frozenset({AssetType.HMI.value, AssetType.OPERATOR_STATION.value})
WORKSTATION_TYPES = frozenset({AssetType.ENGINEERING_WORKSTATION.value})
REMOTE_ENTRY_TYPES = frozenset({AssetType.VPN_CONCENTRATOR.value, AssetType.REMOTE_ACCESS.value})
CONTROLLER_TYPES = frozenset({AssetType.PLC.value, AssetType.DCS_CONTROLLER.value})
SAFETY_TYPES = frozenset({
    AssetType.SAFETY_PLC.value, AssetType.SAFETY_SENSOR.value,
    AssetType.SAFETY_ACTUATOR.value, AssetType.SAFETY_CONTROLLER.value,
    AssetType.SAFETY_VALVE.value, AssetType.SIS_CONTROLLER.value,
})


class RiskTier(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_RANK = {RiskTier.LOW: 0, RiskTier.MEDIUM: 1, RiskTier.HIGH: 2, RiskTier.CRITICAL: 3}


class RelationshipType(str, Enum):
    """Edge types emitted by the inference passes."""
    CONTROLS = "controls"
    MONITORS = "monitors"
    DEPENDS_ON = "depends_on"
    CONNECTS_TO = "connects_to"
    ACCESSES = "accesses"
    PROTECTS = "protects"


class InferenceMethod(str, Enum):
    """Audit label recording which rule produced an edge."""
    TAG_PATTERN = "tag_pattern"
    TAG_PATTERN_INCOMPLETE = "tag_pattern_incomplete"
    VLAN_MEMBERSHIP = "vlan_membership"
    NETWORK_TOPOLOGY = "network_topology"
    PROCESS_HIERARCHY = "process_hierarchy"
    NETWORK_PROXIMITY = "network_proximity"
    PROCESS_AREA = "process_area"
    SAFETY_FUNCTION = "safety_function"
    REMOTE_ACCESS_PATH = "remote_access_path"


class LoopStatus(str, Enum):
    COMPLETE = "complete"      # sensor + controller + actuator
    PARTIAL = "partial"        # one or two roles missing
    ORPHANED = "orphaned"      # no role resolved


class LoopRole(str, Enum):
    SENSOR = "sensor"
    CONTROLLER = "controller"
    ACTUATOR = "actuator"


# ISA measured-variable letters
VARIABLE_TYPES = {
    "T": "Temperature",
    "P": "Pressure",
    "F": "Flow",
    "L": "Level",
    "A": "Analytical",
    "S": "Speed",
    "W": "Weight",
    "D": "Density",
    "M": "Moisture",
    "V": "Vibration",
    "Z": "Position",
    "H": "Hand (manual)",
    "X": "Unclassified",
    "Y": "Event/State",
}

# ISA succeeding-letter functions and the loop role they imply
FUNCTION_TYPES = {
    "E": ("Element", LoopRole.SENSOR),
    "T": ("Transmitter", LoopRole.SENSOR),
    "S": ("Switch", LoopRole.SENSOR),
    "C": ("Controller", LoopRole.CONTROLLER),
    "Y": ("Relay/Compute", LoopRole.CONTROLLER),
    "V": ("Valve", LoopRole.ACTUATOR),
    "Z": ("Driver/Actuator", LoopRole.ACTUATOR),
    "I": ("Indicator", None),
    "A": ("Alarm", None),
    "R": ("Recorder", None),
    "L": ("Light", None),
    "G": ("Glass/Gauge", None),
    "H": ("Hand (manual)", None),
}


def to_dict(obj) -> dict:
    """Dataclass → plain dict with enum members flattened to their values."""
    return _plain(asdict(obj))


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ASSET MODEL — Engine Input
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass
class EngineeringContext:
    """Process / safety engineering attributes."""
    process_area: str = ""
    sil_rating: str = ""  # SIL1..SIL4
    consequence_of_failure: str = ""
    safety_function: str = ""
    pid_reference: str = ""


@dataclass
class NetworkContext:
    ip_address: str = ""
    vlan: Optional[int] = None
    zone: str = ""
    remote_access_exposure: str = ""  # free text, non-empty means exposed


@dataclass
class SecurityContext:
    risk_tier: Optional[RiskTier] = None


@dataclass
class Asset:
    """A tagged item from the plant inventory. Read-only to the engine."""
    id: str = ""
    tag: str = ""  # The Rosetta Stone (e.g. TIC-101, R-101)
    name: str = ""
    asset_type: str = ""  # AssetType value; unknown vendor types kept as-is
    layer: Optional[Layer] = None

    engineering: EngineeringContext = field(default_factory=EngineeringContext)
    network: NetworkContext = field(default_factory=NetworkContext)
    security: SecurityContext = field(default_factory=SecurityContext)

    @property
    def process_area(self) -> str:
        return self.engineering.process_area

    @property
    def ip_address(self) -> str:
        return self.network.ip_address

    @property
    def vlan(self) -> Optional[int]:
        return self.network.vlan

    @property
    def risk_tier(self) -> Optional[RiskTier]:
        return self.security.risk_tier

    @property
    def is_networked(self) -> bool:
        return bool(self.network.ip_address)

    @classmethod
    def from_dict(cls, data: dict) -> "Asset":
        """
        Build an Asset from an ingestion record.

        Accepts the camelCase canon shape (tagNumber, assetType,
        engineering.processArea, network.ipAddress, security.riskTier, ...)
        as well as snake_case keys. Malformed layer / VLAN / risk values and
        non-dict context sections are dropped with a warning.
        """
        asset_id = str(data.get("id") or "")
        eng = _section(data, "engineering", asset_id)
        net = _section(data, "network", asset_id)
        sec = _section(data, "security", asset_id)

        return cls(
            id=asset_id,
            tag=str(_pick(data, "tagNumber", "tag_number", "tag") or ""),
            name=str(data.get("name") or ""),
            asset_type=str(_pick(data, "assetType", "asset_type") or ""),
            layer=_coerce_layer(data.get("layer"), asset_id),
            engineering=EngineeringContext(
                process_area=str(_pick(eng, "processArea", "process_area") or ""),
                sil_rating=str(_pick(eng, "silRating", "sil_rating") or ""),
                consequence_of_failure=str(_pick(eng, "consequenceOfFailure", "consequence_of_failure") or ""),
                safety_function=str(_pick(eng, "safetyFunction", "safety_function") or ""),
                pid_reference=str(_pick(eng, "pidReference", "pid_reference") or ""),
            ),
            network=NetworkContext(
                ip_address=str(_pick(net, "ipAddress", "ip_address") or ""),
                vlan=_coerce_vlan(net.get("vlan"), asset_id),
                zone=str(net.get("zone") or ""),
                remote_access_exposure=str(_pick(net, "remoteAccessExposure", "remote_access_exposure") or ""),
            ),
            security=SecurityContext(
                risk_tier=_coerce_risk(_pick(sec, "riskTier", "risk_tier"), asset_id),
            ),
        )


def _section(data: dict, key: str, asset_id: str) -> dict:
    value = data.get(key)
    if value in (None, "", {}):
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Asset {asset_id or '<no id>'}: dropping malformed {key} section {value!r}")
        return {}
    return value


def _pick(data: dict, *keys):
    for key in keys:
        if data.get(key) not in (None, ""):
            return data[key]
    return None


def _coerce_layer(value, asset_id: str) -> Optional[Layer]:
    if value in (None, ""):
        return None
    try:
        return Layer(int(value))
    except (TypeError, ValueError):
        logger.warning(f"Asset {asset_id or '<no id>'}: dropping invalid layer {value!r}")
        return None


def _coerce_vlan(value, asset_id: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Asset {asset_id or '<no id>'}: dropping invalid VLAN {value!r}")
        return None


def _coerce_risk(value, asset_id: str) -> Optional[RiskTier]:
    if value in (None, ""):
        return None
    try:
        return RiskTier(str(value).lower())
    except ValueError:
        logger.warning(f"Asset {asset_id or '<no id>'}: dropping unknown risk tier {value!r}")
        return None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  DERIVED RECORDS — Engine Output
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass
class TagComponents:
    """Decomposed tag: <variable><functions*><separator><loop_number><suffix?>."""
    variable: str
    functions: list = field(default_factory=list)
    loop_number: str = ""
    suffix: Optional[str] = None  # A, B, ... for redundant instruments
    separator: str = ""
    suffix_separator: str = ""  # equipment grammar only (P-101-A)
    is_equipment: bool = False  # matched the looser equipment grammar
    raw: str = ""

    @property
    def loop_key(self) -> str:
        return f"{self.variable}-{self.loop_number}"

    def __str__(self) -> str:
        return f"{self.variable}{''.join(self.functions)}{self.separator}{self.loop_number}{self.suffix_separator}{self.suffix or ''}"


@dataclass
class LoopMember:
    id: str
    tag: str
    asset_type: str


@dataclass
class ControlLoop:
    """One reconstructed control function."""
    id: str  # loop key, e.g. T-101
    loop_number: str
    variable: str
    variable_name: str
    process_area: Optional[str] = None

    sensor: Optional[LoopMember] = None
    controller: Optional[LoopMember] = None
    actuator: Optional[LoopMember] = None

    status: LoopStatus = LoopStatus.ORPHANED
    missing_elements: list = field(default_factory=list)
    network_connected: bool = False
    unassigned: list = field(default_factory=list)  # tags not chosen as any role


@dataclass
class Relationship:
    """A directed, confidence-scored inferred edge. Not deduplicated across passes."""
    source_id: str
    source_tag: str
    target_id: str
    target_tag: str
    relationship_type: RelationshipType
    confidence: int  # 0-100
    inference_method: InferenceMethod
    description: str = ""


@dataclass
class ChainStep:
    asset: Asset
    event: str
    severity: RiskTier
    depth: int = 1


@dataclass
class ConsequenceChain:
    trigger_id: str
    trigger: Optional[Asset] = None
    chain: list = field(default_factory=list)  # [ChainStep]
    ultimate_consequence: str = ""
    severity: RiskTier = RiskTier.LOW
    found: bool = True

    @classmethod
    def not_found(cls, trigger_id: str) -> "ConsequenceChain":
        return cls(
            trigger_id=trigger_id, found=False,
            ultimate_consequence=f"Asset {trigger_id} not found",
        )


@dataclass
class AttackPath:
    """Path from a remote entry point to a high-value target."""
    entry_point_id: str
    target_id: str
    path_steps: list = field(default_factory=list)  # ordered asset ids, entry first
    consequence_severity: RiskTier = RiskTier.MEDIUM
    likelihood_score: int = 0  # 0-100
    attack_vector: str = "remote_access"


@dataclass
class InferenceSummary:
    total_assets: int = 0
    total_relationships: int = 0
    control_loops: dict = field(default_factory=dict)  # status → count
    network_coverage: dict = field(default_factory=dict)  # total, networked, percentage
    by_relationship_type: dict = field(default_factory=dict)

    def as_camel(self) -> dict[str, Any]:
        """Dashboard payload shape."""
        return {
            "totalAssets": self.total_assets,
            "totalRelationships": self.total_relationships,
            "controlLoops": dict(self.control_loops),
            "networkCoverage": dict(self.network_coverage),
            "byRelationshipType": dict(self.by_relationship_type),
        }
