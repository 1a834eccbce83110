"""Engine configuration: confidence scores and traversal bounds."""

from dataclasses import dataclass


@dataclass(frozen=True)
class InferenceConfig:
    """Tunable constants for the inference passes and graph traversal."""
    # Control-loop pass
    control_loop_confidence: int = 90           # sensor→controller, controller→actuator
    incomplete_loop_confidence: int = 60        # sensor→actuator, controller missing

    # Network-topology pass
    vlan_membership_confidence: int = 85
    firewall_traversal_confidence: int = 70

    # Process-hierarchy pass
    process_hierarchy_confidence: int = 75

    # Operator-access pass
    operator_full_match_confidence: int = 90    # same VLAN and same area
    operator_partial_match_confidence: int = 70
    engineering_access_confidence: int = 85

    # Safety / remote-entry passes
    safety_function_confidence: int = 80
    remote_access_confidence: int = 75

    # Traversal
    max_chain_depth: int = 5                    # consequence-chain hop bound
    attack_path_max_depth: int = 6


DEFAULT_CONFIG = InferenceConfig()
