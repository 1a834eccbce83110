"""
Consequence-Chain Builder
==========================
Unions inferred edges into a directed adjacency map and walks it
breadth-first from a trigger asset:

  - explicit visited set (inferred graphs contain cycles)
  - hard hop bound (default 5) independent of graph size
  - per-node event text from the trigger's category
  - per-node severity from a fixed priority cascade

Also hosts the attack-path finder, which walks the same graph from remote
entry points toward high-value targets.
"""

from collections import defaultdict, deque
from typing import Optional

from .config import DEFAULT_CONFIG, InferenceConfig
from .index import AssetIndex
from .ontology import (
    Asset, AttackPath, ChainStep, ConsequenceChain, Layer, Relationship,
    RiskTier, CONTROLLER_TYPES, SEVERITY_RANK,
)


def build_graph(relationships: list[Relationship]) -> dict[str, list]:
    """source id → outgoing relationships, in emission order."""
    graph: dict[str, list] = defaultdict(list)
    for rel in relationships:
        graph[rel.source_id].append(rel)
    return graph


# ── Event & Severity ─────────────────────────────

def describe_consequence(affected: Asset, trigger: Asset) -> str:
    trigger_type = (trigger.asset_type or "").lower()
    if "sensor" in trigger_type or "transmitter" in trigger_type:
        return f"Loss of {trigger.tag} measurement"
    if "controller" in trigger_type or trigger_type in CONTROLLER_TYPES:
        return f"Loss of control from {trigger.tag}"
    if "valve" in trigger_type:
        return f"{trigger.tag} fails to operate"
    return f"{trigger.tag} failure affects {affected.tag}"


def assess_severity(asset: Asset) -> RiskTier:
    """First matching rule wins."""
    if asset.engineering.sil_rating:
        return RiskTier.CRITICAL
    if asset.risk_tier == RiskTier.CRITICAL:
        return RiskTier.CRITICAL
    if asset.layer == Layer.PHYSICAL_PROCESS:
        return RiskTier.HIGH
    if asset.layer == Layer.INSTRUMENTATION and "safety" in (asset.asset_type or "").lower():
        return RiskTier.CRITICAL
    return asset.risk_tier or RiskTier.MEDIUM


def _is_safety_node(asset: Asset) -> bool:
    return bool(asset.engineering.sil_rating) or "safety" in (asset.asset_type or "").lower()


def ultimate_consequence(trigger: Asset, chain: list[ChainStep]) -> str:
    physical = next((s.asset for s in chain if s.asset.layer == Layer.PHYSICAL_PROCESS), None)
    if physical is not None:
        return physical.engineering.consequence_of_failure or f"Process upset at {physical.tag}"

    safety = next((s.asset for s in chain if _is_safety_node(s.asset)), None)
    if safety is not None:
        return safety.engineering.consequence_of_failure or f"Safety function degradation - {safety.tag}"

    return f"Operational impact from {trigger.tag} failure"


# ── Traversal ────────────────────────────────────

def build_consequence_chain(index: AssetIndex, relationships: list[Relationship], trigger_id: str,
                            config: InferenceConfig = DEFAULT_CONFIG) -> ConsequenceChain:
    trigger = index.get(trigger_id)
    if trigger is None:
        return ConsequenceChain.not_found(trigger_id)

    graph = build_graph(relationships)
    visited = {trigger_id}
    queue = deque([(trigger_id, 0)])
    chain: list[ChainStep] = []

    while queue:
        current_id, depth = queue.popleft()
        if current_id != trigger_id:
            asset = index.get(current_id)
            chain.append(ChainStep(
                asset=asset,
                event=describe_consequence(asset, trigger),
                severity=assess_severity(asset),
                depth=depth,
            ))
        if depth >= config.max_chain_depth:
            continue
        for rel in graph.get(current_id, []):
            if rel.target_id in visited or index.get(rel.target_id) is None:
                continue
            visited.add(rel.target_id)
            queue.append((rel.target_id, depth + 1))

    severity = max((s.severity for s in chain), key=SEVERITY_RANK.get, default=RiskTier.LOW)
    return ConsequenceChain(
        trigger_id=trigger_id,
        trigger=trigger,
        chain=chain,
        ultimate_consequence=ultimate_consequence(trigger, chain),
        severity=severity,
    )


# ── Attack Paths ─────────────────────────────────

def is_high_value_target(asset: Asset) -> bool:
    return (
        _is_safety_node(asset)
        or asset.risk_tier == RiskTier.CRITICAL
        or asset.layer == Layer.PHYSICAL_PROCESS
    )


def attack_paths_from(index: AssetIndex, graph: dict, entry: Asset,
                      max_depth: int, target_id: Optional[str] = None) -> list[AttackPath]:
    """Shortest path from one entry point to every reachable high-value target."""
    parents: dict[str, Optional[Relationship]] = {entry.id: None}
    queue = deque([(entry.id, 0)])
    paths = []

    while queue:
        current_id, depth = queue.popleft()
        if current_id != entry.id:
            asset = index.get(current_id)
            wanted = current_id == target_id if target_id else is_high_value_target(asset)
            if wanted:
                paths.append(_trace(entry.id, current_id, parents, asset))
        if depth >= max_depth:
            continue
        for rel in graph.get(current_id, []):
            if rel.target_id in parents or index.get(rel.target_id) is None:
                continue
            parents[rel.target_id] = rel
            queue.append((rel.target_id, depth + 1))
    return paths


def _trace(entry_id: str, target_id: str, parents: dict, target: Asset) -> AttackPath:
    steps = [target_id]
    likelihood = 1.0
    rel = parents[target_id]
    while rel is not None:
        likelihood *= rel.confidence / 100
        steps.append(rel.source_id)
        rel = parents[rel.source_id]
    steps.reverse()
    return AttackPath(
        entry_point_id=entry_id,
        target_id=target_id,
        path_steps=steps,
        consequence_severity=assess_severity(target),
        likelihood_score=round(likelihood * 100),
    )
