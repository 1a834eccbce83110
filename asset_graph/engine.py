"""
Asset Graph — Relationship Inference Engine
============================================
Entry point tying the stages together:

    assets → AssetIndex → {loop reconstruction, six inference passes}
           → unioned graph → consequence chains / attack paths / summary

An engine is built once from an asset snapshot. Only the index survives
construction; every query recomputes its derived records, so the same
instance can be queried repeatedly or from several threads. Build a new
engine whenever the underlying asset data changes.
"""

from typing import Iterable, Optional

from loguru import logger

from .config import DEFAULT_CONFIG, InferenceConfig
from .consequence import attack_paths_from, build_consequence_chain, build_graph
from .index import AssetIndex
from .inference import is_remote_entry, run_passes
from .loops import reconstruct_loops
from .ontology import (
    Asset, AttackPath, ConsequenceChain, ControlLoop, InferenceSummary,
    LoopStatus, Relationship,
)


class RelationshipInferenceEngine:
    """
    Derives control loops, relationships and consequence chains from a flat
    asset inventory.

    Accepts Asset instances or ingestion dicts (see ``Asset.from_dict``).
    Malformed input never raises; it simply contributes less structure.
    """

    def __init__(self, assets: Iterable, config: Optional[InferenceConfig] = None,
                 firewall_strategy=None):
        self.config = config or DEFAULT_CONFIG
        self.firewall_strategy = firewall_strategy
        records = []
        for a in assets:
            if isinstance(a, Asset):
                records.append(a)
            elif isinstance(a, dict):
                records.append(Asset.from_dict(a))
            else:
                logger.warning(f"Skipping asset record of type {type(a).__name__}: {a!r}")
        self.index = AssetIndex(records)
        logger.info(f"Relationship engine indexed {len(self.index)} assets, "
                    f"{len(self.index.by_loop)} loop keys, {len(self.index.by_vlan)} VLANs")

    # ── Loops & Relationships ────────────────────────

    def infer_control_loops(self) -> list[ControlLoop]:
        return reconstruct_loops(self.index)

    def infer_relationships(self, passes: Optional[list] = None) -> list[Relationship]:
        """Run a subset of passes by name (see ``inference.PASSES``)."""
        return run_passes(self.index, self.infer_control_loops(), self.config,
                          only=passes, firewall_strategy=self.firewall_strategy)

    def infer_all_relationships(self) -> list[Relationship]:
        return self.infer_relationships()

    def get_asset_relationships(self, asset_id: str) -> dict[str, list]:
        """Outgoing and incoming edges of one asset."""
        relationships = self.infer_all_relationships()
        return {
            "outgoing": [r for r in relationships if r.source_id == asset_id],
            "incoming": [r for r in relationships if r.target_id == asset_id],
        }

    # ── Consequence Analysis ─────────────────────────

    def build_consequence_chain(self, asset_id: str) -> ConsequenceChain:
        chain = build_consequence_chain(
            self.index, self.infer_all_relationships(), asset_id, self.config,
        )
        if not chain.found:
            logger.warning(f"Consequence chain requested for unknown asset {asset_id}")
        return chain

    def find_attack_paths(self, entry_id: Optional[str] = None,
                          target_id: Optional[str] = None) -> list[AttackPath]:
        """Shortest paths from remote entry points to high-value targets."""
        if entry_id is not None:
            entry = self.index.get(entry_id)
            if entry is None:
                logger.warning(f"Attack paths requested for unknown entry point {entry_id}")
                return []
            entries = [entry]
        else:
            entries = [a for a in self.index.assets() if is_remote_entry(a)]

        graph = build_graph(self.infer_all_relationships())
        paths = []
        for entry in entries:
            paths.extend(attack_paths_from(
                self.index, graph, entry, self.config.attack_path_max_depth, target_id,
            ))
        return paths

    # ── Summary ──────────────────────────────────────

    def get_summary(self) -> InferenceSummary:
        relationships = self.infer_all_relationships()
        loops = self.infer_control_loops()
        total = len(self.index)
        networked = len(self.index.networked())

        by_type: dict[str, int] = {}
        for rel in relationships:
            by_type[rel.relationship_type.value] = by_type.get(rel.relationship_type.value, 0) + 1

        return InferenceSummary(
            total_assets=total,
            total_relationships=len(relationships),
            control_loops={
                status.value: sum(1 for loop in loops if loop.status == status)
                for status in LoopStatus
            },
            network_coverage={
                "total": total,
                "networked": networked,
                "percentage": round(networked / total * 100) if total else 0,
            },
            by_relationship_type=by_type,
        )


def create_relationship_engine(assets: Iterable, config: Optional[InferenceConfig] = None,
                               firewall_strategy=None) -> RelationshipInferenceEngine:
    return RelationshipInferenceEngine(assets, config, firewall_strategy)
