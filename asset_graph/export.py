"""
Export of engine output for the persistence and chat layers.

Document builders are pure; ``write_json`` / ``write_markdown`` are the only
functions in the package that touch the filesystem.
"""

import json
from pathlib import Path

from loguru import logger

from .engine import RelationshipInferenceEngine
from .ontology import LAYER_NAMES, to_dict


def analysis_document(engine: RelationshipInferenceEngine) -> dict:
    """Full analysis as a JSON-ready dict."""
    summary = engine.get_summary()
    return {
        "metadata": {"version": "1.0", "generator": "asset-graph inference engine"},
        "summary": summary.as_camel(),
        "assets": [to_dict(a) for a in engine.index.assets()],
        "control_loops": [to_dict(loop) for loop in engine.infer_control_loops()],
        "relationships": [to_dict(r) for r in engine.infer_all_relationships()],
        "attack_paths": [to_dict(p) for p in engine.find_attack_paths()],
    }


def knowledge_base_markdown(engine: RelationshipInferenceEngine) -> str:
    """Asset-by-asset text for LLM grounding."""
    relationships = engine.infer_all_relationships()
    outgoing: dict[str, list] = {}
    for rel in relationships:
        outgoing.setdefault(rel.source_id, []).append(rel)

    lines = ["# Plant Asset Knowledge Base\n"]
    for asset in engine.index.assets():
        lines.append(f"\n## {asset.tag or asset.id} — {asset.name}")
        layer = LAYER_NAMES.get(asset.layer, "Unknown") if asset.layer else "Unknown"
        lines.append(f"- Type: {asset.asset_type or 'N/A'} (layer: {layer})")
        if asset.process_area:
            lines.append(f"- Process area: {asset.process_area}")
        if asset.ip_address:
            vlan = f" / VLAN {asset.vlan}" if asset.vlan is not None else ""
            lines.append(f"- Network: {asset.ip_address}{vlan}")
        if asset.engineering.sil_rating:
            lines.append(f"- Safety integrity: {asset.engineering.sil_rating}")
        if asset.engineering.consequence_of_failure:
            lines.append(f"- Consequence of failure: {asset.engineering.consequence_of_failure}")
        edges = outgoing.get(asset.id, [])
        if edges:
            lines.append(f"- Inferred relationships ({len(edges)}):")
            for rel in edges:
                lines.append(f"  - {rel.relationship_type.value} {rel.target_tag} "
                             f"({rel.confidence}%, {rel.inference_method.value})")

    loops = engine.infer_control_loops()
    if loops:
        lines.append("\n## Control Loops")
        for loop in loops:
            missing = f" — missing {', '.join(loop.missing_elements)}" if loop.missing_elements else ""
            lines.append(f"- {loop.id} ({loop.variable_name}): {loop.status.value}{missing}")
    return "\n".join(lines)


def write_json(engine: RelationshipInferenceEngine, filepath: str):
    document = analysis_document(engine)
    Path(filepath).write_text(json.dumps(document, indent=2, default=str), encoding="utf-8")
    logger.info(f"Analysis exported to {filepath} ({len(document['relationships'])} relationships)")


def write_markdown(engine: RelationshipInferenceEngine, filepath: str):
    Path(filepath).write_text(knowledge_base_markdown(engine), encoding="utf-8")
    logger.info(f"LLM knowledge base exported: {filepath}")
