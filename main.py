#!/usr/bin/env python3
"""
Asset Graph — CLI Runner
=========================
Load assets → infer loops & relationships → export analysis artifacts.

Usage:
  # Reference plant, default output directory
  python main.py --output ./output

  # Assets exported by the ingestion layer (JSON list of asset records)
  python main.py --assets ./assets.json --output ./output

  # Consequence chain for one asset
  python main.py --trigger a-tt101

  # Shallower traversal
  python main.py --trigger a-tt101 --max-depth 3
"""

import sys
import json
import time
import argparse
from pathlib import Path

from loguru import logger

from asset_graph.config import InferenceConfig
from asset_graph.engine import create_relationship_engine
from asset_graph.export import write_json, write_markdown
from asset_graph.ontology import Asset
from asset_graph.reference_plant import build_reference_plant


def load_assets(path: str) -> list[Asset]:
    """Read a JSON list (or {"assets": [...]}) of asset records."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Cannot read assets from {path}: {exc}")
        raise SystemExit(1)
    records = data.get("assets", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        logger.warning(f"{path}: expected a list of asset records, got {type(records).__name__}")
        return []
    return [Asset.from_dict(r) for r in records if isinstance(r, dict)]


def log_summary(engine):
    summary = engine.get_summary()
    loops = summary.control_loops
    coverage = summary.network_coverage
    logger.info("━" * 60)
    logger.info("Inference Summary:")
    logger.info(f"  Assets:               {summary.total_assets}")
    logger.info(f"  Relationships:        {summary.total_relationships}")
    for rel_type, count in sorted(summary.by_relationship_type.items()):
        logger.info(f"    {rel_type: <20}{count}")
    logger.info(f"  Loops complete:       {loops['complete']}")
    logger.info(f"  Loops partial:        {loops['partial']}")
    logger.info(f"  Loops orphaned:       {loops['orphaned']}")
    logger.info(f"  Network coverage:     {coverage['networked']}/{coverage['total']} "
                f"({coverage['percentage']}%)")
    logger.info("━" * 60)


def log_chain(engine, trigger_id: str):
    result = engine.build_consequence_chain(trigger_id)
    if not result.found:
        logger.error(result.ultimate_consequence)
        return
    logger.info(f"Consequence chain from {result.trigger.tag}:")
    for step in result.chain:
        logger.info(f"  [{step.depth}] {step.asset.tag: <12} {step.severity.value: <9} {step.event}")
    logger.info(f"  Ultimate consequence: {result.ultimate_consequence}")


def main():
    parser = argparse.ArgumentParser(
        description="Asset Graph: relationship & consequence-chain inference",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--assets", "-a", type=str, default=None,
                        help="JSON file of asset records (default: built-in reference plant)")
    parser.add_argument("--output", "-o", type=str, default="./output",
                        help="Output directory for exported artifacts (default: ./output)")
    parser.add_argument("--trigger", "-t", type=str, default=None,
                        help="Asset id to build a consequence chain for")
    parser.add_argument("--max-depth", type=int, default=5,
                        help="Consequence-chain hop bound (default: 5)")
    parser.add_argument("--no-export", action="store_true",
                        help="Log results only, write no files")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging (per-pass edge counts)")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO",
               format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}")

    start_time = time.time()
    assets = load_assets(args.assets) if args.assets else build_reference_plant()
    engine = create_relationship_engine(assets, InferenceConfig(max_chain_depth=args.max_depth))

    log_summary(engine)
    if args.trigger:
        log_chain(engine, args.trigger)

    if not args.no_export:
        output_path = Path(args.output)
        output_path.mkdir(parents=True, exist_ok=True)
        write_json(engine, str(output_path / "asset_graph.json"))
        write_markdown(engine, str(output_path / "asset_knowledge_base.md"))

    logger.info(f"Completed in {time.time() - start_time:.2f}s")


if __name__ == "__main__":
    main()
