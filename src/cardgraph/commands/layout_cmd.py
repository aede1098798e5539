"""
cardgraph.commands.layout_cmd - Compute the visual graph layout.

Writes the GraphData payload (positions, neighbors, importance and
cluster per card) as JSON to stdout or to --output.
"""

from __future__ import annotations

import argparse
import json

from cardgraph.commands.analyze import load_engine


def run(args: argparse.Namespace) -> int:
    """Run the layout command."""
    engine = load_engine(args)
    data = engine.layout(seed=args.seed, cluster_mode=args.mode)
    output = json.dumps(data.to_dict(), indent=2)

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        print(f"Generated: {args.output}")
    else:
        print(output)
    return 0
