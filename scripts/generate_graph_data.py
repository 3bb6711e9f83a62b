#!/usr/bin/env python3
"""
Generate positioned knowledge graph data for the web graph explorer.

Reads a JSON list of paper records, builds the knowledge graph, applies
an optional view filter and writes nodes with layout positions.

Usage:
    python scripts/generate_graph_data.py --input papers.json --output graph.json
    python scripts/generate_graph_data.py -i papers.json -o graph.json --view materials --preset spacious_3d
"""

import argparse
import json
import sys
import time
from dataclasses import replace
from pathlib import Path

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from knowledge_graph import KnowledgeGraphBuilder, filter_min_connections, filter_view
from layout import ForceDirectedLayout, config_to_dict, get_layout_config
from layout.layout_config import LAYOUT_PRESETS


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate knowledge graph visualization data')
    parser.add_argument('--input', '-i', type=str, required=True,
                       help='JSON file with a list of paper records')
    parser.add_argument('--output', '-o', type=str, default='graph.json',
                       help='Output JSON file')
    parser.add_argument('--view', type=str, default='all',
                       choices=['all', 'materials', 'organisms', 'authors'],
                       help='Restrict the graph to papers plus one entity type')
    parser.add_argument('--preset', type=str, default='default',
                       choices=sorted(LAYOUT_PRESETS),
                       help='Layout preset')
    parser.add_argument('--iterations', type=int, default=None,
                       help='Override the number of simulation iterations')
    parser.add_argument('--min-connections', type=int, default=1,
                       help='Drop non-paper nodes with fewer connections')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Print progress')
    return parser.parse_args(argv)


def load_records(path: Path) -> list:
    with open(path) as f:
        data = json.load(f)
    # Accept either a bare list or an API response with a "papers" key
    if isinstance(data, dict):
        data = data.get('papers', [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of paper records in {path}")
    return data


def main(argv=None):
    args = parse_args(argv)
    start_time = time.time()

    records = load_records(Path(args.input))
    if args.verbose:
        print(f"Loaded {len(records)} records from {args.input}")

    builder = KnowledgeGraphBuilder(verbose=args.verbose)
    graph = builder.build(records)
    graph = filter_min_connections(graph, args.min_connections)
    graph = filter_view(graph, args.view)

    config = get_layout_config(args.preset)
    if args.iterations is not None:
        config = replace(config, iterations=args.iterations)

    layout = ForceDirectedLayout(config, verbose=args.verbose)
    positioned = layout.compute_layout(graph.nodes, graph.edges)
    graph.nodes = positioned

    output = graph.to_dict()
    output['layout'] = config_to_dict(config)
    output['layout']['final_energy'] = layout.energy_history[-1] if layout.energy_history else 0.0
    output['build_report'] = dict(builder.report.__dict__)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(output, f, indent=2)

    if args.verbose:
        print(f"Saved {len(positioned)} positioned nodes to {output_path} "
              f"in {time.time() - start_time:.2f} seconds")


if __name__ == '__main__':
    main()
