#!/usr/bin/env python3
"""
Command line interface for FactGraph.

Usage:
    factgraph parse answer.txt
    factgraph normalize payload.json --output normalized.json
    factgraph explore payload.json --type service --search risk --seed 7
    factgraph serve --port 8000
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .services.fact_parser import FactTextParser
from .services.graph_explorer import FilterState, GraphExplorer
from .services.response_normalizer import ResponseNormalizer, to_canonical_graph
from .shared import CanonicalGraph, FactGraphError, get_settings, setup_logging


def _read_json(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _write_output(data: Any, output: Optional[str]) -> None:
    if not output:
        return
    with open(output, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
    print(f"💾 Results saved to: {output}")


def _load_graph(path: str) -> CanonicalGraph:
    """A canonical graph file, or a backend payload whose graph is extracted."""
    data = _read_json(path)
    if isinstance(data, dict) and 'nodes' in data and 'edges' in data:
        return CanonicalGraph.model_validate(data)

    normalized = ResponseNormalizer().normalize(data)
    tenant = data.get('tenant') if isinstance(data, dict) else None
    return to_canonical_graph(normalized, tenant=tenant or None)


def parse_command(args):
    """Parse facts out of an answer text file"""
    text = Path(args.file).read_text(encoding='utf-8')
    result = FactTextParser().parse(text)

    if result is None:
        print("❌ No graph content found")
        return 1

    print(f"🔍 Found {len(result.nodes)} nodes and {len(result.edges)} edges")
    for edge in result.edges[:10]:
        citations = "".join(f"[{i}]" for i in edge.citation_indices)
        print(f"  - {edge.source_id} -[{edge.relation_label}]-> {edge.target_id} {citations}".rstrip())
    if len(result.edges) > 10:
        print(f"  ... and {len(result.edges) - 10} more")
    if result.skipped_items:
        print(f"⚠️ Skipped {result.skipped_items} unparseable items")

    _write_output(result.to_wire(), args.output)
    return 0


def normalize_command(args):
    """Normalize a backend payload file"""
    normalized = ResponseNormalizer().normalize(_read_json(args.file))

    shape = "structured" if normalized.has_structured_data else "legacy"
    print(f"📄 {shape.capitalize()} response: {len(normalized.nodes)} nodes, {len(normalized.edges)} edges")
    if normalized.has_research_data:
        print(f"🔬 {len(normalized.research_targets)} research targets, "
              f"{len(normalized.research_findings)} findings")
    print("")
    print(normalized.chat_response)

    _write_output(normalized.to_wire(), args.output)
    return 0


def explore_command(args):
    """Filter a graph and print what remains visible"""
    explorer = GraphExplorer(_load_graph(args.file))
    state = FilterState(
        selected_types=frozenset(args.type or []),
        selected_relations=frozenset(args.relation or []),
        search_term=args.search or "",
        min_degree=args.min_degree,
        max_degree=args.max_degree,
        show_isolates=args.show_isolates,
    )
    positioned = explorer.positioned_view(state, seed=args.seed)
    stats = explorer.statistics()

    print(f"📊 {stats.node_count} nodes, {stats.edge_count} edges, "
          f"{stats.type_count} types, {stats.isolate_count} isolates")
    print(f"👁️ {len(positioned.nodes)} nodes and {len(positioned.edges)} edges visible")
    for node in positioned.nodes[:20]:
        badge = positioned.badges[node.id]
        citations = "".join(f"[{i}]" for i in badge.shown)
        if badge.overflow:
            citations += f" +{badge.overflow}"
        print(f"  - {node.label} ({node.type}) degree={explorer.degree(node.id)} "
              f"at ({node.x:.0f}, {node.y:.0f}) {citations}".rstrip())
    if len(positioned.nodes) > 20:
        print(f"  ... and {len(positioned.nodes) - 20} more")

    _write_output(positioned.to_wire(), args.output)
    return 0


def serve_command(args):
    """Start the API server"""
    import uvicorn

    from .api import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_level=settings.log_level.lower()
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='factgraph',
        description='FactGraph - knowledge graph extraction and layout',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='FactGraph operations')

    # Parse command
    parse_parser = subparsers.add_parser('parse', help='Parse facts out of answer text')
    parse_parser.add_argument('file', help='Text file with the answer')
    parse_parser.add_argument('--output', help='Save the parsed graph to a JSON file')
    parse_parser.set_defaults(func=parse_command)

    # Normalize command
    normalize_parser = subparsers.add_parser('normalize', help='Normalize a backend payload')
    normalize_parser.add_argument('file', help='JSON file with the payload')
    normalize_parser.add_argument('--output', help='Save the normalized response to a JSON file')
    normalize_parser.set_defaults(func=normalize_command)

    # Explore command
    explore_parser = subparsers.add_parser('explore', help='Filter and lay out a graph')
    explore_parser.add_argument('file', help='JSON file with a canonical graph or a backend payload')
    explore_parser.add_argument('--type', action='append', help='Entity type to show (repeatable)')
    explore_parser.add_argument('--relation', action='append', help='Relation to show (repeatable)')
    explore_parser.add_argument('--search', help='Case-insensitive label substring')
    explore_parser.add_argument('--min-degree', type=int, default=0, help='Smallest degree shown')
    explore_parser.add_argument('--max-degree', type=int, default=None, help='Largest degree shown')
    explore_parser.add_argument('--show-isolates', action='store_true', help='Show nodes without edges')
    explore_parser.add_argument('--seed', type=int, default=None, help='Layout seed')
    explore_parser.add_argument('--output', help='Save the positioned view to a JSON file')
    explore_parser.set_defaults(func=explore_command)

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Start the API server')
    serve_parser.add_argument('--host', help='Bind host')
    serve_parser.add_argument('--port', type=int, help='Bind port')
    serve_parser.set_defaults(func=serve_command)

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        print("\n💡 Examples:")
        print("  factgraph parse answer.txt")
        print("  factgraph normalize payload.json --output normalized.json")
        print("  factgraph explore graph.json --type service --show-isolates")
        print("  factgraph serve --port 8000")
        return 1

    setup_logging()
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\n⚠️ Operation cancelled by user")
        return 1
    except (FactGraphError, OSError, ValueError) as e:
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
