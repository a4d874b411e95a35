#!/usr/bin/env python3
"""CLI for exploring a money-trail network.

Usage:
    python scripts/trail_cli.py paths koch-brothers --end fox-news
    python scripts/trail_cli.py paths koch-brothers --max-hops 2 --relationship grant
    python scripts/trail_cli.py downstream koch-brothers --limit 10
    python scripts/trail_cli.py stats americans-for-prosperity
    python scripts/trail_cli.py shells
    python scripts/trail_cli.py layout --width 1200 --height 800 --format d3

Reads the network from --network (a JSON file) or from the provider chosen
by NETWORK_PROVIDER.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add the project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
from dotenv import load_dotenv
load_dotenv()  # Must run before any money_trail.* imports

from money_trail.config import DEFAULT_MAX_HOPS
from money_trail.formatting import format_currency, truncate_text
from money_trail.graph import (
    Graph,
    GraphAnalytics,
    PathFinder,
    PathFinderOptions,
    relationship_label,
)
from money_trail.layout import LayoutOptions, create_layout
from money_trail.providers import JsonFileProvider, create_provider
from money_trail.views import TrailQuery, TrailViewBuilder

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    # Keep stdout for reports and --json output
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)
logger = structlog.get_logger()


async def load_network(network_path: str | None) -> Graph:
    if network_path:
        provider = JsonFileProvider(network_path)
    else:
        provider = create_provider()
    return await provider.fetch()


def print_header(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def cmd_paths(graph: Graph, args) -> int:
    finder = PathFinder(graph)
    options = PathFinderOptions(
        max_hops=args.max_hops,
        relationship_filter=args.relationship,
        node_type_filter=args.node_type,
    )
    paths = finder.find(args.start, args.end, options)

    if args.json:
        print(json.dumps([p.to_dict() for p in paths[: args.limit]], indent=2))
        return 0

    target = f" -> {args.end}" if args.end else ""
    print_header(f"MONEY PATHS: {args.start}{target}")
    if not paths:
        print("No paths found.")
        return 0

    names = graph.node_map()
    for i, path in enumerate(paths[: args.limit], 1):
        print(f"\n{i}. {format_currency(path.total_amount)} over {path.hop_count} hop(s)")
        for link, (a, b) in zip(path.links, zip(path.node_ids, path.node_ids[1:])):
            a_name = names[a].name if a in names else a
            b_name = names[b].name if b in names else b
            amount = f" ({format_currency(link.amount)})" if link.amount else ""
            print(f"   {a_name} -[{relationship_label(link.relationship)}{amount}]- {b_name}")

    if len(paths) > args.limit:
        print(f"\n... and {len(paths) - args.limit} more")
    return 0


def cmd_downstream(graph: Graph, args) -> int:
    recipients = GraphAnalytics(graph).downstream_recipients(args.source, args.max_hops)

    if args.json:
        print(json.dumps([r.to_dict() for r in recipients[: args.limit]], indent=2))
        return 0

    print_header(f"DOWNSTREAM RECIPIENTS: {args.source}")
    if not recipients:
        print("No recipients found.")
        return 0

    for recipient in recipients[: args.limit]:
        name = truncate_text(recipient.node.name, 40)
        print(
            f"  {name:<43} {recipient.node.type.value:<15} "
            f"{format_currency(recipient.total_amount):>8}  ({recipient.path_count} paths)"
        )
    return 0


def cmd_stats(graph: Graph, args) -> int:
    node = graph.get_node(args.node)
    if node is None:
        print(f"Unknown node: {args.node}", file=sys.stderr)
        return 1

    analytics = GraphAnalytics(graph)
    stats = analytics.node_stats(node.id)
    shell = analytics.is_likely_shell_org(node.id)

    if args.json:
        print(json.dumps({**stats.to_dict(), "likelyShellOrg": shell}, indent=2))
        return 0

    print_header(f"{node.name} ({node.type.value})")
    print(f"Incoming links:   {stats.incoming_count}")
    print(f"Outgoing links:   {stats.outgoing_count}")
    print(f"Funding received: {format_currency(stats.total_funding_received)}")
    print(f"Funding given:    {format_currency(stats.total_funding_given)}")
    print(f"Likely shell org: {'yes' if shell else 'no'}")
    if stats.connected_node_types:
        print("\nConnected node types:")
        for node_type, count in sorted(stats.connected_node_types.items()):
            print(f"  {node_type:<18} {count}")
    return 0


def cmd_shells(graph: Graph, args) -> int:
    analytics = GraphAnalytics(graph)
    shells = analytics.identify_shell_orgs()

    if args.json:
        print(json.dumps([n.to_dict() for n in shells], indent=2))
        return 0

    print_header("LIKELY PASS-THROUGH ORGANIZATIONS")
    if not shells:
        print("None found.")
        return 0

    for node in shells:
        stats = analytics.node_stats(node.id)
        print(
            f"  {truncate_text(node.name, 40):<43} "
            f"in {format_currency(stats.total_funding_received):>8}  "
            f"out {format_currency(stats.total_funding_given):>8}"
        )
    return 0


def cmd_layout(graph: Graph, args) -> int:
    query = TrailQuery(
        start_id=args.start,
        end_id=args.end,
        max_hops=args.max_hops,
        relationship_filter=args.relationship or [],
        node_type_filter=args.node_type or [],
    )
    view = TrailViewBuilder(graph).build(query)

    options = LayoutOptions(width=args.width, height=args.height, seed=args.seed)
    controller = create_layout(view.nodes, view.links, options)
    snapshot = controller.run_until_settled(max_steps=args.max_steps)
    controller.close()

    logger.info(
        "layout_complete",
        nodes=len(snapshot.nodes),
        ticks=snapshot.tick,
        settled=snapshot.settled,
    )

    if args.format == "cytoscape":
        output = view.to_cytoscape_format()
    elif args.format == "snapshot":
        output = snapshot.to_dict()
    else:
        output = view.to_d3_format(snapshot)

    text = json.dumps(output, indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Wrote {args.format} layout to {args.output}")
    else:
        print(text)
    return 0


def add_filter_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--max-hops",
        type=int,
        default=DEFAULT_MAX_HOPS,
        help=f"Hop budget (default: {DEFAULT_MAX_HOPS})",
    )
    parser.add_argument(
        "--relationship",
        action="append",
        help="Only follow links with this relationship (repeatable)",
    )
    parser.add_argument(
        "--node-type",
        action="append",
        help="Only enter nodes of this type (repeatable)",
    )


def main():
    parser = argparse.ArgumentParser(
        description="Explore a campaign-finance money-trail network"
    )
    parser.add_argument(
        "--network",
        help="Path to a {nodes, links} JSON file (default: NETWORK_PROVIDER config)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of a report",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    paths_parser = subparsers.add_parser("paths", help="Find money paths from a node")
    paths_parser.add_argument("start", help="Start node id")
    paths_parser.add_argument("--end", help="End node id (omit for every path)")
    paths_parser.add_argument("--limit", type=int, default=20, help="Paths to show")
    add_filter_args(paths_parser)

    downstream_parser = subparsers.add_parser(
        "downstream", help="Rank nodes reachable from a source"
    )
    downstream_parser.add_argument("source", help="Source node id")
    downstream_parser.add_argument(
        "--max-hops", type=int, default=DEFAULT_MAX_HOPS, help="Hop budget"
    )
    downstream_parser.add_argument("--limit", type=int, default=20, help="Recipients to show")

    stats_parser = subparsers.add_parser("stats", help="Funding statistics for one node")
    stats_parser.add_argument("node", help="Node id")

    subparsers.add_parser("shells", help="List likely pass-through organizations")

    layout_parser = subparsers.add_parser("layout", help="Compute a settled force layout")
    layout_parser.add_argument("--start", help="Narrow to paths from this node")
    layout_parser.add_argument("--end", help="Narrow to paths ending at this node")
    add_filter_args(layout_parser)
    layout_parser.add_argument("--width", type=float, default=1200, help="Canvas width")
    layout_parser.add_argument("--height", type=float, default=800, help="Canvas height")
    layout_parser.add_argument("--seed", type=int, help="Seed for initial positions")
    layout_parser.add_argument("--max-steps", type=int, default=1000, help="Step cap")
    layout_parser.add_argument(
        "--format",
        choices=["d3", "cytoscape", "snapshot"],
        default="d3",
        help="Output format (default: d3)",
    )
    layout_parser.add_argument("--output", "-o", help="Write JSON here instead of stdout")

    args = parser.parse_args()

    graph = asyncio.run(load_network(args.network))
    if graph.is_empty:
        logger.warning("empty_network", network=args.network)

    commands = {
        "paths": cmd_paths,
        "downstream": cmd_downstream,
        "stats": cmd_stats,
        "shells": cmd_shells,
        "layout": cmd_layout,
    }
    sys.exit(commands[args.command](graph, args))


if __name__ == "__main__":
    main()
