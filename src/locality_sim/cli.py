"""
Command-line interface for the locality simulator.
"""

import argparse
import logging
import sys

import yaml

from locality_sim.analysis.related import related_accesses
from locality_sim.errors import LocalitySimError
from locality_sim.graph import MapNode, load_graph
from locality_sim.simulation.cache_line import cache_line
from locality_sim.simulation.tiling import region_color, tiling_regions
from locality_sim.simulator import Simulator, SimulatorConfig
from locality_sim.utils import format_bytes, format_ratio, parse_index


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="locality-sim - Cache-line reuse-distance analysis for loop nests"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # =========================================
    # simulate command
    # =========================================
    sim_parser = subparsers.add_parser(
        "simulate",
        help="Simulate a graph and report reuse distances and misses"
    )
    sim_parser.add_argument("graph", help="Path to graph description YAML file")
    sim_parser.add_argument(
        "-c", "--config",
        help="Path to simulator config YAML file"
    )
    sim_parser.add_argument(
        "--cache-line",
        type=int,
        default=None,
        help="Cache-line size in bytes, 0 disables grouping (default: 32)"
    )
    sim_parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Reuse-distance threshold for misses (default: 10)"
    )
    sim_parser.add_argument(
        "-o", "--output",
        help="Output file for results (YAML format)"
    )
    sim_parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while enumerating maps"
    )
    sim_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    # =========================================
    # info command
    # =========================================
    info_parser = subparsers.add_parser(
        "info",
        help="Display containers and loop nests of a graph"
    )
    info_parser.add_argument("graph", help="Path to graph description YAML file")

    # =========================================
    # cacheline command
    # =========================================
    cl_parser = subparsers.add_parser(
        "cacheline",
        help="List the elements sharing a cache line with an index"
    )
    cl_parser.add_argument("graph", help="Path to graph description YAML file")
    cl_parser.add_argument("--data", required=True, help="Container name")
    cl_parser.add_argument("--index", required=True, help="Index, e.g. 1,2")
    cl_parser.add_argument(
        "--cache-line",
        type=int,
        default=32,
        help="Cache-line size in bytes (default: 32)"
    )

    # =========================================
    # tiling command
    # =========================================
    tiling_parser = subparsers.add_parser(
        "tiling",
        help="List the map iterations (tiles) that touch an element"
    )
    tiling_parser.add_argument("graph", help="Path to graph description YAML file")
    tiling_parser.add_argument("--data", required=True, help="Container name")
    tiling_parser.add_argument("--index", required=True, help="Index, e.g. 1,2")

    # =========================================
    # related command
    # =========================================
    rel_parser = subparsers.add_parser(
        "related",
        help="List the accesses related to an element"
    )
    rel_parser.add_argument("graph", help="Path to graph description YAML file")
    rel_parser.add_argument("--data", required=True, help="Container name")
    rel_parser.add_argument("--index", required=True, help="Index, e.g. 1,2")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    # =========================================
    # Execute command
    # =========================================
    commands = {
        "simulate": cmd_simulate,
        "info": cmd_info,
        "cacheline": cmd_cacheline,
        "tiling": cmd_tiling,
        "related": cmd_related,
    }
    try:
        return commands[args.command](args)
    except (LocalitySimError, OSError, ValueError) as e:
        print(f"Error: {e}")
        if getattr(args, "verbose", False):
            import traceback
            traceback.print_exc()
        return 1


def _build_config(args) -> SimulatorConfig:
    config = SimulatorConfig.from_yaml(args.config) if args.config else SimulatorConfig()
    if args.cache_line is not None:
        config.cache_line_bytes = args.cache_line
    if args.threshold is not None:
        config.reuse_distance_threshold = args.threshold
    if args.progress:
        config.progress = True
    return config


def cmd_simulate(args) -> int:
    """Execute simulate command."""
    graph = load_graph(args.graph)
    config = _build_config(args)

    print("Locality Simulation")
    print("=" * 60)
    print(f"Graph: {graph.name} ({args.graph})")
    print(f"Cache line: {config.cache_line_bytes} B")
    print(f"Reuse-distance threshold: {config.reuse_distance_threshold}")
    print("=" * 60)

    result = Simulator(graph, config).recalculate_all()
    summary = result.summary()

    print(f"Cells touched:  {summary['cells']}")
    print(f"Stack touches:  {summary['touches']}")
    print(f"Cold misses:    {summary['cold_misses']}")
    print(f"Total misses:   {summary['total_misses']} "
          f"({format_ratio(summary['total_misses'], summary['touches'])})")

    print("\nMisses per container:")
    for name, misses in summary["misses_by_container"].items():
        print(f"  {name}: {misses}")

    print("\nHistograms:")
    for name, histogram in result.histograms.all().items():
        keys = histogram.sorted_keys()
        if keys:
            print(f"  {name}: {len(keys)} buckets, keys {keys[0]}..{keys[-1]}")
        else:
            print(f"  {name}: empty")

    if result.movement:
        print("\nMemory movement:")
        for (src, dst), volume in result.movement.items():
            print(f"  {graph.node(src).label} -> {graph.node(dst).label}: {format_bytes(volume)}")

    if result.errors:
        print("\nSkipped maps:")
        for map_id, message in result.errors.items():
            print(f"  {graph.node(map_id).label}: {message}")

    if args.output:
        output_data = {
            "config": config.to_dict(),
            **result.to_dict(),
        }
        with open(args.output, "w") as f:
            yaml.safe_dump(output_data, f, default_flow_style=False, sort_keys=False)
        print(f"\nResults saved to: {args.output}")

    return 0


def cmd_info(args) -> int:
    """Execute info command."""
    graph = load_graph(args.graph)

    print("Graph Information")
    print("=" * 60)
    print(f"Name: {graph.name}")
    print(f"Symbols: {graph.symbols}")
    for kind, count in graph.summary().items():
        print(f"  {kind}: {count}")

    print("\nContainers:")
    for container in graph.containers.values():
        shape = ", ".join(f"{d.name}={d.value}" for d in container.shape)
        strides = ", ".join(str(s.value) for s in container.strides)
        print(f"  {container.name}[{shape}] strides=({strides}) "
              f"element_size={container.element_size}")

    print("\nLoop nests:")
    for map_id in graph.map_nodes():
        node = graph.node(map_id)
        depth = len(graph.ancestors(map_id))
        print(f"  {'  ' * depth}{node.label} {node.range_label}")
        for child in node.children:
            if not isinstance(graph.node(child), MapNode):
                print(f"  {'  ' * (depth + 1)}{graph.node(child).label}")

    return 0


def cmd_cacheline(args) -> int:
    """Execute cacheline command."""
    graph = load_graph(args.graph)
    if args.data not in graph.containers:
        print(f"Error: unknown container {args.data}")
        return 1
    container = graph.containers[args.data]
    index = parse_index(args.index)

    line = cache_line(container, index, args.cache_line)
    print(f"Cache line of {container.name}{list(index)} ({args.cache_line} B):")
    for sibling in line:
        marker = " *" if sibling == index else ""
        print(f"  {list(sibling)} @ byte {container.byte_offset(sibling)}{marker}")
    if not line:
        print("  (none)")
    return 0


def cmd_tiling(args) -> int:
    """Execute tiling command."""
    graph = load_graph(args.graph)
    index = parse_index(args.index)

    sim = Simulator(graph, SimulatorConfig(show_all_accesses=False))
    sim.compute_traces()
    regions = tiling_regions(graph, sim.context.traces, args.data, index)

    print(f"Tiles touching {args.data}{list(index)}: {len(regions)}")
    for i, (scope, access_map) in enumerate(regions):
        color = region_color(i)
        variables = {k: v for k, v in scope.items() if k not in graph.symbols}
        print(f"  #{color:06X} {variables}: {access_map.count()} accesses")
    return 0


def cmd_related(args) -> int:
    """Execute related command."""
    graph = load_graph(args.graph)
    index = parse_index(args.index)

    related = related_accesses(graph, args.data, index)
    print(f"Accesses related to {args.data}{list(index)}:")
    for container, entries in related.items():
        for mode, idx in entries:
            print(f"  {container}{list(idx)} ({mode.value})")
    if not related:
        print("  (none)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
