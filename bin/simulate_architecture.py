#!/usr/bin/env python3
"""
Architecture Simulation CLI

Headless request-flow simulation for software architecture diagrams.
Clients generate traffic that is routed across load balancers, servers,
caches and databases; the run reports throughput, latency, bottlenecks
and failures.

Usage Examples:
    # Simulate an exported architecture for 10 simulated seconds
    python simulate_architecture.py run examples/three_tier.json --ticks 100

    # Simulate a built-in template, reproducibly
    python simulate_architecture.py run --template microservices --seed 42

    # Save the full report
    python simulate_architecture.py run --template event-driven -o report.json

    # List templates, or export them as editable JSON documents
    python simulate_architecture.py templates
    python simulate_architecture.py templates --export ./architectures
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse
import json
import logging
from typing import List, Optional

from archsim.adapters.outbound import ArchitectureFileStore, ConsoleReporter
from archsim.application.services import SimulationService
from archsim.config import SimulationSettings
from archsim.core import TEMPLATES, build_template, list_templates


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommands."""
    common_parser = argparse.ArgumentParser(add_help=False)
    output_group = common_parser.add_argument_group("Output")
    output_group.add_argument("--output", "-o", metavar="FILE", help="Export results to JSON")
    output_group.add_argument("--json", action="store_true", help="Print JSON to stdout")
    output_group.add_argument("--quiet", "-q", action="store_true", help="Minimal output")
    output_group.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    output_group.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser = argparse.ArgumentParser(
        prog="simulate_architecture.py",
        description="Request-flow simulation for software architecture diagrams.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="templates:\n" + "\n".join(f"  {t.id:<16} {t.description}" for t in TEMPLATES.values()),
    )
    subs = parser.add_subparsers(dest="command", help="Command")

    # run
    rn = subs.add_parser("run", help="Simulate an architecture for a number of ticks", parents=[common_parser])
    rn.add_argument("input", nargs="?", metavar="FILE", help="Architecture JSON document")
    rn.add_argument("--template", "-t", choices=list(TEMPLATES), help="Use a built-in template")
    rn.add_argument("--ticks", "-n", type=int, default=100, help="Number of ticks to simulate")
    rn.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    rn.add_argument("--tick-interval", type=int, default=None, metavar="MS", help="Tick interval in ms")

    # templates
    tp = subs.add_parser("templates", help="List or export built-in templates", parents=[common_parser])
    tp.add_argument("--export", "-e", metavar="DIR", help="Write each template as a JSON document into DIR")

    return parser


# =============================================================================
# Command Handlers
# =============================================================================

def handle_run(args, reporter: ConsoleReporter):
    """Handle the 'run' subcommand."""
    if not args.input and not args.template:
        raise ValueError("Provide an architecture FILE or --template")

    settings = SimulationSettings.from_env()
    if args.tick_interval is not None:
        settings.tick_interval_ms = args.tick_interval

    service = SimulationService(ArchitectureFileStore(), settings)
    graph = service.load_graph(source=args.input, template=args.template)
    if not args.quiet and not args.json:
        reporter.info(f"Architecture: {args.template or args.input} "
                      f"({len(graph.nodes)} nodes, {len(graph.edges)} edges)")

    report = service.run(graph, ticks=args.ticks, seed=args.seed).to_dict()
    if not args.quiet and not args.json:
        reporter.report(report)
    return report


def handle_templates(args, reporter: ConsoleReporter):
    """Handle the 'templates' subcommand."""
    templates = list_templates()
    if args.export:
        store = ArchitectureFileStore(args.export)
        for t in templates:
            path = store.save_graph(build_template(t["id"]), t["id"])
            if not args.quiet:
                reporter.success(f"Exported {t['id']} to {path}")
    elif not args.quiet and not args.json:
        reporter.section("Templates")
        reporter.table(
            ["Id", "Name", "Nodes", "Edges"],
            [[t["id"], t["name"], t["node_count"], t["edge_count"]] for t in templates],
        )
    return templates


# =============================================================================
# Main Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    log_level = (
        logging.WARNING if args.quiet
        else logging.DEBUG if args.verbose
        else logging.INFO
    )
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    reporter = ConsoleReporter(use_color=not args.no_color and sys.stdout.isatty())

    try:
        handlers = {
            "run": handle_run,
            "templates": handle_templates,
        }
        result_data = handlers[args.command](args, reporter)

        if args.json:
            print(json.dumps(result_data, indent=2))

        if args.output:
            with open(args.output, "w") as f:
                json.dump(result_data, f, indent=2)
            if not args.quiet:
                reporter.success(f"Results saved to: {args.output}")

        return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted.")
        return 130
    except Exception as e:
        reporter.error(f"Error: {e}")
        if args.verbose:
            logging.exception("Simulation failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
