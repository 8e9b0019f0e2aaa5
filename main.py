#!/usr/bin/env python3
"""Command line entry point for the virtual network lab."""

import argparse
import logging
import sys

from example import run_example
from netlab.config import load_config
from netlab.containers.ping import PingOrchestrator
from netlab.containers.runtime import DockerRuntime
from netlab.core.errors import LabError


def main() -> int:
    """Run a simulation or a container probe."""
    parser = argparse.ArgumentParser(description="Virtual network lab")
    parser.add_argument("--config", help="YAML configuration file")
    subparsers = parser.add_subparsers(dest="command")

    simulate = subparsers.add_parser("simulate", help="Run the example simulation")
    simulate.add_argument("--duration", type=float, default=10.0, help="Simulated seconds")
    simulate.add_argument("--metrics", help="Save metrics to this JSON file")
    simulate.add_argument("--plot", help="Save the topology drawing to this file")

    probe = subparsers.add_parser("probe", help="Ping one container from another")
    probe.add_argument("source", help="Source container")
    probe.add_argument("destination", help="Destination container")

    bridge = subparsers.add_parser("bridge", help="Start a router container joining two networks")
    bridge.add_argument("network_a")
    bridge.add_argument("network_b")

    args = parser.parse_args()
    config = load_config(args.config)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        run_example(args.duration, config, args.metrics, args.plot)
        return 0

    if args.command in ("probe", "bridge"):
        try:
            runtime = DockerRuntime(
                probe_count=config.probe_count,
                probe_timeout=config.probe_timeout,
                image=config.container_image,
            )
            if args.command == "probe":
                orchestrator = PingOrchestrator(runtime, config.prefix_length)
                print(orchestrator.resolve_bridge_and_probe(args.source, args.destination))
            else:
                print(runtime.create_bridge_router(args.network_a, args.network_b))
        except LabError as e:
            print(f"error ({e.kind.value}): {e.message}", file=sys.stderr)
            return 1
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
