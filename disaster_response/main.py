#!/usr/bin/env python3
"""
Disaster Response Multi-Agent Simulation

Transport agents deliver resources and medical agents provide assistance on
a shared grid while new tasks keep arriving.

Usage:
    python -m disaster_response.main --config configs/disaster_response.yaml [options]

Examples:
    python -m disaster_response.main --config configs/disaster_response.yaml
    python -m disaster_response.main --config configs/disaster_response.yaml --gif --out-dir results/
    python -m disaster_response.main --config configs/disaster_response.yaml --no-csv --no-snapshot --quiet
    python -m disaster_response.main --config configs/disaster_response.yaml --seed 42 --steps 9
"""

import argparse
import sys
from pathlib import Path

from .config import load_config
from .model.engine import SimulationEngine
from .export.console import ConsoleRenderer
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Disaster Response Multi-Agent Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    disaster-response --config configs/disaster_response.yaml
    disaster-response --config configs/disaster_response.yaml --gif --out-dir results/
    disaster-response --config configs/disaster_response.yaml --no-csv --no-snapshot --quiet
    disaster-response --config configs/disaster_response.yaml --seed 42
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override number of simulation steps')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')
    parser.add_argument('--retire-completed', action='store_true', default=False,
                        help='Remove tasks from the queue once they have been served')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV event log (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV event log')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.max_steps = args.steps
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    if args.retire_completed:
        config.rules.retire_completed_tasks = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    try:
        engine = SimulationEngine.from_config(config)
    except ValueError as e:
        print(f"Error building scenario: {e}", file=sys.stderr)
        return 1

    if not config.quiet:
        print(f"Initializing simulation...")
        print(f"  Grid: {config.grid.width}x{config.grid.height}")
        print(f"  Agents: {len(engine.agents)}")
        print(f"  Tasks: {len(engine.environment.tasks)}")
        print(f"  Steps: {config.max_steps}")

    # Initialize exporters
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'event_log.csv')
        csv_writer.open()

    console = ConsoleRenderer()
    visualizer = Visualizer(config.grid.width, config.grid.height)
    reporter = Reporter(str(args.config), config.seed)

    final_state = None
    try:
        for state in engine.run():
            final_state = state

            if csv_writer:
                csv_writer.append(state)

            if config.gif_enabled:
                visualizer.buffer_frame(state)

            reporter.update(state)

            if not config.quiet:
                console.render(state)

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")

    # Events recorded after the last step
    leftover = engine.flush_events()
    if leftover:
        if csv_writer:
            csv_writer.write_events(engine.current_step, engine.clock(), leftover)
        if not config.quiet:
            for event in leftover:
                print(event.describe())

    # Cleanup and final exports
    if csv_writer:
        csv_writer.close()
        if not config.quiet:
            print(f"\nCSV saved: {config.out_dir / 'event_log.csv'}")

    if config.snapshot_enabled and final_state:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    # Print summary report
    if not config.quiet and final_state:
        report = reporter.generate_summary(
            final_state,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
