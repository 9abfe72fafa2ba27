"""awssweep CLI entry point."""
import argparse
import logging
import signal
import sys
import threading

import yaml

from awssweep.core.config import load_config
from awssweep.core.errors import combine_messages
from awssweep.core.logging import setup_logging, get_run_id
from awssweep.resources.catalog import build_registry
from awssweep.sweep.clients import shared_client_cache
from awssweep.sweep.runner import SweepOptions


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='awssweep - sweep leftover AWS test resources')
    parser.add_argument('--region', help='Comma-separated regions to sweep (overrides config)')
    parser.add_argument('--sweep', '--sweep-run', dest='sweep',
                        help='Comma-separated sweeper names to run (default: all)')
    parser.add_argument('--config', '-c', help='Path to YAML config file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Verbosity: -v=INFO, -vv=DEBUG')
    parser.add_argument('--json-logs', action='store_true',
                        help='Output logs in JSON format')
    parser.add_argument('--dry-run', action='store_true',
                        help='List what would be deleted without deleting anything')
    parser.add_argument('--workers', type=int, help='Maximum concurrent API calls per sweeper')
    parser.add_argument('--list', action='store_true', help='List registered sweepers and exit')
    return parser.parse_args(argv)


def print_report(report):
    print(f"\n=== {report.resource_type} ({report.region}) ===")
    print(f"  {report.summary()}")
    if report.region_skipped:
        print(f"  Region skipped: {report.region_skipped}")
    if report.succeeded:
        print('  Deleted:')
        for outcome in report.succeeded:
            print(f"    - {outcome.identifier}")
    if report.skipped:
        print('  Skipped:')
        for outcome in report.skipped:
            print(f"    - {outcome.identifier} ({outcome.reason.value})")
    message = report.error_message()
    if message:
        print('  Errors:')
        for line in message.splitlines():
            print(f"    {line}")


def install_signal_handlers(cancel_event):
    """First SIGINT/SIGTERM cancels the sweep; a second one gets the default behaviour."""
    def handler(signum, frame):
        logging.warning(f"Received signal {signum}, cancelling sweep (repeat to abort)")
        cancel_event.set()
        signal.signal(signal.SIGINT, signal.default_int_handler)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, handler)


def run(registry, regions, sweeper_names, options):
    """Run every selected sweeper in every region; return the list of errors."""
    errors = []
    sweepers = registry.select(sweeper_names)
    for region in regions:
        for sweeper in sweepers:
            if options.cancel_event.is_set():
                errors.append(f"{sweeper.name} ({region}): cancelled before start")
                continue
            logging.info(f"[{region}] Running sweeper {sweeper.name}")
            try:
                report = sweeper(region, options)
            except Exception as e:
                logging.error(f"[{region}] Sweeper {sweeper.name} failed: {e}")
                errors.append(f"{sweeper.name} ({region}): {e}")
                continue
            print_report(report)
            if not report.ok:
                errors.append(f"{sweeper.name} ({region}): {report.error_message()}")
    return errors


def main(argv=None):
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    # CLI args override config
    if args.region:
        config.regions = [r.strip() for r in args.region.split(',') if r.strip()]
    if args.sweep:
        config.sweepers = [s.strip() for s in args.sweep.split(',') if s.strip()]
    if args.verbose:
        config.verbosity = args.verbose
    if args.json_logs:
        config.json_logs = True
    if args.dry_run:
        config.dry_run = True
    if args.workers is not None:
        config.max_workers = args.workers
    try:
        config.validate()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(config.verbosity, config.json_logs)
    registry = build_registry()

    if args.list:
        for name in registry.names():
            print(name)
        return 0

    if not config.regions:
        logging.error("No region given; use --region or set regions in the config file")
        return 2

    try:
        registry.select(config.sweepers)
    except KeyError as e:
        logging.error(f"{e.args[0]}; registered sweepers: {', '.join(registry.names())}")
        return 2

    logging.info(f"awssweep run_id={get_run_id()} dry_run={config.dry_run} regions={config.regions}")

    options = SweepOptions(config=config, cancel_event=threading.Event(), client_cache=shared_client_cache(config))
    install_signal_handlers(options.cancel_event)

    try:
        errors = run(registry, config.regions, config.sweepers, options)
    except KeyboardInterrupt:
        logging.error("Sweep aborted by user")
        return 130
    if errors:
        print(f"\nSweep failed:\n{combine_messages(errors)}", file=sys.stderr)
        return 1
    print('\nSweep complete.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
