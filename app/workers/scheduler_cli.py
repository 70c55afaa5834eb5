from __future__ import annotations

import argparse
import json
import logging
import time

from app.config import load_config, setup_logging
from app.domain.exceptions import PlantCareError
from app.services.container import ServiceContainer
from app.workers.care_sweep import care_sweep_task

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Run the care sweep without starting the web server."""
    parser = argparse.ArgumentParser(prog="plantcare-sweep")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sweep, print the result as JSON and exit",
    )
    parser.add_argument(
        "--interval-minutes",
        type=int,
        default=None,
        help="Minutes between sweeps (default: PLANTCARE_SWEEP_INTERVAL_MINUTES)",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except PlantCareError as exc:
        print(f"Invalid configuration: {exc}")
        return 2
    setup_logging(debug=config.DEBUG, log_file_path=config.log_file_path)

    container = ServiceContainer.build(config)

    if args.once:
        try:
            result = care_sweep_task(container)
        finally:
            container.shutdown()
        print(json.dumps(result, indent=2))
        return 1 if result["errors"] else 0

    interval = args.interval_minutes or config.sweep_interval_minutes
    if interval < 1:
        print("Sweep interval must be at least 1 minute")
        return 2

    logger.info("Care sweep running every %d minute(s) (press Ctrl+C to stop)", interval)
    try:
        while True:
            try:
                care_sweep_task(container)
            except PlantCareError:
                logger.exception("Care sweep failed; retrying next interval")
            time.sleep(interval * 60)
    except KeyboardInterrupt:
        logger.info("Stopping care sweep...")
    finally:
        container.shutdown()
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
