"""
Military Intelligence Engine - Standalone Entry Point
=====================================================
Run with:  python -m milintel.main [--once mini|deep] [--log-level DEBUG]

Without --once, ticks every minute and dispatches mini/deep analysis runs
on the US Eastern cadence until SIGINT/SIGTERM.
"""

import argparse
import asyncio
import json
from typing import List, Optional

from milintel.core.config import get_config
from milintel.core.logger import get_logger, setup_logging
from milintel.core.task_manager import setup_signal_handlers
from milintel.models import AnalysisError, Tier
from milintel.service import IntelService

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="milintel", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--once", choices=[t.value for t in Tier], help="run one tier and print the result")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--json-logs", action="store_true")
    return parser.parse_args(argv)


async def run_once(service: IntelService, tier: Tier) -> int:
    try:
        outcome = await service.run_analysis(tier)
    finally:
        await service.stop()
    print(json.dumps(outcome.to_dict(), indent=2))
    return 1 if isinstance(outcome, AnalysisError) else 0


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, json=args.json_logs)
    config = get_config()
    service = IntelService.from_env(config)

    if args.once:
        return await run_once(service, Tier(args.once))

    logger.info(
        "intel_engine_starting",
        tz=config.schedule_timezone,
        mini_model=config.mini_model,
        deep_model=config.deep_model,
    )
    service.start()
    setup_signal_handlers(service.tasks, asyncio.get_running_loop())

    try:
        await service.tasks.wait_all()
    finally:
        await service.stop()
        logger.info("intel_engine_stopped")
    return 0


def cli() -> None:
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
