"""CLI script to run batch processing over stored sessions."""

import argparse
import asyncio
import logging
import uuid

from rapport.profile_engine.batch_processor import BatchProcessor

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def run(args):
    processor = BatchProcessor()

    if args.step == "all":
        result = await processor.run_full_pipeline(limit=args.limit, group_id=args.group)
    elif args.step == "analyze":
        result = await processor.analyze_sessions(limit=args.limit, group_id=args.group)
    elif args.step == "profiles":
        result = await processor.process_profiles(limit=args.limit, group_id=args.group)
    elif args.step == "patterns":
        result = await processor.refresh_patterns(group_id=args.group)
    else:
        logger.error("Unknown step: %s", args.step)
        return

    logger.info("Result: %s", result)


def main():
    parser = argparse.ArgumentParser(description="Rapport batch processing")
    parser.add_argument(
        "--step",
        choices=["all", "analyze", "profiles", "patterns"],
        default="all",
        help="Which processing step to run",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Limit number of sessions to process",
    )
    parser.add_argument(
        "--group",
        type=uuid.UUID,
        default=None,
        help="Only process sessions of this group (couple) id",
    )

    args = parser.parse_args()
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
