# coding: utf-8

"""
Command line entry point: python -m face_quickstart
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

from azure.core.exceptions import HttpResponseError

from .config import DEFAULT_GROUP_ID, DEFAULT_REGION, AzureRegion, load_settings
from .errors import FaceQuickstartError, OperationCancelledError
from .quickstart import FaceQuickstart

logger = logging.getLogger("face_quickstart")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="face-quickstart",
        description="Detect, find similar and identify faces with the Azure AI Face service.",
        epilog="The subscription key is read from FACE_SUBSCRIPTION_KEY (a .env file is loaded first).",
    )
    parser.add_argument(
        "--region",
        choices=[region.value for region in AzureRegion],
        default=DEFAULT_REGION.value,
        help=f"Region of the Face subscription (default: {DEFAULT_REGION.value})",
    )
    parser.add_argument(
        "--group-id",
        default=DEFAULT_GROUP_ID,
        help=f"Person group ID for the identify step (default: {DEFAULT_GROUP_ID})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=300.0,
        help="Seconds to wait for person group training (default: 300)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=1.0,
        help="Initial delay between training status checks in seconds (default: 1)",
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Delete the person group at the end of the run",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for diagnostics on stderr (default: WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log_level = getattr(logging, args.log_level)
    logging.basicConfig(level=log_level, format='%(asctime)s %(levelname)s %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    try:
        settings = load_settings(
            region=args.region,
            group_id=args.group_id,
            training_timeout=args.timeout,
            poll_interval=args.poll_interval,
        )
    except FaceQuickstartError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Using {settings!r}")
    quickstart = FaceQuickstart.from_settings(settings, logger=logger)

    # Ctrl-C sets the cancel token; the run stops before its next remote call
    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    try:
        quickstart.run(cancel_event=cancel_event, cleanup=args.cleanup)
    except OperationCancelledError as e:
        logger.warning(str(e))
        return 130
    except (FaceQuickstartError, HttpResponseError) as e:
        logger.error(str(e))
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())
