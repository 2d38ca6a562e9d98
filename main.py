# main.py

import argparse
import logging
import sys
from typing import List, Optional

import config
import utils
from processing import process_images

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jp-sentence-extract",
        description="Prints every Japanese sentence found in the given images, one per line.",
    )
    parser.add_argument("images", nargs="+", help="Paths of the image files to read.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point. Returns the process exit code."""
    utils.configure_logging()
    try:
        api_key = config.get_api_key()
        utils.enable_file_logging()
        args = build_parser().parse_args(argv)
        process_images(args.images, api_key)
    except Exception as e:
        logger.critical(f"Extraction aborted: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
