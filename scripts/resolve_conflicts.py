"""CLI for renaming documents and folders whose names collide case-insensitively"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from inkwell.config import settings
from inkwell.workspace import Workspace


def main(data_dir: str) -> None:
    workspace = Workspace.from_settings(settings.model_copy(update={"data_dir": Path(data_dir)}))
    operations = workspace.resolve_conflicts()

    if not operations:
        logger.info("No name conflicts found")
        return

    for operation in operations:
        print(f"{operation.old_path} -> {operation.new_path}")
    logger.info(f"Renamed {len(operations)} items")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--data-dir",
        type=str,
        required=False,
        help="Folder holding the document tree",
        default=str(settings.data_dir),
    )
    parser.add_argument(
        "--log-level",
        type=str,
        required=False,
        help="Log level for console output",
        default=settings.log_level,
    )

    args = parser.parse_args()
    logger.configure(handlers=[{"sink": sys.stderr, "level": args.log_level}])

    main(data_dir=args.data_dir)
