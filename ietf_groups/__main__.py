import sys

from loguru import logger

from ietf_groups.cli import cli

if __name__ == "__main__":
    try:
        cli(prog_name="ietf-groups")
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
