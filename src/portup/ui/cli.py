from __future__ import annotations

import argparse
import logging
import sys
from enum import IntEnum
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from portup.app import list_outdated_packages, resolve_specs, upgrade_packages
from portup.config import ConfigurationError, configure_logging, get_upgrade_config
from portup.domain.upgrade import UpgradeError, UpgradeStatus
from portup.ui.report import ConsoleReporter

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    USAGE = 2
    DRY_RUN = 3
    INTERRUPTED = 130


_EXIT_CODE_BY_STATUS = {
    UpgradeStatus.NOTHING_TO_DO: ExitCode.SUCCESS,
    UpgradeStatus.COMPLETED: ExitCode.SUCCESS,
    UpgradeStatus.COMPLETED_WITH_FAILURES: ExitCode.SUCCESS,
    UpgradeStatus.PREVIEW: ExitCode.DRY_RUN,
    UpgradeStatus.FAILED: ExitCode.FAILURE,
}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="portup",
        description="Rebuild installed packages against the local package definitions",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    upgrade = subparsers.add_parser(
        "upgrade",
        help="Rebuild outdated packages (dry run unless --no-dry-run is given)",
    )
    upgrade.add_argument(
        "packages",
        nargs="*",
        metavar="SPEC",
        help="Packages to upgrade as name or name:triplet (default: all outdated packages)",
    )
    upgrade.add_argument(
        "--no-dry-run",
        action="store_true",
        help="Actually upgrade",
    )
    upgrade.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue installing packages on failure",
    )

    subparsers.add_parser(
        "outdated",
        help="List installed packages whose definition has another version",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        config = get_upgrade_config()
        specs = (
            resolve_specs(parsed_args.packages, config=config)
            if parsed_args.command == "upgrade"
            else ()
        )
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(ExitCode.USAGE)

    exit_code = ExitCode.SUCCESS
    try:
        if parsed_args.command == "upgrade":
            result = upgrade_packages(
                specs,
                no_dry_run=parsed_args.no_dry_run,
                keep_going=parsed_args.keep_going,
                config=config,
            )
            exit_code = _EXIT_CODE_BY_STATUS[result.status]
        elif parsed_args.command == "outdated":
            ConsoleReporter().report_outdated(list_outdated_packages(config=config))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except UpgradeError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(ExitCode.FAILURE)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(ExitCode.FAILURE)

    if exit_code is not ExitCode.SUCCESS:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Exit with ``ExitCode.INTERRUPTED`` on Ctrl+C; applied actions stay applied."""
    log.warning("Interrupted by user (Ctrl+C); installed packages may be partially upgraded")
    sys.exit(ExitCode.INTERRUPTED)


def run() -> None:
    """Console-script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
