"""forgesync - keep a Forge module checkout at the version a constraint asks for.

    Returns:
        int: Exit code (see constants.ExitCodes)
"""
import json
import logging
import sys

from args import parse_args
from constants import Constants, ExitCodes, load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from exceptions import (
    CatalogError,
    InvalidIdentityError,
    MalformedVersionError,
    ReleaseInstallError,
    UnresolvableVersionError,
)
from module.forge import ForgeModule
from versioning.models import LATEST

logger = logging.getLogger(__name__)


def build_report(module, status, action):
    """Summarise one sync for output."""
    return {
        "title": module.title,
        "path": str(module.path),
        "status": status.value,
        "action": action.value if action is not None else None,
        "expected": module.expected_version,
        "actual": module.current_version,
    }


def print_report(report, as_json):
    if as_json:
        sys.stdout.write(json.dumps(report, indent=2) + "\n")
        return
    line = f"{report['title']}: {report['status']}"
    if report["action"]:
        line += f" -> {report['action']}"
    line += f" (expected {report['expected'] or 'unresolved'}, installed {report['actual'] or 'none'})"
    sys.stdout.write(line + "\n")


def run(args):
    """Sync (or only inspect) the module named on the command line.

    Returns:
        ExitCodes member.
    """
    requested = LATEST if args.LATEST else args.VERSION
    try:
        module = ForgeModule(args.TITLE, args.MODULEDIR, requested)
        status = module.status()
        action = None if args.STATUS_ONLY else module.sync()
        report = build_report(module, status, action)
    except (InvalidIdentityError, MalformedVersionError) as exc:
        logger.error("%s", exc)
        return ExitCodes.INVALID_INPUT
    except UnresolvableVersionError as exc:
        logger.error("%s", exc)
        return ExitCodes.UNRESOLVED_VERSION
    except (CatalogError, ReleaseInstallError) as exc:
        logger.error("%s", exc)
        return ExitCodes.CONNECTION_ERROR
    except OSError as exc:
        logger.error("Filesystem error: %s", exc)
        return ExitCodes.FILE_ERROR

    print_report(report, args.JSON)
    if report["expected"] is None:
        logger.warning(
            "No version of %s satisfies '%s': %s",
            module.title,
            module.requested,
            module.resolution.error,
        )
        return ExitCodes.UNRESOLVED_VERSION
    return ExitCodes.SUCCESS


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    config_path = load_config(args.CONFIG)
    if args.FORGE_URL:
        Constants.FORGE_API_URL = args.FORGE_URL
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="main",
                config=config_path,
                target=Constants.FORGE_API_URL,
            )
        )

    code = run(args)
    sys.exit(code.value)


if __name__ == "__main__":
    main()
