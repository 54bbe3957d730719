"""Argument parsing functionality for forgesync."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="forgesync",
        description=(
            "forgesync - keep a Forge module checkout at the version a constraint asks for"
        ),
        add_help=True,
    )

    parser.add_argument("-m", "--module",
                        dest="TITLE",
                        help="Module title, i.e: puppetlabs/stdlib",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-d", "--moduledir",
                        dest="MODULEDIR",
                        help="Directory that holds modules; the module is synced to MODULEDIR/<name>",
                        action="store", type=str,
                        required=True)

    version_group = parser.add_mutually_exclusive_group()
    version_group.add_argument("-v", "--version",
                               dest="VERSION",
                               help="Version constraint, i.e: 4.2.0, '>= 4.0.0 < 5.0.0', 4.x. "
                                    "Defaults to the installed version, or the latest when absent.",
                               action="store", type=str)
    version_group.add_argument("--latest",
                               dest="LATEST",
                               help="Track the latest release on the Forge.",
                               action="store_true")

    parser.add_argument("--status",
                        dest="STATUS_ONLY",
                        help="Report the module status without changing anything.",
                        action="store_true")
    parser.add_argument("--json",
                        dest="JSON",
                        help="Print the result as JSON.",
                        action="store_true")
    parser.add_argument("--forge-url",
                        dest="FORGE_URL",
                        help="Base URL of the Forge API (overrides config and FORGESYNC_FORGE_URL).",
                        action="store", type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML config file.",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
