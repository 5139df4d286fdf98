from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema: global flags, one subcommand
per vault operation, and the translation of parsed arguments into
configuration overrides.
"""

import argparse
from typing import Any, Dict

from composter.domain.constants import APP_VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the Composter CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="composter",
        description="Push, pull and browse React components stored in your Composter vault.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    # --- Global Options ---
    p.add_argument(
        "--base-url",
        dest="base_url",
        default=None,
        help="Vault Service API root (overrides env and config file).",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Network timeout in seconds.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print machine-readable JSON instead of a human summary.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    sub = p.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    # --- Bundle Transfer ---
    push = sub.add_parser("push", help="Bundle a component and its local imports, then upload it.")
    push.add_argument("category", help="Destination category.")
    push.add_argument("title", help="Component title (unique within the category).")
    push.add_argument("file", help="Entry source file of the component.")

    pull = sub.add_parser("pull", help="Download a component and write its files to disk.")
    pull.add_argument("category", help="Category holding the component.")
    pull.add_argument("title", help="Component title.")
    pull.add_argument("target", help="Destination directory (or file, for single-file components).")

    scan = sub.add_parser("scan", help="Show what 'push' would bundle, without uploading.")
    scan.add_argument("file", help="Entry source file of the component.")

    # --- Catalog Browsing ---
    mkcat = sub.add_parser("mkcat", help="Create a new category.")
    mkcat.add_argument("name", help="Category name.")

    sub.add_parser("ls-cat", help="List your categories.")

    ls = sub.add_parser("ls", help="List components.")
    ls.add_argument("-c", "--category", default=None, help="Only list this category.")

    search = sub.add_parser("search", help="Search components by title or category.")
    search.add_argument("query", help="Search text.")

    show = sub.add_parser("show", help="Show a component by id.")
    show.add_argument("component_id", help="Component id.")

    # --- Local Settings ---
    config = sub.add_parser("config", help="Show stored settings, or change one of them.")
    config.add_argument("key", nargs="?", default=None, help="Setting name: base_url or timeout.")
    config.add_argument("value", nargs="?", default=None, help="New value; omit to print the current one.")

    token = sub.add_parser("token", help="Store the token copied from the dashboard, or forget it.")
    token.add_argument("jwt", nargs="?", default=None, help="Token to store; omit to show session status.")
    token.add_argument("--clear", action="store_true", help="Forget the stored session.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset (None means unset).
                        '--base-url' is excluded; it is resolved together
                        with the environment by resolve_base_url.
    """
    overrides: Dict[str, Any] = {
        "timeout": args.timeout,
    }
    return overrides
