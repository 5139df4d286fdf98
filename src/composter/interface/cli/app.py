from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merging
(defaults, config file, environment, CLI overrides), dispatch to the
requested vault operation, and result rendering.
"""

import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional

from composter.core import crawl, unpack
from composter.core.unpacker import normalize_dependencies
from composter.domain.config import (
    EDITABLE_KEYS,
    TOKEN_ENV_VAR,
    clear_session,
    load_config,
    load_session,
    resolve_base_url,
    resolve_token,
    store_token,
    update_config,
)
from composter.domain.errors import ComposterError, VaultAuthError, VaultNotFoundError
from composter.domain.models import ComponentBundle, CrawlResult, DependencyReport, UnpackResult
from composter.infra.logging import LoggingConfig, configure_logging
from composter.infra.network import VaultClient
from composter.interface.cli import args as cli_args

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, non-zero for failure).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap
    configure_logging(LoggingConfig.for_cli(debug=args.debug))

    # 3. Configuration hierarchy
    conf = _merge_config(load_config(), cli_args.args_to_overrides(args))
    conf["base_url"] = resolve_base_url(args.base_url)
    logger.debug(f"Using Vault Service at {conf['base_url']}")

    handler = _COMMANDS[args.command]

    # 4. Command execution phase
    try:
        return handler(args, conf)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except VaultAuthError:
        clear_session()
        print("ERROR: Session invalid or expired. Please log in again.", file=sys.stderr)
        return EXIT_FAILURE
    except ComposterError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        logger.error(f"Filesystem failure: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge non-None overrides for known keys into the base config.

    The base URL is not merged here: resolve_base_url owns its precedence.
    """
    out = dict(base)
    for k in ("timeout",):
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


def _build_client(conf: Dict[str, Any]) -> Optional[VaultClient]:
    """Create an authenticated client, or report the missing session and return None."""
    token = resolve_token()
    if not token:
        print(
            "ERROR: You must be logged in. Sign in on the dashboard and set "
            "COMPOSTER_TOKEN, or run 'composter token <token>'.",
            file=sys.stderr,
        )
        return None
    return VaultClient(conf["base_url"], token=token, timeout=float(conf["timeout"]))

# -----------------------------------------------------------------------------
# COMMAND HANDLERS
# -----------------------------------------------------------------------------

def _cmd_scan(args: Any, conf: Dict[str, Any]) -> int:
    entry = os.path.abspath(args.file)
    if not os.path.isfile(entry):
        print(f"ERROR: File not found: {entry}", file=sys.stderr)
        return EXIT_USAGE

    result = crawl(entry)
    if args.json_output:
        _print_json(asdict(result))
    else:
        _print_crawl_summary(result, verbose=True)
    return EXIT_OK if result.ok else EXIT_FAILURE


def _cmd_push(args: Any, conf: Dict[str, Any]) -> int:
    if not args.category.strip() or not args.title.strip():
        print("ERROR: Category and title are required.", file=sys.stderr)
        return EXIT_USAGE

    entry = os.path.abspath(args.file)
    if not os.path.isfile(entry):
        print(f"ERROR: File not found: {entry}", file=sys.stderr)
        return EXIT_USAGE

    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    if not args.json_output:
        print(f"Scanning {os.path.basename(entry)} and its dependencies...")
    result = crawl(entry)
    if not args.json_output:
        _print_crawl_summary(result, verbose=False)

    record = client.push_component(result.to_bundle(args.title, args.category))

    if args.json_output:
        _print_json(record)
    else:
        print(f"Component '{args.title}' pushed to '{args.category}'.")
    return EXIT_OK


def _cmd_pull(args: Any, conf: Dict[str, Any]) -> int:
    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    if not args.json_output:
        print(f"Fetching '{args.title}' from '{args.category}'...")
    try:
        record = client.pull_component(args.category, args.title)
    except VaultNotFoundError:
        print(f"ERROR: Component '{args.title}' not found in '{args.category}'.", file=sys.stderr)
        return EXIT_FAILURE

    bundle = ComponentBundle(
        title=args.title,
        category=args.category,
        code=record.get("code") or "",
        dependencies=record.get("dependencies"),
    )
    result = unpack(bundle, args.target)

    if args.json_output:
        _print_json(asdict(result))
    else:
        _print_unpack_summary(result)
        print(f"Component '{args.title}' pulled successfully.")
    return EXIT_OK


def _cmd_mkcat(args: Any, conf: Dict[str, Any]) -> int:
    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    category = client.create_category(args.name)
    if args.json_output:
        _print_json(category)
    else:
        print(f"Category '{category.get('name', args.name)}' created.")
    return EXIT_OK


def _cmd_ls_cat(args: Any, conf: Dict[str, Any]) -> int:
    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    categories = client.list_categories()
    if args.json_output:
        _print_json(categories)
    elif not categories:
        print("No categories found.")
    else:
        print("\t\t".join(str(c.get("name", "")) for c in categories))
    return EXIT_OK


def _cmd_ls(args: Any, conf: Dict[str, Any]) -> int:
    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    if args.category:
        try:
            components = client.list_components_by_category(args.category)
        except VaultNotFoundError:
            print(f"ERROR: Category '{args.category}' not found.", file=sys.stderr)
            return EXIT_FAILURE
    else:
        components = client.list_components()

    _print_components(components, args.json_output)
    return EXIT_OK


def _cmd_search(args: Any, conf: Dict[str, Any]) -> int:
    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    _print_components(client.search_components(args.query), args.json_output)
    return EXIT_OK


def _cmd_show(args: Any, conf: Dict[str, Any]) -> int:
    client = _build_client(conf)
    if client is None:
        return EXIT_FAILURE

    record = client.get_component(args.component_id)
    if args.json_output:
        _print_json(record)
        return EXIT_OK

    bundle = ComponentBundle.from_record(record)
    print(f"{bundle.title} ({bundle.category or 'uncategorized'})")
    try:
        files = json.loads(bundle.code)
    except (TypeError, ValueError):
        files = None
    if isinstance(files, dict):
        for vpath in files:
            print(f"  {vpath}")
    else:
        print("  (single-file component)")
    deps = normalize_dependencies(bundle.dependencies)
    if deps:
        print("Dependencies:")
        for name, version in deps.items():
            print(f"  - {name}@{version}")
    return EXIT_OK


def _cmd_config(args: Any, conf: Dict[str, Any]) -> int:
    if args.key is None:
        stored = load_config()
        if args.json_output:
            _print_json(stored)
            return EXIT_OK
        for key in EDITABLE_KEYS:
            print(f"{key} = {stored[key]}")
        if conf["base_url"] != stored["base_url"]:
            print(f"(effective base_url = {conf['base_url']}, from flag or environment)")
        return EXIT_OK

    if args.value is None:
        if args.key not in EDITABLE_KEYS:
            print(f"ERROR: Unknown setting '{args.key}'.", file=sys.stderr)
            return EXIT_USAGE
        print(load_config()[args.key])
        return EXIT_OK

    try:
        saved = update_config(args.key, args.value)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE
    print(f"Saved {args.key} = {saved[args.key]}")
    return EXIT_OK


def _cmd_token(args: Any, conf: Dict[str, Any]) -> int:
    if args.clear:
        clear_session()
        print("Stored session removed.")
        return EXIT_OK

    if args.jwt:
        session = store_token(args.jwt.strip())
        print(f"Session stored. It expires {session['expiresAt']}.")
        return EXIT_OK

    if os.environ.get(TOKEN_ENV_VAR):
        print(f"Using the token from {TOKEN_ENV_VAR}.")
        return EXIT_OK
    session = load_session()
    if session is None:
        print("No valid session stored.")
        return EXIT_FAILURE
    print(f"Session stored. It expires {session.get('expiresAt') or 'never'}.")
    return EXIT_OK


_COMMANDS: Dict[str, Callable[[Any, Dict[str, Any]], int]] = {
    "scan": _cmd_scan,
    "push": _cmd_push,
    "pull": _cmd_pull,
    "mkcat": _cmd_mkcat,
    "ls-cat": _cmd_ls_cat,
    "ls": _cmd_ls,
    "search": _cmd_search,
    "show": _cmd_show,
    "config": _cmd_config,
    "token": _cmd_token,
}

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _print_crawl_summary(result: CrawlResult, verbose: bool) -> None:
    """
    Print the bundle produced by a crawl.

    Args:
        result: Crawl outcome to render.
        verbose: Also list every bundled file and package.
    """
    print(
        f"Bundled {len(result.files)} file(s) and detected "
        f"{len(result.dependencies)} external package(s)."
    )
    if verbose:
        print(f"Project root: {result.root}")
        for vpath in result.files:
            print(f"  + {vpath}")
        for name, version in result.dependencies.items():
            print(f"  - {name}@{version}")
    if verbose and result.unresolved:
        print("Unresolved local imports:")
        for item in result.unresolved:
            print(f"  ? {item.specifier} (in {item.importer})")


def _print_unpack_summary(result: UnpackResult) -> None:
    print(f"Unpacked {len(result.written)} file(s) into: {result.target_dir}")
    for rel_path in result.written:
        print(f"  + {rel_path}")
    _print_dependency_report(result.dependency_report)


def _print_dependency_report(report: DependencyReport) -> None:
    if not report.required:
        return

    if not report.manifest_found:
        print("\nThis component requires these packages:")
        for name, version in report.required.items():
            print(f"  - {name}@{version}")
        return

    if report.missing:
        print("\nMissing dependencies (run this to fix):")
        print(f"  {report.install_command}")
    else:
        print("\nAll dependencies are already installed.")


def _print_components(components: List[Dict[str, Any]], as_json: bool) -> None:
    if as_json:
        _print_json(components)
        return
    if not components:
        print("No components found.")
        return
    for record in components:
        bundle = ComponentBundle.from_record(record)
        ident = record.get("id", "")
        print(f"{bundle.title}\t{bundle.category}\t{ident}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
