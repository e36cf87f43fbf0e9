"""Command line interface for uiforge.

Each command has its own ``handle_*_command(argv)`` function with its own
argument parser; ``main`` dispatches on the first argument.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from uiforge.agents import LLMExplainer, LLMPlanner, PlanOk, decode_plan
from uiforge.codegen import CodegenError, generate
from uiforge.config import EnvVar, get_environment
from uiforge.core import get_logger, parse_level, setup_logging
from uiforge.diff import diff_code
from uiforge.history import VersionStore
from uiforge.ir import export_json_schema
from uiforge.lint import lint_source
from uiforge.llm import LLMError, create_llm_backend
from uiforge.pipeline import Orchestrator, PipelineResult
from uiforge.schema import export_llm_schema
from uiforge.validation import validate_tree

logger = get_logger("uiforge.cli")


def _read_input(path: str) -> str:
    """Read a file argument, ``-`` meaning stdin."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write_output(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        logger.info(f"Saved to {output}")
    else:
        print(text)


def _report(errors: list[str], warnings: list[str]) -> None:
    for message in errors:
        print(f"error: {message}", file=sys.stderr)
    for message in warnings:
        print(f"warning: {message}", file=sys.stderr)


# =============================================================================
# Offline Commands
# =============================================================================


def handle_schema_command(argv: list[str]) -> int:
    """Print the component registry export or the plan JSON Schema."""
    parser = argparse.ArgumentParser(
        prog="uiforge schema",
        description="Print the component whitelist shared with the planner",
    )
    parser.add_argument(
        "--json-schema",
        action="store_true",
        help="Print the JSON Schema of a plan instead of the registry",
    )
    args = parser.parse_args(argv)

    data = export_json_schema() if args.json_schema else export_llm_schema()
    print(json.dumps(data, indent=2))
    return 0


def handle_compile_command(argv: list[str]) -> int:
    """Compile a plan JSON file to component source, offline."""
    parser = argparse.ArgumentParser(
        prog="uiforge compile",
        description="Validate a plan, generate source and lint it",
    )
    parser.add_argument("plan", type=str, help="Plan JSON file ('-' for stdin)")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    args = parser.parse_args(argv)

    outcome = decode_plan(_read_input(args.plan))
    if not isinstance(outcome, PlanOk):
        _report([outcome.message], [])
        return 1

    max_depth = get_environment(EnvVar.MAX_TREE_DEPTH)
    report = validate_tree(outcome.plan.layout_tree, max_depth=max_depth)
    if not report.valid:
        _report(report.messages, report.warnings)
        return 1

    try:
        source = generate(outcome.plan, max_depth=max_depth)
    except CodegenError as e:
        _report([str(e)], report.warnings)
        return 1

    lint = lint_source(source.source_code)
    _report(lint.errors, report.warnings + lint.warnings)
    if not lint.valid:
        return 1

    _write_output(source.source_code, args.output)
    return 0


def handle_lint_command(argv: list[str]) -> int:
    """Statically validate a component source file."""
    parser = argparse.ArgumentParser(
        prog="uiforge lint",
        description="Check generated source against the component whitelist",
    )
    parser.add_argument("source", type=str, help="Source file ('-' for stdin)")
    args = parser.parse_args(argv)

    result = lint_source(_read_input(args.source))
    _report(result.errors, result.warnings)
    if result.valid:
        print("OK")
    return 0 if result.valid else 1


def handle_diff_command(argv: list[str]) -> int:
    """Show line changes between two source files."""
    parser = argparse.ArgumentParser(
        prog="uiforge diff",
        description="Positional line diff of two source files",
    )
    parser.add_argument("old", type=str, help="Original source file")
    parser.add_argument("new", type=str, help="Updated source file")
    args = parser.parse_args(argv)

    result = diff_code(_read_input(args.old), _read_input(args.new))
    print(json.dumps(result.to_dict(), indent=2))
    return 0


# =============================================================================
# Pipeline Commands
# =============================================================================


def _add_store_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Version database path (default: UIFORGE_VERSION_DB)",
    )


def _add_llm_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--provider",
        "-p",
        type=str,
        default=None,
        help="LLM provider: openai or anthropic (default: UIFORGE_LLM_PROVIDER)",
    )
    parser.add_argument(
        "--model",
        "-m",
        type=str,
        default=None,
        help="LLM model name (default: UIFORGE_LLM_MODEL or provider default)",
    )
    parser.add_argument(
        "--api-key",
        "-k",
        type=str,
        default=None,
        help="API key (uses env var if not provided)",
    )
    parser.add_argument(
        "--no-explain",
        action="store_true",
        help="Skip the explanation step",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of the source",
    )


def build_orchestrator(args: argparse.Namespace) -> Orchestrator:
    """Wire an LLM-backed orchestrator from CLI arguments."""
    backend = create_llm_backend(args.provider, args.model, api_key=args.api_key)
    explainer = None if args.no_explain else LLMExplainer(backend)
    store = VersionStore.from_environment(args.db)
    return Orchestrator(LLMPlanner(backend), explainer=explainer, store=store)


def _print_result(result: PipelineResult, as_json: bool) -> int:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _report(result.errors, result.warnings)
        if result.success:
            print(result.code)
            if result.change_summary:
                logger.info(result.change_summary)
            logger.info(f"Version {result.version['id']}")
    return 0 if result.success else 1


def _run_pipeline(args: argparse.Namespace, modify: bool) -> int:
    try:
        orchestrator = build_orchestrator(args)
    except (LLMError, ValueError) as e:
        logger.error(f"Cannot create LLM backend: {e}")
        return 1

    try:
        if modify:
            result = asyncio.run(orchestrator.modify(args.request, args.version))
        else:
            result = asyncio.run(orchestrator.generate(args.request))
    finally:
        orchestrator.store.close()
    return _print_result(result, args.json)


def handle_generate_command(argv: list[str]) -> int:
    """Generate a new version from a natural language request."""
    parser = argparse.ArgumentParser(
        prog="uiforge generate",
        description="Generate UI source from natural language",
    )
    parser.add_argument("request", type=str, help="Description of the UI")
    _add_llm_arguments(parser)
    _add_store_argument(parser)
    args = parser.parse_args(argv)
    return _run_pipeline(args, modify=False)


def handle_modify_command(argv: list[str]) -> int:
    """Modify the latest (or a given) version."""
    parser = argparse.ArgumentParser(
        prog="uiforge modify",
        description="Modify an existing version from natural language",
    )
    parser.add_argument("request", type=str, help="Requested change")
    parser.add_argument(
        "--version",
        "-v",
        type=str,
        default=None,
        help="Version ID to modify (default: latest)",
    )
    _add_llm_arguments(parser)
    _add_store_argument(parser)
    args = parser.parse_args(argv)
    return _run_pipeline(args, modify=True)


def handle_history_command(argv: list[str]) -> int:
    """List stored versions, oldest first."""
    parser = argparse.ArgumentParser(
        prog="uiforge history",
        description="List version history",
    )
    _add_store_argument(parser)
    args = parser.parse_args(argv)

    store = VersionStore.from_environment(args.db)
    try:
        print(json.dumps([s.to_dict() for s in store.get_history()], indent=2))
    finally:
        store.close()
    return 0


def handle_rollback_command(argv: list[str]) -> int:
    """Roll back to a version, discarding every later one."""
    parser = argparse.ArgumentParser(
        prog="uiforge rollback",
        description="Roll back version history (destructive, no redo)",
    )
    parser.add_argument("version_id", type=str, help="Version ID to roll back to")
    _add_store_argument(parser)
    args = parser.parse_args(argv)

    store = VersionStore.from_environment(args.db)
    try:
        target = store.rollback_to_version(args.version_id)
    finally:
        store.close()

    if target is None:
        logger.error(f"Version {args.version_id} not found")
        return 1
    print(target.code)
    return 0


# =============================================================================
# Entry Point
# =============================================================================


COMMANDS = {
    "schema": handle_schema_command,
    "compile": handle_compile_command,
    "lint": handle_lint_command,
    "diff": handle_diff_command,
    "generate": handle_generate_command,
    "modify": handle_modify_command,
    "history": handle_history_command,
    "rollback": handle_rollback_command,
}


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: uiforge {command} [args]")
    print("\n=== Offline ===")
    print("  schema     Print the component whitelist export")
    print("  compile    Compile a plan JSON file to component source")
    print("  lint       Statically validate a component source file")
    print("  diff       Line diff of two source files")
    print("\n=== Pipeline (requires an LLM API key) ===")
    print("  generate   Generate a new version from natural language")
    print("  modify     Modify the latest or a given version")
    print("\n=== History ===")
    print("  history    List versions")
    print("  rollback   Roll back to a version")
    print("\nExamples:")
    print("  uiforge compile plan.json -o GeneratedUI.tsx")
    print("  uiforge generate 'login form with email and password' --db versions.db")
    print("  uiforge modify 'add a forgot password link' --db versions.db")
    print("\nSet UIFORGE_LOG_LEVEL=DEBUG for verbose output.")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        show_help()
        return 1

    command, rest_args = argv[0], argv[1:]
    if command in ("-h", "--help"):
        show_help()
        return 0

    if command not in COMMANDS:
        logger.error(f"Unknown command: {command}")
        show_help()
        return 1

    load_dotenv()
    setup_logging(parse_level(get_environment(EnvVar.LOG_LEVEL)))
    return COMMANDS[command](rest_args)


__all__ = ["main", "build_orchestrator", "COMMANDS"]
