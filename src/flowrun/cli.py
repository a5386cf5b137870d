"""CLI entry point for flowrun."""

import argparse
import asyncio
import json
import logging
import sys

from flowrun.core.state import WorkflowState
from flowrun.core.workflow import Workflow
from flowrun.recipes.loader import load_workflow


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowrun",
        description="Composable async workflow engine",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Run a workflow from a YAML file")
    run.add_argument("file", help="Path to the workflow YAML file")
    run.add_argument("--output", default=None, help="Print only this output key (e.g. 'Build.stdout')")
    run.add_argument("--json", action="store_true", help="Print outputs as JSON")

    return parser


def _print_outputs(workflow: Workflow, as_json: bool) -> None:
    outputs = workflow.outputs
    if as_json:
        print(json.dumps(outputs, indent=2, default=str))
        return
    for key in sorted(outputs):
        print(f"  {key} = {outputs[key]!r}")


async def _run(args: argparse.Namespace) -> int:
    workflow = load_workflow(args.file)
    await workflow.start()

    if args.output:
        value = workflow.output(args.output)
        if value is None:
            print(f"Output {args.output!r} not found", file=sys.stderr)
        elif args.json:
            print(json.dumps(value, default=str))
        else:
            print(value)
        return 0 if workflow.state == WorkflowState.COMPLETED and value is not None else 1

    print(f"Workflow: {workflow.name}")
    print(f"State: {workflow.state.value} in {workflow.report.duration_ms:.0f}ms")
    for status, count in workflow.report.summary()["by_status"].items():
        print(f"  {status}: {count}")

    if workflow.failure is not None:
        print(f"\nFailed at {workflow.failure.path or workflow.failure.node_name}: {workflow.failure.error}")
        origin = workflow.failure.origin
        if origin is not workflow.failure:
            print(f"  caused by {origin.node_name}: {origin.error}")

    print("\nOutputs:")
    _print_outputs(workflow, args.json)

    return 0 if workflow.state == WorkflowState.COMPLETED else 1


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    if args.command == "run":
        try:
            code = asyncio.run(_run(args))
        except (OSError, ValueError) as e:
            print(f"error: {e}", file=sys.stderr)
            code = 2
        sys.exit(code)
    else:
        parser.print_help()
        sys.exit(1)
