"""
Interactive CLI adapter for Aixo.

Architectural role:
- Exposes terminal generation with runtime task/provider switching.
- Provides operator visibility into provider status and token usage.
- Delegates all generation to `aixo.api.snippet.run_snippet`.

Request lifecycle (per line of input):
1. Read stdin.
2. Handle local control commands (`exit`/`quit`, `/task`, `/provider`,
   `/status`, `/usage`).
3. Route any other text as a prompt with the active task/provider.
4. Print the output, or a hint to check the log when the output is empty.

Error handling strategy:
- EOF and keyboard interrupts terminate the loop without traceback output.
- Unknown `/task` or `/provider` values are rejected with a message.
"""

import argparse
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv

from aixo.api.snippet import run_snippet
from aixo.core.dispatcher import Dispatcher, create_dispatcher
from aixo.core.options import TASK_ALIASES, normalize_task
from aixo.settings import Settings


# =========================================================
# STATUS OUTPUT
# =========================================================

def print_status(dispatcher: Dispatcher) -> None:
    default_key = dispatcher.settings.default_provider
    print("PROVIDERS:")
    for descriptor in dispatcher.describe_providers():
        status = "ready" if descriptor.available else "not configured"
        mark = " (default)" if descriptor.key == default_key else ""
        print(f"  {descriptor.key:<12} {descriptor.display_name:<24} {status}{mark}")


def print_usage(dispatcher: Dispatcher) -> None:
    store = dispatcher.usage_store
    if store is None:
        print("Usage store not configured.")
        return

    last = store.latest()
    if last is None:
        print("Last Request: (no data yet)")
    else:
        print(
            f"Last Request: {last.provider} (model {last.model}) used {last.tokens} tokens "
            f"at {last.timestamp.isoformat()}."
        )
    for total in store.totals():
        print(f"  {total.provider} (model {total.model}): {total.tokens} tokens")


# =========================================================
# MAIN
# =========================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aixo", description="Aixo interactive generation CLI")
    parser.add_argument("--provider", default=None, help="Initial provider key")
    parser.add_argument("--task", default="text", choices=sorted(TASK_ALIASES), help="Initial task")
    parser.add_argument("--debug", action="store_true", help="Log requests and responses")
    return parser


def main(argv: Sequence[str] | None = None, dispatcher: Dispatcher | None = None) -> int:
    """
    Run the CLI loop.

    Interaction with core:
    - Calls `run_snippet(dispatcher, {"prompt": ..., "task": ..., "provider": ...})`
      for every non-command line.
    """
    args = build_parser().parse_args(argv)

    if dispatcher is None:
        load_dotenv()
        settings = Settings.from_env(dotenv=False)
        if args.debug:
            settings = settings.with_overrides(debug=True)
        dispatcher = create_dispatcher(settings)

    logging.basicConfig(
        level=logging.INFO if dispatcher.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    active_task = normalize_task(args.task)
    active_provider = (args.provider or dispatcher.settings.default_provider).lower()

    print("Aixo started. (Type 'exit' to quit)\n")
    print("-" * 60)
    print_status(dispatcher)
    print("-" * 60)

    while True:

        try:
            line = input(f"[{active_provider}/{active_task}] Prompt: ").strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not line:
            continue

        if line.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        command, *rest = line.split(None, 1)
        argument = rest[0] if rest else ""

        if command == "/task":
            requested = argument.strip().lower()
            if requested not in TASK_ALIASES:
                print(f"Unknown task. Choose one of: {', '.join(sorted(TASK_ALIASES))}")
            else:
                active_task = normalize_task(requested)
                print(f"Task set to {active_task}.")
            continue

        if command == "/provider":
            requested = argument.strip().lower()
            if dispatcher.get_provider(requested) is None:
                print(f"Unknown provider. Choose one of: {', '.join(dispatcher.get_providers())}")
            else:
                active_provider = requested
                print(f"Provider set to {active_provider}.")
            continue

        if line == "/status":
            print_status(dispatcher)
            continue

        if line == "/usage":
            print_usage(dispatcher)
            continue

        output = run_snippet(
            dispatcher,
            {"prompt": line, "task": active_task, "provider": active_provider},
        )
        print("\nResponse:\n")
        print(output if output else "(no output; see log for details)")
        print("\n" + "-" * 60 + "\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
