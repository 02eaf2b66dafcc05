"""
fanout entry point.

This file handles startup concerns (arg-parsing, env setup, logging) and runs one research
orchestrator on the task given on the command line.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from fanout.agent.llm_interface import load_llm
from fanout.common import (
    AnsiColors,
    colored_print,
    print_error,
)
from fanout.config import settings
from fanout.core.errors import AgentError
from fanout.core.schema import ToolMessage
from fanout.orchestration.research import Orchestrator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    # Keep SDK request chatter out of the agent log
    for noisy in ("httpx", "openai", "anthropic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


async def _run(task: str, model: str | None, log_dir: Path) -> str:
    llm = load_llm(settings.LLM_BACKEND, model=model)
    transcript = await Orchestrator(llm, task, log_dir).run()
    last = transcript[-1]
    return last.result if isinstance(last, ToolMessage) else last.content()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the fanout application.

    Parses the task description, model and log directory, initializes logging and runs the
    orchestrator.  Any error ends the process with status 1 after printing its class and message.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run a fanout research orchestrator")
    parser.add_argument("task", help="Research task description")
    parser.add_argument(
        "--model",
        default=settings.MODEL,
        help="Model identifier passed to the LLM backend (default from env: %(default)s)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path(settings.LOG_DIR),
        help="Directory for the markdown transcript logs (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    _init_logging(settings.LOG_LEVEL)

    # Ensure the log directory exists and is writable
    log_dir: Path = args.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    if not os.access(log_dir, os.W_OK):
        logger.error("Log directory is not writable: %s", log_dir)
        sys.exit(1)

    logger.info("Starting fanout [%s backend, logs in %s]", settings.LLM_BACKEND, log_dir)
    logger.debug(
        "Settings: %s", settings.model_dump(exclude={"OPENAI_API_KEY", "ANTHROPIC_API_KEY"})
    )

    try:
        result = asyncio.run(_run(args.task, args.model, log_dir))
    except AgentError as exc:
        print_error(exc)
        sys.exit(1)
    except Exception as exc:  # pylint: disable=broad-except
        logger.debug("Unhandled error", exc_info=True)
        print_error(exc)
        sys.exit(1)

    colored_print(result, AnsiColors.GREEN)


if __name__ == "__main__":
    main()
