#!/usr/bin/env python3
"""
Ask the evidence agent one question from the terminal.

Outbound web commands are shown for approval on stdin unless --yes is given.
Prints the routes, the citations and the final answer. Model failures are
printed as-is and exit with status 1.

Run from project root:

    python scripts/ask.py "Which artists are in the catalog?"
    python scripts/ask.py --yes "Who founded AC/DC?"
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "evidence_agent" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from evidence_agent.agent.graph import build_pipeline, run_agent
from evidence_agent.services.approval import ApprovalGate, ApprovalMode, console_prompter


def main() -> int:
    parser = argparse.ArgumentParser(description="Ask the multi-source evidence agent a question.")
    parser.add_argument("question", nargs="+", help="Question text.")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Approve outbound web commands without prompting.",
    )
    parser.add_argument(
        "--concurrent",
        action="store_true",
        help="Collect SQL and DOCS evidence concurrently.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline steps.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    mode = ApprovalMode.AUTO_APPROVE if args.yes else ApprovalMode.INTERACTIVE
    gate = ApprovalGate(mode=mode, prompter=console_prompter)
    pipeline = build_pipeline(gate=gate, concurrent=args.concurrent or None)

    try:
        result = run_agent(" ".join(args.question), pipeline)
    except Exception as e:
        print(f"Error: {e!r}", file=sys.stderr)
        return 1

    print(f"Routes: {', '.join(r.value for r in result['routes'])}")
    print(f"Sources: {', '.join(result['citations']) or 'none'}")
    print()
    print(result["answer"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
