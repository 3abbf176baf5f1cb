"""
CLI Entry Point: Run prompts through the lead-generation assistant

Usage:
    python scripts/run_prompt.py "https://www.linkedin.com/in/jane-doe"
    python scripts/run_prompt.py "find CTOs at fintech startups in Berlin"
    python scripts/run_prompt.py --data-source webscraping "top 5 AI agencies in Pune"
    python scripts/run_prompt.py --csv public/email.csv "show prospects" "generate previews"
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from leadgen.assistant import ProspectSession, build_default_context, process_user_prompt
from leadgen.common.config import Config
from leadgen.common.logger import setup_logging
from leadgen.services.csv_import import load_prospects_from_csv


async def run(prompts, session: ProspectSession, csv_path: str, show_data: bool) -> None:
    context = build_default_context()
    context.csv_path = csv_path

    for prompt in prompts:
        print(f"\n> {prompt}")
        response = await process_user_prompt(prompt, session, context)
        print(response.text)

        if show_data and response.data:
            print(json.dumps(response.data, indent=2, default=str))
        if response.metrics:
            print(response.metrics.model_dump_json(indent=2))

    if context.persister is not None:
        await context.persister.drain()
        if context.persister.errors:
            print(f"\n⚠️  {len(context.persister.errors)} background save(s) failed; see logs")


def main():
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Run one or more prompts through the lead-generation assistant"
    )
    parser.add_argument(
        "prompts",
        nargs="+",
        help="Prompts to run in order against one session"
    )
    parser.add_argument(
        "--data-source",
        default="contactout",
        choices=["contactout", "webscraping"],
        help="contactout (enrichment/search) or webscraping (every prompt is scraped)"
    )
    parser.add_argument(
        "--csv",
        default=Config.PROSPECTS_CSV_PATH,
        help="Prospect CSV loaded into the session and used by 'enrich prospects from csv'"
    )
    parser.add_argument(
        "--no-data",
        action="store_true",
        help="Print only the response text"
    )
    parser.add_argument(
        "--log-level",
        default=Config.LOG_LEVEL,
        help="DEBUG, INFO, WARNING or ERROR"
    )

    args = parser.parse_args()

    setup_logging(args.log_level, Config.LOG_FORMAT)
    Config.warn_if_incomplete(logging.getLogger("run_prompt"))

    session = ProspectSession(data_source=args.data_source)
    if Path(args.csv).exists():
        session.add_prospects(load_prospects_from_csv(args.csv))
        print(f"✓ Loaded {len(session.prospects)} prospects from {args.csv}")

    try:
        asyncio.run(run(args.prompts, session, args.csv, show_data=not args.no_data))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
