#!/usr/bin/env python3
"""Main entry point for the read-all webmail automation"""

import asyncio
import os
import sys
import argparse
import uuid
from loguru import logger
from dotenv import load_dotenv

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"


def configure_logging(debug: bool = False):
    """Console sink plus a rotating JSON file sink"""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format=LOG_FORMAT)
    logger.add("logs/read_all_json_{time}.log", rotation="1 day", retention="7 days", level="DEBUG", serialize=True)


# Configure logger
configure_logging()

# Load environment variables
load_dotenv()

from readall.browser.session import BrowserSession, DEFAULT_PROFILE_DIR
from readall.providers.base import SelectScope
from readall.providers.registry import ProviderRegistry
from readall.workflow.models import WorkflowTimings
from readall.workflow.orchestrator import WorkflowOrchestrator, prepare_provider


DEFAULT_URL = "https://mail.google.com/mail/u/0/#inbox"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Mark every message in a webmail inbox as read')
    parser.add_argument('--url', type=str, default=os.getenv('READ_ALL_URL', DEFAULT_URL),
                        help='Mailbox URL (Gmail, Outlook or Yahoo)')
    parser.add_argument('--profile', type=str, default=os.getenv('READ_ALL_PROFILE_DIR', DEFAULT_PROFILE_DIR),
                        help='Chromium profile directory holding the webmail login')
    parser.add_argument('--fresh-profile', action='store_true', help='Use a throwaway profile instead of --profile')
    parser.add_argument('--headless', action='store_true', help='Run browser in headless mode (no UI)')
    parser.add_argument('--debug', action='store_true', help='Enable verbose logging')
    parser.add_argument('--scope', type=str, choices=[s.value for s in SelectScope],
                        default=os.getenv('READ_ALL_GMAIL_SCOPE', SelectScope.UNREAD_ONLY.value),
                        help='Gmail selection scope: unread (default) or all (entire folder)')
    parser.add_argument('--select-pause-ms', type=int, default=None,
                        help='Pause after selecting (default: READ_ALL_SELECT_PAUSE_MS or 500)')
    parser.add_argument('--mark-pause-ms', type=int, default=None,
                        help='Pause after marking as read (default: READ_ALL_MARK_PAUSE_MS or 2000)')
    parser.add_argument('--check-only', action='store_true',
                        help='Only resolve the provider and wait for the mailbox, do not click anything')
    return parser


def build_timings(args: argparse.Namespace) -> WorkflowTimings:
    timings = WorkflowTimings.from_env()
    overrides = {}
    if args.select_pause_ms is not None:
        overrides['select_pause_ms'] = args.select_pause_ms
    if args.mark_pause_ms is not None:
        overrides['mark_pause_ms'] = args.mark_pause_ms
    if overrides:
        timings = timings.model_copy(update=overrides)
    return timings


async def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)

    if args.debug:
        configure_logging(debug=True)
        logger.debug("DEBUG mode enabled")

    if args.headless:
        os.environ['HEADLESS'] = 'true'
        logger.info("Running in HEADLESS mode (no browser UI)")

    correlation_id = uuid.uuid4().hex[:8]
    session = BrowserSession(
        correlation_id=correlation_id,
        user_data_dir=None if args.fresh_profile else args.profile,
    )

    try:
        await session.start()
        document = await session.open(args.url)

        registry = ProviderRegistry(document, gmail_scope=SelectScope(args.scope))
        provider = await prepare_provider(registry)
        if provider is None:
            return 1

        if args.check_only:
            logger.success(f"{provider.name} is ready")
            return 0

        orchestrator = WorkflowOrchestrator(
            provider,
            timings=build_timings(args),
            correlation_id=correlation_id,
        )
        result = await orchestrator.run()

        if result.succeeded:
            logger.success(f"Marked messages as read in {provider.name} ({result.duration_seconds:.1f}s)")
            return 0

        logger.error(f"Run failed: {result.error}")
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1
    finally:
        await session.close()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
