"""Command-line entry point for the email agent."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from email_agent.core import AppSettings, configure_logging, load_oauth_settings, load_settings
from email_agent.exceptions import ConfigError, GmailAuthError

logger = logging.getLogger("email_agent")


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="email-agent",
        description="Daily Gmail summary and reply-driven mailbox actions",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Path to a .env file with configuration (default: ./.env).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Summarize and parse commands without sending or changing anything.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "summarize", "process-commands", "setup-oauth"],
        help="Operation to execute (default: run).",
    )
    return parser


def _setup_oauth(env_file: Path) -> int:
    from email_agent.gmail.auth import GmailAuth

    try:
        settings = load_oauth_settings(env_file)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET in your environment or .env file.",
              file=sys.stderr)
        return 1

    auth = GmailAuth(
        settings.google.client_id,
        settings.google.client_secret,
        settings.paths.token_storage,
        redirect_uri=settings.google.redirect_uri,
    )
    if auth.has_token():
        try:
            auth.get_credentials()
        except GmailAuthError:
            print("Existing token is invalid. Starting a new authorization flow.")
        else:
            print("Existing Gmail token is valid. No setup needed.")
            return 0

    auth.authorize()
    print(f"Authorization successful. Token saved to {settings.paths.token_storage}.")
    return 0


def run_agent(settings: AppSettings, command: str) -> None:
    """Wire the services together and run the requested passes."""
    from email_agent.commands.handler import CommandHandler
    from email_agent.commands.parser import CommandParser
    from email_agent.gmail.auth import GmailAuth
    from email_agent.gmail.client import GmailClient
    from email_agent.llm.client import LLMClient
    from email_agent.summary.handler import SummaryHandler
    from email_agent.summary.store import SummaryStore
    from email_agent.summary.summarizer import EmailSummarizer

    auth = GmailAuth(
        settings.google.client_id,
        settings.google.client_secret,
        settings.paths.token_storage,
        redirect_uri=settings.google.redirect_uri,
    )
    gmail = GmailClient(auth.get_credentials(), max_results=settings.agent.max_emails_per_run)
    llm = LLMClient(api_key=settings.anthropic.api_key, model=settings.anthropic.model)
    store = SummaryStore(settings.paths.summary_storage)
    dry_run = settings.agent.dry_run

    if command in ("run", "summarize"):
        logger.info("Generating daily summary...")
        summary_handler = SummaryHandler(
            gmail,
            EmailSummarizer(llm),
            store,
            settings.user.email,
            lookback_hours=settings.agent.email_lookback_hours,
            max_emails=settings.agent.max_emails_per_run,
            dry_run=dry_run,
        )
        result = summary_handler.generate_and_send_summary()
        if result:
            logger.info(
                f"Summary generated successfully. {len(result.summary.action_items)} action items, "
                f"{len(result.summary.informational)} informational."
            )
        else:
            logger.info("No emails to summarize.")

    if command == "process-commands" or (
        command == "run" and settings.agent.enable_command_processing
    ):
        logger.info("Checking for reply commands...")
        command_handler = CommandHandler(
            gmail, CommandParser(llm), store, settings.user.email, dry_run=dry_run,
        )
        results = command_handler.process_reply_commands()
        if results:
            successful = sum(1 for r in results if r.success)
            logger.info(
                f"Processed {len(results)} commands: {successful} successful, "
                f"{len(results) - successful} failed"
            )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "setup-oauth":
        return _setup_oauth(args.env_file)

    try:
        settings = load_settings(args.env_file)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    if args.dry_run:
        settings.agent.dry_run = True

    configure_logging(settings.logging.level, settings.paths.logs)
    logger.info("Starting Email Agent")

    try:
        run_agent(settings, args.command)
    except GmailAuthError as e:
        logger.error(f"{e}")
        return 1
    except Exception:
        logger.exception("Email Agent failed")
        return 1

    logger.info("Email Agent completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
