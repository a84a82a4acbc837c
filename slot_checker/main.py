"""
VFS Visa Slot Checker - Command line entry point

Logs in, discovers every visa office, checks each one for open slots and
writes the summary to the results file.
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from slot_checker.auth.challenge import ChallengeResolver, InteractiveChallengeResolver, MailboxChallengeResolver
from slot_checker.auth.imap_reader import IMAPMessageStore
from slot_checker.auth.login import SessionAuthenticator
from slot_checker.auth.mailbox import GmailMessageStore, MessageStore
from slot_checker.config import Settings, load_settings
from slot_checker.core.browser import BrowserManager
from slot_checker.errors import ConfigError, SlotCheckerError
from slot_checker.notifications import LogChannel, Notifier, TelegramNotifier
from slot_checker.reporting.report import ReportAggregator, ScanReport
from slot_checker.scanner import AvailabilityProbe, LocationEnumerator, ProbeResult, ProbeStatus, ScanOrchestrator
from slot_checker.utils.helpers import seconds_to_human

logger = logging.getLogger("slot_checker")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

COMMANDS = ("run", "setup-gmail")
ROOT_OPTIONS = ("-v", "--verbose")
HELP_OPTIONS = ("-h", "--help")


def build_notifier(settings: Settings) -> Notifier:
    notifier = Notifier()
    notifier.add_channel(LogChannel())
    telegram = TelegramNotifier(settings.telegram_bot_token, settings.telegram_chat_id)
    if telegram.is_enabled():
        notifier.add_channel(telegram)
    return notifier


def build_message_store(settings: Settings) -> MessageStore:
    if settings.otp_mode == "imap":
        if not settings.imap_email or not settings.imap_password:
            raise ConfigError("Please set VFS_IMAP_EMAIL and VFS_IMAP_PASSWORD for IMAP mode")
        return IMAPMessageStore(settings.imap_email, settings.imap_password, settings.imap_server, settings.imap_port)
    return GmailMessageStore.from_token_file(settings.gmail_token_path)


def build_resolver(settings: Settings, notifier: Optional[Notifier] = None) -> ChallengeResolver:
    if settings.otp_mode == "manual":
        on_waiting = notifier.notify_otp_required if notifier else None
        return InteractiveChallengeResolver(on_waiting=on_waiting)
    return MailboxChallengeResolver(
        build_message_store(settings),
        max_attempts=settings.otp_max_attempts,
        retry_delay=settings.otp_retry_delay,
    )


def progress_reporter(notifier: Notifier):
    async def report_progress(result: ProbeResult, index: int, total: int) -> None:
        if result.status == ProbeStatus.AVAILABLE:
            logger.info(f"✓ {result.office}: SLOTS AVAILABLE ({result.count} slots)")
            if result.dates:
                logger.info(f"  Dates: {', '.join(result.dates)}")
            await notifier.notify_appointment_found(result.office, result.dates, result.count)
        elif result.status == ProbeStatus.UNAVAILABLE:
            logger.info(f"✗ {result.office}: No slots available")
        elif result.status == ProbeStatus.UNCERTAIN:
            logger.warning(f"? {result.office}: Could not determine availability")
        else:
            logger.warning(f"⚠ {result.office}: {result.message}")

    return report_progress


async def run_scan(
    settings: Settings,
    resolver: ChallengeResolver,
    browser_manager: Optional[BrowserManager] = None,
    notifier: Optional[Notifier] = None,
) -> ScanReport:
    """Run one full scan: login, discovery, per-location probes, report."""
    credentials = settings.credentials()
    browser_manager = browser_manager or BrowserManager(headless=settings.headless)
    notifier = notifier or build_notifier(settings)

    authenticator = SessionAuthenticator(settings.login_url, timeout=settings.timeout, settle=settings.login_settle)
    enumerator = LocationEnumerator(settings.booking_url, timeout=settings.timeout)
    orchestrator = ScanOrchestrator(
        AvailabilityProbe(timeout=settings.timeout, settle=settings.probe_settle),
        visa_type=settings.visa_type,
        on_result=progress_reporter(notifier),
    )

    await notifier.notify_scan_started(settings.visa_type)
    try:
        async with browser_manager.open_page() as page:
            session = await authenticator.login(page, credentials, resolver)
            await notifier.notify_login_success()
            locations = await enumerator.enumerate(session)
            results = await orchestrator.scan_all(session, locations)

        report = ReportAggregator(settings.results_file).aggregate(results)
    except SlotCheckerError as e:
        await notifier.notify_error(f"Scan aborted: {e}")
        raise
    await notifier.notify_scan_completed(report.summary.to_dict())
    return report


def log_summary(report: ScanReport) -> None:
    summary = report.summary
    logger.info("=== SUMMARY ===")
    logger.info(f"Total offices: {summary.total}")
    logger.info(f"Available: {summary.available}")
    logger.info(f"Unavailable: {summary.unavailable}")
    logger.info(f"Uncertain: {summary.uncertain}")
    logger.info(f"Errors: {summary.errors}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slot-checker",
        description="Check VFS Global appointment availability across all visa offices",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="log in and scan every office (default)")
    run.add_argument("--manual", action="store_true", help="type the verification code instead of reading Gmail")
    run.add_argument("--visa-type", help="visa category label to look for")
    run.add_argument("--results-file", type=Path, help="where to write the JSON report")
    run.add_argument("--headed", action="store_true", help="show the browser window")

    setup = subparsers.add_parser("setup-gmail", help="authorize Gmail access for reading verification codes")

    setup.add_argument("--credentials", type=Path, help="OAuth client secrets file")
    setup.add_argument("--token", type=Path, help="where to store the Gmail token")
    return parser


def with_default_command(argv: List[str]) -> List[str]:
    """Insert "run" after the root options unless a command or help was asked for."""
    index = 0
    while index < len(argv) and argv[index] in ROOT_OPTIONS:
        index += 1
    if index < len(argv) and (argv[index] in COMMANDS or argv[index] in HELP_OPTIONS):
        return argv
    return argv[:index] + ["run"] + argv[index:]


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def setup_gmail(args: argparse.Namespace) -> int:
    from slot_checker.auth.gmail_setup import authorize

    settings = load_settings()
    authorize(args.credentials or settings.gmail_credentials_path, args.token or settings.gmail_token_path)
    logger.info("=== Next Steps ===")
    logger.info("1. Set your VFS Global credentials: VFS_EMAIL and VFS_PASSWORD")
    logger.info("2. Run the checker: slot-checker run")
    return EXIT_OK


def run(args: argparse.Namespace) -> int:
    settings = load_settings(
        otp_mode="manual" if args.manual else None,
        visa_type=args.visa_type,
        results_file=args.results_file,
        headless=False if args.headed else None,
    )
    settings.credentials()

    logger.info("=== VFS Global Visa Slot Checker ===")
    notifier = build_notifier(settings)
    resolver = build_resolver(settings, notifier)

    started = time.monotonic()
    report = asyncio.run(run_scan(settings, resolver, notifier=notifier))
    log_summary(report)
    logger.info(f"Results saved to {settings.results_file}")
    logger.info(f"Finished in {seconds_to_human(time.monotonic() - started)}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(with_default_command(argv))
    setup_logging(args.verbose)

    try:
        if args.command == "setup-gmail":
            return setup_gmail(args)
        return run(args)
    except SlotCheckerError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED
    except Exception:
        logger.exception("Fatal error")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
