"""
CLI script for draining the pending notification queue and sending pushes.

Usage:
    # Send every pending notification to all active devices
    uv run python -m notifications.process_notification_queue

    # Dry run (read the queue and directory, don't send or write anything)
    uv run python -m notifications.process_notification_queue --dry-run

Exit code is 0 when the run completes, even if some notifications failed,
and 1 on missing configuration or when the queue/directory can't be read.
"""

import argparse
import sys
import time
import traceback

from models.notification import DispatchOutcome, Notification, RunResult
from notifications.credentials import AccessTokenProvider, load_service_account
from notifications.dispatcher import (
    NO_TOKENS_REASON,
    PROJECT_NOT_CONFIGURED_REASON,
    Sender,
    dispatch_notification,
    skipped_outcome,
)
from notifications.error_logger import log_notification_error
from notifications.fcm_sender import FcmSender
from notifications.notification_queue import (
    get_pending_notifications,
    mark_notification_as_sent,
)
from notifications.token_directory import get_active_tokens
from shared.config import Settings
from shared.db import RealtimeDatabase, get_realtime_db
from shared.errors import StatusWriteError
from shared.utils import print_run_header, print_summary


def process_pending_notifications(
    settings: Settings,
    database: RealtimeDatabase,
    sender: Sender | None = None,
    dry_run: bool = False,
) -> RunResult:
    """
    Send every pending notification and record its terminal status.

    Reads the queue first and stops there when it is empty. Without active
    destination tokens, or without FCM_PROJECT_ID, every pending notification
    is marked failed without any push being attempted. A failure while
    handling one notification never stops the others.

    Args:
        settings: Run configuration
        database: Realtime Database handle
        sender: Push sender, required when settings.project_id is set
        dry_run: If True, don't send pushes or write statuses

    Returns:
        RunResult with total/sent/failed counts

    Raises:
        QueueReadError: If pending notifications can't be read
        DirectoryReadError: If the token directory can't be read
    """
    if settings.project_id and sender is None and not dry_run:
        raise ValueError("A sender is required when FCM_PROJECT_ID is configured")

    pending = get_pending_notifications(database)

    if not pending:
        print("No pending notifications.")
        return RunResult(total=0, sent=0, failed=0)

    print(f"Found {len(pending)} pending notification(s)")

    tokens = get_active_tokens(database)

    if not tokens:
        print("No FCM tokens registered, marking all notifications as failed")
        failed = 0
        for notification in pending:
            _record_outcome(
                database,
                notification,
                skipped_outcome(notification, NO_TOKENS_REASON),
                settings,
                dry_run,
            )
            failed += 1
        return RunResult(total=len(pending), sent=0, failed=failed)

    print(f"Found {len(tokens)} active FCM token(s)")

    result = RunResult(total=len(pending))

    for notification in pending:
        print(f"\nProcessing notification {notification.id}...")
        print(f"   Title:   {notification.title}")
        print(f"   Message: {notification.message}")

        if not settings.project_id:
            print("   ⚠️  FCM_PROJECT_ID not configured, skipping")
            outcome = skipped_outcome(notification, PROJECT_NOT_CONFIGURED_REASON)
        elif dry_run:
            print(f"   [DRY RUN] Would send to {len(tokens)} device(s)")
            outcome = DispatchOutcome(
                notification_id=notification.id,
                delivered=[token.id for token in tokens],
            )
        else:
            try:
                outcome = dispatch_notification(
                    notification, tokens, sender, max_workers=settings.max_workers
                )
            except Exception as e:
                # Keep the record from staying pending forever
                print(f"   ✗ Unexpected error dispatching {notification.id}: {e}")
                outcome = skipped_outcome(notification, f"Dispatch error: {e}")

        if _record_outcome(database, notification, outcome, settings, dry_run):
            result.sent += 1
        else:
            result.failed += 1

    return result


def _record_outcome(
    database: RealtimeDatabase,
    notification: Notification,
    outcome: DispatchOutcome,
    settings: Settings,
    dry_run: bool,
) -> bool:
    """Write the terminal status. Returns True when it counts as sent."""
    error = outcome.error_summary()

    if outcome.succeeded:
        print(f"   ✓ Delivered to {len(outcome.delivered)} device(s)")
        if outcome.failures:
            print(f"   ⚠️  Warning: {len(outcome.failures)} send(s) failed")
    else:
        print(f"   ✗ Marked as failed: {error}")
        if not dry_run and not outcome.skipped_reason:
            error_file = log_notification_error(
                error_type="sending",
                error_message=error,
                context={
                    "notification_id": notification.id,
                    "title": notification.title,
                    "failed_destinations": [
                        f.destination_id for f in outcome.failures
                    ],
                    "status_codes": [f.status_code for f in outcome.failures],
                    "error_codes": [f.error_code for f in outcome.failures],
                },
            )
            print(f"    Error details logged to: {error_file}")

    if dry_run:
        return outcome.succeeded

    try:
        written = mark_notification_as_sent(
            database, notification.id, error=error, guarded=settings.guarded_writes
        )
    except StatusWriteError as e:
        print(f"   ✗ Could not record status for {notification.id}: {e}")
        log_notification_error(
            error_type="status",
            error_message=str(e),
            context={
                "notification_id": notification.id,
                "delivered": outcome.delivered,
                "intended_error": error,
            },
        )
        return False

    if not written:
        print(f"   ⚠️  {notification.id} was already completed by another run")

    return outcome.succeeded


def run(settings: Settings | None = None, dry_run: bool = False) -> RunResult:
    """
    Build the datastore handle and sender from configuration and process the queue.

    Raises:
        ConfigError: If required configuration is missing
        CredentialError: If the service account JSON is malformed
        QueueReadError / DirectoryReadError: If the datastore can't be read
    """
    if settings is None:
        settings = Settings.from_env()

    service_account = load_service_account(settings.service_account_json)
    database = get_realtime_db(
        service_account, settings.database_url, timeout=settings.http_timeout
    )

    try:
        sender = None
        if settings.project_id:
            token_provider = AccessTokenProvider(
                service_account, timeout=settings.http_timeout
            )
            sender = FcmSender(
                settings.project_id, token_provider, timeout=settings.http_timeout
            )
        return process_pending_notifications(
            settings, database, sender=sender, dry_run=dry_run
        )
    finally:
        database.close()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Send pending notifications to all registered FCM devices"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't send pushes or update notifications)",
    )

    args = parser.parse_args(argv)

    start = time.monotonic()

    try:
        print_run_header("Processing pending notifications...")
        result = run(dry_run=args.dry_run)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        print(f"\n{'=' * 60}", file=sys.stderr)
        print("✗ Run failed", file=sys.stderr)
        print(f"{'=' * 60}", file=sys.stderr)
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        traceback.print_exc()
        print(f"Time until failure: {elapsed_ms}ms", file=sys.stderr)
        log_notification_error(
            error_type="run",
            error_message=str(e),
            context={"exception": type(e).__name__, "elapsed_ms": elapsed_ms},
        )
        return 1

    print_summary(result)
    print(f"Execution time: {int((time.monotonic() - start) * 1000)}ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
