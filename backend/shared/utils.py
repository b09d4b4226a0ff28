import os
import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from models.notification import RunResult

DEFAULT_TIMEZONE = "America/Santiago"


def now_millis() -> int:
    """Current time as epoch milliseconds (the sentAt format)."""
    return int(time.time() * 1000)


def readable_timestamp(tz_name: str | None = None) -> str:
    """Local wall-clock time for run headers."""
    tz_name = tz_name or os.getenv("REPORT_TIMEZONE") or DEFAULT_TIMEZONE
    return datetime.now(ZoneInfo(tz_name)).strftime("%d-%m-%Y %H:%M:%S")


def github_run_info(env: dict[str, str] | None = None) -> dict[str, str]:
    """GitHub Actions workflow details, empty outside of Actions."""
    env = dict(os.environ) if env is None else env
    if not env.get("GITHUB_RUN_ID"):
        return {}
    return {
        "run_id": env["GITHUB_RUN_ID"],
        "run_number": env.get("GITHUB_RUN_NUMBER", ""),
        "workflow": env.get("GITHUB_WORKFLOW", ""),
        "event": env.get("GITHUB_EVENT_NAME") or "unknown",
    }


def print_run_header(title: str, tz_name: str | None = None) -> None:
    """Print run start banner."""
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(f"Local time: {readable_timestamp(tz_name)}")
    print(f"UTC time:   {datetime.now(timezone.utc).isoformat()}")

    run_info = github_run_info()
    if run_info:
        print(f"Run ID:     {run_info['run_id']}")
        print(f"Run Number: {run_info['run_number']}")
        print(f"Workflow:   {run_info['workflow']}")
        print(f"Event:      {run_info['event']}")


def print_summary(result: RunResult) -> None:
    """Print processing summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] Dispatch Complete!")
    print(f"{'=' * 60}")
    print(f"Total:  {result.total}")
    print(f"✓ Sent:   {result.sent}")
    print(f"✗ Failed: {result.failed}")
    print(f"{'=' * 60}\n")
