#!/usr/bin/env python3
"""
Scheduler for running the distress scan on a daily cadence.

SCHEDULE_CRON set (e.g. "0 6 * * *")  -> APScheduler blocking cron job,
                                         London time
SCHEDULE_CRON unset                    -> single run, for an external cron

For cloud deployment use lambda_handler with an EventBridge schedule.
"""

import json
import logging
import sys

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from dotenv import load_dotenv

from distress_engine import ConfigurationError, Settings, run_daily

logger = logging.getLogger(__name__)

TIMEZONE = "Europe/London"


def run_scheduled(settings=None) -> dict:
    """Run one distress scan with settings from the environment."""
    settings = settings or Settings.from_env()
    logger.info("Running scheduled Companies House distress scan...")
    result = run_daily(settings)
    logger.info(
        f"Daily distress scan completed: {result['total_flagged']} flagged, "
        f"{len(result['new_findings'])} new"
    )
    return result


def _scheduled_job(settings):
    try:
        run_scheduled(settings)
    except Exception as e:
        # Keep the scheduler alive for tomorrow's run
        logger.error(f"Daily distress scan failed: {e}", exc_info=True)


def start_scheduler(settings=None) -> None:
    """Block on a cron schedule, or run once when no schedule is configured."""
    settings = settings or Settings.from_env()

    if not settings.schedule_cron:
        run_scheduled(settings)
        return

    settings.validate()
    trigger = CronTrigger.from_crontab(settings.schedule_cron, timezone=TIMEZONE)
    scheduler = BlockingScheduler(timezone=TIMEZONE)
    scheduler.add_job(
        _scheduled_job,
        trigger,
        args=[settings],
        id="daily_distress_scan",
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Distress scan scheduled with cron '{settings.schedule_cron}' ({TIMEZONE})")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")


def lambda_handler(event, context):
    """AWS Lambda handler."""
    logging.basicConfig(level=logging.INFO)

    settings = Settings.from_env()
    codes = (event or {}).get("sic_codes")
    if codes:
        settings.sic_codes = tuple(codes)

    try:
        result = run_scheduled(settings)
    except ConfigurationError as e:
        logger.error(f"Lambda configuration error: {e}")
        return {"statusCode": 500, "body": json.dumps({"error": str(e)})}
    except Exception as e:
        logger.error(f"Lambda execution failed: {e}")
        return {"statusCode": 500, "body": json.dumps({"error": str(e)})}

    return {
        "statusCode": 200,
        "body": json.dumps({
            "message": "Distress scan completed",
            "total_companies": result["total_companies"],
            "total_flagged": result["total_flagged"],
            "new_findings": len(result["new_findings"]),
            "failed_codes": result["failed_codes"],
            "email_sent": result["email_sent"],
        }),
    }


def main() -> int:
    """Scheduler entry point."""
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    try:
        start_scheduler()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
