"""Cron Schedule - turns 5-field cron expressions into Celery beat entries."""

from celery.schedules import crontab

from app.config import Settings

DORMANT_USERS_TASK = "maintenance.deactivate_dormant_users"


def parse_cron_expression(expression: str) -> crontab:
    """'minute hour day-of-month month day-of-week' -> crontab."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"cron expression must have 5 fields, got {expression!r}")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def build_beat_schedule(settings: Settings) -> dict[str, dict]:
    return {
        DORMANT_USERS_TASK: {
            "task": DORMANT_USERS_TASK,
            "schedule": parse_cron_expression(settings.cron_deactivate_dormant_users),
        },
    }
