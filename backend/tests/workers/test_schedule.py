"""Cron Schedule - expression parsing and beat entries built from settings."""

import pytest

from app.config import get_settings
from app.workers.schedule import DORMANT_USERS_TASK, build_beat_schedule, parse_cron_expression


def test_parses_five_field_expression():
    schedule = parse_cron_expression("30 3 * * 1")
    assert schedule.minute == {30}
    assert schedule.hour == {3}
    assert schedule.day_of_week == {1}


@pytest.mark.parametrize("expression", ["", "0 3 * *", "0 3 * * * *"])
def test_wrong_field_count_rejected(expression):
    with pytest.raises(ValueError):
        parse_cron_expression(expression)


def test_beat_schedule_uses_configured_cron():
    settings = get_settings().model_copy(update={"cron_deactivate_dormant_users": "15 4 * * *"})
    entry = build_beat_schedule(settings)[DORMANT_USERS_TASK]
    assert entry["task"] == DORMANT_USERS_TASK
    assert entry["schedule"].hour == {4}
    assert entry["schedule"].minute == {15}
