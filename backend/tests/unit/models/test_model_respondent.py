"""Tests for Respondent defaults and the elapsed-time helper."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from surveyadmin.models import Respondent
from tests.factories.subject import RespondentFactory

STARTED = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class TestRespondentElapsedTime:
    @pytest.mark.parametrize(
        "first_access_at, finalized_at",
        [(None, None), (STARTED, None), (None, STARTED)],
    )
    def test_not_calculated_until_both_timestamps_exist(self, first_access_at, finalized_at):
        respondent = Respondent(first_access_at=first_access_at, finalized_at=finalized_at)
        assert respondent.elapsed_time == "Not calculated"

    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=0), "00:00:00"),
            (timedelta(minutes=7, seconds=5), "00:07:05"),
            (timedelta(hours=26, minutes=1, seconds=59), "26:01:59"),
        ],
    )
    def test_formats_hours_minutes_seconds(self, delta, expected):
        respondent = Respondent(first_access_at=STARTED, finalized_at=STARTED + delta)
        assert respondent.elapsed_time == expected


class TestRespondentDefaults:
    def test_new_respondent_is_active_without_logins(self, session):
        respondent = RespondentFactory()
        session.flush()

        assert respondent.active is True
        assert respondent.logins == 0
        assert respondent.elapsed_time == "Not calculated"
