from datetime import date

import pytest
import pytz

from worklog_app.analytics.worklogs import (
    logged_seconds_per_day,
    summarize_by_issue,
    worklogs_to_dataframe,
)
from worklog_app.core.config import DEFAULT_TIMEZONE
from worklog_app.core.jira_client import JiraAPI, TrackerError
from worklog_app.core.mappers import map_issue, map_worklog
from worklog_app.core.models import ParsedWorkLog
from worklog_app.core.service import WorklogService


def _worklog(author, started, seconds):
    return {"author": author, "started": started, "timeSpentSeconds": seconds}


ME = {"accountId": "acc-1", "displayName": "Me"}
OTHER = {"accountId": "acc-2", "displayName": "Someone"}


class DummyAPI(JiraAPI):
    def __init__(self):
        self.server = "https://example.atlassian.net"
        self.searches = []
        self.added = []
        self.worklogs = {
            "OBS-1": [
                _worklog(ME, "2024-09-02T10:00:00.000+0000", 3600),
                _worklog(ME, "2024-09-03T10:00:00.000+0000", 7200),
                _worklog(OTHER, "2024-09-02T11:00:00.000+0000", 9999),
            ],
            "OBS-2": [
                _worklog(ME, "2024-09-02T15:00:00.000+0000", 1800),
                _worklog(ME, "2024-08-30T15:00:00.000+0000", 28800),
            ],
            "OBS-3": TrackerError("forbidden"),
        }

    def search_enhanced(self, jql, fields=None, page_size=100):
        self.searches.append(jql)
        return [
            {"key": key, "fields": {"summary": f"Issue {key}", "status": {"name": "In Progress"}}}
            for key in self.worklogs
        ]

    def current_user_ids(self):
        return {"acc-1"}

    def fetch_worklogs(self, issue_key):
        result = self.worklogs[issue_key]
        if isinstance(result, Exception):
            raise result
        return result

    def add_worklog(self, issue_key, seconds, comment, started=None):
        self.added.append((issue_key, seconds, comment, started))


def test_map_issue():
    issue = map_issue({"key": "OBS-9", "fields": {"summary": "Fix dome", "status": {"name": "To Do"}}})
    assert (issue.key, issue.summary, issue.status) == ("OBS-9", "Fix dome", "To Do")
    bare = map_issue({"key": "OBS-10", "fields": {"summary": None, "status": None}})
    assert bare.summary == "" and bare.status is None


def test_map_worklog_collects_author_ids():
    row = map_worklog(_worklog({"name": "jdoe", "key": "JIRAUSER1"}, "2024-09-02T10:00:00.000+0000", 60), "OBS-1")
    assert row["author_ids"] == {"jdoe", "JIRAUSER1"}
    assert row["seconds"] == 60
    assert row["started"].year == 2024


def test_logged_seconds_fenced_per_day_and_author():
    svc = WorklogService(DummyAPI())
    totals = svc.logged_seconds_by_day(date(2024, 9, 2), date(2024, 9, 6))
    assert totals == {date(2024, 9, 2): 5400, date(2024, 9, 3): 7200}


def test_logged_seconds_query_uses_range():
    api = DummyAPI()
    WorklogService(api).logged_seconds_by_day(date(2024, 9, 2), date(2024, 9, 6))
    assert '"2024-09-02"' in api.searches[0] and '"2024-09-06"' in api.searches[0]


def test_logged_seconds_respects_timezone():
    # 2024-09-02T23:30 UTC is already the 3rd in Moscow
    rows = [map_worklog(_worklog(ME, "2024-09-02T23:30:00.000+0000", 600), "OBS-1")]
    df = worklogs_to_dataframe(rows)
    utc = logged_seconds_per_day(df, {"acc-1"}, date(2024, 9, 2), date(2024, 9, 3))
    msk = logged_seconds_per_day(df, {"acc-1"}, date(2024, 9, 2), date(2024, 9, 3), "Europe/Moscow")
    assert utc == {date(2024, 9, 2): 600}
    assert msk == {date(2024, 9, 3): 600}


def test_logged_seconds_on_single_day():
    svc = WorklogService(DummyAPI())
    assert svc.logged_seconds_on(date(2024, 9, 3)) == 7200
    assert svc.logged_seconds_on(date(2024, 9, 4)) == 0


def test_empty_worklogs():
    df = worklogs_to_dataframe([])
    assert logged_seconds_per_day(df, {"acc-1"}, date(2024, 9, 2), date(2024, 9, 6)) == {}


def test_fetch_issues():
    svc = WorklogService(DummyAPI())
    issues = svc.fetch_open_issues()
    assert [i.key for i in issues] == ["OBS-1", "OBS-2", "OBS-3"]
    assert svc.fetch_my_issues()[0].summary == "Issue OBS-1"


def test_log_work_for_past_day_starts_in_local_morning():
    api = DummyAPI()
    svc = WorklogService(api, timezone="Europe/Moscow")
    svc.log_work(ParsedWorkLog("OBS-1", 3600, "Review"), date(2024, 9, 2))
    key, seconds, comment, started = api.added[0]
    assert (key, seconds, comment) == ("OBS-1", 3600, "Review")
    assert started.isoformat() == "2024-09-02T09:00:00+03:00"


def test_log_work_today_has_no_explicit_start():
    api = DummyAPI()
    WorklogService(api).log_work(ParsedWorkLog("OBS-1", 60, "x"))
    assert api.added[0][3] is None


def test_unknown_timezone_rejected():
    with pytest.raises(pytz.UnknownTimeZoneError):
        WorklogService(DummyAPI(), timezone="Mars/Olympus")


def test_summarize_by_issue_groups_in_order():
    logs = [
        ParsedWorkLog("OBS-2", 1800, "Standup"),
        ParsedWorkLog("OBS-1", 3600, "Review"),
        ParsedWorkLog("OBS-2", 600, "Sync"),
    ]
    out = summarize_by_issue(logs)
    assert list(out["issue_key"]) == ["OBS-2", "OBS-1"]
    assert list(out["seconds"]) == [2400, 3600]
    assert out.iloc[0]["description"] == "Standup; Sync"


def test_evening_worklog_counts_on_its_recorded_date():
    rows = [map_worklog(_worklog(ME, "2024-09-02T18:00:00.000-0800", 28800), "OBS-1")]
    df = worklogs_to_dataframe(rows)
    span = (date(2024, 9, 2), date(2024, 9, 3))
    assert logged_seconds_per_day(df, {"acc-1"}, *span, timezone=DEFAULT_TIMEZONE) == {date(2024, 9, 2): 28800}
    assert logged_seconds_per_day(df, {"acc-1"}, *span, timezone="UTC") == {date(2024, 9, 3): 28800}


def test_service_without_zone_keeps_recorded_dates():
    api = DummyAPI()
    api.worklogs = {"OBS-1": [_worklog(ME, "2024-09-02T18:00:00.000-0800", 28800)]}
    svc = WorklogService(api)
    assert svc.timezone == DEFAULT_TIMEZONE
    assert svc.logged_seconds_by_day(date(2024, 9, 2), date(2024, 9, 3)) == {date(2024, 9, 2): 28800}


def test_service_without_zone_uses_machine_clock():
    svc = WorklogService(DummyAPI())
    assert svc.today() == date.today()
    started = svc.started_at(date(2024, 9, 2))
    assert started.tzinfo is not None
    assert (started.date(), started.hour) == (date(2024, 9, 2), 9)
