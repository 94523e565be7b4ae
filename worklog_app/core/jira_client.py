"""Jira API client wrapper (enhanced search pagination + worklog endpoints)."""

from __future__ import annotations

import hashlib
import json
import time
from datetime import datetime
from typing import Any

import requests
from jira import JIRA, JIRAError

from .config import JIRA_API_VERSION, SEARCH_CACHE_TTL, SEARCH_PAGE_SIZE


class TrackerError(RuntimeError):
    """Raised when a Jira call fails."""


class JiraAPI:
    def __init__(self, server: str, email: str, token: str, api_version: str = JIRA_API_VERSION):
        self.server = server.rstrip("/")
        self.api_version = api_version
        options = {"server": self.server, "rest_api_version": api_version}
        self.cloud = bool(email)
        # Cloud uses email + API token, Server/DC a personal access token
        try:
            if email:
                self.client = JIRA(basic_auth=(email, token), options=options)
            else:
                self.client = JIRA(token_auth=token, options=options)
        except (JIRAError, requests.RequestException) as exc:
            raise TrackerError(f"Failed to connect to Jira at {self.server}: {exc}") from exc
        # Simple in-memory cache: {(hash): (timestamp, data)}
        self._cache: dict[str, tuple[float, list]] = {}
        self._cache_ttl = SEARCH_CACHE_TTL

    def clear_cache(self) -> None:
        """Reset the in-memory search cache."""
        cache = getattr(self, "_cache", None)
        if isinstance(cache, dict):
            cache.clear()

    def _cache_key(self, jql: str, fields, page_size: int) -> str:
        payload = {
            "jql": jql,
            "fields": fields,
            "page_size": page_size,
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()

    def search_enhanced(
        self,
        jql: str,
        fields: list[str] | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """All issues matching ``jql``, cached for ``SEARCH_CACHE_TTL`` seconds.

        Cloud pages ``/search/jql`` by ``nextPageToken``; Server/DC only has
        ``/search`` paged by ``startAt``.
        """
        session = getattr(self.client, "_session", None)
        if session is None:
            raise TrackerError("JIRA session unavailable")
        key = self._cache_key(jql, fields, page_size)
        now = time.time()
        cached = self._cache.get(key)
        if cached and (now - cached[0]) < self._cache_ttl:
            return cached[1]
        params = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        if self.cloud:
            out = self._search_by_token(session, params)
        else:
            out = self._search_by_offset(session, params)
        self._cache[key] = (now, out)
        return out

    def _get_page(self, session, url: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = session.get(url, params=params)
        except requests.RequestException as exc:
            raise TrackerError(f"Jira search request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise TrackerError(f"Jira search failed {resp.status_code}: {resp.text[:200]}")
        return resp.json()

    def _search_by_token(self, session, params: dict[str, Any]) -> list[dict[str, Any]]:
        url = f"{self.server}/rest/api/{self.api_version}/search/jql"
        out: list[dict[str, Any]] = []
        token = None
        while True:
            qp = dict(params)
            if token:
                qp["nextPageToken"] = token
            data = self._get_page(session, url, qp)
            out.extend(data.get("issues", []))
            token = data.get("nextPageToken")
            if not token or data.get("isLast") is True:
                break
        return out

    def _search_by_offset(self, session, params: dict[str, Any]) -> list[dict[str, Any]]:
        url = f"{self.server}/rest/api/{self.api_version}/search"
        out: list[dict[str, Any]] = []
        while True:
            data = self._get_page(session, url, {**params, "startAt": len(out)})
            issues = data.get("issues", [])
            out.extend(issues)
            if not issues or len(out) >= int(data.get("total", 0)):
                break
        return out

    def current_user_ids(self) -> set[str]:
        """Identifiers Jira may use for the authenticated user in worklog authors."""
        try:
            me = self.client.myself()
        except (JIRAError, requests.RequestException) as exc:
            raise TrackerError(f"Failed to fetch current user: {exc}") from exc
        return {str(me[k]) for k in ("accountId", "name", "key") if me.get(k)}

    def fetch_worklogs(self, issue_key: str) -> list[dict[str, Any]]:
        try:
            worklogs = self.client.worklogs(issue_key)
        except (JIRAError, requests.RequestException) as exc:
            raise TrackerError(f"Failed to fetch worklogs for {issue_key}: {exc}") from exc
        return [getattr(w, "raw", w) for w in worklogs]

    def add_worklog(
        self,
        issue_key: str,
        seconds: int,
        comment: str,
        started: datetime | None = None,
    ) -> None:
        try:
            self.client.add_worklog(
                issue_key,
                timeSpentSeconds=str(seconds),
                comment=comment,
                started=started,
            )
        except (JIRAError, requests.RequestException) as exc:
            raise TrackerError(f"Failed to log work on {issue_key}: {exc}") from exc
