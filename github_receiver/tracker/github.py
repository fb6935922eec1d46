"""GitHub issue tracker — async REST client scoped to one organisation."""

from __future__ import annotations

import re
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import structlog

from github_receiver.alerts import TrackerError
from github_receiver.tracker import Issue

log = structlog.get_logger("github_receiver.tracker")

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

# Every issue opened by the receiver carries this label; listing filters on it.
ALERT_LABEL = "alert:boom:"

_MAX_PAGES = 10


class GitHubTracker:
    """Thin async wrapper around the GitHub issues API.

    One attempt per call: transport errors and non-2xx responses are raised
    as :class:`TrackerError` and never retried here.
    """

    def __init__(
        self,
        org: str,
        token: str | None = None,
        *,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.org = org
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubTracker:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── tracker operations ─────────────────────────────────────────────────

    async def list_open_issues(self) -> list[Issue]:
        """Return every open alert issue across the organisation's repos."""
        query = f'is:issue is:open in:title org:{self.org} label:"{ALERT_LABEL}"'
        issues: list[Issue] = []
        async for item in self._search(query):
            issues.append(_to_issue(item))
        log.debug("github.listed", org=self.org, count=len(issues))
        return issues

    async def create_issue(
        self, repo: str, title: str, body: str, extra_labels: list[str]
    ) -> Issue:
        """Open an issue in ``<org>/<repo>``."""
        payload = {
            "title": title,
            "body": body,
            "labels": [ALERT_LABEL, *extra_labels],
        }
        resp = await self._request("POST", f"/repos/{self.org}/{repo}/issues", json=payload)
        return _to_issue(resp.json())

    async def close_issue(self, issue: Issue) -> Issue:
        """Set the issue state to closed."""
        if not issue.repository or issue.number is None:
            raise TrackerError(f"cannot close issue without repository/number: {issue.title!r}")
        resp = await self._request(
            "PATCH",
            f"/repos/{issue.repository}/issues/{issue.number}",
            json={"state": "closed"},
        )
        return _to_issue(resp.json())

    # ── internal ───────────────────────────────────────────────────────────

    async def _search(self, query: str) -> AsyncGenerator[dict[str, Any], None]:
        """Yield items from the issue search endpoint, following ``Link`` headers."""
        url: str | None = "/search/issues"
        params: dict[str, Any] | None = {"q": query, "per_page": 100}
        page = 0
        while url and page < _MAX_PAGES:
            resp = await self._request("GET", url, params=params)
            for item in resp.json().get("items", []):
                yield item
            url = self._parse_next_link(resp.headers.get("Link", ""))
            params = None  # the next link already carries the query
            page += 1

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.warning(
                "github.request_failed",
                method=method,
                url=url,
                status=exc.response.status_code,
            )
            raise TrackerError(
                f"{method} {url} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("github.request_failed", method=method, url=url, error=str(exc))
            raise TrackerError(f"{method} {url} failed: {exc}") from exc
        return resp

    @staticmethod
    def _parse_next_link(link_header: str) -> str | None:
        """Extract the ``next`` URL from a GitHub ``Link`` header."""
        match = _NEXT_LINK_RE.search(link_header)
        return match.group(1) if match else None


def parse_repository(repository_url: str) -> str:
    """Extract ``owner/repo`` from a GitHub repository URL.

    Handles API urls (``https://api.github.com/repos/owner/repo``) and
    html urls (``https://github.com/owner/repo``).  Returns an empty string
    when the URL has fewer than two path segments.
    """
    url = repository_url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]
    parts = [p for p in url.split("/") if p]
    if len(parts) < 2 or parts[-2].endswith(":"):
        return ""
    return f"{parts[-2]}/{parts[-1]}"


def _to_issue(data: dict[str, Any]) -> Issue:
    return Issue(
        title=data.get("title") or "",
        body=data.get("body") or "",
        repository=parse_repository(data.get("repository_url") or ""),
        number=data.get("number"),
        url=data.get("html_url") or "",
    )
