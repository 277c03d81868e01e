"""GitLab REST API (v4) adapter."""

import base64
import binascii
import logging
from typing import Any, Dict, Iterator, List
from urllib.parse import quote

import requests

from glissue.adapters.base import GitPlatformAdapter, GitPlatformError
from glissue.models import Issue, IssueLabel, IssueMilestone, Project


def _project_from_api(data: Dict[str, Any]) -> Project:
    return Project(
        id=data["id"],
        path_with_namespace=data.get("path_with_namespace") or "",
        default_branch=data.get("default_branch"),
        web_url=data.get("web_url") or "",
        http_url_to_repo=data.get("http_url_to_repo") or "",
    )


def _label_from_api(data: Dict[str, Any]) -> IssueLabel:
    return IssueLabel(
        id=data["id"],
        name=data.get("name") or "",
        description=data.get("description") or "",
    )


def _milestone_from_api(data: Dict[str, Any]) -> IssueMilestone:
    return IssueMilestone(id=data["id"], name=data.get("title") or "")


def _issue_from_api(data: Dict[str, Any]) -> Issue:
    milestone = data.get("milestone") or {}
    return Issue(
        id=data["id"],
        iid=data["iid"],
        title=data.get("title") or "",
        description=data.get("description") or "",
        web_url=data.get("web_url") or "",
        labels=list(data.get("labels") or []),
        milestone_id=milestone.get("id"),
    )


class GitLabAdapter(GitPlatformAdapter):
    """GitLab API implementation.

    Authenticates with a personal access token (PRIVATE-TOKEN header);
    without a token only public projects are reachable.
    """

    def __init__(
        self,
        token: str | None,
        api_url: str = "https://gitlab.com/api/v4",
        timeout: int = 30,
        per_page: int = 100,
        log: logging.Logger | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._per_page = per_page
        self._log = log or logging.getLogger("glissue.adapters.gitlab")
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/json"
        if token:
            self._session.headers["PRIVATE-TOKEN"] = token

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        self._log.debug("%s %s params=%s", method, url, params)
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path}: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                body = resp.json()
                msg = body.get("message") or body.get("error") or msg
            except (ValueError, AttributeError):
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}", status_code=resp.status_code)
        return resp

    def _json(self, resp: requests.Response, path: str, expected: type) -> Any:
        """Decode a 2xx body; anything but JSON of the expected type is a
        GitPlatformError."""
        try:
            data = resp.json()
        except ValueError as e:
            raise GitPlatformError(f"{path}: response is not JSON: {e}", status_code=resp.status_code) from e
        if not isinstance(data, expected):
            raise GitPlatformError(
                f"{path}: expected a JSON {expected.__name__}, got {type(data).__name__}",
                status_code=resp.status_code,
            )
        return data

    def _get_object(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        return self._json(self._request(method, path, **kwargs), path, dict)

    def _paginate(self, path: str, params: Dict[str, Any] | None = None) -> Iterator[Dict[str, Any]]:
        """Yield items of a list endpoint, following X-Next-Page."""
        page: str | None = "1"
        while page:
            page_params = {**(params or {}), "per_page": self._per_page, "page": page}
            resp = self._request("GET", path, params=page_params)
            yield from self._json(resp, path, list)
            page = (resp.headers.get("X-Next-Page") or "").strip() or None

    def search_projects(self, search: str) -> Iterator[Project]:
        for data in self._paginate("/projects", params={"search": search}):
            yield _project_from_api(data)

    def list_labels(self, project_id: int) -> List[IssueLabel]:
        return [_label_from_api(d) for d in self._paginate(f"/projects/{project_id}/labels")]

    def list_milestones(self, project_id: int, state: str = "active") -> List[IssueMilestone]:
        data = self._paginate(f"/projects/{project_id}/milestones", params={"state": state})
        return [_milestone_from_api(d) for d in data]

    def list_tree(self, project_id: int, path: str, ref: str) -> List[dict]:
        return list(
            self._paginate(
                f"/projects/{project_id}/repository/tree",
                params={"path": path, "ref": ref},
            )
        )

    def get_file_content(self, project_id: int, file_path: str, ref: str) -> bytes:
        encoded_path = quote(file_path, safe="")
        data = self._get_object(
            "GET",
            f"/projects/{project_id}/repository/files/{encoded_path}",
            params={"ref": ref},
        )
        try:
            return base64.b64decode(data.get("content") or "", validate=True)
        except binascii.Error as e:
            raise GitPlatformError(f"could not decode file {file_path}: {e}") from e

    def create_issue(self, project_id: int, title: str, description: str) -> Issue:
        data = self._get_object(
            "POST",
            f"/projects/{project_id}/issues",
            json={"title": title, "description": description},
        )
        return _issue_from_api(data)

    def update_issue(
        self,
        project_id: int,
        issue_iid: int,
        add_labels: List[str],
        milestone_id: int | None = None,
    ) -> Issue:
        payload: Dict[str, Any] = {"add_labels": ",".join(add_labels)}
        if milestone_id is not None:
            payload["milestone_id"] = milestone_id
        data = self._get_object("PUT", f"/projects/{project_id}/issues/{issue_iid}", json=payload)
        return _issue_from_api(data)
