"""Azure DevOps SourceRepository using the Git items and commits APIs."""

import base64
import logging
import posixpath
import re
from typing import Any
from urllib.parse import urlparse

import httpx

from parca.errors import RefResolutionError, RemoteNotFoundError, SourceAccessError
from parca.integrations.source.abc import (
    DirectoryResult,
    FileResult,
    RemoteFile,
    SourceRepository,
)
from parca.integrations.source.github import USER_AGENT

logger = logging.getLogger(__name__)

API_VERSION = "7.1"

_COMMIT_RE = re.compile(r"^[0-9a-f]{40}$")


def parse_azure_url(url: str) -> tuple[str, str, str]:
    """Extract (org, project, repo) from https://dev.azure.com/{org}/{project}/_git/{repo}.

    Raises:
        ValueError: If the URL does not follow that layout
    """
    parts = [p for p in urlparse(url).path.split("/") if p]
    if "_git" not in parts:
        raise ValueError(f"Invalid Azure DevOps URL: {url}")
    git_index = parts.index("_git")
    if git_index < 2 or git_index + 1 >= len(parts):
        raise ValueError(f"Invalid Azure DevOps URL: {url}")
    return parts[0], parts[1], parts[git_index + 1]


def _version_params(ref: str, prefix: str) -> dict[str, str]:
    params = {f"{prefix}.version": ref}
    if _COMMIT_RE.match(ref):
        params[f"{prefix}.versionType"] = "commit"
    return params


class AzureSourceRepository(SourceRepository):
    """Production implementation over dev.azure.com."""

    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._url = url
        org, project, repo = parse_azure_url(url)
        self._base = f"https://dev.azure.com/{org}/{project}/_apis/git/repositories/{repo}"
        self._headers = {"User-Agent": USER_AGENT}
        if token:
            encoded = base64.b64encode(f":{token}".encode()).decode("ascii")
            self._headers["Authorization"] = f"Basic {encoded}"
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def _get(
        self, suffix: str, params: dict[str, str], not_found: Exception
    ) -> httpx.Response:
        api_url = f"{self._base}/{suffix}"
        try:
            response = await self._client.get(
                api_url, params={**params, "api-version": API_VERSION}, headers=self._headers
            )
        except httpx.HTTPError as e:
            raise SourceAccessError(f"Failed to reach {api_url}: {e}") from e

        if response.status_code == 404:
            raise not_found
        if response.is_error:
            raise SourceAccessError(
                f"HTTP {response.status_code} from {api_url}: {response.text[:200]}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise SourceAccessError(f"Failed to parse JSON from {response.url}") from e

    async def resolve_ref(self, ref: str) -> str:
        logger.debug("Resolving ref %s in %s", ref, self._url)
        params = {**_version_params(ref, "searchCriteria.itemVersion"), "$top": "1"}
        response = await self._get("commits", params, RefResolutionError(ref, self._url))
        data = self._json(response)
        commits = data.get("value") if isinstance(data, dict) else None
        if not commits:
            raise RefResolutionError(ref, self._url)
        return commits[0]["commitId"]

    async def fetch_file(self, path: str, ref: str) -> FileResult:
        logger.debug("Fetching %s@%s from %s", path, ref, self._url)
        params = {"path": path, **_version_params(ref, "versionDescriptor")}
        response = await self._get("items", params, RemoteNotFoundError(path, ref))
        try:
            content = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SourceAccessError(f"{path}@{ref} is not valid UTF-8 text") from e
        return FileResult(content=content, content_id="")

    async def fetch_directory(self, path: str, ref: str) -> DirectoryResult:
        params = {
            "scopePath": path,
            "recursionLevel": "full",
            **_version_params(ref, "versionDescriptor"),
        }
        response = await self._get("items", params, RemoteNotFoundError(path, ref))
        data = self._json(response)
        items = data.get("value") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise SourceAccessError(f"Expected directory listing from Azure DevOps for {path}")

        root = "/" + path.strip("/")
        files: list[RemoteFile] = []
        for item in items:
            if item.get("gitObjectType") != "blob" or item["path"] == root:
                continue
            fetched = await self.fetch_file(item["path"], ref)
            relative = posixpath.relpath(item["path"], root)
            files.append(RemoteFile(path=relative, content=fetched.content))
        return DirectoryResult(files=files)

    async def aclose(self) -> None:
        await self._client.aclose()
