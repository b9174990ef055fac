"""GitHub SourceRepository using the REST contents and commits APIs."""

import base64
import logging
from typing import Any
from urllib.parse import quote, urlparse

import httpx

from parca.errors import RefResolutionError, RemoteNotFoundError, SourceAccessError
from parca.integrations.source.abc import (
    DirectoryResult,
    FileResult,
    RemoteFile,
    SourceRepository,
)

logger = logging.getLogger(__name__)

API_ROOT = "https://api.github.com"
USER_AGENT = "parca/0.1"


def parse_github_url(url: str) -> tuple[str, str]:
    """Extract (owner, repo) from a GitHub repository URL.

    Raises:
        ValueError: If the URL has no owner/repo path
    """
    parts = [p for p in urlparse(url).path.removesuffix(".git").split("/") if p]
    if len(parts) < 2:
        raise ValueError(f"Invalid GitHub URL: {url}")
    return parts[0], parts[1]


class GitHubSourceRepository(SourceRepository):
    """Production implementation over api.github.com.

    Requests are issued one at a time; directory trees are walked recursively.
    """

    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._url = url
        self._owner, self._repo = parse_github_url(url)
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    def _api(self, suffix: str) -> str:
        return f"{API_ROOT}/repos/{self._owner}/{self._repo}/{suffix}"

    async def _get_json(
        self,
        api_url: str,
        params: dict[str, str],
        not_found: Exception,
        not_found_statuses: tuple[int, ...] = (404,),
    ) -> Any:
        try:
            response = await self._client.get(api_url, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            raise SourceAccessError(f"Failed to reach {api_url}: {e}") from e

        if response.status_code in not_found_statuses:
            raise not_found
        if response.is_error:
            raise SourceAccessError(
                f"HTTP {response.status_code} from {api_url}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise SourceAccessError(f"Failed to parse JSON from {api_url}") from e

    async def resolve_ref(self, ref: str) -> str:
        logger.debug("Resolving ref %s in %s", ref, self._url)
        data = await self._get_json(
            self._api(f"commits/{quote(ref, safe='')}"),
            {},
            RefResolutionError(ref, self._url),
            not_found_statuses=(404, 422),
        )
        if not isinstance(data, dict) or "sha" not in data:
            raise SourceAccessError(f"GitHub returned unexpected commit payload for {ref}")
        return data["sha"]

    async def fetch_file(self, path: str, ref: str) -> FileResult:
        logger.debug("Fetching %s@%s from %s", path, ref, self._url)
        data = await self._get_json(
            self._api(f"contents/{quote(path)}"),
            {"ref": ref},
            RemoteNotFoundError(path, ref),
        )
        if not isinstance(data, dict) or data.get("encoding") != "base64" or "content" not in data:
            raise SourceAccessError(f"GitHub returned unexpected format for {path}")
        try:
            content = base64.b64decode(data["content"]).decode("utf-8")
        except ValueError as e:
            raise SourceAccessError(f"{path}@{ref} is not valid UTF-8 text") from e
        return FileResult(content=content, content_id=data.get("sha", ""))

    async def fetch_directory(self, path: str, ref: str) -> DirectoryResult:
        files: list[RemoteFile] = []
        await self._collect(path, ref, "", files)
        return DirectoryResult(files=files)

    async def _collect(
        self, dir_path: str, ref: str, relative: str, results: list[RemoteFile]
    ) -> None:
        items = await self._get_json(
            self._api(f"contents/{quote(dir_path)}"),
            {"ref": ref},
            RemoteNotFoundError(dir_path, ref),
        )
        if not isinstance(items, list):
            raise SourceAccessError(f"Expected directory listing from GitHub for {dir_path}")

        for item in items:
            item_relative = f"{relative}/{item['name']}" if relative else item["name"]
            if item["type"] == "file":
                fetched = await self.fetch_file(item["path"], ref)
                results.append(RemoteFile(path=item_relative, content=fetched.content))
            elif item["type"] == "dir":
                await self._collect(item["path"], ref, item_relative, results)

    async def aclose(self) -> None:
        await self._client.aclose()
