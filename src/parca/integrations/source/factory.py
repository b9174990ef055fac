"""Construct SourceRepository instances for registered sources."""

import logging
import os
from collections.abc import Callable

from parca.integrations.source.abc import SourceRepository
from parca.integrations.source.azure import AzureSourceRepository
from parca.integrations.source.github import GitHubSourceRepository
from parca.models.config import ProviderName
from parca.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)

SourceRepositoryFactory = Callable[[ProviderName, str], SourceRepository]


def infer_provider(url: str) -> ProviderName:
    """Infer the Git hosting provider from a repository URL."""
    if "dev.azure.com" in url or "visualstudio.com" in url:
        return "azure"
    return "github"


def _gh_cli_token() -> str | None:
    try:
        result = run_subprocess_with_context(["gh", "auth", "token"], "read gh auth token")
    except RuntimeError as e:
        logger.debug("No token from gh CLI: %s", e)
        return None
    return result.stdout.strip() or None


def get_token(provider: ProviderName) -> str | None:
    """Find a token for the provider.

    GitHub: GITHUB_TOKEN, PARCA_TOKEN, then `gh auth token`.
    Azure DevOps: AZURE_DEVOPS_PAT, then PARCA_TOKEN.
    """
    if provider == "github":
        token = os.environ.get("GITHUB_TOKEN") or os.environ.get("PARCA_TOKEN")
        return token or _gh_cli_token()
    return os.environ.get("AZURE_DEVOPS_PAT") or os.environ.get("PARCA_TOKEN")


def create_source_repository(provider: ProviderName, url: str) -> SourceRepository:
    """Production SourceRepositoryFactory."""
    token = get_token(provider)
    if provider == "azure":
        return AzureSourceRepository(url, token=token)
    return GitHubSourceRepository(url, token=token)
