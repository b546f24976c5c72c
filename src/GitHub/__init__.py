"""
GitHub integration package.

Provides release-feed access, asset downloads and the requirement
synchronization that keeps UE4SS and AutoIntegrator installed.
"""

from .github_api import GitHubAPI, GitHubAPIError, RateLimitError, ResolvedAsset
from .github_download import download_asset, DownloadError, DownloadCancelled
from .requirements import (
    RequirementResolver, RequirementDescriptor, RequirementOutcome, DEFAULT_REQUIREMENTS,
)

__all__ = ["GitHubAPI", "GitHubAPIError", "RateLimitError", "ResolvedAsset",
           "download_asset", "DownloadError", "DownloadCancelled",
           "RequirementResolver", "RequirementDescriptor", "RequirementOutcome",
           "DEFAULT_REQUIREMENTS"]
