"""
Package Models

Pydantic models for gem metadata returned by /api/v1/gems and search.
"""

from typing import Optional, List, Any
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegistryModel(BaseModel):
    """Base model for registry payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Metadata(RegistryModel):
    """Project links declared in the gemspec metadata."""
    documentation_uri: Optional[str] = None
    bug_tracker_uri: Optional[str] = None
    mailing_list_uri: Optional[str] = None
    changelog_uri: Optional[str] = None
    source_code_uri: Optional[str] = None
    rubygems_mfa_required: Optional[str] = None
    wiki_uri: Optional[str] = None
    homepage_uri: Optional[str] = None


class Dependency(RegistryModel):
    """Single declared dependency."""
    name: str
    requirements: str = ""


class Dependencies(RegistryModel):
    """Dependencies grouped by kind."""
    development: List[Dependency] = Field(default_factory=list)
    runtime: List[Dependency] = Field(default_factory=list)


class PackageInformation(RegistryModel):
    """
    Gem information.

    Example payload (abridged):
        {"name": "rails", "downloads": 436090160, "version": "7.0.5",
         "licenses": ["MIT"], "dependencies": {"development": [], "runtime": [...]}}
    """
    name: str
    downloads: int = 0
    version: str = ""
    version_created_at: Optional[datetime] = None
    version_downloads: int = 0
    platform: str = ""
    authors: Optional[str] = None
    info: Optional[str] = None
    licenses: Optional[List[str]] = None
    metadata: Metadata = Field(default_factory=Metadata)
    yanked: bool = False
    sha: Optional[str] = None
    project_uri: Optional[str] = None
    gem_uri: Optional[str] = None
    homepage_uri: Optional[str] = None
    wiki_uri: Optional[Any] = None
    documentation_uri: Optional[str] = None
    mailing_list_uri: Optional[str] = None
    source_code_uri: Optional[str] = None
    bug_tracker_uri: Optional[str] = None
    changelog_uri: Optional[str] = None
    funding_uri: Optional[Any] = None
    dependencies: Dependencies = Field(default_factory=Dependencies)
