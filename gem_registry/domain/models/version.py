"""
Version Models

Models for /api/v1/versions endpoints.
"""

from typing import Optional, List, Any
from datetime import datetime

from pydantic import Field

from .package import RegistryModel, Metadata


class Version(RegistryModel):
    """Released version of a gem."""
    number: str
    authors: Optional[str] = None
    built_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    description: Optional[str] = None
    downloads_count: int = 0
    metadata: Optional[Metadata] = None
    summary: Optional[str] = None
    platform: str = ""
    rubygems_version: Optional[str] = None
    ruby_version: Optional[str] = None
    prerelease: bool = False
    licenses: Optional[List[str]] = None
    requirements: List[Any] = Field(default_factory=list)
    sha: Optional[str] = None


class LatestVersion(RegistryModel):
    """Latest version number of a gem."""
    version: str
