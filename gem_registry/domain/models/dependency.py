"""
Dependency and Download Models
"""

from pydantic import Field

from .package import RegistryModel


class DependencyInfo(RegistryModel):
    """Row of /api/v1/dependencies."""
    name: str
    dependent_name: str = ""
    requirements: str = ""
    dependent_type: str = ""


class RepositoryDownloadCount(RegistryModel):
    """Total downloads across the whole registry."""
    total_downloads: int = Field(0, alias="total")


class VersionDownloadCount(RegistryModel):
    """Downloads of one gem version."""
    version_downloads: int = 0
    total_downloads: int = 0
