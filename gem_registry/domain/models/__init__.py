"""
Registry Domain Models
"""

from .package import (
    RegistryModel,
    Metadata,
    Dependency,
    Dependencies,
    PackageInformation,
)
from .version import Version, LatestVersion
from .dependency import (
    DependencyInfo,
    RepositoryDownloadCount,
    VersionDownloadCount,
)

__all__ = [
    "RegistryModel",
    "Metadata",
    "Dependency",
    "Dependencies",
    "PackageInformation",
    "Version",
    "LatestVersion",
    "DependencyInfo",
    "RepositoryDownloadCount",
    "VersionDownloadCount",
]
