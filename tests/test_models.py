"""
Tests for registry payload models.
"""

from datetime import datetime

from gem_registry.domain.models import (
    DependencyInfo,
    LatestVersion,
    PackageInformation,
    RepositoryDownloadCount,
    Version,
    VersionDownloadCount,
)
from tests.conftest import RAILS_PAYLOAD, VERSIONS_PAYLOAD


class TestPackageInformation:
    """Test PackageInformation parsing."""

    def test_full_payload(self) -> None:
        package = PackageInformation.model_validate(RAILS_PAYLOAD)

        assert package.name == "rails"
        assert package.downloads == 436090160
        assert isinstance(package.version_created_at, datetime)
        assert package.metadata.changelog_uri.endswith("v7.0.5")
        assert package.dependencies.development == []
        assert package.dependencies.runtime[1].requirements == "= 7.0.5"

    def test_unknown_fields_ignored(self) -> None:
        package = PackageInformation.model_validate(RAILS_PAYLOAD)
        assert not hasattr(package, "some_new_field")

    def test_minimal_payload(self) -> None:
        package = PackageInformation.model_validate({"name": "tiny"})

        assert package.downloads == 0
        assert package.licenses is None
        assert package.dependencies.runtime == []


class TestVersionModels:
    """Test version models."""

    def test_version(self) -> None:
        version = Version.model_validate(VERSIONS_PAYLOAD[0])

        assert version.number == "7.0.5"
        assert version.created_at.year == 2023
        assert version.prerelease is False

    def test_latest_version(self) -> None:
        assert LatestVersion.model_validate({"version": "1.2.3"}).version == "1.2.3"


class TestCountModels:
    """Test dependency and download models."""

    def test_repository_download_count_alias(self) -> None:
        assert RepositoryDownloadCount.model_validate({"total": 99}).total_downloads == 99
        assert RepositoryDownloadCount(total_downloads=5).total_downloads == 5

    def test_version_download_count(self) -> None:
        counts = VersionDownloadCount.model_validate({"version_downloads": 1, "total_downloads": 2})
        assert (counts.version_downloads, counts.total_downloads) == (1, 2)

    def test_dependency_info(self) -> None:
        info = DependencyInfo.model_validate({
            "name": "rails",
            "dependent_name": "rack",
            "requirements": ">= 2.2",
            "dependent_type": "runtime",
        })
        assert info.dependent_type == "runtime"
