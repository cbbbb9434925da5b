"""Tests for release repositories"""

import json

import pytest

from release_tool.api.exceptions import InvalidVersionError, ReleaseNotFoundError, RepositoryError
from release_tool.models import (
    AppDeployerData,
    AppSpec,
    Manifest,
    PackageReference,
    Release,
    RepositoryConfig,
    StatusCode,
)
from release_tool.repository import (
    FilesystemAppDeployerDataRepository,
    FilesystemReleaseRepository,
    InMemoryAppDeployerDataRepository,
    InMemoryReleaseRepository,
    RepositoryFactory,
    create_repositories,
)


def _release(version, name="logger", level="INFO", status=StatusCode.DEPLOYED):
    release = Release(
        name=name,
        version=version,
        package=PackageReference("logger", "1.0.0"),
        manifest=Manifest(
            data=f"# v{version}",
            app_specs=(AppSpec(
                application_name="logger-app",
                kind="generic-app",
                resource="maven://org.example:logger-app",
                version="1.0.0",
                application_properties={"log.level": level}
            ),)
        ),
        platform_name="default"
    )
    release.set_status(status)
    return release


@pytest.fixture(params=["memory", "filesystem"])
def repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryReleaseRepository()
    return FilesystemReleaseRepository(tmp_path)


@pytest.fixture(params=["memory", "filesystem"])
def deployer_data_repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryAppDeployerDataRepository()
    return FilesystemAppDeployerDataRepository(tmp_path)


class TestReleaseRepository:

    @pytest.mark.asyncio
    async def test_save_and_find(self, repository):
        await repository.save(_release(1))

        found = await repository.find_by_name_and_version("logger", 1)
        assert found.version == 1
        assert found.manifest == _release(1).manifest
        assert found.status_code == StatusCode.DEPLOYED

    @pytest.mark.asyncio
    async def test_versions_must_be_contiguous(self, repository):
        await repository.save(_release(1))

        with pytest.raises(RepositoryError, match="next version"):
            await repository.save(_release(3))

        await repository.save(_release(2))
        assert await repository.latest_version("logger") == 2

    @pytest.mark.asyncio
    async def test_first_version_is_one(self, repository):
        with pytest.raises(InvalidVersionError):
            await repository.save(_release(0))

        with pytest.raises(RepositoryError):
            await repository.save(_release(2))

    @pytest.mark.asyncio
    async def test_manifest_is_immutable(self, repository):
        await repository.save(_release(1))

        # Status updates of an existing version are fine
        updated = _release(1, status=StatusCode.DELETED)
        updated.manifest = (await repository.find_by_name_and_version("logger", 1)).manifest
        await repository.save(updated)

        with pytest.raises(RepositoryError, match="immutable"):
            await repository.save(_release(1, level="DEBUG"))

    @pytest.mark.asyncio
    async def test_missing_version(self, repository):
        with pytest.raises(ReleaseNotFoundError):
            await repository.find_by_name_and_version("logger", 1)
        assert await repository.find_latest_by_name("logger") is None

    @pytest.mark.asyncio
    async def test_history_newest_first(self, repository):
        for version in (1, 2, 3):
            await repository.save(_release(version, level=f"L{version}"))

        history = await repository.find_all_by_name("logger")
        assert [r.version for r in history] == [3, 2, 1]

        revisions = await repository.find_release_revisions("logger", 2)
        assert [r.version for r in revisions] == [3, 2]

    @pytest.mark.asyncio
    async def test_current_skips_deleted(self, repository):
        await repository.save(_release(1, status=StatusCode.DELETED))
        await repository.save(_release(2, level="DEBUG", status=StatusCode.FAILED))
        await repository.save(_release(3, level="WARN", status=StatusCode.DELETED))

        assert (await repository.find_latest_by_name("logger")).version == 3
        assert (await repository.find_current_by_name("logger")).version == 2
        assert await repository.find_latest_deployed_by_name("logger") is None

    @pytest.mark.asyncio
    async def test_latest_deployed_or_failed(self, repository):
        await repository.save(_release(1, name="alpha"))
        await repository.save(_release(2, name="alpha", level="DEBUG", status=StatusCode.DEPLOYING))
        await repository.save(_release(1, name="beta", status=StatusCode.DELETED))
        await repository.save(_release(1, name="gamma", status=StatusCode.FAILED))

        releases = await repository.find_latest_deployed_or_failed()
        assert [(r.name, r.version) for r in releases] == [("alpha", 1), ("gamma", 1)]

    @pytest.mark.asyncio
    async def test_delete_all(self, repository):
        await repository.save(_release(1))
        await repository.save(_release(1, name="other"))

        await repository.delete_all("logger")

        assert not await repository.exists("logger")
        assert await repository.names() == ["other"]

    @pytest.mark.asyncio
    async def test_stored_records_are_copies(self, repository):
        release = _release(1)
        await repository.save(release)

        release.set_status(StatusCode.FAILED, "changed after save")
        found = await repository.find_by_name_and_version("logger", 1)
        assert found.status_code == StatusCode.DEPLOYED


class TestAppDeployerDataRepository:

    @pytest.mark.asyncio
    async def test_save_and_find(self, deployer_data_repository):
        await deployer_data_repository.save(AppDeployerData("logger", 1, {"logger-app": "id-1"}))
        await deployer_data_repository.save(AppDeployerData("logger", 2, {"logger-app": "id-2"}))

        data = await deployer_data_repository.find_by_release_name_and_version("logger", 1)
        assert data.deployment_data == {"logger-app": "id-1"}
        assert data.find_application_name("id-1") == "logger-app"

        everything = await deployer_data_repository.find_all_by_release_name("logger")
        assert sorted(everything) == [1, 2]

        assert await deployer_data_repository.find_by_release_name_and_version("logger", 3) is None

    @pytest.mark.asyncio
    async def test_delete_all(self, deployer_data_repository):
        await deployer_data_repository.save(AppDeployerData("logger", 1, {"logger-app": "id-1"}))
        await deployer_data_repository.delete_all("logger")

        assert await deployer_data_repository.find_all_by_release_name("logger") == {}


class TestFilesystemLayout:

    @pytest.mark.asyncio
    async def test_json_record_per_version(self, tmp_path):
        repository = FilesystemReleaseRepository(tmp_path)
        await repository.save(_release(1))

        path = tmp_path / "releases" / "logger" / "v1.json"
        assert path.is_file()
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == 1
        assert not list(path.parent.glob(".*.tmp"))

    @pytest.mark.asyncio
    async def test_corrupt_record(self, tmp_path):
        path = tmp_path / "releases" / "logger" / "v1.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RepositoryError, match="Corrupt record"):
            await FilesystemReleaseRepository(tmp_path).find_by_name_and_version("logger", 1)


class TestRepositoryFactory:

    def test_create_memory(self):
        releases, data = create_repositories(RepositoryConfig(type="memory"))
        assert isinstance(releases, InMemoryReleaseRepository)
        assert isinstance(data, InMemoryAppDeployerDataRepository)

    def test_create_filesystem(self, tmp_path):
        releases, data = RepositoryFactory.create_from_config(
            RepositoryConfig(type="filesystem", path=str(tmp_path)))
        assert isinstance(releases, FilesystemReleaseRepository)
        assert isinstance(data, FilesystemAppDeployerDataRepository)

    def test_supported_types(self):
        assert {"memory", "filesystem"} <= set(RepositoryFactory.get_supported_types())
