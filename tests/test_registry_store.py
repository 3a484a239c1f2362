"""Unit tests for the registry store."""

import json
from unittest.mock import patch

import pytest

from apk_index.exceptions import RegistryCorruptError
from apk_index.models import Package, PackageRegistry, Repository
from apk_index.registry_store import RegistryStore

REPO_URL = "https://dl-cdn.alpinelinux.org/alpine/v3.18/main/x86_64/"
OTHER_URL = "https://dl-cdn.alpinelinux.org/alpine/v3.18/community/x86_64/"


def make_package(name: str, version: str = "1.0-r0") -> Package:
    return Package(name=name, version=version, filename=f"{name}-{version}.apk")


@pytest.fixture
def store(tmp_path):
    return RegistryStore(tmp_path / "packages.json")


class TestLoad:
    def test_missing_file_returns_none(self, store):
        assert store.load() is None

    def test_round_trip(self, store):
        registry = PackageRegistry()
        store.merge(registry, REPO_URL, [make_package("curl"), make_package("jq")])
        store.persist(registry)

        loaded = store.load()

        assert loaded == registry
        assert loaded.repositories[0].architecture == "x86_64"

    def test_total_packages_is_recomputed(self, store):
        document = {
            "repositories": [
                {
                    "url": REPO_URL,
                    "architecture": "x86_64",
                    "package_count": 1,
                    "packages": [
                        {
                            "name": "curl",
                            "version": "8.1.2-r0",
                            "size": "unknown",
                            "date": "unknown",
                            "filename": "curl-8.1.2-r0.apk",
                        }
                    ],
                }
            ],
            "total_packages": 999,
        }
        store.path.write_text(json.dumps(document))

        registry = store.load()

        assert registry.total_packages == 1

    def test_package_count_is_derived_from_packages(self, store):
        document = {
            "repositories": [{"url": REPO_URL, "package_count": 99, "packages": []}],
            "total_packages": 0,
        }
        store.path.write_text(json.dumps(document))

        registry = store.load()

        assert registry.repositories[0].package_count == 0
        assert registry.total_packages == 0

    def test_stale_count_is_not_persisted(self, store):
        document = {
            "repositories": [
                {
                    "url": REPO_URL,
                    "package_count": 5,
                    "packages": [make_package("curl").to_dict()],
                }
            ],
            "total_packages": 5,
        }
        store.path.write_text(json.dumps(document))

        registry = store.load_or_empty()
        store.merge(registry, OTHER_URL, [make_package("htop")])
        store.persist(registry)

        data = json.loads(store.path.read_text())
        assert data["repositories"][0]["package_count"] == 1
        assert data["total_packages"] == 2

    def test_invalid_json_raises(self, store):
        store.path.write_text("{not json")

        with pytest.raises(RegistryCorruptError, match="not valid JSON"):
            store.load()

    def test_wrong_structure_raises(self, store):
        store.path.write_text(json.dumps({"packages": []}))

        with pytest.raises(RegistryCorruptError, match="unexpected structure"):
            store.load()

    def test_load_or_empty_missing(self, store):
        assert store.load_or_empty() == PackageRegistry()

    def test_load_or_empty_corrupt(self, store):
        store.path.write_text("[]")

        assert store.load_or_empty() == PackageRegistry()


class TestMerge:
    def test_adds_new_repository(self, store):
        registry = store.merge(PackageRegistry(), REPO_URL, [make_package("curl")])

        assert len(registry.repositories) == 1
        assert registry.repositories[0].url == REPO_URL
        assert registry.repositories[0].package_count == 1
        assert registry.total_packages == 1

    def test_replaces_existing_repository(self, store):
        registry = PackageRegistry()
        store.merge(registry, REPO_URL, [make_package("curl"), make_package("jq")])
        store.merge(registry, OTHER_URL, [make_package("htop")])

        store.merge(registry, REPO_URL, [make_package("bash")])

        assert [repo.url for repo in registry.repositories] == [REPO_URL, OTHER_URL]
        assert [p.name for p in registry.repositories[0].packages] == ["bash"]
        assert registry.repositories[0].package_count == 1
        assert registry.total_packages == 2

    def test_empty_package_list(self, store):
        registry = store.merge(PackageRegistry(), REPO_URL, [])

        assert registry.repositories[0].package_count == 0
        assert registry.total_packages == 0


class TestPersist:
    def test_writes_expected_document(self, store):
        registry = PackageRegistry()
        store.merge(registry, REPO_URL, [make_package("curl", "8.1.2-r0")])

        store.persist(registry)

        data = json.loads(store.path.read_text())
        assert data == {
            "repositories": [
                {
                    "url": REPO_URL,
                    "architecture": "x86_64",
                    "package_count": 1,
                    "packages": [
                        {
                            "name": "curl",
                            "version": "8.1.2-r0",
                            "size": "unknown",
                            "date": "unknown",
                            "filename": "curl-8.1.2-r0.apk",
                        }
                    ],
                }
            ],
            "total_packages": 1,
        }

    def test_recomputes_stale_total(self, store):
        registry = PackageRegistry(
            repositories=[Repository.build(REPO_URL, [make_package("a"), make_package("b")])],
            total_packages=0,
        )

        store.persist(registry)

        assert json.loads(store.path.read_text())["total_packages"] == 2

    def test_creates_parent_directory(self, tmp_path):
        store = RegistryStore(tmp_path / "state" / "packages.json")

        store.persist(PackageRegistry())

        assert store.path.exists()

    def test_failed_write_keeps_previous_file(self, store):
        registry = PackageRegistry()
        store.merge(registry, REPO_URL, [make_package("curl")])
        store.persist(registry)
        previous = store.path.read_text()

        store.merge(registry, OTHER_URL, [make_package("htop")])
        with patch("apk_index.registry_store.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                store.persist(registry)

        assert store.path.read_text() == previous
        assert list(store.path.parent.iterdir()) == [store.path]
