"""Unit tests for the pool sweep."""

from __future__ import annotations

import pytest

from poolkeeper.core.exceptions import FileDeleteError, PackageNotFoundError
from poolkeeper.core.models import Package, PackageFile, RefList
from poolkeeper.core.reconciler import reconcile_pool, referenced_files


class RecordingReporter:
    """ProgressReporter that records task events."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, int, int]] = []

    def start_task(self, name: str, total: int):
        self.events.append(("start", name, 0, total))

        def callback(done: int, total: int) -> None:
            self.events.append(("update", name, done, total))

        return callback

    def finish_task(self, name: str) -> None:
        self.events.append(("finish", name, 0, 0))


@pytest.mark.core
@pytest.mark.tra("UseCase.ReconcilePool")
@pytest.mark.tier(0)
class TestReferencedFiles:
    """Tests for referenced_files()."""

    def test_collects_sorted_paths_of_live_packages(self, fake_repo) -> None:
        """Paths of all files of all live packages are returned sorted."""
        pkg = Package(
            "nginx",
            "1.2",
            "amd64",
            files=(
                PackageFile("nginx.deb", "ffee0000"),
                PackageFile("nginx.dsc", "00aa0000"),
            ),
        )
        fake_repo.packages.update(pkg)

        files = referenced_files(fake_repo.packages, fake_repo.pool, RefList([pkg.key]))

        assert files == ["00/aa/nginx.dsc", "ff/ee/nginx.deb"]

    def test_shared_files_may_repeat(self, fake_repo) -> None:
        """Two packages sharing a file yield the path twice."""
        shared = PackageFile("shared.tar.gz", "abcd0000")
        one = Package("one", "1", "source", files=(shared,))
        two = Package("two", "1", "source", files=(shared,))
        fake_repo.packages.update(one)
        fake_repo.packages.update(two)

        files = referenced_files(
            fake_repo.packages, fake_repo.pool, RefList([one.key, two.key])
        )

        assert files == ["ab/cd/shared.tar.gz", "ab/cd/shared.tar.gz"]

    def test_missing_package_aborts(self, fake_repo) -> None:
        """A live key without a record raises PackageNotFoundError."""
        with pytest.raises(PackageNotFoundError):
            referenced_files(fake_repo.packages, fake_repo.pool, RefList([b"Pamd64 x 1"]))

    def test_reports_progress_per_package(self, fake_repo) -> None:
        """One progress step is reported per live package."""
        a = fake_repo.add_package("a")
        b = fake_repo.add_package("b")
        reporter = RecordingReporter()

        referenced_files(
            fake_repo.packages, fake_repo.pool, RefList([a.key, b.key]), reporter
        )

        updates = [e for e in reporter.events if e[0] == "update"]
        assert [u[2] for u in updates] == [1, 2]
        assert reporter.events[-1][0] == "finish"


@pytest.mark.core
@pytest.mark.tra("UseCase.ReconcilePool")
@pytest.mark.tier(0)
class TestReconcilePool:
    """Tests for reconcile_pool()."""

    def test_deletes_orphans_and_sums_sizes(self, fake_repo) -> None:
        """Unreferenced files are removed and their sizes returned."""
        a = fake_repo.add_package("a", size=10)
        fake_repo.pool.files["zz/zz/orphan.deb"] = 7
        fake_repo.pool.files["00/00/other.deb"] = 5

        deleted, freed = reconcile_pool(
            fake_repo.packages, fake_repo.pool, RefList([a.key])
        )

        assert deleted == 2
        assert freed == 12
        assert sorted(fake_repo.pool.files) == a.filepath_list(fake_repo.pool)

    def test_files_of_dead_packages_are_deleted(self, fake_repo) -> None:
        """Files belonging to packages outside the live set are orphans."""
        a = fake_repo.add_package("a", size=10)
        b = fake_repo.add_package("b", size=20)

        deleted, freed = reconcile_pool(
            fake_repo.packages, fake_repo.pool, RefList([a.key])
        )

        assert (deleted, freed) == (1, 20)
        assert fake_repo.pool.removed == b.filepath_list(fake_repo.pool)

    def test_dead_package_records_are_not_resolved(self, fake_repo) -> None:
        """Only live keys are looked up in the metadata store."""
        a = fake_repo.add_package("a")
        fake_repo.add_package("b")

        reconcile_pool(fake_repo.packages, fake_repo.pool, RefList([a.key]))

        assert fake_repo.packages.lookups == [a.key]

    def test_nothing_to_delete(self, fake_repo) -> None:
        """A clean pool frees nothing."""
        a = fake_repo.add_package("a")

        result = reconcile_pool(fake_repo.packages, fake_repo.pool, RefList([a.key]))

        assert result == (0, 0)
        assert fake_repo.pool.removed == []

    def test_referenced_file_missing_from_pool_is_fine(self, fake_repo) -> None:
        """A live package whose file is already gone does not cause errors."""
        a = fake_repo.add_package("a", in_pool=False)

        result = reconcile_pool(fake_repo.packages, fake_repo.pool, RefList([a.key]))

        assert result == (0, 0)

    def test_delete_failure_stops_and_keeps_earlier_deletions(self, fake_repo) -> None:
        """The first failing removal aborts; files already removed stay removed."""
        fake_repo.pool.files["aa/aa/first.deb"] = 1
        fake_repo.pool.files["bb/bb/second.deb"] = 2
        fake_repo.pool.files["cc/cc/third.deb"] = 3
        fake_repo.pool.fail_remove.add("bb/bb/second.deb")

        with pytest.raises(FileDeleteError) as exc_info:
            reconcile_pool(fake_repo.packages, fake_repo.pool, RefList())

        assert exc_info.value.path == "bb/bb/second.deb"
        assert isinstance(exc_info.value.cause, PermissionError)
        assert fake_repo.pool.removed == ["aa/aa/first.deb"]
        assert "cc/cc/third.deb" in fake_repo.pool.files
        assert exc_info.value.deleted_files == 1
        assert exc_info.value.freed_bytes == 1

    def test_dry_run_measures_without_removing(self, fake_repo) -> None:
        """dry_run returns what would be freed and removes nothing."""
        fake_repo.pool.files["zz/zz/orphan.deb"] = 42

        result = reconcile_pool(
            fake_repo.packages, fake_repo.pool, RefList(), dry_run=True
        )

        assert result == (1, 42)
        assert "zz/zz/orphan.deb" in fake_repo.pool.files

    def test_reports_deletion_progress(self, fake_repo) -> None:
        """Deleting files reports one step per file."""
        fake_repo.pool.files["aa/aa/x.deb"] = 1
        fake_repo.pool.files["bb/bb/y.deb"] = 1
        reporter = RecordingReporter()

        reconcile_pool(fake_repo.packages, fake_repo.pool, RefList(), reporter)

        delete_updates = [
            e for e in reporter.events
            if e[0] == "update" and e[1] == "Deleting unreferenced files"
        ]
        assert [(e[2], e[3]) for e in delete_updates] == [(1, 2), (2, 2)]
