"""Tests for concurrent directory sizing."""

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

import npkl.sizer as sizer
from npkl.errors import FilesystemError
from npkl.sizer import SizeTally, get_directory_size, iter_files


class TestSizeTally:
    def test_starts_empty(self):
        tally = SizeTally()
        assert tally.total == 0
        assert tally.error is None

    def test_add(self):
        tally = SizeTally()
        tally.add(10)
        tally.add(32)
        assert tally.total == 42

    def test_first_error_wins(self):
        tally = SizeTally()
        first = PermissionError(13, "Permission denied", "/a")
        second = FileNotFoundError(2, "No such file", "/b")

        assert tally.record_error(first) is True
        assert tally.record_error(second) is False
        assert tally.error is first

    def test_concurrent_adds_are_not_lost(self):
        tally = SizeTally()

        def add_many():
            for _ in range(1000):
                tally.add(1)

        threads = [threading.Thread(target=add_many) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert tally.total == 8000


class TestIterFiles:
    def test_yields_files_not_directories(self, tmp_path, make_files):
        make_files(tmp_path, {"a.js": 1, "lib/b.js": 1, "lib/deep/c.js": 1})
        (tmp_path / "empty").mkdir()

        names = sorted(os.path.basename(p) for p in iter_files(str(tmp_path)))
        assert names == ["a.js", "b.js", "c.js"]

    def test_raises_for_missing_directory(self, tmp_path):
        with pytest.raises(OSError):
            list(iter_files(str(tmp_path / "missing")))


class TestGetDirectorySize:
    def test_sums_files_at_every_depth(self, tmp_path, make_files):
        make_files(
            tmp_path,
            {
                "index.js": 100,
                "lib/util.js": 250,
                "lib/a/b/c/d/deep.js": 4096,
            },
        )
        assert get_directory_size(tmp_path) == 100 + 250 + 4096

    def test_empty_directory_is_zero(self, tmp_path):
        assert get_directory_size(tmp_path) == 0

    def test_directories_contribute_nothing(self, tmp_path):
        (tmp_path / "a" / "b" / "c").mkdir(parents=True)
        (tmp_path / "d").mkdir()
        assert get_directory_size(tmp_path) == 0

    def test_many_files_with_few_workers(self, tmp_path, make_files):
        make_files(tmp_path, {f"pkg{i % 7}/file{i}.js": i for i in range(300)})
        assert get_directory_size(tmp_path, max_workers=3) == sum(range(300))

    def test_uses_given_executor(self, tmp_path, make_files):
        make_files(tmp_path, {"a.js": 10, "b/c.js": 20})
        with ThreadPoolExecutor(max_workers=2) as executor:
            assert get_directory_size(tmp_path, executor=executor) == 30
            assert get_directory_size(tmp_path, executor=executor) == 30

    def test_symlinks_are_not_followed(self, tmp_path, make_files):
        make_files(tmp_path, {"outside/huge.bin": 100_000})
        target = tmp_path / "pkg"
        target.mkdir()
        os.symlink(tmp_path / "outside" / "huge.bin", target / "link.bin")
        os.symlink(tmp_path / "outside", target / "linkdir")

        size = get_directory_size(target)
        assert size < 100_000
        assert size == os.lstat(target / "link.bin").st_size + os.lstat(target / "linkdir").st_size

    def test_concurrent_calls_do_not_share_state(self, tmp_path, make_files):
        make_files(tmp_path, {f"one/f{i}": 10 for i in range(50)})
        make_files(tmp_path, {f"two/f{i}": 3 for i in range(50)})

        with ThreadPoolExecutor(max_workers=2) as pool:
            one = pool.submit(get_directory_size, tmp_path / "one")
            two = pool.submit(get_directory_size, tmp_path / "two")

            assert one.result() == 500
            assert two.result() == 150

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FilesystemError):
            get_directory_size(tmp_path / "missing")

    def test_walk_failure_raises(self, tmp_path):
        error = PermissionError(13, "Permission denied", str(tmp_path))
        with patch("npkl.sizer.os.scandir", side_effect=error):
            with pytest.raises(FilesystemError) as exc_info:
                get_directory_size(tmp_path)

        assert exc_info.value.path == str(tmp_path)
        assert "Permission denied" in exc_info.value.reason

    def test_file_error_discards_partial_total(self, tmp_path, make_files):
        """One failing stat among three fails the whole calculation."""
        make_files(tmp_path, {"a.js": 500, "b.js": 1500, "locked.js": 1024})
        real_size = sizer._file_size

        def fake_size(path):
            if path.endswith("locked.js"):
                raise PermissionError(13, "Permission denied", path)
            return real_size(path)

        with patch("npkl.sizer._file_size", side_effect=fake_size):
            with pytest.raises(FilesystemError) as exc_info:
                get_directory_size(tmp_path)

        assert exc_info.value.path.endswith("locked.js")
        assert "2000" not in str(exc_info.value)

    def test_waits_for_stragglers_after_error(self, tmp_path, make_files):
        """All dispatched units finish before the error is raised."""
        make_files(tmp_path, {"bad.js": 1, "slow.js": 1})
        finished = []

        def fake_size(path):
            if path.endswith("bad.js"):
                raise PermissionError(13, "Permission denied", path)
            time.sleep(0.2)
            finished.append(path)
            return 1

        with patch("npkl.sizer._file_size", side_effect=fake_size):
            with pytest.raises(FilesystemError):
                get_directory_size(tmp_path, max_workers=2)

        assert len(finished) == 1

    def test_reports_only_first_file_error(self, tmp_path, make_files):
        make_files(tmp_path, {f"f{i}.js": 1 for i in range(5)})

        def always_fail(path):
            raise PermissionError(13, "Permission denied", path)

        with patch("npkl.sizer._file_size", side_effect=always_fail):
            with pytest.raises(FilesystemError) as exc_info:
                get_directory_size(tmp_path)

        assert "Permission denied" in str(exc_info.value)
