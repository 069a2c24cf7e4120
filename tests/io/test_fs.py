import os
import socket
import sys

import pytest

from deferio.io import fs

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX file types")


@pytest.fixture
def sample_tree(tmp_path):
    (tmp_path / "a.txt").write_text("alpha")
    (tmp_path / "b.log").write_text("beta")
    (tmp_path / ".hidden.txt").write_text("secret")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.txt").write_text("gamma")
    return tmp_path


class TestPredicates:
    """Stat predicates in sync and async form."""

    @pytest.mark.asyncio
    async def test_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        assert await fs.is_file(str(path))
        assert fs.is_file_sync(str(path))
        assert not await fs.is_directory(str(path))
        assert not fs.is_directory_sync(path)

    @pytest.mark.asyncio
    async def test_directory(self, tmp_path):
        assert await fs.is_directory(tmp_path)
        assert fs.is_directory_sync(tmp_path)
        assert not await fs.is_file(tmp_path)

    @pytest.mark.asyncio
    async def test_missing_path_is_false(self):
        """A path that does not exist answers False instead of raising."""
        missing = "/does/not/exist"
        for predicate in (
            fs.is_file,
            fs.is_directory,
            fs.is_symbolic_link,
            fs.is_fifo,
            fs.is_socket,
            fs.is_block_device,
            fs.is_character_device,
        ):
            assert await predicate(missing) is False
            assert await predicate(missing, use_lstat=True) is False
        for predicate in (
            fs.is_file_sync,
            fs.is_directory_sync,
            fs.is_symbolic_link_sync,
            fs.is_fifo_sync,
            fs.is_socket_sync,
            fs.is_block_device_sync,
            fs.is_character_device_sync,
        ):
            assert predicate(missing) is False

    def test_invalid_path_is_false(self):
        assert fs.is_file_sync("bad\x00path") is False

    @posix_only
    @pytest.mark.asyncio
    async def test_symbolic_link(self, tmp_path):
        target = tmp_path / "target.txt"
        target.write_text("x")
        link = tmp_path / "link.txt"
        os.symlink(target, link)

        assert await fs.is_symbolic_link(str(link), use_lstat=True)
        assert fs.is_symbolic_link_sync(str(link), use_lstat=True)
        # stat follows the link
        assert not await fs.is_symbolic_link(str(link))
        assert await fs.is_file(str(link))
        assert not await fs.is_file(str(link), use_lstat=True)

    @posix_only
    @pytest.mark.asyncio
    async def test_dangling_link(self, tmp_path):
        link = tmp_path / "dangling"
        os.symlink(tmp_path / "gone", link)
        assert not await fs.is_file(str(link))
        assert await fs.is_symbolic_link(str(link), use_lstat=True)

    @posix_only
    @pytest.mark.asyncio
    async def test_fifo(self, tmp_path):
        path = tmp_path / "pipe"
        os.mkfifo(path)
        assert await fs.is_fifo(str(path))
        assert fs.is_fifo_sync(str(path))
        assert not await fs.is_file(str(path))

    @posix_only
    @pytest.mark.asyncio
    async def test_socket(self, tmp_path):
        path = tmp_path / "s.sock"
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            server.bind(str(path))
            assert await fs.is_socket(str(path))
            assert fs.is_socket_sync(str(path))
        finally:
            server.close()

    @pytest.mark.asyncio
    @pytest.mark.skipif(not os.path.exists("/dev/null"), reason="needs /dev/null")
    async def test_character_device(self):
        assert await fs.is_character_device("/dev/null")
        assert fs.is_character_device_sync("/dev/null")
        assert not await fs.is_block_device("/dev/null")


class TestSize:
    """size() propagates stat errors."""

    @pytest.mark.asyncio
    async def test_size(self, tmp_path):
        path = tmp_path / "five.bin"
        path.write_bytes(b"12345")
        assert await fs.size(str(path)) == 5
        assert fs.size_sync(str(path)) == 5

    @pytest.mark.asyncio
    async def test_size_missing_raises(self):
        with pytest.raises(FileNotFoundError):
            await fs.size("/does/not/exist")
        with pytest.raises(FileNotFoundError):
            fs.size_sync("/does/not/exist")

    @posix_only
    @pytest.mark.asyncio
    async def test_size_lstat(self, tmp_path):
        target = tmp_path / "big.bin"
        target.write_bytes(b"x" * 1000)
        link = tmp_path / "l"
        os.symlink(target, link)
        assert await fs.size(str(link)) == 1000
        assert await fs.size(str(link), use_lstat=True) == len(os.fsencode(str(target)))


class TestExists:
    """exists() never raises."""

    @pytest.mark.asyncio
    async def test_exists(self, tmp_path):
        assert await fs.exists(str(tmp_path))
        assert fs.exists_sync(str(tmp_path))
        assert not await fs.exists(str(tmp_path / "nope"))
        assert not fs.exists_sync(str(tmp_path / "nope"))


class TestCreateDirectoryIfNeeded:
    """Idempotent directory creation."""

    @pytest.mark.asyncio
    async def test_creates_once(self, tmp_path):
        target = tmp_path / "new"
        assert await fs.create_directory_if_needed(str(target)) is True
        assert target.is_dir()
        assert await fs.create_directory_if_needed(str(target)) is False

    def test_creates_once_sync(self, tmp_path):
        target = tmp_path / "new"
        assert fs.create_directory_if_needed_sync(str(target)) is True
        assert fs.create_directory_if_needed_sync(str(target)) is False

    @pytest.mark.asyncio
    async def test_does_not_create_ancestors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await fs.create_directory_if_needed(str(tmp_path / "missing" / "child"))
        assert not (tmp_path / "missing").exists()

    @pytest.mark.asyncio
    async def test_file_in_the_way(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(NotADirectoryError):
            await fs.create_directory_if_needed(str(blocker))
        with pytest.raises(NotADirectoryError):
            fs.create_directory_if_needed_sync(str(blocker))


class TestGlob:
    """Multi-pattern globbing."""

    def test_single_pattern(self, sample_tree):
        assert sorted(fs.glob_sync("*.txt", cwd=str(sample_tree))) == ["a.txt"]

    def test_patterns_are_unioned_without_duplicates(self, sample_tree):
        matches = fs.glob_sync(["*.txt", "*.log", "a.*"], cwd=str(sample_tree))
        assert sorted(matches) == ["a.txt", "b.log"]
        assert len(matches) == len(set(matches))

    def test_recursive(self, sample_tree):
        matches = fs.glob_sync("**/*.txt", cwd=str(sample_tree))
        assert sorted(matches) == ["a.txt", os.path.join("sub", "c.txt")]

    def test_include_hidden(self, sample_tree):
        matches = fs.glob_sync("*.txt", cwd=str(sample_tree), include_hidden=True)
        assert sorted(matches) == [".hidden.txt", "a.txt"]

    def test_nodir(self, sample_tree):
        assert "sub" in fs.glob_sync("*", cwd=str(sample_tree))
        assert "sub" not in fs.glob_sync("*", cwd=str(sample_tree), nodir=True)

    def test_ignore(self, sample_tree):
        matches = fs.glob_sync("*", cwd=str(sample_tree), ignore="*.log")
        assert "b.log" not in matches
        assert "a.txt" in matches

    def test_ignore_star_stays_in_its_directory(self, sample_tree):
        """A `*` ignore pattern does not reach into subdirectories."""
        matches = fs.glob_sync("**/*.txt", cwd=str(sample_tree), ignore="*.txt")
        assert matches == [os.path.join("sub", "c.txt")]

    def test_ignore_double_star(self, sample_tree):
        assert fs.glob_sync("**/*.txt", cwd=str(sample_tree), ignore="**/*.txt") == []
        assert fs.glob_sync("**/*.txt", cwd=str(sample_tree), ignore="sub/**") == ["a.txt"]

    def test_absolute(self, sample_tree):
        matches = fs.glob_sync("*.log", cwd=str(sample_tree), absolute=True)
        assert matches == [str(sample_tree / "b.log")]

    def test_no_match(self, sample_tree):
        assert fs.glob_sync("*.nothing", cwd=str(sample_tree)) == []

    @pytest.mark.asyncio
    async def test_async(self, sample_tree):
        matches = await fs.glob(["*.txt", "sub/*.txt"], cwd=str(sample_tree))
        assert sorted(matches) == ["a.txt", os.path.join("sub", "c.txt")]


class TestPathMatches:
    """Segment-wise pattern matching used for ignore lists."""

    def test_star_does_not_cross_separator(self):
        assert fs.path_matches("a.txt", "*.txt")
        assert not fs.path_matches("sub/a.txt", "*.txt")

    def test_double_star(self):
        assert fs.path_matches("a.txt", "**/*.txt")
        assert fs.path_matches("x/y/a.txt", "**/*.txt")
        assert fs.path_matches("sub/deep/file", "sub/**")
        assert not fs.path_matches("other/file", "sub/**")

    def test_question_mark(self):
        assert fs.path_matches("a/b", "a/?")
        assert not fs.path_matches("a/bc", "a/?")
