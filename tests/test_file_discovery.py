"""Tests for project traversal and ignore rules."""

import tempfile
from pathlib import Path

import pytest

from ragindex.core.config import IndexingConfig
from ragindex.file_discovery import IgnoreRules, discover_files, relative_key


class TestDiscoverFiles:
    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def teardown_method(self):
        self.temp_dir.cleanup()

    def _touch(self, relative: str, content: bytes = b"text") -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def _keys(self, files: list[Path]) -> list[str]:
        return [relative_key(self.root, path) for path in files]

    def test_files_sorted_by_relative_path(self):
        self._touch("zeta.md")
        self._touch("src/main/App.kt")
        self._touch("alpha.txt")
        self._touch("src/Beta.java")

        files = discover_files(self.root)

        assert self._keys(files) == ["alpha.txt", "src/Beta.java", "src/main/App.kt", "zeta.md"]

    def test_default_rules_skip_build_dirs_and_unknown_extensions(self):
        self._touch("keep.py")
        self._touch("build/generated.kt")
        self._touch(".git/config.txt")
        self._touch("image.png")

        assert self._keys(discover_files(self.root)) == ["keep.py"]

    def test_binary_and_oversized_files_are_skipped(self):
        self._touch("ok.txt", b"plain")
        self._touch("blob.txt", b"abc\x00def")
        self._touch("huge.txt", b"x" * 2048)

        rules = IgnoreRules(root=self.root, max_file_size_bytes=1024)

        assert self._keys(discover_files(self.root, rules)) == ["ok.txt"]

    def test_patterns_and_custom_extensions(self):
        self._touch("notes/draft.md")
        self._touch("notes/final.md")
        self._touch("script.sh")

        rules = IgnoreRules(
            root=self.root,
            include_extensions=["md", ".SH"],
            exclude_patterns=["notes/draft*"],
        )

        assert self._keys(discover_files(self.root, rules)) == ["notes/final.md", "script.sh"]

    def test_rules_from_config(self):
        self._touch("vendor/lib.txt")
        self._touch("readme.txt")
        config = IndexingConfig(exclude_dirs=["vendor"], include_extensions=["txt"])

        rules = IgnoreRules.from_config(config, self.root)

        assert self._keys(discover_files(self.root, rules)) == ["readme.txt"]

    def test_custom_predicate(self):
        self._touch("a.txt")
        self._touch("b.txt")

        files = discover_files(self.root, lambda path: path.name == "a.txt")

        assert self._keys(files) == ["b.txt"]

    def test_invalid_roots_raise(self):
        file_path = self._touch("file.txt")

        with pytest.raises(FileNotFoundError):
            discover_files(self.root / "missing")
        with pytest.raises(NotADirectoryError):
            discover_files(file_path)
