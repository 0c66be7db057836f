"""
Tests cho core.prompting.path_utils.format_path().

Kiem tra cac truong hop:
- Path tuong doi voi root
- Bo tien to "./"
- Path ngoai root (fallback ve path goc)
- root la None
- Windows-style path van dung "/"
"""

from pathlib import Path, PureWindowsPath

from core.prompting.path_utils import format_path, relative_to_root


class TestFormatPath:
    """Test suite cho format_path - single source of truth."""

    def test_relative_tu_root(self, tmp_path: Path):
        """Path nam trong root -> tuong doi."""
        assert format_path(tmp_path / "src" / "main.py", tmp_path) == "src/main.py"

    def test_file_tai_root(self, tmp_path: Path):
        assert format_path(tmp_path / "README.md", tmp_path) == "README.md"

    def test_bo_tien_to_dot_slash(self):
        """./src/main.py -> src/main.py"""
        assert format_path(Path("./src/main.py")) == "src/main.py"

    def test_root_la_dot(self):
        """Input mac dinh "." cua CLI"""
        assert format_path(Path(".") / "a" / "b.txt", Path(".")) == "a/b.txt"

    def test_root_none_giu_nguyen_absolute(self, tmp_path: Path):
        file_path = tmp_path / "x.txt"
        assert format_path(file_path) == str(file_path)

    def test_path_ngoai_root(self, tmp_path: Path):
        """Path khong nam trong root -> fallback ve path goc."""
        workspace = tmp_path / "project"
        outside = tmp_path / "outside" / "file.txt"
        assert format_path(outside, workspace) == str(outside)

    def test_windows_path_dung_forward_slash(self):
        assert format_path(PureWindowsPath("src\\pkg\\mod.py")) == "src/pkg/mod.py"

    def test_windows_absolute(self):
        assert format_path(PureWindowsPath("C:\\repo\\a.txt")) == "C:/repo/a.txt"


class TestRelativeToRoot:
    def test_none_root(self):
        assert relative_to_root(Path("a/b"), None) == Path("a/b")

    def test_inside(self, tmp_path: Path):
        assert relative_to_root(tmp_path / "a" / "b", tmp_path) == Path("a/b")
