from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from prrs.file_manipulation import is_skipped_directory, is_source_file, list_entries, read_source_text

if TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("app.py", True),
        ("App.TS", True),
        ("view.tsx", True),
        ("config.json", True),
        ("loader.mjs", True),
        ("README.md", False),
        (".env", False),
        ("Makefile", False),
    ],
)
def test_is_source_file(tmp_path: Path, name: str, *, expected: bool) -> None:
    assert is_source_file(tmp_path / name) is expected


@pytest.mark.unit
def test_only_directories_are_skipped(tmp_path: Path) -> None:
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "dist").write_text("not a folder", encoding="utf-8")

    assert is_skipped_directory(tmp_path / "node_modules") is True
    assert is_skipped_directory(tmp_path / "dist") is False


@pytest.mark.unit
def test_list_entries_is_sorted_and_filtered(tmp_path: Path) -> None:
    for name in ("zeta.py", "alpha.py", "Beta.js"):
        (tmp_path / name).write_text("x = 1\n", encoding="utf-8")
    for name in (".git", "__pycache__", "src"):
        (tmp_path / name).mkdir()

    assert [p.name for p in list_entries(tmp_path)] == ["Beta.js", "alpha.py", "src", "zeta.py"]


@pytest.mark.unit
def test_list_entries_propagates_missing_folder(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        list_entries(tmp_path / "missing")


@pytest.mark.unit
def test_read_source_text(tmp_path: Path) -> None:
    good = tmp_path / "good.py"
    good.write_text("print('é')\n", encoding="utf-8")
    bad = tmp_path / "bad.py"
    bad.write_bytes(b"\xff\xfe\x00\x81")

    assert read_source_text(good) == "print('é')\n"
    assert read_source_text(bad) is None


@pytest.mark.unit
def test_read_source_text_skips_dangling_symlink(tmp_path: Path) -> None:
    link = tmp_path / "gone.py"
    link.symlink_to(tmp_path / "missing.py")

    assert read_source_text(link) is None


@pytest.mark.unit
def test_read_source_text_propagates_other_errors(tmp_path: Path, mocker: MockerFixture) -> None:
    path = tmp_path / "locked.py"
    path.write_text("x = 1\n", encoding="utf-8")
    mocker.patch.object(type(path), "read_text", side_effect=PermissionError("denied"))

    with pytest.raises(PermissionError):
        read_source_text(path)
