from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from prrs import traversal
from prrs.config import NodeKind, Sentinel
from prrs.traversal import TraversalContext, summarize_path
from tests.conftest import AGGREGATION_MARKER, RANKING_MARKER, SUMMARY_MARKER, FakeOracle

if TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

    from prrs.models import SummaryNode


def _context(oracle: FakeOracle, max_depth: int = 3, lens: str = "architecture") -> TraversalContext:
    return TraversalContext(lens=lens, oracle=oracle, max_depth=max_depth, max_chunk_chars=1000)


def _write(path: Path, content: str = "def main():\n    return 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _all_nodes(node: SummaryNode) -> list[SummaryNode]:
    nodes = [node]
    for child in node.children:
        nodes.extend(_all_nodes(child))
    return nodes


@pytest.mark.unit
def test_source_file_goes_through_rank_then_summarize(tmp_path: Path, oracle: FakeOracle) -> None:
    path = _write(tmp_path / "app.py")

    node = summarize_path(path, _context(oracle))

    assert node.summary == "file summary"
    assert node.kind == NodeKind.FILE
    assert node.path == path
    assert node.children == ()
    assert len(oracle.prompts) == 2
    assert RANKING_MARKER in oracle.prompts[0]
    assert SUMMARY_MARKER in oracle.prompts[1]


@pytest.mark.unit
def test_non_source_file_is_skipped_without_model_call(tmp_path: Path, oracle: FakeOracle) -> None:
    node = summarize_path(_write(tmp_path / ".env", "SECRET=1\n"), _context(oracle))

    assert node.summary.startswith(Sentinel.SKIPPED)
    assert node.is_skipped
    assert oracle.prompts == []


@pytest.mark.unit
def test_skipped_files_never_reach_the_parent(tmp_path: Path, oracle: FakeOracle) -> None:
    _write(tmp_path / "app.py")
    _write(tmp_path / ".env", "SECRET=1\n")
    _write(tmp_path / "notes.md", "# notes\n")

    node = summarize_path(tmp_path, _context(oracle))

    assert [child.name for child in node.children] == ["app.py"]
    assert not any(n.is_skipped for n in _all_nodes(node))
    aggregation = oracle.prompts_with(AGGREGATION_MARKER)
    assert len(aggregation) == 1
    assert ".env" not in aggregation[0]
    assert "app.py: file summary..." in aggregation[0]


@pytest.mark.unit
def test_folder_of_ignored_items_is_empty(tmp_path: Path, oracle: FakeOracle) -> None:
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    _write(tmp_path / "node_modules" / "lib" / "index.js", "module.exports = 1;\n")
    (tmp_path / ".git").mkdir()

    node = summarize_path(tmp_path, _context(oracle))

    assert node.summary == Sentinel.EMPTY_FOLDER
    assert node.children == ()
    assert node.kind == NodeKind.FOLDER
    assert oracle.prompts == []


@pytest.mark.unit
def test_folder_of_non_source_files_is_empty(tmp_path: Path, oracle: FakeOracle) -> None:
    _write(tmp_path / "README.md", "hello\n")

    node = summarize_path(tmp_path, _context(oracle))

    assert node.summary == Sentinel.EMPTY_FOLDER
    assert node.children == ()


@pytest.mark.unit
def test_blank_file_is_empty(tmp_path: Path, oracle: FakeOracle) -> None:
    node = summarize_path(_write(tmp_path / "blank.ts", "  \n\n\t\n"), _context(oracle))

    assert node.summary == Sentinel.EMPTY_FILE
    assert oracle.prompts == []


@pytest.mark.unit
def test_empty_file_is_kept_by_its_parent(tmp_path: Path, oracle: FakeOracle) -> None:
    _write(tmp_path / "blank.ts", "")

    node = summarize_path(tmp_path, _context(oracle))

    assert [child.summary for child in node.children] == [Sentinel.EMPTY_FILE]
    assert len(oracle.prompts) == 1


@pytest.mark.unit
def test_undecodable_file_is_skipped(tmp_path: Path, oracle: FakeOracle) -> None:
    (tmp_path / "binary.js").write_bytes(b"\xff\xfe\x00\x81")
    _write(tmp_path / "main.py")

    node = summarize_path(tmp_path, _context(oracle))

    assert [child.name for child in node.children] == ["main.py"]


@pytest.mark.unit
def test_depth_zero_stops_at_root_children(tmp_path: Path, oracle: FakeOracle, mocker: MockerFixture) -> None:
    _write(tmp_path / "a" / "b" / "c" / "deep.py")
    _write(tmp_path / "a" / "mid.py")
    _write(tmp_path / "top.py")
    spy = mocker.spy(traversal, "list_entries")

    node = summarize_path(tmp_path, _context(oracle, max_depth=0))

    assert spy.call_count == 1
    assert [child.name for child in node.children] == ["a", "top.py"]
    for child in node.children:
        assert child.summary == Sentinel.DEPTH_LIMIT
        assert child.children == ()
        assert child.kind is None
    assert len(oracle.prompts) == 1
    assert AGGREGATION_MARKER in oracle.prompts[0]


@pytest.mark.unit
def test_depth_one_expands_one_level(tmp_path: Path, oracle: FakeOracle) -> None:
    _write(tmp_path / "a" / "b" / "deep.py")
    _write(tmp_path / "a" / "mid.py")

    node = summarize_path(tmp_path, _context(oracle, max_depth=1))

    (folder_a,) = node.children
    assert folder_a.summary == "folder summary"
    assert {child.name: child.summary for child in folder_a.children} == {
        "b": Sentinel.DEPTH_LIMIT,
        "mid.py": Sentinel.DEPTH_LIMIT,
    }


@pytest.mark.unit
def test_children_follow_sorted_listing_order(tmp_path: Path, oracle: FakeOracle) -> None:
    for name in ("zed.py", "alpha.ts", "mid.js"):
        _write(tmp_path / name)

    node = summarize_path(tmp_path, _context(oracle))

    assert [child.name for child in node.children] == ["alpha.ts", "mid.js", "zed.py"]


@pytest.mark.unit
def test_traversal_is_deterministic(tmp_path: Path) -> None:
    _write(tmp_path / "pkg" / "one.py")
    _write(tmp_path / "pkg" / "two.py", "class Two:\n    pass\n")
    _write(tmp_path / "run.js", "function run() {\n  return 1;\n}\n")

    first_oracle, second_oracle = FakeOracle(), FakeOracle()
    first = summarize_path(tmp_path, _context(first_oracle))
    second = summarize_path(tmp_path, _context(second_oracle))

    assert first == second
    assert first_oracle.prompts == second_oracle.prompts


@pytest.mark.unit
def test_aggregation_truncates_child_summaries(tmp_path: Path) -> None:
    _write(tmp_path / "long.py")
    oracle = FakeOracle(replies=['[{"index": 0, "score": 9, "reason": "r"}]', "s" * 150, "folder"])

    node = summarize_path(tmp_path, _context(oracle))

    assert node.children[0].summary == "s" * 150
    assert "long.py: " + "s" * 100 + "..." in oracle.prompts[2]
    assert "s" * 101 not in oracle.prompts[2]


@pytest.mark.unit
def test_aggregation_failure_keeps_children(tmp_path: Path) -> None:
    _write(tmp_path / "app.py")
    oracle = FakeOracle(replies=['[{"index": 0, "score": 9, "reason": "r"}]', "file", ConnectionError("down")])

    node = summarize_path(tmp_path, _context(oracle))

    assert node.summary == Sentinel.MODEL_ERROR
    assert [child.summary for child in node.children] == ["file"]


@pytest.mark.unit
def test_listing_errors_propagate(tmp_path: Path, oracle: FakeOracle, mocker: MockerFixture) -> None:
    mocker.patch.object(traversal, "list_entries", side_effect=PermissionError("denied"))

    with pytest.raises(PermissionError):
        summarize_path(tmp_path, _context(oracle))


@pytest.mark.unit
def test_structural_splitter_is_chosen_per_file(tmp_path: Path, oracle: FakeOracle, mocker: MockerFixture) -> None:
    path = _write(tmp_path / "app.py", "import os\n\n\ndef main():\n    return os.sep\n")
    factory = mocker.Mock(wraps=traversal.splitter_for)
    context = TraversalContext(
        lens="architecture",
        oracle=oracle,
        max_depth=3,
        max_chunk_chars=1000,
        splitter_factory=factory,
    )

    summarize_path(path, context)

    factory.assert_called_once_with(path)
    assert "[0] import os" in oracle.prompts[0]
    assert "[1] def main(): return os.sep" in oracle.prompts[0]


@pytest.mark.unit
def test_dangling_symlink_is_skipped(tmp_path: Path, oracle: FakeOracle) -> None:
    _write(tmp_path / "a.py")
    (tmp_path / "gone.py").symlink_to(tmp_path / "missing.py")

    node = summarize_path(tmp_path, _context(oracle, max_depth=2))

    assert [child.name for child in node.children] == ["a.py"]
    assert node.summary == "folder summary"


@pytest.mark.unit
def test_javascript_declarations_are_ranked_separately(tmp_path: Path, oracle: FakeOracle) -> None:
    source = "import x from './x';\n\n// entry\nexport function run() {\n  return x;\n}\n"
    path = _write(tmp_path / "run.js", source)

    summarize_path(path, _context(oracle))

    assert "[0] import x from './x';" in oracle.prompts[0]
    assert "[1] // entry export function run() { return x; }" in oracle.prompts[0]
