import pytest

from antlyst.ingest import read_table
from antlyst.manifest import build_manifest, correlation_matrix, pearson
from antlyst.table import Column, ColumnType


def _numeric(name: str, values: list) -> Column:
    return Column(name=name, type=ColumnType.NUMERIC, values=tuple(values))


def test_manifest_describes_columns_and_correlations() -> None:
    manifest = build_manifest(read_table(b"a,b,c\n1,2,x\n2,4,y\n3,6,z\n"))
    assert manifest["rowCount"] == 3
    assert manifest["columnCount"] == 3
    assert manifest["columns"] == [
        {"name": "a", "type": "numeric"},
        {"name": "b", "type": "numeric"},
        {"name": "c", "type": "text"},
    ]
    assert [summary["name"] for summary in manifest["summaries"]] == ["a", "b", "c"]
    assert manifest["correlations"] == {"a": {"a": 1.0, "b": 1.0}, "b": {"a": 1.0, "b": 1.0}}
    assert manifest["generatedAt"].endswith("Z")


def test_no_correlations_with_a_single_numeric_column() -> None:
    manifest = build_manifest(read_table(b"category,amount\nA,10\nB,20\n"))
    assert manifest["correlations"] is None


def test_negative_correlation() -> None:
    assert pearson(_numeric("x", [1.0, 2.0, 3.0]), _numeric("y", [3.0, 2.0, 1.0])) == pytest.approx(-1.0)


def test_pearson_uses_complete_pairs_only() -> None:
    left = _numeric("x", [1.0, 2.0, None, 4.0])
    right = _numeric("y", [2.0, 4.0, 100.0, 8.0])
    assert pearson(left, right) == pytest.approx(1.0)


def test_pearson_undefined_for_constant_or_tiny_input() -> None:
    assert pearson(_numeric("x", [1.0, 1.0, 1.0]), _numeric("y", [1.0, 2.0, 3.0])) is None
    assert pearson(_numeric("x", [1.0, None]), _numeric("y", [2.0, 3.0])) is None


def test_constant_column_has_undefined_correlations() -> None:
    matrix = correlation_matrix(read_table(b"a,b\n1,5\n2,5\n3,5\n"))
    assert matrix == {"a": {"a": 1.0, "b": None}, "b": {"a": None, "b": None}}


def test_manifest_preview_holds_leading_rows() -> None:
    table = read_table(b"a,b\n1,x\n2.5,\n3,z\n")
    manifest = build_manifest(table, preview_rows=2)
    assert manifest["preview"] == [{"a": 1, "b": "x"}, {"a": 2.5, "b": None}]
    assert type(manifest["preview"][0]["a"]) is int


def test_manifest_preview_is_capped_by_row_count() -> None:
    assert len(build_manifest(read_table(b"a\n1\n2\n"))["preview"]) == 2
