"""Tests for splitting scripts into batches."""

import pytest

from tenantdb_api.workflow.sql.batch_splitter import split_batches


class TestSplitBatches:
    def test_splits_on_separator_lines(self):
        assert split_batches("A\nGO\nB\nGO\n") == ["A", "B"]

    @pytest.mark.parametrize("script", ["", "   ", "\n\n", None])
    def test_blank_input_returns_empty_list(self, script):
        assert split_batches(script) == []

    def test_script_without_separator_is_one_batch(self):
        assert split_batches("  SELECT 1\nSELECT 2  ") == ["SELECT 1\nSELECT 2"]

    def test_trailing_batch_without_separator_is_emitted(self):
        assert split_batches("A\nGO\nB") == ["A", "B"]

    def test_whitespace_only_batches_are_dropped(self):
        assert split_batches("A\nGO\n   \n\t\nGO\nB") == ["A", "B"]

    def test_separator_is_case_insensitive_and_trimmed(self):
        assert split_batches("A\n  go  \nB\n\tGo\nC") == ["A", "B", "C"]

    def test_separator_must_be_whole_line(self):
        script = "SELECT 'GO'\nGOTO label\nEXEC dbo.GoHome\nGO"

        assert split_batches(script) == ["SELECT 'GO'\nGOTO label\nEXEC dbo.GoHome"]

    def test_windows_and_old_mac_line_endings(self):
        assert split_batches("A\r\nGO\r\nB\rGO\rC") == ["A", "B", "C"]

    def test_separator_lines_never_included(self):
        batches = split_batches("GO\nA\nGO\nGO\nB\nGO")

        assert batches == ["A", "B"]
        assert all(batch.strip().upper() != "GO" for batch in batches)

    def test_custom_separator(self):
        assert split_batches("A\n;;\nB", separator=";;") == ["A", "B"]

    def test_preserves_source_order_and_inner_lines(self):
        script = "CREATE TABLE t (\n  id INT\n)\nGO\nINSERT INTO t VALUES (1)\nGO"

        assert split_batches(script) == ["CREATE TABLE t (\n  id INT\n)", "INSERT INTO t VALUES (1)"]
