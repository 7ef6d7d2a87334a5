"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from erlindex.cli import _build_config, _ensure_db_parent, _setup_logging, app
from erlindex.errors import NotFoundError
from erlindex.index.storage import DOCUMENTS, SQLiteDocumentStore
from erlindex.models import Document
from erlindex.utils.uri import uri_from_path


runner = CliRunner()


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.erl").write_text("-module(a).\n-export([f/0]).\nf() -> ok.\n")
    (root / "src" / "b.erl").write_text("-module(b).\n")
    (root / "erlang_ls.config").write_text("otp_path: null\n")
    return root


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("erlindex.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("erlindex.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestEnsureDbParent:
    """Tests for _ensure_db_parent helper."""

    def test_ensure_db_parent_creates_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "subdir" / "test.db"
        assert not db_path.parent.exists()
        _ensure_db_parent(db_path)
        assert db_path.parent.exists()


class TestBuildConfig:
    """Tests for _build_config helper."""

    def test_picks_up_project_config_file(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        (root / "erlang_ls.config").write_text("deps_dirs:\n  - deps/jsx\notp_path: null\n")

        config = _build_config(root, None, None)

        assert config.deps_dirs == ["deps/jsx"]
        assert config.root_uri == uri_from_path(root)

    def test_db_option(self, tmp_path: Path) -> None:
        root = _project(tmp_path)

        config = _build_config(root, None, tmp_path / "index.db")

        assert config.db_path == tmp_path / "index.db"


class TestIndexCommand:
    """Tests for the index command."""

    def test_index_project(self, tmp_path: Path) -> None:
        """Indexes the app path and prints totals."""
        root = _project(tmp_path)

        result = runner.invoke(app, ["index", str(root)])

        assert result.exit_code == 0
        assert "Succeeded: 2, failed: 0" in result.stdout

    def test_index_no_source_directories(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(app, ["index", str(empty), "--config", str(_config(tmp_path))])

        assert result.exit_code == 0
        assert "No source directories found" in result.stdout

    def test_index_into_database(self, tmp_path: Path) -> None:
        """With --db the documents are persisted."""
        root = _project(tmp_path)
        db_path = tmp_path / "db" / "index.db"

        result = runner.invoke(app, ["index", str(root), "--db", str(db_path), "-v"])

        assert result.exit_code == 0
        store = SQLiteDocumentStore(db_path)
        try:
            assert store.keys(DOCUMENTS) == sorted(
                uri_from_path(root / "src" / name) for name in ("a.erl", "b.erl")
            )
        finally:
            store.close()

    def test_index_counts_failures(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        (root / "src" / "bad.erl").write_bytes(b"\xff\xfe")

        result = runner.invoke(app, ["index", str(root)])

        assert result.exit_code == 0
        assert "Succeeded: 2, failed: 1" in result.stdout

    def test_invalid_config(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        (root / "erlang_ls.config").write_text("unknown_option: 1\n")

        result = runner.invoke(app, ["index", str(root)])

        assert result.exit_code != 0


class TestFindCommand:
    """Tests for the find command."""

    def test_find_existing(self, tmp_path: Path) -> None:
        root = _project(tmp_path)

        result = runner.invoke(app, ["find", "a.erl", str(root)])

        assert result.exit_code == 0
        assert uri_from_path(root / "src" / "a.erl") in result.stdout.replace("\n", "")

    def test_find_missing(self, tmp_path: Path) -> None:
        root = _project(tmp_path)

        result = runner.invoke(app, ["find", "missing.erl", str(root)])

        assert result.exit_code == 1
        assert "missing.erl" in result.stdout

    def test_find_rejects_path(self, tmp_path: Path) -> None:
        root = _project(tmp_path)

        result = runner.invoke(app, ["find", "../project/src/a.erl", str(root)])

        assert result.exit_code == 2

    @patch("erlindex.cli.Indexer")
    def test_find_closes_store(self, mock_indexer_class: MagicMock, tmp_path: Path) -> None:
        root = _project(tmp_path)
        mock_indexer = MagicMock()
        mock_indexer.find_and_index_file.side_effect = NotFoundError("x.erl")
        mock_indexer_class.return_value = mock_indexer

        with patch("erlindex.cli.SQLiteDocumentStore") as mock_store_class:
            result = runner.invoke(
                app, ["find", "x.erl", str(root), "--db", str(tmp_path / "i.db")]
            )

        assert result.exit_code == 1
        mock_store_class.return_value.close.assert_called_once()


class TestPathsCommand:
    """Tests for the paths command."""

    def test_lists_categories(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        (root / "include").mkdir()

        result = runner.invoke(app, ["paths", str(root)])

        assert result.exit_code == 0
        assert "app" in result.stdout
        assert "include" in result.stdout


class TestPruneCommand:
    """Tests for the prune command."""

    def test_prune_database_not_found(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["prune", "--db", str(tmp_path / "missing.db")])

        assert result.exit_code == 0
        assert "nothing to prune" in result.stdout

    def test_prune_removes_missing(self, tmp_path: Path) -> None:
        db_path = tmp_path / "index.db"
        store = SQLiteDocumentStore(db_path)
        gone = uri_from_path(tmp_path / "gone.erl")
        store.store(DOCUMENTS, gone, Document(uri=gone, text=""))
        store.close()

        result = runner.invoke(app, ["prune", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "Removed 1 orphaned documents." in result.stdout


def _config(tmp_path: Path) -> Path:
    config_file = tmp_path / "erlindex.yaml"
    config_file.write_text("otp_path: null\n")
    return config_file
