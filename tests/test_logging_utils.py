"""Test cases for logging_utils."""

from __future__ import annotations

import logging
from pathlib import Path

from anomaly_eval.utils.logging_utils import LOG_FILE, setup_logging


def test_setup_logging_debug_mode(tmp_path: Path):
    """デバッグモードでのロギング設定"""
    output_dir = str(tmp_path / "output")

    setup_logging(debug_mode=True, output_dir=output_dir)

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG

    file_handlers = [h for h in root_logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename) == (Path(output_dir) / LOG_FILE).resolve()


def test_setup_logging_info_mode(tmp_path: Path):
    """INFOモードでのロギング設定"""
    setup_logging(debug_mode=False, output_dir=str(tmp_path / "output"))

    assert logging.getLogger().level == logging.INFO


def test_setup_logging_creates_directory(tmp_path: Path):
    """存在しないディレクトリが自動作成される"""
    output_dir = tmp_path / "new" / "output"

    setup_logging(debug_mode=False, output_dir=str(output_dir))

    assert output_dir.exists()


def test_setup_logging_writes_to_file(tmp_path: Path):
    """ログがファイルに書き込まれる"""
    output_dir = tmp_path / "output"

    setup_logging(debug_mode=False, output_dir=str(output_dir))
    logging.getLogger("anomaly_eval.test").info("評価開始")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "評価開始" in (output_dir / LOG_FILE).read_text(encoding="utf-8")


def test_setup_logging_replaces_handlers(tmp_path: Path):
    """再設定してもハンドラーが重複しない"""
    setup_logging(debug_mode=False, output_dir=str(tmp_path / "a"))
    setup_logging(debug_mode=False, output_dir=str(tmp_path / "b"))

    assert len(logging.getLogger().handlers) == 2
