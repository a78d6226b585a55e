"""Logging utilities for the anomaly detection evaluation."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "evaluation.log"


def setup_logging(debug_mode: bool = False, output_dir: str = "output") -> None:
    """ロギングを設定する

    コンソール（stdout）と出力ディレクトリ内のログファイルの両方に出力する。

    Args:
        debug_mode: デバッグモードの場合True
        output_dir: 出力ディレクトリ
    """
    log_level = logging.DEBUG if debug_mode else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT)

    # 既存のハンドラをクリア
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    log_dir = Path(output_dir)
    log_dir.mkdir(exist_ok=True, parents=True)

    file_handler = logging.FileHandler(log_dir / LOG_FILE, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
