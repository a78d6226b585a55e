"""Configuration management module for the anomaly detection evaluation."""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigManager:
    """設定ファイル管理クラス

    YAML/JSON形式の設定ファイルを読み込み、検証し、設定値を提供する。

    Attributes:
        config_path: 設定ファイルのパス
        config: 読み込まれた設定データ
    """

    # 必須項目の定義
    REQUIRED_KEYS = {
        "video": ["input_path"],
        "annotation": ["path"],
        "features": ["cell_width"],
        "classifier": ["gamma", "nu"],
        "grid_search": ["gamma_values", "nu_values"],
        "output": ["directory"],
    }

    # デフォルト設定値
    DEFAULT_CONFIG = {
        "video": {
            "input_path": "input/video.mp4",
        },
        "annotation": {
            "path": "input/annotations.yaml",
        },
        "split": {
            "seed": 42,
        },
        "features": {
            "cell_width": 16,
            "hog_cell_size": 8,
            "block_size": 16,
            "block_stride": 8,
            "nbins": 9,
        },
        "classifier": {
            "gamma": 0.01,
            "nu": 0.01,
        },
        "grid_search": {
            # 底10の対数グリッド
            "gamma_values": [0.0001, 0.001, 0.01, 0.1, 1.0, 10.0, 100.0, 1000.0],
            "nu_values": [0.00001, 0.0001, 0.001, 0.01, 0.1],
            "max_fp_frames_percentage": 50.0,
            "csv_separator": ";",
            "output_file": "grid_search_results.csv",
        },
        "cache": {
            "directory": "output/feature_cache",
            "save": False,
            "load": False,
        },
        "output": {
            "directory": "output",
            "debug_mode": False,
        },
    }

    def __init__(self, config_path: str = "config.yaml"):
        """ConfigManagerを初期化する

        Args:
            config_path: 設定ファイルのパス（デフォルト: config.yaml）
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """設定ファイルを読み込む

        Returns:
            読み込まれた設定データ

        Raises:
            ValueError: 設定ファイルの形式が不正な場合
        """
        if not os.path.exists(self.config_path):
            logger.warning(f"設定ファイル '{self.config_path}' が見つかりません。デフォルト設定を使用します。")
            return copy.deepcopy(self.DEFAULT_CONFIG)

        file_ext = Path(self.config_path).suffix.lower()
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                if file_ext in [".yaml", ".yml"]:
                    config = yaml.safe_load(f)
                elif file_ext == ".json":
                    config = json.load(f)
                else:
                    raise ValueError(f"サポートされていないファイル形式: {file_ext}")
        except yaml.YAMLError as e:
            raise ValueError(f"YAML解析エラー: {e}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON解析エラー: {e}") from e

        if config is None:
            logger.warning("設定ファイルが空です。デフォルト設定を使用します。")
            return copy.deepcopy(self.DEFAULT_CONFIG)
        if not isinstance(config, dict):
            raise ValueError("設定ファイルは辞書形式である必要があります。")

        logger.info(f"設定ファイル '{self.config_path}' を読み込みました。")
        return config

    def validate(self) -> bool:
        """設定値の妥当性を検証する

        必須項目の存在チェック、型チェック、値の範囲チェックを実行する。

        Returns:
            検証が成功した場合True

        Raises:
            ValueError: 設定値が不正な場合
        """
        for section, required_keys in self.REQUIRED_KEYS.items():
            if section not in self.config:
                raise ValueError(f"必須セクション '{section}' が設定ファイルに存在しません。")

            section_config = self.config[section]
            if not isinstance(section_config, dict):
                raise ValueError(f"セクション '{section}' は辞書型である必要があります。")
            for key in required_keys:
                if key not in section_config:
                    raise ValueError(f"必須項目 '{section}.{key}' が設定ファイルに存在しません。")

        self._validate_path_config()
        self._validate_split_config()
        self._validate_features_config()
        self._validate_classifier_config()
        self._validate_grid_search_config()
        self._validate_cache_config()
        self._validate_output_config()

        logger.info("設定ファイルの検証が完了しました。")
        return True

    def _validate_path_config(self):
        """video / annotation セクションの検証"""
        if not isinstance(self.get("video.input_path"), str):
            raise ValueError("video.input_path は文字列である必要があります。")
        if not isinstance(self.get("annotation.path"), str):
            raise ValueError("annotation.path は文字列である必要があります。")

    def _validate_split_config(self):
        """split セクションの検証"""
        seed = self.get("split.seed", 42)
        if not isinstance(seed, int) or isinstance(seed, bool) or seed < 0:
            raise ValueError("split.seed は非負の整数である必要があります。")

    def _validate_features_config(self):
        """features セクションの検証"""
        features_config = self.get_section("features")

        for key in ["cell_width", "hog_cell_size", "block_size", "block_stride", "nbins"]:
            if key in features_config:
                value = features_config[key]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    raise ValueError(f"features.{key} は正の整数である必要があります。")

    @staticmethod
    def _is_positive_number(value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0

    def _validate_classifier_config(self):
        """classifier セクションの検証"""
        if not self._is_positive_number(self.get("classifier.gamma")):
            raise ValueError("classifier.gamma は正の数値である必要があります。")

        nu = self.get("classifier.nu")
        if not self._is_positive_number(nu) or nu > 1.0:
            raise ValueError("classifier.nu は 0.0 より大きく 1.0 以下である必要があります。")

    def _validate_grid_search_config(self):
        """grid_search セクションの検証"""
        grid_config = self.get_section("grid_search")

        gamma_values = grid_config.get("gamma_values")
        if not isinstance(gamma_values, list) or not gamma_values:
            raise ValueError("grid_search.gamma_values は空でないリストである必要があります。")
        if not all(self._is_positive_number(v) for v in gamma_values):
            raise ValueError("grid_search.gamma_values の要素は正の数値である必要があります。")

        nu_values = grid_config.get("nu_values")
        if not isinstance(nu_values, list) or not nu_values:
            raise ValueError("grid_search.nu_values は空でないリストである必要があります。")
        if not all(self._is_positive_number(v) and v <= 1.0 for v in nu_values):
            raise ValueError("grid_search.nu_values の要素は 0.0 より大きく 1.0 以下である必要があります。")

        if "max_fp_frames_percentage" in grid_config:
            threshold = grid_config["max_fp_frames_percentage"]
            if not isinstance(threshold, (int, float)) or not (0.0 <= threshold <= 100.0):
                raise ValueError("grid_search.max_fp_frames_percentage は 0.0 から 100.0 の範囲である必要があります。")

        if "csv_separator" in grid_config:
            separator = grid_config["csv_separator"]
            if not isinstance(separator, str) or len(separator) != 1:
                raise ValueError("grid_search.csv_separator は1文字の文字列である必要があります。")

        if "output_file" in grid_config and not isinstance(grid_config["output_file"], str):
            raise ValueError("grid_search.output_file は文字列である必要があります。")

    def _validate_cache_config(self):
        """cache セクションの検証"""
        cache_config = self.get_section("cache")

        if "directory" in cache_config and not isinstance(cache_config["directory"], str):
            raise ValueError("cache.directory は文字列である必要があります。")

        for field in ["save", "load"]:
            if field in cache_config and not isinstance(cache_config[field], bool):
                raise ValueError(f"cache.{field} はブール値である必要があります。")

    def _validate_output_config(self):
        """output セクションの検証"""
        output_config = self.get_section("output")

        if not isinstance(output_config.get("directory"), str):
            raise ValueError("output.directory は文字列である必要があります。")

        if "debug_mode" in output_config and not isinstance(output_config["debug_mode"], bool):
            raise ValueError("output.debug_mode はブール値である必要があります。")

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得する

        ドット記法（例: 'video.input_path'）で階層的な設定値にアクセスできる。

        Args:
            key: 設定キー（ドット記法をサポート）
            default: キーが存在しない場合のデフォルト値

        Returns:
            設定値、またはデフォルト値
        """
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """設定セクション全体を取得する

        Args:
            section: セクション名（例: 'features', 'grid_search'）

        Returns:
            セクションの設定データ
        """
        return self.config.get(section, {})

    def set(self, key: str, value: Any):
        """設定値を動的に変更する

        Args:
            key: 設定キー（ドット記法をサポート）
            value: 設定する値
        """
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        logger.debug(f"設定値を変更しました: {key} = {value}")

    def save(self, output_path: Optional[str] = None):
        """設定をファイルに保存する

        Args:
            output_path: 保存先パス（指定しない場合は元のパスに上書き）
        """
        save_path = output_path or self.config_path
        file_ext = Path(save_path).suffix.lower()

        if file_ext not in [".yaml", ".yml", ".json"]:
            raise ValueError(f"サポートされていないファイル形式: {file_ext}")

        with open(save_path, "w", encoding="utf-8") as f:
            if file_ext == ".json":
                json.dump(self.config, f, indent=2, ensure_ascii=False)
            else:
                yaml.dump(self.config, f, default_flow_style=False, allow_unicode=True)

        logger.info(f"設定ファイルを保存しました: {save_path}")
