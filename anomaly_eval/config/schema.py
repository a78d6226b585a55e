"""評価パイプラインに渡す設定レコード。

ConfigManager で検証済みの辞書から、パイプラインが参照する値だけを型付きで取り出す。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anomaly_eval.config.config_manager import ConfigManager


@dataclass(frozen=True)
class FeatureConfig:
    cell_width: int = 16
    hog_cell_size: int = 8
    block_size: int = 16
    block_stride: int = 8
    nbins: int = 9


@dataclass(frozen=True)
class GridSearchConfig:
    gamma_values: tuple[float, ...]
    nu_values: tuple[float, ...]
    max_fp_frames_percentage: float = 50.0
    csv_separator: str = ";"
    output_file: str = "grid_search_results.csv"


@dataclass(frozen=True)
class EvaluationConfig:
    """1回の評価実行に必要な設定一式"""

    video_path: Path
    annotation_path: Path
    output_dir: Path
    cache_dir: Path
    features: FeatureConfig
    grid_search: GridSearchConfig
    gamma: float = 0.01
    nu: float = 0.01
    seed: int = 42
    save_features: bool = False
    load_features: bool = False
    debug_mode: bool = False

    @property
    def grid_search_output_path(self) -> Path:
        return self.output_dir / self.grid_search.output_file

    @classmethod
    def from_config(cls, config: ConfigManager) -> EvaluationConfig:
        """検証済みの ConfigManager から設定レコードを構築する"""
        features = config.get_section("features")
        grid = config.get_section("grid_search")
        defaults = FeatureConfig()

        return cls(
            video_path=Path(config.get("video.input_path")),
            annotation_path=Path(config.get("annotation.path")),
            output_dir=Path(config.get("output.directory", "output")),
            cache_dir=Path(config.get("cache.directory", "output/feature_cache")),
            features=FeatureConfig(
                cell_width=int(features.get("cell_width", defaults.cell_width)),
                hog_cell_size=int(features.get("hog_cell_size", defaults.hog_cell_size)),
                block_size=int(features.get("block_size", defaults.block_size)),
                block_stride=int(features.get("block_stride", defaults.block_stride)),
                nbins=int(features.get("nbins", defaults.nbins)),
            ),
            grid_search=GridSearchConfig(
                gamma_values=tuple(float(v) for v in grid["gamma_values"]),
                nu_values=tuple(float(v) for v in grid["nu_values"]),
                max_fp_frames_percentage=float(grid.get("max_fp_frames_percentage", 50.0)),
                csv_separator=grid.get("csv_separator", ";"),
                output_file=grid.get("output_file", "grid_search_results.csv"),
            ),
            gamma=float(config.get("classifier.gamma")),
            nu=float(config.get("classifier.nu")),
            seed=int(config.get("split.seed", 42)),
            save_features=bool(config.get("cache.save", False)),
            load_features=bool(config.get("cache.load", False)),
            debug_mode=bool(config.get("output.debug_mode", False)),
        )

    def with_overrides(self, **changes) -> EvaluationConfig:
        """一部の値を差し替えた新しい設定レコードを返す"""
        return replace(self, **changes)
