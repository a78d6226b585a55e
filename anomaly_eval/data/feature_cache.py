"""Feature matrix cache for skipping extraction between runs."""

from __future__ import annotations

from datetime import datetime
import json
import logging
from pathlib import Path

import numpy as np

from anomaly_eval.models.data_models import FeatureSet

logger = logging.getLogger(__name__)


class FeatureCache:
    """標準化済み特徴量行列の保存・読み込み

    分類器やハイパーパラメータ探索の試行時に、特徴量抽出をやり直さずに済むようにする。

    Attributes:
        cache_dir: キャッシュの保存ディレクトリ
    """

    MATRIX_FILE = "features.npz"
    METADATA_FILE = "metadata.json"

    def __init__(self, cache_dir: str | Path):
        self.cache_dir = Path(cache_dir)
        self.matrix_path = self.cache_dir / self.MATRIX_FILE
        self.metadata_path = self.cache_dir / self.METADATA_FILE

    def exists(self) -> bool:
        return self.matrix_path.exists() and self.metadata_path.exists()

    def save(self, feature_set: FeatureSet) -> None:
        """特徴量行列とメタデータを保存

        Args:
            feature_set: 保存する特徴量
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        np.savez(
            self.matrix_path,
            x_train=feature_set.x_train,
            x_test_normal=feature_set.x_test_normal,
            x_test_anomaly=feature_set.x_test_anomaly,
        )

        metadata = {
            "samples_per_frame": feature_set.samples_per_frame,
            "cell_width": feature_set.cell_width,
            "shapes": {
                "x_train": list(feature_set.x_train.shape),
                "x_test_normal": list(feature_set.x_test_normal.shape),
                "x_test_anomaly": list(feature_set.x_test_anomaly.shape),
            },
            "saved_at": datetime.now().isoformat(),
        }
        with open(self.metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)

        logger.info(f"特徴量キャッシュを保存しました: {self.cache_dir}")

    def load(self) -> FeatureSet:
        """保存済みの特徴量行列を読み込む

        Returns:
            FeatureSet

        Raises:
            FileNotFoundError: キャッシュが存在しない場合
            ValueError: メタデータが不正な場合
        """
        if not self.exists():
            raise FileNotFoundError(f"特徴量キャッシュが見つかりません: {self.cache_dir}")

        with open(self.metadata_path, encoding="utf-8") as f:
            metadata = json.load(f)

        try:
            samples_per_frame = int(metadata["samples_per_frame"])
            cell_width = int(metadata["cell_width"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"特徴量キャッシュのメタデータが不正です: {e}") from e

        with np.load(self.matrix_path) as data:
            feature_set = FeatureSet(
                x_train=data["x_train"],
                x_test_normal=data["x_test_normal"],
                x_test_anomaly=data["x_test_anomaly"],
                samples_per_frame=samples_per_frame,
                cell_width=cell_width,
                metadata=metadata,
            )

        logger.info(
            f"特徴量キャッシュを読み込みました: {self.cache_dir} "
            f"(x_train: {feature_set.x_train.shape[0]} x {feature_set.x_train.shape[1]})"
        )
        return feature_set
