"""テスト向けの軽量な Fake 実装群。"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from anomaly_eval.core.interfaces import ClassifierPort, FeatureExtractorPort
from anomaly_eval.models.data_models import LABEL_ANOMALY, LABEL_NORMAL

if TYPE_CHECKING:
    from collections.abc import Iterable


class FakeClassifier(ClassifierPort):
    """先頭列の値がしきい値を超えた行を異常とする分類器。

    しきい値は gamma * nu とし、学習データは記録のみ行う。
    """

    def __init__(self):
        self.fit_calls: list[tuple[float, float]] = []
        self.threshold: float | None = None

    def fit(self, x: np.ndarray, gamma: float, nu: float) -> None:
        _ = x  # 未使用引数
        self.fit_calls.append((gamma, nu))
        self.threshold = gamma * nu

    def predict(self, x: np.ndarray) -> np.ndarray:
        if self.threshold is None:
            raise RuntimeError("fit() が呼び出されていません")
        return np.where(np.asarray(x)[:, 0] > self.threshold, LABEL_ANOMALY, LABEL_NORMAL).astype(np.int32)


class FailingClassifier(ClassifierPort):
    """fit で必ず失敗する分類器。"""

    def fit(self, x: np.ndarray, gamma: float, nu: float) -> None:
        raise RuntimeError(f"学習に失敗しました: gamma={gamma}, nu={nu}")

    def predict(self, x: np.ndarray) -> np.ndarray:
        raise RuntimeError("学習されていません")


class FakeFeatureExtractor(FeatureExtractorPort):
    """フレームを cell_width ごとの列平均に変換する特徴量抽出器。"""

    def __init__(self, cell_width: int = 4):
        self.cell_width = cell_width
        self.frame_width: int | None = None

    def _transform_frame(self, frame: np.ndarray) -> np.ndarray:
        n_cells = frame.shape[1] // self.cell_width
        cells = frame[:, : n_cells * self.cell_width].reshape(frame.shape[0], n_cells, self.cell_width)
        return cells.mean(axis=(0, 2)).reshape(n_cells, 1).astype(np.float32)

    def fit_transform(self, frames: Iterable[np.ndarray]) -> np.ndarray:
        frames = list(frames)
        self.frame_width = frames[0].shape[1]
        return self.transform(frames)

    def transform(self, frames: Iterable[np.ndarray]) -> np.ndarray:
        return np.vstack([self._transform_frame(np.asarray(frame, dtype=np.float32)) for frame in frames])
