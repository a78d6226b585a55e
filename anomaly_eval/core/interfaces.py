"""ポートインターフェース定義。

評価ロジックはここで定義されるProtocolに依存し、具体実装は classifier / features 層へ分離する。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    import numpy as np


class ClassifierPort(Protocol):
    """1クラス分類器ポート。"""

    def fit(self, x: np.ndarray, gamma: float, nu: float) -> None:
        """正常サンプルのみで学習する。"""

    def predict(self, x: np.ndarray) -> np.ndarray:
        """行ごとに LABEL_NORMAL / LABEL_ANOMALY を返す。"""


class FeatureExtractorPort(Protocol):
    """特徴量抽出ポート。"""

    cell_width: int

    def fit_transform(self, frames: Iterable[np.ndarray]) -> np.ndarray:
        """フレーム形状を記録したうえで特徴量行列を返す。"""

    def transform(self, frames: Iterable[np.ndarray]) -> np.ndarray:
        """学習時と同じ形状のフレームから特徴量行列を返す。"""
