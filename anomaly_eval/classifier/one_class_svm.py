"""One-class SVM classifier wrapper."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from sklearn.svm import OneClassSVM

from anomaly_eval.models.data_models import LABEL_ANOMALY, LABEL_NORMAL

logger = logging.getLogger(__name__)


class OneClassClassifier:
    """RBFカーネルの1クラスSVM

    正常サンプルのみで学習し、予測時は LABEL_NORMAL / LABEL_ANOMALY を返す。
    """

    def __init__(self, kernel: str = "rbf"):
        self.kernel = kernel
        self.model: Optional[OneClassSVM] = None

    def fit(self, x: np.ndarray, gamma: float, nu: float) -> None:
        """学習する

        Args:
            x: 学習用特徴量行列
            gamma: RBFカーネルの広がり
            nu: 外れ値の割合の上限
        """
        self.model = OneClassSVM(kernel=self.kernel, gamma=gamma, nu=nu)
        self.model.fit(x)
        logger.debug(f"OneClassSVM 学習完了 - gamma={gamma}, nu={nu}, サポートベクター数: {len(self.model.support_)}")

    def predict(self, x: np.ndarray) -> np.ndarray:
        """行ごとのラベルを返す

        Raises:
            RuntimeError: 学習前に呼び出された場合
        """
        if self.model is None:
            raise RuntimeError("分類器が未学習です。先にfit()を呼び出してください。")
        if len(x) == 0:
            return np.empty(0, dtype=np.int32)

        predicted = self.model.predict(x)
        return np.where(predicted > 0, LABEL_NORMAL, LABEL_ANOMALY).astype(np.int32)
