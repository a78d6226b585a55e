"""Data models for the anomaly detection evaluation system."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

# OneClassSVM.predict の出力規約に合わせる
LABEL_NORMAL = 1
LABEL_ANOMALY = -1


def _validate_span(frame: int, x_start: int, x_end: int) -> None:
    if x_start < 0:
        raise ValueError(f"x_start は非負である必要があります: frame={frame}, x_start={x_start}")
    if x_start > x_end:
        raise ValueError(f"x_start は x_end 以下である必要があります: frame={frame}, x_start={x_start}, x_end={x_end}")


@dataclass(frozen=True)
class AnomalyRegion:
    """異常領域アノテーション

    Attributes:
        frame: フレームID
        x_start: 領域の開始x座標（ピクセル）
        x_end: 領域の終了x座標（ピクセル、この列を含む）
        anomaly_id: 異常ID（複数フレームにまたがる同一の異常で共有される）
    """

    frame: int
    x_start: int
    x_end: int
    anomaly_id: str

    def __post_init__(self):
        _validate_span(self.frame, self.x_start, self.x_end)


@dataclass(frozen=True)
class UnclearRegion:
    """判定不明領域アノテーション（偽陽性の集計から除外する）"""

    frame: int
    x_start: int
    x_end: int

    def __post_init__(self):
        _validate_span(self.frame, self.x_start, self.x_end)


@dataclass(frozen=True)
class AnnotationSet:
    """動画1本分のアノテーション

    Attributes:
        normal_frames: 正常フレームIDの列（時系列順）
        anomaly_frames: 異常フレームIDの列（時系列順）
        anomaly_regions: 異常領域のリスト
        unclear_regions: 判定不明領域のリスト
    """

    normal_frames: Tuple[int, ...]
    anomaly_frames: Tuple[int, ...]
    anomaly_regions: Tuple[AnomalyRegion, ...] = ()
    unclear_regions: Tuple[UnclearRegion, ...] = ()


@dataclass(frozen=True)
class GroundTruth:
    """サンプル単位の正解ラベル

    Attributes:
        labels: 異常フレームブロックのラベルベクトル（読み取り専用）
        anomaly_groups: 異常ID -> サンプルインデックス集合
        unclear_indices: 偽陽性の集計から除外するインデックス集合
        samples_per_frame: 1フレームあたりのサンプル数
    """

    labels: np.ndarray
    anomaly_groups: Mapping[str, frozenset]
    unclear_indices: frozenset
    samples_per_frame: int

    @property
    def frame_count(self) -> int:
        return len(self.labels) // self.samples_per_frame

    @property
    def anomaly_sample_count(self) -> int:
        return int(np.count_nonzero(self.labels == LABEL_ANOMALY))

    @property
    def anomaly_count(self) -> int:
        return len(self.anomaly_groups)


@dataclass(frozen=True)
class EvaluationMetrics:
    """評価指標データクラス

    正常フレームのみの評価では、正解ラベルに依存する項目は None になる。

    Attributes:
        fp_frames: 偽陽性を含むフレーム数
        total_frames: 評価対象フレーム数
        fp_frames_percentage: 偽陽性を含むフレームの割合（%）
        true_positives: サンプル単位の真陽性数
        false_negatives: サンプル単位の偽陰性数
        recall: サンプル単位の再現率
        tp_anomaly_level: 検出できた異常IDの数
        anomaly_count: 異常IDの総数
        recall_anomaly_level: 異常ID単位の再現率
    """

    fp_frames: int
    total_frames: int
    fp_frames_percentage: float
    true_positives: Optional[int] = None
    false_negatives: Optional[int] = None
    recall: Optional[float] = None
    tp_anomaly_level: Optional[int] = None
    anomaly_count: Optional[int] = None
    recall_anomaly_level: Optional[float] = None

    @property
    def has_ground_truth(self) -> bool:
        return self.recall is not None


@dataclass(frozen=True)
class GridSearchResult:
    """グリッドサーチ1セル分の結果"""

    gamma: float
    nu: float
    metrics: EvaluationMetrics


@dataclass
class FeatureSet:
    """標準化済みの特徴量行列一式

    Attributes:
        x_train: 学習用（正常フレーム）特徴量行列
        x_test_normal: テスト用正常フレーム特徴量行列
        x_test_anomaly: テスト用異常フレーム特徴量行列
        samples_per_frame: 1フレームあたりのサンプル数
        cell_width: 1サンプルあたりの幅（ピクセル）
    """

    x_train: np.ndarray
    x_test_normal: np.ndarray
    x_test_anomaly: np.ndarray
    samples_per_frame: int
    cell_width: int
    metadata: dict = field(default_factory=dict)
