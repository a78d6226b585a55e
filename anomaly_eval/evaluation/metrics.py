"""Sample-, frame- and anomaly-level metrics for one-class predictions."""

from __future__ import annotations

import logging

import numpy as np

from anomaly_eval.models.data_models import LABEL_ANOMALY, EvaluationMetrics, GroundTruth

logger = logging.getLogger(__name__)


class MetricsAggregator:
    """予測ラベルから評価指標を計算するクラス

    フレームは samples_per_frame 個の連続したサンプルで構成される。
    偽陽性はフレーム単位で数え、判定不明領域のサンプルは偽陽性の判定から除外する。

    Attributes:
        samples_per_frame: 1フレームあたりのサンプル数
    """

    def __init__(self, samples_per_frame: int):
        if samples_per_frame <= 0:
            raise ValueError(f"samples_per_frame は正の整数である必要があります: {samples_per_frame}")
        self.samples_per_frame = samples_per_frame

    def _as_frames(self, mask: np.ndarray, name: str) -> np.ndarray:
        if mask.size % self.samples_per_frame != 0:
            raise ValueError(
                f"{name} の長さ {mask.size} が samples_per_frame={self.samples_per_frame} で割り切れません"
            )
        return mask.reshape(-1, self.samples_per_frame)

    def _count_fp_frames(self, fp_mask: np.ndarray, name: str) -> tuple[int, int]:
        frames = self._as_frames(fp_mask, name)
        return int(np.count_nonzero(frames.any(axis=1))), frames.shape[0]

    @staticmethod
    def _percentage(count: int, total: int) -> float:
        return count / total * 100.0 if total > 0 else 0.0

    def evaluate_normal(self, predicted: np.ndarray) -> EvaluationMetrics:
        """異常を含まないデータに対する偽陽性フレーム率を計算

        Args:
            predicted: 予測ラベル（正常サンプルのみ）

        Returns:
            正解ラベルに依存する項目が None の評価指標
        """
        fp_mask = np.asarray(predicted).ravel() == LABEL_ANOMALY
        fp_frames, total_frames = self._count_fp_frames(fp_mask, "predicted")

        return EvaluationMetrics(
            fp_frames=fp_frames,
            total_frames=total_frames,
            fp_frames_percentage=self._percentage(fp_frames, total_frames),
        )

    def evaluate(
        self,
        normal_predicted: np.ndarray,
        anomaly_predicted: np.ndarray,
        ground_truth: GroundTruth,
    ) -> EvaluationMetrics:
        """正常テストブロックと異常テストブロックを合わせて評価

        Args:
            normal_predicted: 正常テストフレームの予測ラベル
            anomaly_predicted: 異常テストフレームの予測ラベル
            ground_truth: 異常テストフレームの正解ラベル

        Returns:
            評価指標

        Raises:
            ValueError: 予測ラベルの長さが正解ラベルやフレーム構成と一致しない場合
        """
        anomaly_predicted = np.asarray(anomaly_predicted).ravel()
        if anomaly_predicted.size != ground_truth.labels.size:
            raise ValueError(
                f"予測ラベル数 {anomaly_predicted.size} と正解ラベル数 {ground_truth.labels.size} が一致しません"
            )

        is_anomaly = ground_truth.labels == LABEL_ANOMALY
        predicted_anomaly = anomaly_predicted == LABEL_ANOMALY

        # サンプル単位
        true_positives = int(np.count_nonzero(is_anomaly & predicted_anomaly))
        positives = int(np.count_nonzero(is_anomaly))
        recall = true_positives / positives if positives > 0 else 1.0

        # フレーム単位（判定不明サンプルは偽陽性に数えない）
        fp_mask = predicted_anomaly & ~is_anomaly
        if ground_truth.unclear_indices:
            fp_mask[np.fromiter(ground_truth.unclear_indices, dtype=np.int64)] = False
        normal_fp_mask = np.asarray(normal_predicted).ravel() == LABEL_ANOMALY

        normal_fp_frames, normal_frames = self._count_fp_frames(normal_fp_mask, "normal_predicted")
        anomaly_fp_frames, anomaly_frames = self._count_fp_frames(fp_mask, "anomaly_predicted")
        fp_frames = normal_fp_frames + anomaly_fp_frames
        total_frames = normal_frames + anomaly_frames

        # 異常ID単位（いずれか1サンプルでも検出できれば検出とみなす）
        tp_anomaly_level = sum(
            1
            for indices in ground_truth.anomaly_groups.values()
            if predicted_anomaly[np.fromiter(indices, dtype=np.int64)].any()
        )
        anomaly_count = ground_truth.anomaly_count
        recall_anomaly_level = tp_anomaly_level / anomaly_count if anomaly_count > 0 else 1.0

        return EvaluationMetrics(
            fp_frames=fp_frames,
            total_frames=total_frames,
            fp_frames_percentage=self._percentage(fp_frames, total_frames),
            true_positives=true_positives,
            false_negatives=positives - true_positives,
            recall=recall,
            tp_anomaly_level=tp_anomaly_level,
            anomaly_count=anomaly_count,
            recall_anomaly_level=recall_anomaly_level,
        )


def log_metrics(metrics: EvaluationMetrics, log: logging.Logger | None = None) -> None:
    """評価指標を読みやすい形式でログ出力

    Args:
        metrics: 評価指標
        log: 出力先ロガー（省略時はモジュールロガー）
    """
    log = log or logger
    if metrics.has_ground_truth:
        log.info(f"  Recall (sample): {metrics.recall:.4f} (TP: {metrics.true_positives}, FN: {metrics.false_negatives})")
        log.info(
            f"  Recall (anomaly): {metrics.recall_anomaly_level:.4f} "
            f"({metrics.tp_anomaly_level} / {metrics.anomaly_count})"
        )
    log.info(
        f"  FP frames: {metrics.fp_frames_percentage:.2f}% ({metrics.fp_frames} / {metrics.total_frames})"
    )
