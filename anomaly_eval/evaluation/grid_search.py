"""Hyperparameter grid search over the one-class classifier."""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from pathlib import Path

import pandas as pd
from tqdm import tqdm

from anomaly_eval.core.interfaces import ClassifierPort
from anomaly_eval.evaluation.metrics import MetricsAggregator, log_metrics
from anomaly_eval.models.data_models import EvaluationMetrics, FeatureSet, GridSearchResult, GroundTruth

logger = logging.getLogger(__name__)


def format_grid_cell(metrics: EvaluationMetrics) -> str:
    """グリッド表の1セル分の要約文字列: "異常ID単位TP / Recall / FPフレーム率" """
    return f"{metrics.tp_anomaly_level} / {metrics.recall:.4f} / {metrics.fp_frames_percentage:.2f}"


def format_param(value: float) -> str:
    return f"{value:g}"


class GridSearchDriver:
    """gamma / nu の全組み合わせで分類器を学習・評価するクラス

    正解ラベルは全組み合わせで共有され、ループ内で変更されない。

    Attributes:
        classifier_factory: 組み合わせごとに新しい分類器を生成する関数
        gamma_values: gamma（カーネルの広がり）の候補
        nu_values: nu（外れ値の割合）の候補
        max_fp_frames_percentage: ランキング対象とする偽陽性フレーム率の上限（%、この値未満）
    """

    def __init__(
        self,
        classifier_factory: Callable[[], ClassifierPort],
        gamma_values: Sequence[float],
        nu_values: Sequence[float],
        max_fp_frames_percentage: float = 50.0,
    ):
        if not gamma_values or not nu_values:
            raise ValueError("gamma_values と nu_values は空にできません")
        for name, values in (("gamma_values", gamma_values), ("nu_values", nu_values)):
            labels = [format_param(v) for v in values]
            if len(set(labels)) != len(labels):
                raise ValueError(f"{name} に表示ラベルが重複する値があります: {labels}")
        self.classifier_factory = classifier_factory
        self.gamma_values = list(gamma_values)
        self.nu_values = list(nu_values)
        self.max_fp_frames_percentage = max_fp_frames_percentage

    def run(self, feature_set: FeatureSet, ground_truth: GroundTruth) -> list[GridSearchResult]:
        """全組み合わせを評価する

        分類器の例外はそのまま送出し、探索全体を中断する。

        Args:
            feature_set: 標準化済み特徴量行列
            ground_truth: 異常テストフレームの正解ラベル

        Returns:
            nu を外側、gamma を内側としたループ順の結果リスト
        """
        aggregator = MetricsAggregator(feature_set.samples_per_frame)
        total = len(self.gamma_values) * len(self.nu_values)
        logger.info(f"探索空間: {total} 組み合わせ (gamma: {len(self.gamma_values)}, nu: {len(self.nu_values)})")

        results = []
        with tqdm(total=total, desc="グリッドサーチ中") as progress:
            for nu in self.nu_values:
                for gamma in self.gamma_values:
                    logger.debug(f"gamma={gamma}, nu={nu}")
                    classifier = self.classifier_factory()
                    classifier.fit(feature_set.x_train, gamma, nu)
                    metrics = aggregator.evaluate(
                        classifier.predict(feature_set.x_test_normal),
                        classifier.predict(feature_set.x_test_anomaly),
                        ground_truth,
                    )
                    results.append(GridSearchResult(gamma=gamma, nu=nu, metrics=metrics))
                    progress.update(1)

        return results

    def build_grid_table(self, results: Sequence[GridSearchResult]) -> pd.DataFrame:
        """行を nu、列を gamma とした要約表を作成

        Args:
            results: run() の結果

        Returns:
            各セルが format_grid_cell() の文字列の DataFrame
        """
        table = pd.DataFrame(
            "",
            index=[format_param(nu) for nu in self.nu_values],
            columns=[format_param(gamma) for gamma in self.gamma_values],
        )
        for result in results:
            table.loc[format_param(result.nu), format_param(result.gamma)] = format_grid_cell(result.metrics)
        return table

    def export_grid_csv(
        self,
        results: Sequence[GridSearchResult],
        output_path: str | Path,
        separator: str = ";",
    ) -> Path:
        """要約表を区切り文字付きテキストとして保存

        先頭行は空セルと gamma の値、以降は nu ごとに1行。

        Returns:
            出力ファイルのパス
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        self.build_grid_table(results).to_csv(output_path, sep=separator, index_label="", encoding="utf-8")

        logger.info(f"グリッドサーチ結果を保存しました: {output_path}")
        return output_path

    def rank_results(self, results: Sequence[GridSearchResult]) -> list[GridSearchResult]:
        """偽陽性フレーム率が上限未満の組み合わせを良い順に並べる

        異常ID単位のTP数の降順、同数の場合はサンプル単位の再現率の降順。
        """
        candidates = [r for r in results if r.metrics.fp_frames_percentage < self.max_fp_frames_percentage]
        return sorted(candidates, key=lambda r: (-r.metrics.tp_anomaly_level, -r.metrics.recall))

    def report(self, results: Sequence[GridSearchResult], log: logging.Logger | None = None) -> list[GridSearchResult]:
        """ランキングをログ出力して返す"""
        log = log or logger
        ranked = self.rank_results(results)
        log.info(
            f"偽陽性フレーム率 {self.max_fp_frames_percentage:.0f}% 未満の組み合わせ: {len(ranked)} / {len(results)}"
        )
        for result in ranked:
            log.info(f"gamma={format_param(result.gamma)}, nu={format_param(result.nu)}")
            log_metrics(result.metrics, log)
        return ranked
