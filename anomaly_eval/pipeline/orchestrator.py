"""Pipeline orchestrator for feature preparation, single fit and grid search."""

from __future__ import annotations

from collections.abc import Callable
import logging

import numpy as np
from sklearn.preprocessing import StandardScaler
from tqdm import tqdm

from anomaly_eval.annotation import read_annotations
from anomaly_eval.classifier import OneClassClassifier
from anomaly_eval.config.schema import EvaluationConfig
from anomaly_eval.core.interfaces import ClassifierPort, FeatureExtractorPort
from anomaly_eval.data import FeatureCache, samples_per_frame, split_normal_frames
from anomaly_eval.evaluation import (AnnotationIndexer, GridSearchDriver, LabelSynthesizer, MetricsAggregator,
                                     log_metrics)
from anomaly_eval.features import HogFeatureExtractor
from anomaly_eval.models import AnnotationSet, EvaluationMetrics, FeatureSet, GridSearchResult, GroundTruth
from anomaly_eval.video import VideoFrameReader


def _standardize(scaler: StandardScaler, x: np.ndarray) -> np.ndarray:
    if len(x) == 0:
        return x.astype(np.float32)
    return scaler.transform(x).astype(np.float32)


class EvaluationOrchestrator:
    """評価パイプライン全体を統括するオーケストレーター

    正解ラベルはハイパーパラメータに依存しないため一度だけ生成し、全ての学習・評価で共有する。
    """

    def __init__(
        self,
        config: EvaluationConfig,
        logger: logging.Logger,
        classifier_factory: Callable[[], ClassifierPort] = OneClassClassifier,
        extractor_factory: Callable[[], FeatureExtractorPort] | None = None,
        frame_reader_factory: Callable[[str], VideoFrameReader] = VideoFrameReader,
    ):
        """初期化

        Args:
            config: 評価設定
            logger: ロガー
            classifier_factory: 1クラス分類器の生成関数
            extractor_factory: 特徴量抽出器の生成関数（省略時は設定に基づく HogFeatureExtractor）
            frame_reader_factory: 動画パスからフレームリーダーを生成する関数
        """
        self.config = config
        self.logger = logger
        self.classifier_factory = classifier_factory
        self.extractor_factory = extractor_factory or self._default_extractor
        self.frame_reader_factory = frame_reader_factory
        self.feature_cache = FeatureCache(config.cache_dir)

    def _default_extractor(self) -> HogFeatureExtractor:
        features = self.config.features
        return HogFeatureExtractor(
            cell_width=features.cell_width,
            hog_cell_size=features.hog_cell_size,
            block_size=features.block_size,
            block_stride=features.block_stride,
            nbins=features.nbins,
        )

    def log_phase_start(self, phase_name: str) -> None:
        self.logger.info("=" * 80)
        self.logger.info(phase_name)
        self.logger.info("=" * 80)

    def load_annotations(self) -> AnnotationSet:
        return read_annotations(self.config.annotation_path)

    def prepare_features(self, annotations: AnnotationSet) -> FeatureSet:
        """特徴量行列を用意する（キャッシュ読み込み、または抽出と標準化）

        Args:
            annotations: アノテーション

        Returns:
            標準化済みの FeatureSet

        Raises:
            ValueError: 特徴量行列とフレーム構成が整合しない場合
        """
        self.log_phase_start("フェーズ1: 特徴量の準備")

        if self.config.load_features:
            feature_set = self.feature_cache.load()
        else:
            feature_set = self._extract_features(annotations)
            if self.config.save_features:
                self.feature_cache.save(feature_set)

        expected_rows = len(annotations.anomaly_frames) * feature_set.samples_per_frame
        if feature_set.x_test_anomaly.shape[0] != expected_rows:
            raise ValueError(
                f"異常テスト特徴量の行数 {feature_set.x_test_anomaly.shape[0]} が "
                f"異常フレーム数 x サンプル数/フレーム ({expected_rows}) と一致しません"
            )

        self.logger.info(f"XTrain shape = {feature_set.x_train.shape[0]} x {feature_set.x_train.shape[1]}")
        return feature_set

    def _extract_features(self, annotations: AnnotationSet) -> FeatureSet:
        # 正常テストフレームは異常フレームと同数を取り出す
        train_frames, test_normal_frames = split_normal_frames(
            annotations.normal_frames, len(annotations.anomaly_frames), seed=self.config.seed
        )
        extractor = self.extractor_factory()

        with self.frame_reader_factory(str(self.config.video_path)) as reader:
            x_train = extractor.fit_transform(
                tqdm(reader.iter_frames(train_frames), total=len(train_frames), desc="特徴量抽出中（学習）")
            )
            n_samples = samples_per_frame(x_train.shape[0], len(train_frames))

            x_test_normal = extractor.transform(
                tqdm(reader.iter_frames(test_normal_frames), total=len(test_normal_frames), desc="特徴量抽出中（正常）")
            )
            x_test_anomaly = extractor.transform(
                tqdm(
                    reader.iter_frames(annotations.anomaly_frames),
                    total=len(annotations.anomaly_frames),
                    desc="特徴量抽出中（異常）",
                )
            )

        # 平均0、標準偏差1に標準化
        scaler = StandardScaler()
        scaler.fit(x_train)

        return FeatureSet(
            x_train=_standardize(scaler, x_train),
            x_test_normal=_standardize(scaler, x_test_normal),
            x_test_anomaly=_standardize(scaler, x_test_anomaly),
            samples_per_frame=n_samples,
            cell_width=extractor.cell_width,
        )

    def build_ground_truth(self, annotations: AnnotationSet, feature_set: FeatureSet) -> GroundTruth:
        """異常テストフレームの正解ラベルを生成する"""
        self.log_phase_start("フェーズ2: 正解ラベル生成")
        indexer = AnnotationIndexer(feature_set.cell_width, feature_set.samples_per_frame)
        return LabelSynthesizer(indexer).synthesize(annotations)

    def run_fit_predict(
        self, feature_set: FeatureSet, ground_truth: GroundTruth
    ) -> tuple[EvaluationMetrics, EvaluationMetrics]:
        """設定されたハイパーパラメータで1回学習し、学習データとテストデータの指標を出力する

        Returns:
            (学習データの指標, テストデータの指標)
        """
        self.log_phase_start(f"フェーズ3: 学習・評価 (gamma={self.config.gamma}, nu={self.config.nu})")

        classifier = self.classifier_factory()
        classifier.fit(feature_set.x_train, self.config.gamma, self.config.nu)
        aggregator = MetricsAggregator(feature_set.samples_per_frame)

        self.logger.info("TRAIN")
        train_metrics = aggregator.evaluate_normal(classifier.predict(feature_set.x_train))
        log_metrics(train_metrics, self.logger)

        self.logger.info("TEST")
        test_metrics = aggregator.evaluate(
            classifier.predict(feature_set.x_test_normal),
            classifier.predict(feature_set.x_test_anomaly),
            ground_truth,
        )
        log_metrics(test_metrics, self.logger)

        return train_metrics, test_metrics

    def run_grid_search(
        self, feature_set: FeatureSet, ground_truth: GroundTruth
    ) -> tuple[list[GridSearchResult], list[GridSearchResult]]:
        """グリッドサーチを実行し、要約表の保存とランキングの出力を行う

        Returns:
            (全結果, 偽陽性フレーム率で絞り込んだランキング)
        """
        self.log_phase_start("フェーズ3: グリッドサーチ")
        grid_config = self.config.grid_search

        driver = GridSearchDriver(
            self.classifier_factory,
            grid_config.gamma_values,
            grid_config.nu_values,
            max_fp_frames_percentage=grid_config.max_fp_frames_percentage,
        )
        results = driver.run(feature_set, ground_truth)
        driver.export_grid_csv(results, self.config.grid_search_output_path, separator=grid_config.csv_separator)
        ranked = driver.report(results, self.logger)
        return results, ranked

    def run(self, grid_search: bool = False) -> tuple:
        """アノテーション読み込みから評価までを実行する

        Args:
            grid_search: True の場合はグリッドサーチ、False の場合は単一の学習・評価

        Returns:
            run_grid_search() または run_fit_predict() の戻り値
        """
        annotations = self.load_annotations()
        feature_set = self.prepare_features(annotations)
        ground_truth = self.build_ground_truth(annotations, feature_set)

        if grid_search:
            return self.run_grid_search(feature_set, ground_truth)
        return self.run_fit_predict(feature_set, ground_truth)
