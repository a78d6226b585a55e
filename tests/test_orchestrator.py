"""Integration tests for EvaluationOrchestrator using fakes."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pytest
import yaml

from anomaly_eval.adapters.fakes import FakeClassifier, FakeFeatureExtractor
from anomaly_eval.config import EvaluationConfig, FeatureConfig, GridSearchConfig
from anomaly_eval.pipeline import EvaluationOrchestrator

FRAME_SHAPE = (2, 16)

# 異常フレーム100はセル1（x=4..7）、101はセル3（x=12..15）に高い値を持つ
ANOMALY_CELLS = {100: 1, 101: 3}


class FakeFrameReader:
    """フレームIDから合成フレームを返すリーダー。正常フレームは全て0。"""

    def __init__(self, video_path: str):
        self.video_path = video_path
        self.read_ids: list[int] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def iter_frames(self, frame_ids):
        for frame_id in frame_ids:
            self.read_ids.append(frame_id)
            frame = np.zeros(FRAME_SHAPE, dtype=np.uint8)
            if frame_id in ANOMALY_CELLS:
                x = ANOMALY_CELLS[frame_id] * 4
                frame[:, x : x + 4] = 10
            yield frame


class UnavailableFrameReader:
    def __init__(self, video_path: str):
        raise AssertionError("キャッシュ読み込み時に動画は開かれない")


@pytest.fixture
def annotation_path(tmp_path: Path) -> Path:
    path = tmp_path / "annotations.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "normal_frames": list(range(10)),
                "anomaly_frames": [100, 101],
                "anomaly_regions": [
                    {"frame": 100, "x_start": 4, "x_end": 7, "anomaly_id": "A001"},
                    {"frame": 101, "x_start": 12, "x_end": 15, "anomaly_id": "A002"},
                ],
                "unclear_regions": [{"frame": 500, "x_start": 0, "x_end": 15}],
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def evaluation_config(tmp_path: Path, annotation_path: Path) -> EvaluationConfig:
    return EvaluationConfig(
        video_path=tmp_path / "video.mp4",
        annotation_path=annotation_path,
        output_dir=tmp_path / "output",
        cache_dir=tmp_path / "output" / "feature_cache",
        features=FeatureConfig(cell_width=4),
        grid_search=GridSearchConfig(gamma_values=(0.5, 1.0, 20.0), nu_values=(1.0,)),
        gamma=1.0,
        nu=1.0,
    )


def _orchestrator(config: EvaluationConfig, frame_reader_factory=FakeFrameReader) -> EvaluationOrchestrator:
    return EvaluationOrchestrator(
        config,
        logging.getLogger("test_orchestrator"),
        classifier_factory=FakeClassifier,
        extractor_factory=lambda: FakeFeatureExtractor(cell_width=4),
        frame_reader_factory=frame_reader_factory,
    )


def test_prepare_features_shapes(evaluation_config: EvaluationConfig):
    """学習8フレーム、正常テスト2フレーム、異常テスト2フレームの特徴量になる。"""

    orchestrator = _orchestrator(evaluation_config)
    annotations = orchestrator.load_annotations()

    feature_set = orchestrator.prepare_features(annotations)

    assert feature_set.samples_per_frame == 4
    assert feature_set.cell_width == 4
    assert feature_set.x_train.shape == (32, 1)
    assert feature_set.x_test_normal.shape == (8, 1)
    assert feature_set.x_test_anomaly.shape == (8, 1)
    np.testing.assert_allclose(feature_set.x_test_anomaly.ravel(), [0, 10, 0, 0, 0, 0, 0, 10])


def test_build_ground_truth(evaluation_config: EvaluationConfig):
    orchestrator = _orchestrator(evaluation_config)
    annotations = orchestrator.load_annotations()
    feature_set = orchestrator.prepare_features(annotations)

    ground_truth = orchestrator.build_ground_truth(annotations, feature_set)

    assert np.flatnonzero(ground_truth.labels == -1).tolist() == [1, 7]
    assert dict(ground_truth.anomaly_groups) == {"A001": frozenset({1}), "A002": frozenset({7})}
    assert ground_truth.unclear_indices == frozenset()


def test_run_fit_predict(evaluation_config: EvaluationConfig):
    """しきい値1.0の分類器で両方の異常を検出し、偽陽性は出ない。"""

    train_metrics, test_metrics = _orchestrator(evaluation_config).run()

    assert train_metrics.has_ground_truth is False
    assert train_metrics.total_frames == 8
    assert train_metrics.fp_frames == 0

    assert test_metrics.total_frames == 4
    assert test_metrics.recall == pytest.approx(1.0)
    assert test_metrics.tp_anomaly_level == 2
    assert test_metrics.recall_anomaly_level == pytest.approx(1.0)
    assert test_metrics.fp_frames_percentage == pytest.approx(0.0)


def test_run_grid_search_writes_csv(evaluation_config: EvaluationConfig):
    results, ranked = _orchestrator(evaluation_config).run(grid_search=True)

    assert [(r.gamma, r.nu) for r in results] == [(0.5, 1.0), (1.0, 1.0), (20.0, 1.0)]
    assert [r.gamma for r in ranked] == [0.5, 1.0, 20.0]
    assert ranked[-1].metrics.tp_anomaly_level == 0

    lines = evaluation_config.grid_search_output_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ";0.5;1;20"
    assert lines[1] == "1;2 / 1.0000 / 0.00;2 / 1.0000 / 0.00;0 / 0.0000 / 0.00"


def test_feature_cache_round_trip(evaluation_config: EvaluationConfig):
    """保存した特徴量キャッシュを読み込む場合は動画を開かない。"""

    saving = evaluation_config.with_overrides(save_features=True)
    _, expected = _orchestrator(saving).run()

    loading = evaluation_config.with_overrides(load_features=True)
    _, actual = _orchestrator(loading, frame_reader_factory=UnavailableFrameReader).run()

    assert actual == expected


def test_cache_mismatch_with_annotations(evaluation_config: EvaluationConfig, annotation_path: Path):
    """キャッシュの異常フレーム数がアノテーションと合わない場合はエラー。"""

    _orchestrator(evaluation_config.with_overrides(save_features=True)).run()

    data = yaml.safe_load(annotation_path.read_text(encoding="utf-8"))
    data["anomaly_frames"].append(102)
    annotation_path.write_text(yaml.safe_dump(data), encoding="utf-8")

    orchestrator = _orchestrator(evaluation_config.with_overrides(load_features=True), UnavailableFrameReader)
    with pytest.raises(ValueError):
        orchestrator.prepare_features(orchestrator.load_annotations())


def test_missing_annotation_file(evaluation_config: EvaluationConfig, tmp_path: Path):
    config = evaluation_config.with_overrides(annotation_path=tmp_path / "missing.yaml")

    with pytest.raises(FileNotFoundError):
        _orchestrator(config).run()
