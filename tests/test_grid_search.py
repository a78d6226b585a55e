"""Unit tests for GridSearchDriver."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from anomaly_eval.adapters.fakes import FailingClassifier, FakeClassifier
from anomaly_eval.evaluation import GridSearchDriver, format_grid_cell
from anomaly_eval.models import EvaluationMetrics, FeatureSet, GridSearchResult, GroundTruth

GAMMA_VALUES = [0.1, 1.0, 10.0]
NU_VALUES = [0.01, 1.0]


@pytest.fixture
def feature_set(sample_ground_truth: GroundTruth) -> FeatureSet:
    """FakeClassifier（先頭列 > gamma * nu を異常）向けの特徴量

    A001 の2フレーム目 (10, 11, 12) は 0.8、その他の異常サンプルは 5.0、
    正常テストブロックの先頭サンプルのみ 0.5。
    """

    x_test_anomaly = np.zeros((30, 2), dtype=np.float32)
    x_test_anomaly[[2, 3, 4, 28, 29], 0] = 5.0
    x_test_anomaly[[10, 11, 12], 0] = 0.8
    x_test_normal = np.zeros((30, 2), dtype=np.float32)
    x_test_normal[0, 0] = 0.5

    return FeatureSet(
        x_train=np.zeros((50, 2), dtype=np.float32),
        x_test_normal=x_test_normal,
        x_test_anomaly=x_test_anomaly,
        samples_per_frame=10,
        cell_width=20,
    )


@pytest.fixture
def driver() -> GridSearchDriver:
    return GridSearchDriver(FakeClassifier, GAMMA_VALUES, NU_VALUES)


@pytest.fixture
def results(driver: GridSearchDriver, feature_set: FeatureSet, sample_ground_truth: GroundTruth):
    return driver.run(feature_set, sample_ground_truth)


def _find(results: list[GridSearchResult], gamma: float, nu: float) -> GridSearchResult:
    return next(r for r in results if r.gamma == gamma and r.nu == nu)


def test_run_evaluates_every_combination(results: list[GridSearchResult]):
    """nu を外側、gamma を内側の順で全組み合わせを評価する。"""

    assert [(r.nu, r.gamma) for r in results] == [(nu, gamma) for nu in NU_VALUES for gamma in GAMMA_VALUES]


def test_run_creates_new_classifier_per_combination(feature_set: FeatureSet, sample_ground_truth: GroundTruth):
    """組み合わせごとに新しい分類器を生成して学習する。"""

    created: list[FakeClassifier] = []

    def factory() -> FakeClassifier:
        classifier = FakeClassifier()
        created.append(classifier)
        return classifier

    GridSearchDriver(factory, GAMMA_VALUES, NU_VALUES).run(feature_set, sample_ground_truth)

    assert len(created) == 6
    assert all(len(classifier.fit_calls) == 1 for classifier in created)
    assert created[0].fit_calls == [(0.1, 0.01)]


def test_run_metrics_per_combination(results: list[GridSearchResult]):
    strict = _find(results, 1.0, 1.0).metrics
    assert strict.tp_anomaly_level == 2
    assert strict.recall == pytest.approx(5 / 8)
    assert strict.fp_frames == 0

    loose = _find(results, 0.1, 0.01).metrics
    assert loose.recall == 1.0
    assert loose.fp_frames == 1
    assert loose.fp_frames_percentage == pytest.approx(100 / 6)

    blind = _find(results, 10.0, 1.0).metrics
    assert blind.tp_anomaly_level == 0
    assert blind.recall == 0.0


def test_grid_table_shape_and_cells(driver: GridSearchDriver, results: list[GridSearchResult]):
    """行が nu、列が gamma の要約表を作る。"""

    table = driver.build_grid_table(results)

    assert table.shape == (len(NU_VALUES), len(GAMMA_VALUES))
    assert list(table.index) == ["0.01", "1"]
    assert list(table.columns) == ["0.1", "1", "10"]
    assert table.loc["1", "1"] == "2 / 0.6250 / 0.00"
    assert table.loc["0.01", "0.1"] == "2 / 1.0000 / 16.67"


def test_export_grid_csv(tmp_path: Path, driver: GridSearchDriver, results: list[GridSearchResult]):
    """先頭行は空セルと gamma、以降 nu ごとに1行のCSVを出力する。"""

    output_path = driver.export_grid_csv(results, tmp_path / "out" / "grid.csv")

    lines = output_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ";0.1;1;10"
    assert len(lines) == 1 + len(NU_VALUES)
    assert lines[2].startswith("1;")

    loaded = pd.read_csv(output_path, sep=";", index_col=0, dtype=str)
    assert loaded.shape == (len(NU_VALUES), len(GAMMA_VALUES))


def test_export_grid_csv_custom_separator(tmp_path: Path, driver: GridSearchDriver, results: list[GridSearchResult]):
    output_path = driver.export_grid_csv(results, tmp_path / "grid.tsv", separator="\t")

    assert output_path.read_text(encoding="utf-8").splitlines()[0] == "\t0.1\t1\t10"


def test_rank_results_orders_by_anomaly_tp_then_recall(driver: GridSearchDriver, results: list[GridSearchResult]):
    ranked = driver.rank_results(results)

    assert len(ranked) == 6
    assert all(r.metrics.recall == 1.0 for r in ranked[:4])
    assert (ranked[4].gamma, ranked[4].nu) == (1.0, 1.0)
    assert (ranked[5].gamma, ranked[5].nu) == (10.0, 1.0)


def test_rank_results_filters_by_fp_threshold(feature_set: FeatureSet, sample_ground_truth: GroundTruth):
    """偽陽性フレーム率が上限以上の組み合わせは除外する。"""

    driver = GridSearchDriver(FakeClassifier, GAMMA_VALUES, NU_VALUES, max_fp_frames_percentage=10.0)
    results = driver.run(feature_set, sample_ground_truth)

    ranked = driver.rank_results(results)

    assert [(r.gamma, r.nu) for r in ranked] == [(1.0, 1.0), (10.0, 1.0)]


def test_rank_results_threshold_is_exclusive():
    metrics = EvaluationMetrics(
        fp_frames=1, total_frames=2, fp_frames_percentage=50.0,
        true_positives=1, false_negatives=0, recall=1.0,
        tp_anomaly_level=1, anomaly_count=1, recall_anomaly_level=1.0,
    )
    driver = GridSearchDriver(FakeClassifier, [1.0], [0.1])

    assert driver.rank_results([GridSearchResult(gamma=1.0, nu=0.1, metrics=metrics)]) == []


def test_report_logs_ranked_results(driver: GridSearchDriver, results: list[GridSearchResult], caplog):
    with caplog.at_level("INFO"):
        ranked = driver.report(results)

    assert len(ranked) == 6
    assert "gamma=10, nu=1" in caplog.text


def test_classifier_failure_aborts_sweep(feature_set: FeatureSet, sample_ground_truth: GroundTruth):
    driver = GridSearchDriver(FailingClassifier, GAMMA_VALUES, NU_VALUES)

    with pytest.raises(RuntimeError):
        driver.run(feature_set, sample_ground_truth)


def test_empty_grid_rejected():
    with pytest.raises(ValueError):
        GridSearchDriver(FakeClassifier, [], [0.1])


def test_format_grid_cell():
    metrics = EvaluationMetrics(
        fp_frames=1, total_frames=3, fp_frames_percentage=33.3333,
        true_positives=3, false_negatives=1, recall=0.75,
        tp_anomaly_level=4, anomaly_count=5, recall_anomaly_level=0.8,
    )

    assert format_grid_cell(metrics) == "4 / 0.7500 / 33.33"


@pytest.mark.parametrize(
    ("gamma_values", "nu_values"),
    [
        ([1.0000001, 1.0000002], [0.1]),
        ([0.1], [0.01, 0.0100000001]),
    ],
)
def test_colliding_grid_labels_rejected(gamma_values, nu_values):
    """表示ラベルが同じになる値を含むグリッドは要約表のセルが衝突するため拒否する。"""

    with pytest.raises(ValueError, match="重複"):
        GridSearchDriver(FakeClassifier, gamma_values, nu_values)
