"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import numpy as np
import pytest

from anomaly_eval.evaluation import AnnotationIndexer, LabelSynthesizer
from anomaly_eval.models import AnnotationSet, AnomalyRegion, GroundTruth, UnclearRegion

SAMPLES_PER_FRAME = 10
CELL_WIDTH = 20


@pytest.fixture
def indexer() -> AnnotationIndexer:
    """10サンプル/フレーム、セル幅20ピクセルのインデクサ"""

    return AnnotationIndexer(cell_width=CELL_WIDTH, samples_per_frame=SAMPLES_PER_FRAME)


@pytest.fixture
def sample_annotations() -> AnnotationSet:
    """異常フレーム3枚、異常ID2種類、判定不明領域2つ（1つは評価対象外フレーム）のアノテーション"""

    return AnnotationSet(
        normal_frames=tuple(range(0, 20)),
        anomaly_frames=(100, 101, 102),
        anomaly_regions=(
            AnomalyRegion(frame=100, x_start=40, x_end=90, anomaly_id="A001"),
            AnomalyRegion(frame=101, x_start=0, x_end=59, anomaly_id="A001"),
            AnomalyRegion(frame=102, x_start=160, x_end=199, anomaly_id="A002"),
        ),
        unclear_regions=(
            UnclearRegion(frame=102, x_start=0, x_end=19),
            UnclearRegion(frame=999, x_start=0, x_end=199),
        ),
    )


@pytest.fixture
def sample_ground_truth(indexer: AnnotationIndexer, sample_annotations: AnnotationSet) -> GroundTruth:
    """sample_annotations から生成した正解ラベル

    異常インデックス: A001 = {2, 3, 4, 10, 11, 12}, A002 = {28, 29}
    除外インデックス: {20}
    """

    return LabelSynthesizer(indexer).synthesize(sample_annotations)


@pytest.fixture
def all_normal() -> np.ndarray:
    """3フレーム分の全サンプル正常の予測"""

    return np.ones(3 * SAMPLES_PER_FRAME, dtype=np.int32)
