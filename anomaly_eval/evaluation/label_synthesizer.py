"""Ground truth label synthesis from pixel-space annotations."""

from __future__ import annotations

import logging
from types import MappingProxyType

import numpy as np

from anomaly_eval.evaluation.annotation_indexer import AnnotationIndexer
from anomaly_eval.evaluation.frame_index import FrameIndex
from anomaly_eval.models.data_models import LABEL_ANOMALY, LABEL_NORMAL, AnnotationSet, GroundTruth

logger = logging.getLogger(__name__)


class LabelSynthesizer:
    """異常フレームブロックの正解ラベルを生成するクラス

    全サンプルを正常で初期化し、アノテーションされた異常領域のみを異常に上書きする。
    異常フレームであってもアノテーション範囲外は見た目上正常であるため。

    Attributes:
        indexer: 領域 -> インデックス範囲の変換器
    """

    def __init__(self, indexer: AnnotationIndexer):
        self.indexer = indexer

    def synthesize(self, annotations: AnnotationSet) -> GroundTruth:
        """ラベルベクトル、異常IDごとのインデックス集合、除外インデックス集合を生成

        Args:
            annotations: アノテーション

        Returns:
            GroundTruth（生成後は変更不可）

        Raises:
            ValueError: 異常領域のフレームが異常フレーム列に存在しない場合
        """
        samples_per_frame = self.indexer.samples_per_frame
        frame_index = FrameIndex(annotations.anomaly_frames)

        labels = np.full(len(frame_index) * samples_per_frame, LABEL_NORMAL, dtype=np.int32)
        groups: dict[str, set[int]] = {}

        for region in annotations.anomaly_regions:
            position = frame_index.position(region.frame)
            if position is None:
                raise ValueError(
                    f"異常領域のフレームが異常フレーム列に存在しません: "
                    f"frame={region.frame}, anomaly_id={region.anomaly_id}"
                )

            indices = self.indexer.sample_range(position, region.x_start, region.x_end)
            for i in indices:
                labels[i] = LABEL_ANOMALY
                groups.setdefault(region.anomaly_id, set()).add(i)

        unclear_indices: set[int] = set()
        for region in annotations.unclear_regions:
            if region.frame not in frame_index:
                logger.debug(f"評価対象外フレームの判定不明領域をスキップします: frame={region.frame}")
                continue
            position = frame_index.position(region.frame)
            unclear_indices.update(self.indexer.sample_range(position, region.x_start, region.x_end))

        labels.setflags(write=False)

        logger.info(
            f"正解ラベル生成完了 - サンプル数: {len(labels)}, "
            f"異常サンプル数: {int(np.count_nonzero(labels == LABEL_ANOMALY))}, "
            f"異常ID数: {len(groups)}, 除外サンプル数: {len(unclear_indices)}"
        )

        return GroundTruth(
            labels=labels,
            anomaly_groups=MappingProxyType({anomaly_id: frozenset(idx) for anomaly_id, idx in groups.items()}),
            unclear_indices=frozenset(unclear_indices),
            samples_per_frame=samples_per_frame,
        )
