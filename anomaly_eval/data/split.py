"""Train/test split of normal frames."""

from __future__ import annotations

from collections.abc import Sequence
import logging

import numpy as np

logger = logging.getLogger(__name__)


def split_normal_frames(
    normal_frames: Sequence[int],
    n_test: int,
    seed: int = 42,
) -> tuple[list[int], list[int]]:
    """正常フレームを学習用とテスト用に分割する

    正常フレームをシャッフルし、先頭 n_test 個をテスト用とする。
    学習用は残りのフレームを元の時系列順のまま返す。

    Args:
        normal_frames: 時系列順の正常フレームID
        n_test: テスト用に取り出すフレーム数（通常は異常フレーム数と同数）
        seed: 乱数シード

    Returns:
        (学習用フレームID, テスト用フレームID)
    """
    if n_test < 0:
        raise ValueError(f"n_test は非負である必要があります: {n_test}")

    rng = np.random.default_rng(seed)
    order = rng.permutation(len(normal_frames))
    test_frames = [normal_frames[i] for i in order[:n_test]]

    test_set = set(test_frames)
    train_frames = [frame for frame in normal_frames if frame not in test_set]

    if not train_frames:
        raise ValueError(
            f"学習用の正常フレームがありません (正常フレーム数: {len(normal_frames)}, テスト用: {len(test_frames)})"
        )

    logger.info(f"正常フレームを分割しました - 学習: {len(train_frames)}, テスト: {len(test_frames)} (seed={seed})")
    return train_frames, test_frames
