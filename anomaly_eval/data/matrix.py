"""Feature matrix assembly helpers."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def stack_samples(vectors: Sequence[np.ndarray]) -> np.ndarray:
    """サンプルごとの特徴量ベクトルを (サンプル数, 特徴量次元) の行列にまとめる

    Args:
        vectors: 1次元に平坦化できる特徴量ベクトルのリスト

    Returns:
        float32 の2次元行列

    Raises:
        ValueError: 特徴量の次元がサンプル間で一致しない場合
    """
    if len(vectors) == 0:
        return np.empty((0, 0), dtype=np.float32)

    rows = [np.asarray(v, dtype=np.float32).ravel() for v in vectors]
    width = rows[0].size
    for i, row in enumerate(rows):
        if row.size != width:
            raise ValueError(f"特徴量の次元が一致しません: サンプル {i} は {row.size} 次元 (期待: {width})")

    return np.vstack(rows)


def samples_per_frame(n_rows: int, n_frames: int) -> int:
    """特徴量行列の行数とフレーム数から1フレームあたりのサンプル数を求める

    Raises:
        ValueError: フレーム数が0、または行数がフレーム数で割り切れない場合
    """
    if n_frames <= 0:
        raise ValueError(f"フレーム数は正である必要があります: {n_frames}")
    if n_rows % n_frames != 0:
        raise ValueError(f"特徴量行数 {n_rows} がフレーム数 {n_frames} で割り切れません")
    return n_rows // n_frames
