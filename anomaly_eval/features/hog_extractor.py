"""HOG feature extraction over fixed-width vertical cells."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import Optional

import cv2
import numpy as np

from anomaly_eval.data.matrix import stack_samples

logger = logging.getLogger(__name__)


class HogFeatureExtractor:
    """フレームを幅 cell_width の縦長セルに分割し、セルごとにHOG特徴量を計算するクラス

    1セルが特徴量行列の1行（サンプル）になる。フレーム右端の幅に満たない列は使用しない。
    高さは HOG ブロックが収まる最大の高さに切り詰める。

    Attributes:
        cell_width: 1サンプルあたりの幅（ピクセル）
        hog_cell_size: HOGのセルサイズ（ピクセル）
        block_size: HOGのブロックサイズ（ピクセル）
        block_stride: HOGのブロック移動量（ピクセル）
        nbins: 勾配方向ヒストグラムのビン数
        frame_shape: fit 時に記録したフレーム形状 (H, W)
    """

    def __init__(
        self,
        cell_width: int = 16,
        hog_cell_size: int = 8,
        block_size: int = 16,
        block_stride: int = 8,
        nbins: int = 9,
    ):
        if block_size % hog_cell_size != 0:
            raise ValueError(f"block_size ({block_size}) は hog_cell_size ({hog_cell_size}) の倍数である必要があります")
        if cell_width < block_size or (cell_width - block_size) % block_stride != 0:
            raise ValueError(
                f"cell_width ({cell_width}) は block_size ({block_size}) 以上で、"
                f"差が block_stride ({block_stride}) の倍数である必要があります"
            )

        self.cell_width = cell_width
        self.hog_cell_size = hog_cell_size
        self.block_size = block_size
        self.block_stride = block_stride
        self.nbins = nbins
        self.frame_shape: Optional[tuple[int, int]] = None
        self._window_height: Optional[int] = None
        self._hog: Optional[cv2.HOGDescriptor] = None

    @property
    def samples_per_frame(self) -> int:
        if self.frame_shape is None:
            raise RuntimeError("特徴量抽出器が未学習です。先にfit()を呼び出してください。")
        return self.frame_shape[1] // self.cell_width

    def fit(self, frame_shape: tuple[int, int]) -> HogFeatureExtractor:
        """フレーム形状を記録し、HOG記述子を構築する

        Args:
            frame_shape: フレーム形状 (H, W)
        """
        height, width = frame_shape[:2]
        if height < self.block_size:
            raise ValueError(f"フレームの高さ {height} が block_size {self.block_size} より小さいです")
        if width < self.cell_width:
            raise ValueError(f"フレームの幅 {width} が cell_width {self.cell_width} より小さいです")

        self.frame_shape = (height, width)
        self._window_height = self.block_size + ((height - self.block_size) // self.block_stride) * self.block_stride
        self._hog = cv2.HOGDescriptor(
            (self.cell_width, self._window_height),
            (self.block_size, self.block_size),
            (self.block_stride, self.block_stride),
            (self.hog_cell_size, self.hog_cell_size),
            self.nbins,
        )

        logger.info(
            f"HOG特徴量抽出器を初期化しました - フレーム: {width}x{height}, "
            f"セル幅: {self.cell_width}, サンプル数/フレーム: {self.samples_per_frame}, "
            f"特徴量次元: {self._hog.getDescriptorSize()}"
        )
        return self

    def _transform_frame(self, frame: np.ndarray) -> list[np.ndarray]:
        if frame.shape[:2] != self.frame_shape:
            raise ValueError(f"フレーム形状が学習時と異なります: {frame.shape[:2]} (期待: {self.frame_shape})")

        if frame.ndim == 3:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        if frame.dtype != np.uint8:
            frame = frame.astype(np.uint8)

        samples = []
        for i in range(self.samples_per_frame):
            x = i * self.cell_width
            strip = np.ascontiguousarray(frame[: self._window_height, x : x + self.cell_width])
            samples.append(self._hog.compute(strip))
        return samples

    def transform(self, frames: Iterable[np.ndarray]) -> np.ndarray:
        """フレーム列を特徴量行列に変換する

        Args:
            frames: fit 時と同じ形状のフレーム

        Returns:
            (フレーム数 * samples_per_frame, 特徴量次元) の行列
        """
        if self._hog is None:
            raise RuntimeError("特徴量抽出器が未学習です。先にfit()を呼び出してください。")

        samples: list[np.ndarray] = []
        for frame in frames:
            samples.extend(self._transform_frame(frame))
        return stack_samples(samples)

    def fit_transform(self, frames: Iterable[np.ndarray]) -> np.ndarray:
        """先頭フレームの形状で fit し、全フレームを変換する"""
        iterator = iter(frames)
        first = next(iterator, None)
        if first is None:
            raise ValueError("特徴量抽出の対象フレームがありません")

        self.fit(first.shape)
        samples = self._transform_frame(first)
        for frame in iterator:
            samples.extend(self._transform_frame(frame))
        return stack_samples(samples)
