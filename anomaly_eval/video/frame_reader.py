"""Random-access grayscale frame reader."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import logging
import os
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class VideoFrameReader:
    """フレームIDを指定して動画からグレースケールフレームを読み出すクラス

    フレームIDは動画先頭からの0始まりのフレーム番号とする。

    Attributes:
        video_path: 動画ファイルのパス
        cap: OpenCVのVideoCaptureオブジェクト
        total_frames: 総フレーム数
        width: 動画の幅
        height: 動画の高さ
    """

    def __init__(self, video_path: str):
        self.video_path = video_path
        self.cap: Optional[cv2.VideoCapture] = None
        self.total_frames: Optional[int] = None
        self.width: Optional[int] = None
        self.height: Optional[int] = None

    def open(self) -> None:
        """動画ファイルを開く

        Raises:
            FileNotFoundError: 動画ファイルが存在しない場合
            RuntimeError: 動画ファイルを開けなかった場合
        """
        if not os.path.exists(self.video_path):
            raise FileNotFoundError(f"動画ファイルが見つかりません: {self.video_path}")

        self.cap = cv2.VideoCapture(self.video_path)
        if not self.cap.isOpened():
            self.cap = None
            raise RuntimeError(f"動画ファイルを開けませんでした: {self.video_path}")

        self.total_frames = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        logger.info(f"動画ファイルを開きました: {self.video_path}")
        logger.info(f"  解像度: {self.width}x{self.height}, 総フレーム数: {self.total_frames}")

    def read_frame(self, frame_id: int) -> np.ndarray:
        """指定フレームをグレースケールで取得する

        Args:
            frame_id: フレーム番号（0始まり）

        Returns:
            (H, W) の uint8 配列

        Raises:
            RuntimeError: 動画が開かれていない、または読み込みに失敗した場合
            ValueError: フレーム番号が範囲外の場合
        """
        if self.cap is None:
            raise RuntimeError("動画ファイルが開かれていません。先にopen()を呼び出してください。")

        if frame_id < 0 or (self.total_frames and frame_id >= self.total_frames):
            raise ValueError(f"フレーム番号が範囲外です: {frame_id} (総フレーム数: {self.total_frames})")

        # 直前に読んだフレームの次であればシークを省略する
        if int(self.cap.get(cv2.CAP_PROP_POS_FRAMES)) != frame_id:
            self.cap.set(cv2.CAP_PROP_POS_FRAMES, frame_id)

        ret, frame = self.cap.read()
        if not ret or frame is None:
            raise RuntimeError(f"フレーム {frame_id} の読み込みに失敗しました")

        if frame.ndim == 3:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        return frame

    def iter_frames(self, frame_ids: Iterable[int]) -> Iterator[np.ndarray]:
        """指定順にフレームを返すジェネレータ"""
        for frame_id in frame_ids:
            yield self.read_frame(frame_id)

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.debug("動画リソースを解放しました")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
