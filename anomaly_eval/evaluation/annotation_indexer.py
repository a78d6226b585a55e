"""Pixel-space annotation to sample index conversion."""

from __future__ import annotations


class AnnotationIndexer:
    """ピクセル座標の領域をサンプルインデックスの範囲に変換するクラス

    特徴量抽出器はフレームを幅 cell_width の縦長セルに分割し、
    セルごとに1サンプルを出力する。右端の幅に満たない列は切り捨てられる。

    Attributes:
        cell_width: 1サンプルあたりの幅（ピクセル）
        samples_per_frame: 1フレームあたりのサンプル数
    """

    def __init__(self, cell_width: int, samples_per_frame: int):
        if cell_width <= 0:
            raise ValueError(f"cell_width は正の整数である必要があります: {cell_width}")
        if samples_per_frame <= 0:
            raise ValueError(f"samples_per_frame は正の整数である必要があります: {samples_per_frame}")
        self.cell_width = cell_width
        self.samples_per_frame = samples_per_frame

    def cell_range(self, x_start: int, x_end: int) -> tuple[int, int]:
        """フレーム内のセル範囲 [start_idx, end_idx) を計算

        x_end を含むセルまでを範囲に含め、切り捨てられた右端セルを超えないよう
        samples_per_frame で打ち切る。

        Args:
            x_start: 開始x座標（ピクセル）
            x_end: 終了x座標（ピクセル）

        Returns:
            (start_idx, end_idx)。start_idx >= end_idx の場合は空範囲
        """
        start_idx = x_start // self.cell_width
        end_idx = min(self.samples_per_frame, x_end // self.cell_width + 1)
        return start_idx, end_idx

    def sample_range(self, frame_position: int, x_start: int, x_end: int) -> range:
        """連結されたラベルベクトル上の絶対インデックス範囲を返す

        Args:
            frame_position: フレーム列内でのフレームの位置
            x_start: 開始x座標（ピクセル）
            x_end: 終了x座標（ピクセル）

        Returns:
            インデックスの range（空の場合もある）
        """
        start_idx, end_idx = self.cell_range(x_start, x_end)
        offset = frame_position * self.samples_per_frame
        if start_idx >= end_idx:
            return range(offset, offset)
        return range(offset + start_idx, offset + end_idx)
