"""Frame identifier to block position lookup."""

from __future__ import annotations

from collections.abc import Iterable


class FrameIndex:
    """フレームIDから順序付きフレーム列内の位置を引く逆引きテーブル

    同じIDが複数回現れる場合は最初の位置を返す。
    """

    def __init__(self, frame_ids: Iterable[int]):
        """
        Args:
            frame_ids: 時系列順のフレームID列
        """
        self._positions: dict[int, int] = {}
        self._length = 0
        for position, frame_id in enumerate(frame_ids):
            self._positions.setdefault(frame_id, position)
            self._length += 1

    def position(self, frame_id: int) -> int | None:
        """フレームIDのゼロ始まりの位置を返す。見つからない場合はNone"""
        return self._positions.get(frame_id)

    def __contains__(self, frame_id: object) -> bool:
        return frame_id in self._positions

    def __len__(self) -> int:
        return self._length
