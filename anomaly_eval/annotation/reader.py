"""Annotation file reader."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from anomaly_eval.models.data_models import AnnotationSet, AnomalyRegion, UnclearRegion

logger = logging.getLogger(__name__)


def _load_document(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    with path.open(encoding="utf-8") as f:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"サポートされないアノテーション形式です: {suffix}")

    if not isinstance(data, dict):
        raise ValueError("アノテーションファイルは辞書形式である必要があります")
    return data


def _frame_list(data: dict[str, Any], key: str) -> tuple[int, ...]:
    frames = data.get(key, [])
    if not isinstance(frames, list):
        raise ValueError(f"{key} はリストである必要があります")
    if not all(isinstance(frame, int) and not isinstance(frame, bool) for frame in frames):
        raise ValueError(f"{key} の要素は整数である必要があります")
    return tuple(frames)


def _region_fields(entry: Any, key: str, index: int) -> tuple[int, int, int]:
    if not isinstance(entry, dict):
        raise ValueError(f"{key}[{index}] は辞書である必要があります")
    try:
        return int(entry["frame"]), int(entry["x_start"]), int(entry["x_end"])
    except KeyError as e:
        raise ValueError(f"{key}[{index}] には {e} が必要です") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key}[{index}] の値が不正です: {e}") from e


def parse_annotations(data: dict[str, Any]) -> AnnotationSet:
    """辞書からアノテーションを構築する

    Raises:
        ValueError: 形式が不正な場合
    """
    anomaly_regions = []
    for i, entry in enumerate(data.get("anomaly_regions", []) or []):
        frame, x_start, x_end = _region_fields(entry, "anomaly_regions", i)
        anomaly_id = entry.get("anomaly_id")
        if anomaly_id is None or anomaly_id == "":
            raise ValueError(f"anomaly_regions[{i}] には 'anomaly_id' が必要です")
        anomaly_regions.append(AnomalyRegion(frame, x_start, x_end, str(anomaly_id)))

    unclear_regions = []
    for i, entry in enumerate(data.get("unclear_regions", []) or []):
        unclear_regions.append(UnclearRegion(*_region_fields(entry, "unclear_regions", i)))

    return AnnotationSet(
        normal_frames=_frame_list(data, "normal_frames"),
        anomaly_frames=_frame_list(data, "anomaly_frames"),
        anomaly_regions=tuple(anomaly_regions),
        unclear_regions=tuple(unclear_regions),
    )


def read_annotations(path: str | Path) -> AnnotationSet:
    """YAML/JSON のアノテーションファイルを読み込む

    Args:
        path: アノテーションファイルのパス

    Returns:
        AnnotationSet

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: 形式が不正な場合
    """
    annotation_path = Path(path)
    if not annotation_path.exists():
        raise FileNotFoundError(f"アノテーションファイルが見つかりません: {annotation_path}")

    try:
        data = _load_document(annotation_path)
    except yaml.YAMLError as e:
        raise ValueError(f"YAML解析エラー: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON解析エラー: {e}") from e

    annotations = parse_annotations(data)
    logger.info(f"アノテーションを読み込みました: {annotation_path}")
    logger.info(
        f"正常フレーム数: {len(annotations.normal_frames)}, 異常フレーム数: {len(annotations.anomaly_frames)}, "
        f"異常領域数: {len(annotations.anomaly_regions)}, 判定不明領域数: {len(annotations.unclear_regions)}"
    )
    return annotations
