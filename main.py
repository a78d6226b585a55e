#!/usr/bin/env python
"""
セル単位の映像異常検知評価 - メインエントリーポイント

正常フレームのHOG特徴量で1クラスSVMを学習し、
アノテーションから生成した正解ラベルに対して
サンプル単位・フレーム単位・異常単位の指標を計算します。
"""

import logging
import sys

from anomaly_eval.cli import parse_arguments
from anomaly_eval.config import ConfigManager, EvaluationConfig
from anomaly_eval.pipeline import EvaluationOrchestrator
from anomaly_eval.utils import setup_logging


def main():
    """メイン処理"""
    args = parse_arguments()

    # 初期ロギング設定（設定ファイル読み込み前）
    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    logger.info("=" * 80)
    logger.info("映像異常検知評価 起動")
    logger.info("=" * 80)

    try:
        logger.info(f"設定ファイルを読み込んでいます: {args.config}")
        config = ConfigManager(args.config)
        config.validate()

        # コマンドライン引数で設定を上書き
        if args.debug:
            config.set("output.debug_mode", True)
        if args.save_features:
            config.set("cache.save", True)
        if args.load_features:
            config.set("cache.load", True)

        evaluation_config = EvaluationConfig.from_config(config)

        # ロギングを再設定（出力ディレクトリを反映）
        setup_logging(evaluation_config.debug_mode, str(evaluation_config.output_dir))
        logger = logging.getLogger(__name__)

        orchestrator = EvaluationOrchestrator(evaluation_config, logger)
        orchestrator.run(grid_search=args.grid_search)

        logger.info("=" * 80)
        logger.info("処理が正常に完了しました")
        if args.grid_search:
            logger.info(f"グリッドサーチ結果: {evaluation_config.grid_search_output_path.absolute()}")
        logger.info("=" * 80)

        return 0

    except FileNotFoundError as e:
        logger.error(f"ファイルが見つかりません: {e}")
        return 1
    except ValueError as e:
        logger.error(f"設定・入力データエラー: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("処理が中断されました")
        return 130
    except Exception as e:
        logger.error(f"予期しないエラーが発生しました: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
