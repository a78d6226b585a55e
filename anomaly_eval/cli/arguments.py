"""Command-line argument parsing."""

import argparse


def parse_arguments() -> argparse.Namespace:
    """コマンドライン引数をパースする

    Returns:
        パース済み引数
    """
    parser = argparse.ArgumentParser(description="セル単位の映像異常検知 - 1クラスSVMの評価とハイパーパラメータ探索")

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="設定ファイルのパス（デフォルト: config.yaml）",
    )

    parser.add_argument("--debug", action="store_true", help="デバッグモードで実行（詳細ログ）")

    parser.add_argument(
        "--grid-search", action="store_true", help="gamma / nu のグリッドサーチを実行（指定しない場合は単一の学習・評価）"
    )

    parser.add_argument("--save-features", action="store_true", help="抽出した特徴量をキャッシュに保存")

    parser.add_argument("--load-features", action="store_true", help="特徴量をキャッシュから読み込み、抽出を省略")

    return parser.parse_args()
