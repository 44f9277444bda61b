# app/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。

    インデックス生成そのもののオプション（pattern, excludeSelectors など）は
    services.options.normalize_options() 側で扱う。ここは実行時のフラグだけ。
    """

    # ---------- ログ ----------
    # SEARCH_DEBUG=true で DEBUG ログ（抽出の詳細）を出す
    search_debug: bool = False

    # ---------- 抽出 ----------
    # 1 以下なら直列で処理する
    extract_max_workers: int = 4

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
