# models/options_models.py

from __future__ import annotations

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

DEFAULT_MAX_CONTENT_LENGTH = 10000


class SearchOptions(BaseModel):
    """
    1 回のインデックス生成で使う、正規化済みのオプション。

    services.options.normalize_options() 経由で生成する前提。
    生成後は変更しない（frozen）。抽出処理間で読み取り専用として共有される。

    Attributes:
        pattern (str): 出力ディレクトリ内の HTML を探す glob。
        ignore (Tuple[str, ...]): 除外する glob。
        index_path (str): 出力ディレクトリからの相対パス（インデックス JSON）。
        exclude_selectors (Tuple[str, ...]): 抽出前に取り除く CSS セレクタ。
        max_content_length (int): title / content を切り詰める文字数。
        fuse_options (Dict[str, Any]): クライアント側 Fuse.js の設定（素通し）。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",  # 未知のキーも保持する（解釈はしない）
    )

    pattern: str = "**/*.html"
    ignore: Tuple[str, ...] = ()
    index_path: str = "search-index.json"
    exclude_selectors: Tuple[str, ...] = ()
    max_content_length: PositiveInt = DEFAULT_MAX_CONTENT_LENGTH
    fuse_options: Dict[str, Any] = Field(default_factory=dict)
