# models/search_models.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """
    JSON 上は camelCase（wordCount, totalEntries ...）、
    Python 側では snake_case で扱うための共通ベース。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HeadingAnchor(_CamelModel):
    """
    ページ内見出し 1 件分のアンカー情報。
    クライアント側の scroll-to で使う。

    - level: 見出しタグ名 ("h1"〜"h6")
    - id: 見出し要素の id 属性（ページ内で一意）
    - title: 見出しテキスト
    """

    level: str
    id: str
    title: str

    @field_validator("level", mode="before")
    @classmethod
    def _level_as_tag_name(cls, value: Any) -> Any:
        # 2 のような数値レベルは "h2" にそろえる
        if isinstance(value, int) and not isinstance(value, bool):
            return f"h{value}"
        return value

    @field_validator("id", "title", mode="before")
    @classmethod
    def _text_as_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class SourcePage(BaseModel):
    """
    抽出対象の入力 1 件。
    path は出力ディレクトリからの相対パス（例: "blog/post.html"）。
    """

    path: str
    html: str


class PageRecord(_CamelModel):
    """
    1 ページ分の検索用レコード。
    ContentExtractor が生成し、SearchIndexer が IndexEntry に変換する。

    id / type / url は他の生成元から来たレコードでは欠けている場合があるため Optional。
    description / tags / date / author は抽出器では埋めないが、入力としては受け付ける。
    """

    id: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    title: str = ""
    content: str = ""
    excerpt: Optional[str] = None
    headings: List[HeadingAnchor] = Field(default_factory=list)
    word_count: int = 0

    description: Optional[str] = None
    tags: Optional[List[str]] = None
    date: Optional[Union[datetime, str]] = None
    author: Optional[str] = None

    # ---- 他の生成元からの入力をゆるく受け付ける ----

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_list(cls, value: Any) -> Any:
        """文字列 1 つなら 1 要素のリストにする。"""
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(t) for t in value if t is not None]
        return value

    @field_validator("headings", mode="before")
    @classmethod
    def _headings_as_list(cls, value: Any) -> Any:
        return [] if value is None else value


class IndexEntry(_CamelModel):
    """
    インデックスに格納される 1 エントリ。
    None のフィールドはシリアライズ時に落とす（null / 空値を出力しない）。
    """

    id: str
    type: str
    url: str
    title: str
    content: str
    description: Optional[str] = None
    excerpt: Optional[str] = None
    tags: Optional[List[str]] = None
    date: Optional[Union[datetime, str]] = None
    author: Optional[str] = None
    headings: Optional[List[HeadingAnchor]] = None

    # クライアント側のランキング用に予約（ここでは計算しない）
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IndexStats(_CamelModel):
    total_entries: int = 0
    entries_by_type: Dict[str, int] = Field(default_factory=dict)
    total_content_length: int = 0
    average_content_length: int = 0


class IndexConfig(_CamelModel):
    """クライアントが Fuse.js を組み立て直すための設定（中身には触れない）。"""

    fuse_options: Dict[str, Any] = Field(default_factory=dict)


class SearchIndex(_CamelModel):
    """
    最終的に JSON として書き出される検索インデックス全体。

    total_entries / stats.total_entries / len(entries) は常に一致する。
    """

    version: str
    generator: str
    generated: str
    total_entries: int
    config: IndexConfig
    stats: IndexStats
    entries: List[IndexEntry] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """空の optional フィールドを除いた、JSON にそのまま渡せる dict を返す。"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
