# services/search_indexer.py

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from models.options_models import SearchOptions
from models.search_models import (
    IndexConfig,
    IndexEntry,
    IndexStats,
    PageRecord,
    SearchIndex,
)
from services.options import DEFAULT_MAX_CONTENT_LENGTH

logger = logging.getLogger(__name__)

INDEX_VERSION = "1.0.0"
INDEX_GENERATOR = "site-search-index"

# 単語文字・空白・一部の記号以外は落とす
_DISALLOWED_CHARS_RE = re.compile(r"[^\w\s\-.,!?;:'\"()]")
_WS_RE = re.compile(r"\s+")

RecordLike = Union[PageRecord, Mapping[str, Any]]

# wordCount <-> word_count のように、エラー位置のキーと入力キーの表記を対応させる
_KEY_SPELLINGS: Dict[str, str] = {
    **{f.alias: name for name, f in PageRecord.model_fields.items() if f.alias},
    **{name: f.alias for name, f in PageRecord.model_fields.items() if f.alias},
}


# ============================================================
# ユーティリティ
# ============================================================

def clean_text(text: Any, max_length: int = DEFAULT_MAX_CONTENT_LENGTH) -> str:
    """
    検索用にテキストを整形する。

    記号除去 → 空白の圧縮 → trim → max_length で切り詰め（末尾の空白は残さない）。
    記号除去を先にしているので、2 回かけても結果は変わらない。
    """
    if not text or not isinstance(text, str):
        return ""
    text = _DISALLOWED_CHARS_RE.sub("", text)
    text = _WS_RE.sub(" ", text).strip()
    return text[:max_length].rstrip()


def _now_iso() -> str:
    """JS の toISOString() と同じ形（ミリ秒 + Z）の UTC タイムスタンプ。"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _coerce_record(record: RecordLike, index: int) -> Optional[PageRecord]:
    """
    入力 1 件を PageRecord にする。

    mapping 以外は捨てる。mapping で型の合わないフィールドがあれば、
    そのフィールドだけ落として作り直す（レコード自体は落とさない）。
    """
    if isinstance(record, PageRecord):
        return record
    if not isinstance(record, Mapping):
        logger.warning("[search_indexer] skipping non-mapping record #%s: %r", index, record)
        return None

    data = dict(record)
    while True:
        try:
            return PageRecord.model_validate(data)
        except ValidationError as e:
            bad_keys = {err["loc"][0] for err in e.errors() if err["loc"]}
            # 入力は camelCase / snake_case どちらのキーでも来る
            bad_keys |= {_KEY_SPELLINGS.get(k, k) for k in bad_keys}
            present = bad_keys & data.keys()
            if not present:
                logger.warning("[search_indexer] skipping invalid record #%s: %s", index, e)
                return None
            logger.warning(
                "[search_indexer] record #%s: dropping invalid fields %s",
                index,
                sorted(present),
            )
            for key in present:
                del data[key]


def _warn_truncated(records: Sequence[PageRecord], max_length: int) -> None:
    """max_length を超える本文を持つページを列挙して警告する（処理自体は変えない）。"""
    truncated = [r for r in records if len(r.content or "") > max_length]
    if not truncated:
        return

    lines = [
        f"{len(truncated)} page(s) had content truncated to {max_length} chars:",
        *(f"  - {r.url or '/'} ({len(r.content or '')} chars)" for r in truncated),
        "Increase the maxContentLength option to index full content.",
    ]
    logger.warning("[search_indexer] %s", "\n".join(lines))


def _build_entry(record: PageRecord, index: int, max_length: int) -> IndexEntry:
    """
    PageRecord を IndexEntry に変換する。

    optional フィールドは値があるものだけ埋め、空のものは None のままにする
    （シリアライズ時に落ちる）。
    """
    return IndexEntry(
        id=record.id or f"entry-{index}",
        type=record.type or "page",
        url=record.url or "/",
        title=clean_text(record.title, max_length),
        content=clean_text(record.content, max_length),
        description=clean_text(record.description, max_length) or None,
        excerpt=clean_text(record.excerpt, max_length) or None,
        tags=record.tags or None,
        date=record.date or None,
        author=record.author or None,
        headings=record.headings or None,
        score=0,
    )


def generate_index_stats(entries: Sequence[IndexEntry]) -> IndexStats:
    """エントリ数・タイプ別件数・本文長の合計と平均を集計する。"""
    entries_by_type: Dict[str, int] = {}
    total_length = 0

    for entry in entries:
        entries_by_type[entry.type] = entries_by_type.get(entry.type, 0) + 1
        total_length += len(entry.content)

    # JS の Math.round と同じく .5 は切り上げ
    average = math.floor(total_length / len(entries) + 0.5) if entries else 0
    return IndexStats(
        total_entries=len(entries),
        entries_by_type=entries_by_type,
        total_content_length=total_length,
        average_content_length=average,
    )


# ============================================================
# メインロジック
# ============================================================

def create_search_index(
    records: Optional[Sequence[RecordLike]],
    options: SearchOptions,
) -> SearchIndex:
    """
    抽出済みレコード群から検索インデックス全体を組み立てる。

    - records が None / 空なら空のインデックス（stats はすべて 0）
    - entries の順序は入力順のまま
    - config.fuseOptions は options からそのまま渡す
    """
    max_length = options.max_content_length or DEFAULT_MAX_CONTENT_LENGTH

    entries: List[IndexEntry] = []
    if records:
        indexed = [(i, _coerce_record(r, i)) for i, r in enumerate(records)]
        valid = [(i, r) for i, r in indexed if r is not None]

        _warn_truncated([r for _, r in valid], max_length)
        entries = [_build_entry(r, i, max_length) for i, r in valid]

    stats = generate_index_stats(entries)
    logger.info(
        "[search_indexer] built index: entries=%s total_content_length=%s",
        stats.total_entries,
        stats.total_content_length,
    )

    return SearchIndex(
        version=INDEX_VERSION,
        generator=INDEX_GENERATOR,
        generated=_now_iso(),
        total_entries=len(entries),
        config=IndexConfig(fuse_options=dict(options.fuse_options)),
        stats=stats,
        entries=entries,
    )
