# agents/extractor_agent.py

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from app.config import settings
from models.options_models import SearchOptions
from models.search_models import PageRecord, SourcePage
from services.content_extractor import extract_searchable_content

logger = logging.getLogger(__name__)


def _extract_one(page: SourcePage, options: SearchOptions) -> List[PageRecord]:
    """
    1 ページ分の抽出。
    ここで失敗しても他のページには影響させない（空リスト扱い）。
    """
    try:
        records = extract_searchable_content(page.html, page.path, options)
    except Exception as e:
        logger.warning("[extractor_agent] Error for %s: %s", page.path, e)
        return []

    logger.debug("[extractor_agent] processed %s (%s entries)", page.path, len(records))
    return records


def extract_pages(
    pages: Sequence[SourcePage],
    options: SearchOptions,
    max_workers: Optional[int] = None,
) -> List[PageRecord]:
    """
    複数ページをまとめて抽出し、入力順に並んだ PageRecord のリストを返す。

    max_workers が 2 以上ならスレッドプールで並列に処理する。
    Executor.map は入力順で結果を返すので、並列でも順序は変わらない。
    """
    if max_workers is None:
        max_workers = settings.extract_max_workers

    if max_workers <= 1 or len(pages) <= 1:
        results = [_extract_one(page, options) for page in pages]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(lambda p: _extract_one(p, options), pages))

    records = [record for page_records in results for record in page_records]
    logger.info(
        "[extractor_agent] extracted %s entries from %s pages",
        len(records),
        len(pages),
    )
    return records
