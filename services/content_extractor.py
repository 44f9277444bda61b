# services/content_extractor.py

from __future__ import annotations

import logging
import re
from pathlib import PurePath
from typing import List, Sequence, Set, Union

from bs4 import BeautifulSoup, Tag

from models.options_models import SearchOptions
from models.search_models import HeadingAnchor, PageRecord
from services.anchor_generator import generate_anchor_id, unique_anchor_id

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
UNTITLED = "Untitled"

# content がこの文字数を超えたら excerpt を切り出す
EXCERPT_TRIGGER_CHARS = 300
# excerpt の最大文字数（"..." を除く）
EXCERPT_MAX_CHARS = 250

_WS_RE = re.compile(r"\s+")
_TRAILING_PARTIAL_WORD_RE = re.compile(r"\s+\S*$")


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _node_text(node: Tag) -> str:
    """要素内のテキストをスペース区切りで連結し、空白を 1 つにまとめる。"""
    return _collapse(node.get_text(separator=" "))


def derive_page_url(file_path: Union[str, PurePath]) -> str:
    """
    出力ディレクトリからの相対パスをサイト上の URL に変換する。

    - index.html       -> /
    - about/index.html -> /about
    - blog/post.html   -> /blog/post
    """
    path = file_path.as_posix() if isinstance(file_path, PurePath) else str(file_path)
    path = path.replace("\\", "/")
    if path.startswith("./"):
        path = path[2:]

    base = re.sub(r"\.html$", "", path)
    if base == "index" or base.endswith("/index"):
        base = re.sub(r"/?index$", "", base) or "/"
    return "/" + base.lstrip("/")


def make_excerpt(
    content: str,
    trigger_chars: int = EXCERPT_TRIGGER_CHARS,
    max_chars: int = EXCERPT_MAX_CHARS,
) -> str:
    """長い本文は先頭 max_chars 文字を単語境界で切って "..." を付ける。"""
    if len(content) <= trigger_chars:
        return content
    head = _TRAILING_PARTIAL_WORD_RE.sub("", content[:max_chars])
    return f"{head}..."


def _remove_excluded(soup: BeautifulSoup, selectors: Sequence[str]) -> None:
    """除外セレクタに一致する要素と、script/style を取り除く。"""
    selectors = [s for s in selectors if s.strip()]
    if selectors:
        for tag in soup.select(", ".join(selectors)):
            # 親ごと既に除去済みの要素はスキップ
            if not tag.decomposed:
                tag.decompose()
        logger.debug("[content_extractor] removed excluded selectors: %s", ", ".join(selectors))

    for tag in soup(["script", "style"]):
        tag.decompose()


def _page_title(soup: BeautifulSoup) -> str:
    """<title> → 最初の <h1> → "Untitled" の順で決める。"""
    title_tag = soup.find("title")
    if title_tag is not None:
        title = _node_text(title_tag)
        if title:
            return title

    h1 = soup.find("h1")
    if h1 is not None:
        title = _node_text(h1)
        if title:
            return title

    return UNTITLED


def _extract_headings(soup: BeautifulSoup) -> List[HeadingAnchor]:
    """
    h1〜h6 を文書順に走査し、id を持たない見出しには id を振る。

    used_ids はこの 1 文書の処理中だけ使う。既存の id も生成した id も登録し、
    生成 id が衝突した場合は -1, -2 ... を付ける。
    振った id は要素に書き戻す。
    """
    headings: List[HeadingAnchor] = []
    used_ids: Set[str] = set()

    for tag in soup.find_all(HEADING_TAGS):
        title = _node_text(tag)
        if not title:
            continue

        anchor_id = tag.get("id")
        if not anchor_id:
            anchor_id = unique_anchor_id(generate_anchor_id(title), used_ids)
            tag["id"] = anchor_id
            logger.debug(
                "[content_extractor] generated id=%s for %s: %s", anchor_id, tag.name, title
            )

        used_ids.add(anchor_id)
        headings.append(HeadingAnchor(level=tag.name, id=anchor_id, title=title))

    return headings


def extract_searchable_content(
    html: str,
    file_path: Union[str, PurePath],
    options: SearchOptions,
) -> List[PageRecord]:
    """
    HTML 文字列から検索用の PageRecord を生成する。

    戻り値は「0 件 or 1 件」のリスト。
    空の HTML、除外処理後に本文が残らない HTML、パースに失敗した HTML は [] を返す。
    例外は外に出さない（他のページの処理に影響させない）。
    """
    try:
        if not html or not html.strip():
            logger.debug("[content_extractor] skipping %s: empty content", file_path)
            return []

        soup = BeautifulSoup(html, "html.parser")

        # 見出しや本文を拾う前に除外しておく（nav / footer などの文字が混ざらないように）
        _remove_excluded(soup, options.exclude_selectors)

        url = derive_page_url(file_path)
        title = _page_title(soup)
        logger.debug("[content_extractor] processing %s (url=%s, title=%s)", file_path, url, title)

        headings = _extract_headings(soup)

        content = _node_text(soup)
        if not content:
            logger.debug("[content_extractor] skipping %s: no text after processing", file_path)
            return []

        record = PageRecord(
            id=f"page:{url}",
            type="page",
            url=url,
            title=title,
            content=content,
            excerpt=make_excerpt(content),
            headings=headings,
            word_count=len(content.split()),
        )
        logger.debug(
            "[content_extractor] extracted %s: headings=%s words=%s",
            url,
            len(headings),
            record.word_count,
        )
        return [record]

    except Exception as e:
        logger.warning("[content_extractor] error extracting %s: %s", file_path, e)
        return []
