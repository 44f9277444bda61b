# services/anchor_generator.py

from __future__ import annotations

import re
from typing import Optional, Set

FALLBACK_ANCHOR = "section"
DEFAULT_MAX_LENGTH = 50

_TAG_RE = re.compile(r"<[^>]*>")
_DIGIT_RE = re.compile(r"[0-9]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def _slugify(text: str, allow_numbers: bool = True) -> str:
    """タグ風の断片を除き、英小文字・数字・ハイフンだけの slug にする。"""
    slug = _TAG_RE.sub("", text).lower()
    if not allow_numbers:
        slug = _DIGIT_RE.sub("", slug)
    slug = _NON_ALNUM_RE.sub("-", slug)
    return slug.strip("-")


def generate_anchor_id(
    text: Optional[str],
    *,
    allow_numbers: bool = True,
    prefix: Optional[str] = None,
    suffix: Optional[str] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> str:
    """
    見出しテキストから URL フラグメントに使えるアンカー ID を生成する。

    - "Hello, World!" -> "hello-world"
    - 空文字 / None / 空白のみ -> "section"
    - allow_numbers=False の場合は数字そのものを取り除く
    - prefix / suffix はハイフンで前後に連結する
    - max_length を超える分は本体側の slug を切り詰める（末尾のハイフンは残さない）

    同じ入力には常に同じ結果を返す。ページ内での一意性は呼び出し側で担保する
    （unique_anchor_id を参照）。
    """
    if not text or not text.strip():
        return FALLBACK_ANCHOR

    core = _slugify(text, allow_numbers=allow_numbers)
    if not core:
        return FALLBACK_ANCHOR

    head = _slugify(prefix or "")
    tail = _slugify(suffix or "")
    budget = max_length - sum(len(a) + 1 for a in (head, tail) if a)
    if budget < 1:
        # prefix / suffix だけで埋まる場合は suffix を捨て、prefix を削って本体を最低 1 文字残す
        tail = ""
        head = head[: max(max_length - 2, 0)].rstrip("-")
        budget = max_length - (len(head) + 1 if head else 0)
    core = core[:budget].rstrip("-")

    anchor = "-".join(p for p in (head, core, tail) if p)
    anchor = anchor[:max_length].rstrip("-")
    return anchor or FALLBACK_ANCHOR


def unique_anchor_id(base: str, used: Set[str]) -> str:
    """
    used に含まれない ID を返す。
    base が使用済みなら base-1, base-2 ... と番号を振っていく。
    """
    candidate = base
    counter = 1
    while candidate in used:
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
