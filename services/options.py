# services/options.py

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from models.options_models import DEFAULT_MAX_CONTENT_LENGTH, SearchOptions

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.html"

# ============================================================
# デフォルト設定
# ============================================================

DEFAULT_OPTIONS: Dict[str, Any] = {
    "pattern": DEFAULT_PATTERN,
    "ignore": ["**/search-index.json"],
    "indexPath": "search-index.json",
    "excludeSelectors": ["nav", "header", "footer"],
    "maxContentLength": DEFAULT_MAX_CONTENT_LENGTH,
    # クライアント側 Fuse.js の設定
    "fuseOptions": {
        "keys": [
            {"name": "title", "weight": 10},
            {"name": "content", "weight": 5},
            {"name": "excerpt", "weight": 3},
        ],
        "threshold": 0.3,
        "includeScore": True,
        "includeMatches": True,
        "minMatchCharLength": 3,
    },
}

# snake_case で渡されたキーを camelCase に寄せる（index_path -> indexPath など）
_KEY_ALIASES: Dict[str, str] = {
    name: field.alias
    for name, field in SearchOptions.model_fields.items()
    if field.alias and field.alias != name
}


# ============================================================
# ユーティリティ
# ============================================================

def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    base に override を再帰的に重ねた新しい dict を返す。

    - 両方とも dict（Mapping）のキーはキー単位でマージ
    - それ以外（list を含む）は override の値で丸ごと置き換え
    - base / override は変更しない
    """
    merged: Dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping):
            current = merged.get(key)
            merged[key] = deep_merge(current if isinstance(current, Mapping) else {}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _to_tuple(value: Any) -> Tuple[str, ...]:
    """文字列は 1 要素、list/tuple はそのまま（文字列以外の要素は捨てる）、それ以外は空にする。"""
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(v for v in value if isinstance(v, str))
    return ()


def _canonical_keys(options: Mapping[str, Any]) -> Dict[str, Any]:
    return {_KEY_ALIASES.get(key, key): value for key, value in options.items()}


# ============================================================
# メインロジック
# ============================================================

def normalize_options(user_options: Optional[Mapping[str, Any]] = None) -> SearchOptions:
    """
    ユーザー指定のオプションをデフォルトに重ね、型をそろえた SearchOptions を返す。

    型が不正な値はエラーにせず安全な値に置き換える:
      - pattern が文字列でない -> デフォルトの glob
      - ignore / excludeSelectors -> 文字列は 1 要素、配列はそのまま、それ以外は空
      - maxContentLength が正の整数でない -> デフォルト値
    """
    merged = deep_merge(DEFAULT_OPTIONS, _canonical_keys(user_options or {}))

    if not isinstance(merged.get("pattern"), str):
        logger.debug("[options] invalid pattern=%r, using default", merged.get("pattern"))
        merged["pattern"] = DEFAULT_PATTERN

    merged["ignore"] = _to_tuple(merged.get("ignore"))
    merged["excludeSelectors"] = _to_tuple(merged.get("excludeSelectors"))

    max_length = merged.get("maxContentLength")
    if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length <= 0:
        logger.debug("[options] invalid maxContentLength=%r, using default", max_length)
        merged["maxContentLength"] = DEFAULT_MAX_CONTENT_LENGTH

    if not isinstance(merged.get("fuseOptions"), Mapping):
        merged["fuseOptions"] = copy.deepcopy(DEFAULT_OPTIONS["fuseOptions"])

    if not isinstance(merged.get("indexPath"), str) or not merged["indexPath"]:
        merged["indexPath"] = DEFAULT_OPTIONS["indexPath"]

    return SearchOptions.model_validate(merged)
