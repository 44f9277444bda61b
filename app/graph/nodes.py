# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List

from app.graph.lg_state import GraphState
from agents.extractor_agent import extract_pages
from models.options_models import SearchOptions
from models.search_models import PageRecord, SearchIndex
from services.options import normalize_options
from services.search_indexer import create_search_index

logger = logging.getLogger(__name__)


def _log_progress(state: GraphState, node: str, message: str) -> GraphState:
    """
    進捗ログを state に積むユーティリティ。
    state は dict (GraphState) として扱う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- Options ノード ----------


def options_node(state: GraphState) -> GraphState:
    """
    Options ノード:
    ユーザー指定のオプションをデフォルトに重ねて SearchOptions を作る。
    以降のノードはこれを読み取り専用で使う。
    呼び出し側で正規化済みの options が state にあれば、それをそのまま使う。
    """
    state = _log_progress(state, "options", "start: normalizing options")

    options = state.get("options")
    if options is None:
        options = normalize_options(state.get("user_options"))
        state["options"] = options

    logger.debug("[options_node] options=%s", options)

    state = _log_progress(state, "options", "done: options normalized")
    return state


# ---------- Extract ノード ----------


def extract_node(state: GraphState) -> GraphState:
    """
    Extract ノード:
    各ページの HTML から PageRecord を抽出する（失敗したページは 0 件扱い）。
    """
    pages = state.get("pages", [])
    state = _log_progress(state, "extract", f"start: extracting {len(pages)} pages")

    options: SearchOptions = state["options"]
    records: List[PageRecord] = extract_pages(pages, options)
    state["records"] = records

    state = _log_progress(
        state,
        "extract",
        f"done: extracted {len(records)} entries from {len(pages)} pages",
    )
    return state


# ---------- Index ノード ----------


def index_node(state: GraphState) -> GraphState:
    """
    Index ノード:
    PageRecord 群から SearchIndex を組み立てる。
    """
    state = _log_progress(state, "index", "start: building search index")

    options: SearchOptions = state["options"]
    search_index: SearchIndex = create_search_index(state.get("records", []), options)
    state["search_index"] = search_index

    state = _log_progress(
        state,
        "index",
        f"done: index built with {search_index.total_entries} entries",
    )
    return state
