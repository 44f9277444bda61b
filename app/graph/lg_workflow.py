# app/graph/lg_workflow.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from app.graph.lg_state import GraphState, create_initial_state
from app.graph import nodes
from models.options_models import SearchOptions
from models.search_models import SourcePage
from services.options import normalize_options
from services.site_files import discover_html_files, read_source_pages, write_search_index

logger = logging.getLogger(__name__)


def run_workflow(
    pages: Sequence[SourcePage],
    user_options: Optional[Mapping[str, Any]] = None,
    options: Optional[SearchOptions] = None,
) -> GraphState:
    """
    インデックス生成のシンプルな直列ワークフロー。

    options → extract → index
    正規化済みの options を渡した場合、user_options は使わない。
    """
    logger.info("[lg_workflow] run_workflow start pages=%s", len(pages))

    state = create_initial_state(pages=pages, user_options=user_options, options=options)

    # 1) オプションの正規化
    state = nodes.options_node(state)

    # 2) HTML → PageRecord
    state = nodes.extract_node(state)

    # 3) PageRecord → SearchIndex
    state = nodes.index_node(state)

    logger.info(
        "[lg_workflow] run_workflow done entries=%s current_node=%s",
        state["search_index"].total_entries,
        state.get("current_node"),
    )
    return state


def build_site_index(
    output_dir: Union[str, Path],
    user_options: Optional[Mapping[str, Any]] = None,
) -> Path:
    """
    ビルド済みサイトの出力ディレクトリから検索インデックスを作って書き出す。

    1) pattern / ignore で HTML を探す
    2) 読み込み → run_workflow
    3) index_path に JSON を書き出す（HTML が 0 件でも空のインデックスを書く）
    """
    options = normalize_options(user_options)

    rel_paths = discover_html_files(output_dir, options)
    logger.info("[lg_workflow] found %s HTML files in %s", len(rel_paths), output_dir)

    pages = read_source_pages(output_dir, rel_paths)
    state = run_workflow(pages, options=options)

    return write_search_index(state["search_index"], output_dir, state["options"])
