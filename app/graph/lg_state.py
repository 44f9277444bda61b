# app/graph/lg_state.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from models.options_models import SearchOptions
from models.search_models import SourcePage


class GraphState(Dict[str, Any]):
    """
    ワークフローの「状態」コンテナ。
    実体はただの dict だが、型ヒントとして分かりやすくするためのラッパ。
    """
    pass


def create_initial_state(
    pages: Sequence[SourcePage],
    user_options: Optional[Mapping[str, Any]] = None,
    options: Optional[SearchOptions] = None,
) -> GraphState:
    """
    ワークフロー開始時の初期 state を作成。
    options（正規化済み）が渡された場合は options ノードでそのまま使う。
    """
    state: GraphState = GraphState()
    state["pages"] = list(pages)
    state["user_options"] = dict(user_options or {})
    state["options"] = options
    state["progress_messages"] = []  # 各ノードからのログ的メッセージ
    state["current_node"] = None
    return state
