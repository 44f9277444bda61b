# app/api/routes.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.graph.lg_workflow import run_workflow
from models.search_models import PageRecord, SearchIndex, SourcePage
from services.anchor_generator import DEFAULT_MAX_LENGTH, generate_anchor_id
from services.content_extractor import extract_searchable_content
from services.options import normalize_options

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request / Response モデル ---------


class ExtractRequest(BaseModel):
    path: str
    html: str
    options: Optional[Dict[str, Any]] = None


class BuildIndexRequest(BaseModel):
    pages: List[SourcePage] = Field(default_factory=list)
    options: Optional[Dict[str, Any]] = None


class AnchorIdResponse(BaseModel):
    id: str


# --------- エンドポイント ---------


@router.post(
    "/extract",
    response_model=List[PageRecord],
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def api_extract(payload: ExtractRequest) -> List[PageRecord]:
    """
    HTML 1 ページ分から PageRecord を返す（0 件 or 1 件）。
    抽出結果の確認用。
    """
    logger.info("[api.extract] path=%s html_chars=%s", payload.path, len(payload.html))
    options = normalize_options(payload.options)
    return extract_searchable_content(payload.html, payload.path, options)


@router.post(
    "/build-index",
    response_model=SearchIndex,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def api_build_index(payload: BuildIndexRequest) -> SearchIndex:
    """
    複数ページの HTML からインデックス全体を組み立てて返すメインAPI。

    1) オプション正規化
    2) 各ページの抽出
    3) インデックス生成
    """
    logger.info("[api.build-index] start pages=%s", len(payload.pages))

    state = run_workflow(pages=payload.pages, user_options=payload.options)

    logger.info(
        "[api.build-index] done entries=%s nodes=%s",
        state["search_index"].total_entries,
        state.get("current_node"),
    )
    return state["search_index"]


@router.get("/anchor-id", response_model=AnchorIdResponse)
def api_anchor_id(
    text: str = "",
    allow_numbers: bool = True,
    prefix: Optional[str] = None,
    suffix: Optional[str] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> AnchorIdResponse:
    """見出しテキストから生成されるアンカー ID を確認する。"""
    anchor = generate_anchor_id(
        text,
        allow_numbers=allow_numbers,
        prefix=prefix,
        suffix=suffix,
        max_length=max_length,
    )
    return AnchorIdResponse(id=anchor)
