# services/site_files.py

from __future__ import annotations

import glob
import json
import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from models.options_models import SearchOptions
from models.search_models import SearchIndex, SourcePage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _is_ignored(rel_path: str, patterns: Iterable[str]) -> bool:
    """
    相対パスが ignore の glob のどれかに一致するか。
    "**/x" はルート直下の "x" にも一致させる。
    """
    for pattern in patterns:
        if fnmatch(rel_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch(rel_path, pattern[3:]):
            return True
    return False


def discover_html_files(output_dir: PathLike, options: SearchOptions) -> List[str]:
    """
    出力ディレクトリ内で pattern に一致するファイルを探す。
    戻り値は output_dir からの相対パス（"/" 区切り、ソート済み）。
    """
    root = Path(output_dir)
    if not root.is_dir():
        logger.warning("[site_files] output directory not found: %s", root)
        return []

    matches = glob.glob(options.pattern, root_dir=root, recursive=True)
    rel_paths = sorted(
        Path(m).as_posix()
        for m in matches
        if (root / m).is_file()
    )
    found = [p for p in rel_paths if not _is_ignored(p, options.ignore)]

    logger.debug(
        "[site_files] found %s files in %s (ignored=%s)",
        len(found),
        root,
        len(rel_paths) - len(found),
    )
    return found


def read_source_pages(output_dir: PathLike, rel_paths: Sequence[str]) -> List[SourcePage]:
    """
    HTML ファイルを読み込んで SourcePage のリストにする。
    読めなかったファイルはログだけ出してスキップする（他のファイルは続行）。
    """
    root = Path(output_dir)
    pages: List[SourcePage] = []
    for rel_path in rel_paths:
        try:
            html = (root / rel_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("[site_files] error reading %s: %s", rel_path, e)
            continue
        pages.append(SourcePage(path=rel_path, html=html))
    return pages


def write_search_index(
    index: SearchIndex,
    output_dir: PathLike,
    options: SearchOptions,
) -> Path:
    """インデックスを output_dir / index_path に JSON で書き出す。親ディレクトリも作る。"""
    index_path = Path(output_dir) / options.index_path
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_text(
        json.dumps(index.to_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info(
        "[site_files] wrote search index to %s (entries=%s)",
        index_path,
        index.total_entries,
    )
    return index_path
