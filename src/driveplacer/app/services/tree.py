"""
Folder Tree Builder.

Drive 폴더 평면 목록(페이지네이션) → 이름순 계층 트리.

불변 조건:
- 목록의 모든 폴더가 트리에 정확히 1번 등장
- 부모가 목록에 없으면 루트 자식 (누락/에러 없음)
- 부모 순환은 목록 순서상 첫 멤버를 루트에 붙여서 끊음
- 모든 레벨의 children은 이름순 (동명 폴더 간 순서는 보장하지 않음)
"""

import logging
import unicodedata
from collections.abc import Iterable
from typing import Protocol

from driveplacer.domain.constants import MAX_LISTING_PAGES
from driveplacer.domain.errors import ErrorCodes, UpstreamListingError
from driveplacer.domain.schemas import FolderNode, FolderPage, FolderRecord, FolderTree

logger = logging.getLogger(__name__)


class FolderLister(Protocol):
    """폴더 목록 1페이지를 돌려주는 협력자 (DriveClient 등)."""

    def list_folders(
        self, page_token: str | None = None, include_parents: bool = True
    ) -> FolderPage: ...


# =============================================================================
# Listing
# =============================================================================


def fetch_all_folders(
    lister: FolderLister,
    include_parents: bool = True,
    max_pages: int = MAX_LISTING_PAGES,
) -> list[FolderRecord]:
    """
    nextPageToken이 없을 때까지 모든 페이지를 모아 평면 목록으로 반환.

    Args:
        lister: 목록 제공자
        include_parents: 부모 ID까지 조회할지 (resolver는 id+name만 필요)
        max_pages: 페이지 상한 (토큰을 무한히 돌려주는 provider 방어)

    Raises:
        UpstreamListingError: 페이지 조회 실패 또는 상한 초과
    """
    records: list[FolderRecord] = []
    page_token: str | None = None

    for page_number in range(1, max_pages + 1):
        page = lister.list_folders(page_token=page_token, include_parents=include_parents)
        records.extend(page.records)
        page_token = page.next_page_token
        if not page_token:
            logger.debug(f"Folder listing complete: {len(records)} folders, {page_number} pages")
            return records

    raise UpstreamListingError(
        ErrorCodes.LISTING_PAGE_LIMIT_EXCEEDED,
        f"Folder listing did not finish within {max_pages} pages",
        folders_so_far=len(records),
    )


# =============================================================================
# Tree Assembly
# =============================================================================


def name_sort_key(name: str) -> tuple[str, str, str]:
    """
    로케일 비교와 유사한 정렬 키.

    1차: 악센트 제거 + casefold, 2차: casefold, 3차: 소문자 우선.
    """
    folded = name.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, folded, name.swapcase())


def sort_tree(root: FolderNode) -> None:
    """모든 노드의 children을 이름순 정렬 (제자리, 재귀 없이)."""
    for node in root.iter_nodes():
        node.children.sort(key=lambda child: name_sort_key(child.name))


def assemble_tree(records: Iterable[FolderRecord]) -> FolderTree:
    """
    평면 목록 → FolderTree (정렬 포함).

    1) id → 노드 맵 (중복 id는 첫 항목만 사용)
    2) 첫 번째 부모에 연결, 부모가 없거나 목록에 없으면 루트
    3) 루트에서 닿지 않는 노드(부모 순환) 구제
    4) 이름순 정렬
    """
    tree = FolderTree()
    nodes: dict[str, FolderNode] = {}
    ordered: list[FolderRecord] = []

    for record in records:
        if record.id in nodes:
            logger.debug(f"Duplicate folder id in listing ignored: {record.id}")
            continue
        nodes[record.id] = FolderNode(id=record.id, name=record.name)
        ordered.append(record)

    parent_of: dict[str, FolderNode] = {}
    for record in ordered:
        node = nodes[record.id]
        parent = nodes.get(record.parent_id) if record.parent_id else None
        if parent is None:
            tree.children.append(node)
        else:
            parent.children.append(node)
            parent_of[record.id] = parent

    _attach_unreachable(tree, ordered, nodes, parent_of)
    sort_tree(tree)
    return tree


def _attach_unreachable(
    tree: FolderTree,
    ordered: list[FolderRecord],
    nodes: dict[str, FolderNode],
    parent_of: dict[str, FolderNode],
) -> None:
    """부모 순환으로 루트에서 끊긴 노드를 루트 자식으로 옮긴다."""
    reached = {node.id for node in tree.iter_nodes()}
    if len(reached) - 1 == len(nodes):
        return

    for record in ordered:
        if record.id in reached:
            continue
        node = nodes[record.id]
        parent = parent_of.pop(record.id)
        parent.children.remove(node)
        tree.children.append(node)
        logger.warning(
            f"Folder parent cycle detected; attaching '{record.name}' ({record.id}) to root"
        )
        reached.update(n.id for n in node.iter_nodes())


def build_folder_tree(
    lister: FolderLister,
    max_pages: int = MAX_LISTING_PAGES,
) -> FolderTree:
    """
    전체 폴더 트리 생성 (요청마다 새로 조회, 캐시 없음).

    Raises:
        UpstreamListingError
    """
    records = fetch_all_folders(lister, include_parents=True, max_pages=max_pages)
    tree = assemble_tree(records)
    logger.info(f"Built folder tree: {len(records)} folders, {len(tree.children)} top-level")
    return tree
