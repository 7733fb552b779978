from collections.abc import Iterator
from typing import Any

from video_relink.core.paths import DocumentPath, FieldSegment, IndexSegment, KeySegment, Segment
from video_relink.core.references import strip_draft_prefix

ASSET_FIELD = "asset"


def is_reference(value: Any, only_ref_to: str | None = None) -> bool:
    """True if ``value`` is a reference object, optionally pointing at ``only_ref_to``."""
    if not isinstance(value, dict) or value.get("_type") != "reference":
        return False
    if only_ref_to is None:
        return True
    ref = value.get("_ref")
    return isinstance(ref, str) and strip_draft_prefix(ref) == strip_draft_prefix(only_ref_to)


def _item_segment(item: Any, index: int) -> Segment:
    key = item.get("_key") if isinstance(item, dict) else None
    if key and isinstance(key, str):
        return KeySegment(key)
    return IndexSegment(index)


def find_asset_paths(document: Any, only_ref_to: str | None = None) -> Iterator[DocumentPath]:
    """Yield the path of every ``asset`` field holding a reference.

    List items keyed by ``_key`` are addressed by key, others by position.
    Output order is not part of the contract.
    """
    stack: list[tuple[Any, DocumentPath]] = [(document, DocumentPath())]
    while stack:
        node, path = stack.pop()
        if isinstance(node, list):
            for index in range(len(node) - 1, -1, -1):
                item = node[index]
                stack.append((item, path.child(_item_segment(item, index))))
        elif isinstance(node, dict):
            for name, value in node.items():
                child = path.child(FieldSegment(name))
                if name == ASSET_FIELD and is_reference(value, only_ref_to):
                    yield child
                stack.append((value, child))
