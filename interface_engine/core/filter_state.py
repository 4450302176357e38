# File: /interface_engine/core/filter_state.py | Version: 1.0 | Title: Page-scoped filter broadcast registry
from __future__ import annotations

import json
import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from interface_engine.core.filter_converters import coerce_filter_configs, filter_configs_to_filter_tree
from interface_engine.core.filter_tree import and_filter_trees
from interface_engine.schemas.filters import FilterBlockState, FilterConfig, FilterTree

log = logging.getLogger(__name__)

Snapshot = Mapping[str, FilterBlockState]
Subscriber = Callable[[Snapshot], None]
TargetBlocks = Union[str, Sequence[str]]


class RegistryClosedError(RuntimeError):
    pass


def compute_signature(
    block_id: str,
    filters: Sequence[FilterConfig],
    target_blocks: TargetBlocks,
    filter_tree: FilterTree = None,
    table_id: Optional[str] = None,
    title: Optional[str] = None,
) -> str:
    # Emitters keep a stable filter order, so a plain dump is enough
    payload = {
        "block_id": block_id,
        "filters": [f.model_dump(mode="json") for f in filters],
        "target_blocks": target_blocks if target_blocks == "all" else list(target_blocks),
        "filter_tree": filter_tree.model_dump(mode="json") if filter_tree is not None else None,
        "table_id": table_id,
        "title": title,
    }
    return json.dumps(payload, sort_keys=True, default=str)


class FilterStateRegistry:
    """
    Holds what every filter block on one page emits. The state is an
    immutable snapshot replaced on each real change; re-emitting an identical
    payload leaves the snapshot object and subscribers untouched.
    """

    def __init__(self, page_id: Optional[str] = None):
        self.page_id = page_id
        self._snapshot: Snapshot = MappingProxyType({})
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "FilterStateRegistry":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def closed(self) -> bool:
        return self._closed

    def _publish(self, snapshot: Snapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                log.exception("Filter state subscriber failed on page %s", self.page_id)

    def _replace(self, mutate: Callable[[Dict[str, FilterBlockState]], bool]) -> bool:
        if self._closed:
            raise RegistryClosedError(f"Filter state for page {self.page_id} is closed")
        with self._lock:
            nxt = dict(self._snapshot)
            if not mutate(nxt):
                return False
            self._snapshot = MappingProxyType(nxt)
            snapshot = self._snapshot
        self._publish(snapshot)
        return True

    def update_filter_block(
        self,
        block_id: str,
        filters: Sequence[Any],
        target_blocks: TargetBlocks,
        title: Optional[str] = None,
        filter_tree: FilterTree = None,
        table_id: Optional[str] = None,
    ) -> bool:
        """Store a block's emission. Returns False when nothing changed."""
        filters = coerce_filter_configs(filters)
        targets = "all" if target_blocks == "all" else tuple(target_blocks or ())
        signature = compute_signature(block_id, filters, targets, filter_tree, table_id, title)

        def _mutate(state: Dict[str, FilterBlockState]) -> bool:
            existing = state.get(block_id)
            if existing is not None and existing.signature == signature:
                return False
            state[block_id] = FilterBlockState(
                block_id=block_id,
                filters=filters,
                filter_tree=filter_tree,
                target_blocks=targets,
                table_id=table_id,
                title=title,
                signature=signature,
            )
            return True

        return self._replace(_mutate)

    def remove_filter_block(self, block_id: str) -> bool:
        def _mutate(state: Dict[str, FilterBlockState]) -> bool:
            return state.pop(block_id, None) is not None

        return self._replace(_mutate)

    @staticmethod
    def _targets(state: FilterBlockState, block_id: str, block_table_id: Optional[str]) -> bool:
        if state.target_blocks == "all":
            if block_table_id is None or state.table_id is None:
                return True
            return state.table_id == block_table_id
        return block_id in state.target_blocks

    def get_filters_for_block(
        self, block_id: str, block_table_id: Optional[str] = None
    ) -> List[FilterConfig]:
        """Flat view: one filter per field, the last registered emitter wins."""
        by_field: Dict[str, FilterConfig] = {}
        for emitter_id, state in self._snapshot.items():
            if not self._targets(state, block_id, block_table_id):
                continue
            for f in state.filters:
                # re-inserting keeps the first position, as the flat list did
                by_field[f.field] = f.model_copy(
                    update={"source_block_id": emitter_id, "source_block_title": state.title}
                )
        return list(by_field.values())

    def get_filter_tree_for_block(
        self, block_id: str, block_table_id: Optional[str] = None
    ) -> FilterTree:
        """Tree view: every targeting emitter's tree, AND-combined."""
        trees: List[FilterTree] = []
        for state in self._snapshot.values():
            if not self._targets(state, block_id, block_table_id):
                continue
            tree = state.filter_tree
            if tree is None:
                tree = filter_configs_to_filter_tree(list(state.filters))
            if tree is not None:
                trees.append(tree)
        return and_filter_trees(trees)

    def get_filter_block_info(self, block_id: str) -> Optional[Dict[str, Optional[str]]]:
        state = self._snapshot.get(block_id)
        if state is None:
            return None
        return {"block_id": block_id, "title": state.title}

    def get_all_filter_blocks(self) -> List[FilterBlockState]:
        return list(self._snapshot.values())

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        if self._closed:
            raise RegistryClosedError(f"Filter state for page {self.page_id} is closed")
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def close(self) -> None:
        self._closed = True
        self._subscribers.clear()
        self._snapshot = MappingProxyType({})


class PageFilterStates:
    """One registry per open page; closing a page tears its registry down."""

    def __init__(self):
        self._pages: Dict[str, FilterStateRegistry] = {}
        self._lock = threading.Lock()

    def open_page(self, page_id: str) -> FilterStateRegistry:
        with self._lock:
            reg = self._pages.get(page_id)
            if reg is None or reg.closed:
                reg = FilterStateRegistry(page_id)
                self._pages[page_id] = reg
            return reg

    def get(self, page_id: str) -> Optional[FilterStateRegistry]:
        return self._pages.get(page_id)

    def close_page(self, page_id: str) -> None:
        with self._lock:
            reg = self._pages.pop(page_id, None)
        if reg is not None:
            reg.close()

    def close_all(self) -> None:
        with self._lock:
            pages, self._pages = self._pages, {}
        for reg in pages.values():
            reg.close()
