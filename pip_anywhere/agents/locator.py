"""Locator - enumerate candidate videos reachable from the page root

Depth-first walk over the scope graph: the top document, every shadow
root hosted inside it, and every same-origin frame document, recursively.

INVARIANTS:
- A scope is visited at most once per pass (visited set keyed by scope_key)
- An element is reported at most once (seen set keyed by element_key)
- Result order is traversal order; later stages break ties on it
- Cross-origin frames arrive as INACCESSIBLE and are skipped
"""

import logging
from typing import List, Optional, Set, Hashable

from pip_anywhere.agents.dom import CandidateElement, DocumentScope, InaccessibleScope


def collect_candidates(root: Optional[DocumentScope]) -> List[CandidateElement]:
    """Return every candidate video under root, in traversal order.

    An empty list means "no selection possible"; it is not an error.
    """
    if root is None:
        return []

    collected: List[CandidateElement] = []
    seen_elements: Set[Hashable] = set()
    visited_scopes: Set[Hashable] = set()
    skipped_frames = 0

    stack: List[DocumentScope] = [root]
    while stack:
        scope = stack.pop()
        if scope.scope_key in visited_scopes:
            continue
        visited_scopes.add(scope.scope_key)

        for element in scope.media_elements():
            if not isinstance(element, CandidateElement):
                continue
            if element.element_key in seen_elements:
                continue
            seen_elements.add(element.element_key)
            collected.append(element)

        children: List[DocumentScope] = list(scope.shadow_roots())
        for frame_doc in scope.frame_documents():
            if isinstance(frame_doc, InaccessibleScope) or frame_doc is None:
                skipped_frames += 1
                continue
            children.append(frame_doc)

        # Reversed so the first child is walked first
        stack.extend(reversed(children))

    if skipped_frames:
        logging.debug(f"Skipped {skipped_frames} inaccessible frame(s)")

    if not collected:
        logging.warning("No <video> elements found on this page (including frames/shadow DOM).")
    else:
        logging.debug(
            f"Collected {len(collected)} candidate(s) from {len(visited_scopes)} scope(s)"
        )

    return collected


def collect_top_level(root: Optional[DocumentScope]) -> List[CandidateElement]:
    """Videos directly in the root document only, no shadow/frame descent."""
    if root is None:
        return []
    videos = [el for el in root.media_elements() if isinstance(el, CandidateElement)]
    if not videos:
        logging.warning("No <video> elements found in the top-level document.")
    return videos
