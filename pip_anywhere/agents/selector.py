"""Selector - reduce candidates to the one "main" video

Layered, deterministic reduction. Each layer narrows the working set only
if it keeps at least one element; otherwise the input passes through.

1. Visibility: layout rect has width > 0 and height > 0
2. Playback: not paused, not ended, readyState >= threshold
3. Area: intrinsic w*h if both non-zero, else layout w*h; max wins,
   ties go to the first-seen element

Pure with respect to the DOM: reads live geometry/state, never mutates.
"""

import logging
from typing import Callable, List, Optional, Sequence

from pip_anywhere.agents.dom import CandidateElement, ReadyState

DEFAULT_MIN_READY_STATE = ReadyState.HAVE_METADATA
LEGACY_MIN_READY_STATE = ReadyState.HAVE_CURRENT_DATA


def is_visible(element: CandidateElement) -> bool:
    """Geometry only; CSS visibility/opacity/z-index are not consulted."""
    rect = element.layout_rect()
    return rect.width > 0 and rect.height > 0


def is_playing(element: CandidateElement, min_ready_state: int = DEFAULT_MIN_READY_STATE) -> bool:
    state = element.playback_state()
    return not state.paused and not state.ended and state.ready_state >= min_ready_state


def area_score(element: CandidateElement) -> float:
    """Intrinsic resolution area, falling back to layout area."""
    width, height = element.intrinsic_size()
    if width > 0 and height > 0:
        return float(width * height)
    area = element.layout_rect().area
    return area if area > 0 else 0.0


def intrinsic_area(element: CandidateElement) -> float:
    width, height = element.intrinsic_size()
    return float(max(width, 0) * max(height, 0))


def _narrow(
    candidates: List[CandidateElement],
    keep: Callable[[CandidateElement], bool],
) -> List[CandidateElement]:
    narrowed = [el for el in candidates if keep(el)]
    return narrowed if narrowed else candidates


def _largest(
    candidates: Sequence[CandidateElement],
    score: Callable[[CandidateElement], float],
) -> Optional[CandidateElement]:
    best: Optional[CandidateElement] = None
    best_score = 0.0
    for element in candidates:
        current = score(element)
        # strict > keeps the first-seen element on ties
        if best is None or current > best_score:
            best, best_score = element, current
    return best


def select_main(
    candidates: Sequence[CandidateElement],
    min_ready_state: int = DEFAULT_MIN_READY_STATE,
) -> Optional[CandidateElement]:
    """Pick the main video, or None for an empty sequence."""
    working = list(candidates)
    if not working:
        return None

    working = _narrow(working, is_visible)
    working = _narrow(working, lambda el: is_playing(el, min_ready_state))

    main = _largest(working, area_score)
    if main is not None:
        logging.debug(f"Selected main video {main.describe()} out of {len(candidates)}")
    return main


def select_main_legacy(candidates: Sequence[CandidateElement]) -> Optional[CandidateElement]:
    """Earlier heuristic kept as a second opinion.

    Stricter readiness (HAVE_CURRENT_DATA) and intrinsic area only.
    """
    working = list(candidates)
    if not working:
        return None

    working = _narrow(working, is_visible)
    working = _narrow(working, lambda el: is_playing(el, LEGACY_MIN_READY_STATE))

    main = _largest(working, intrinsic_area)
    if main is None:
        logging.warning("Could not determine a main video element via fallback strategy.")
    return main
