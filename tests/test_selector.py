"""Selector: visibility -> playback -> area, with stable tie-breaks."""

from pip_anywhere.agents.dom import ReadyState
from pip_anywhere.agents.selector import (
    area_score,
    is_playing,
    is_visible,
    select_main,
    select_main_legacy,
)

from conftest import FakeVideo, playing_video


def test_empty_candidates_select_nothing():
    assert select_main([]) is None
    assert select_main_legacy([]) is None


def test_zero_area_element_is_never_selected_over_visible_one():
    hidden = playing_video("hidden", intrinsic=(3840, 2160), rect=(0, 0))
    visible = FakeVideo("visible", intrinsic=(320, 180), rect=(320, 180))

    assert select_main([hidden, visible]) is visible


def test_all_hidden_falls_through_to_full_set():
    small = FakeVideo("small", intrinsic=(320, 180), rect=(0, 0))
    large = FakeVideo("large", intrinsic=(1280, 720), rect=(0, 100))

    assert select_main([small, large]) is large


def test_playing_element_wins_regardless_of_size():
    big_paused = FakeVideo("big", intrinsic=(3840, 2160), rect=(1920, 1080))
    ended = FakeVideo("ended", intrinsic=(1920, 1080), rect=(1280, 720),
                      paused=False, ended=True, ready_state=4)
    small_playing = playing_video("small", intrinsic=(426, 240), rect=(426, 240))

    assert select_main([big_paused, ended, small_playing]) is small_playing


def test_playing_requires_minimum_ready_state():
    starting = FakeVideo("starting", rect=(640, 360), paused=False, ready_state=ReadyState.HAVE_NOTHING)
    assert not is_playing(starting)

    metadata = FakeVideo("meta", rect=(640, 360), paused=False, ready_state=ReadyState.HAVE_METADATA)
    assert is_playing(metadata)
    assert not is_playing(metadata, ReadyState.HAVE_CURRENT_DATA)


def test_ready_state_threshold_is_tunable():
    meta = FakeVideo("meta", intrinsic=(1920, 1080), rect=(640, 360),
                     paused=False, ready_state=ReadyState.HAVE_METADATA)
    buffered = FakeVideo("buffered", intrinsic=(640, 360), rect=(640, 360),
                         paused=False, ready_state=ReadyState.HAVE_ENOUGH_DATA)

    assert select_main([meta, buffered]) is meta
    assert select_main([meta, buffered], ReadyState.HAVE_FUTURE_DATA) is buffered


def test_area_prefers_intrinsic_resolution_over_layout():
    hd_in_small_box = playing_video("hd", intrinsic=(1920, 1080), rect=(320, 180))
    sd_in_big_box = playing_video("sd", intrinsic=(640, 360), rect=(1280, 720))

    assert select_main([sd_in_big_box, hd_in_small_box]) is hd_in_small_box


def test_area_falls_back_to_layout_when_intrinsic_unknown():
    unloaded = FakeVideo("unloaded", intrinsic=(0, 0), rect=(800, 450))
    assert area_score(unloaded) == 800 * 450

    half_known = FakeVideo("half", intrinsic=(1920, 0), rect=(100, 100))
    assert area_score(half_known) == 100 * 100


def test_equal_area_tie_goes_to_first_seen():
    first = playing_video("first", intrinsic=(1280, 720))
    second = playing_video("second", intrinsic=(1280, 720))

    assert select_main([first, second]) is first
    assert select_main([second, first]) is second


def test_selection_is_deterministic():
    videos = [
        FakeVideo("thumb", intrinsic=(160, 90), rect=(160, 90)),
        playing_video("ad", intrinsic=(640, 360)),
        playing_video("main", intrinsic=(1920, 1080)),
        FakeVideo("loop", intrinsic=(1920, 1080), rect=(0, 0), paused=False, ready_state=4),
    ]
    assert select_main(videos) is select_main(videos)
    assert select_main(videos).element_key == "main"


def test_visibility_is_geometry_only():
    assert is_visible(FakeVideo("v", rect=(1, 1)))
    assert not is_visible(FakeVideo("w", rect=(10, 0)))


def test_legacy_strategy_needs_current_data_and_uses_intrinsic_area():
    meta_only = FakeVideo("meta", intrinsic=(1920, 1080), rect=(640, 360),
                          paused=False, ready_state=ReadyState.HAVE_METADATA)
    current = FakeVideo("current", intrinsic=(640, 360), rect=(640, 360),
                        paused=False, ready_state=ReadyState.HAVE_CURRENT_DATA)

    assert select_main_legacy([meta_only, current]) is current

    no_intrinsic = FakeVideo("a", rect=(1920, 1080))
    also_none = FakeVideo("b", rect=(10, 10))
    # intrinsic area 0 for both -> first seen
    assert select_main_legacy([no_intrinsic, also_none]) is no_intrinsic
