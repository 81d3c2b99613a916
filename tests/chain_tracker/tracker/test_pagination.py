"""Tests for window pagination."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from chain_tracker.tracker import TRACK_HEAD, compute_window, reanchor_for_selection
from chain_tracker.tracker.pagination import clamp_anchor


class TestComputeWindow:
    """Tests for the heights shown in a window."""

    def test_track_head_starts_at_head(self) -> None:
        """Anchor -1 shows the newest page."""
        window = compute_window(TRACK_HEAD, 100, 50)

        assert window == list(range(99, 49, -1))

    def test_anchor_at_or_above_height_clamps_to_head(self) -> None:
        """Anchors past the head resolve to the head."""
        assert compute_window(100, 100, 3) == [99, 98, 97]
        assert compute_window(500, 100, 3) == [99, 98, 97]

    def test_pinned_anchor(self) -> None:
        """A valid anchor is the top of the window."""
        assert compute_window(40, 100, 5) == [40, 39, 38, 37, 36]

    def test_window_stops_at_genesis(self) -> None:
        """Windows near the bottom of the chain are short."""
        assert compute_window(3, 100, 50) == [3, 2, 1, 0]

    def test_short_chain(self) -> None:
        """A chain shorter than a page is shown whole."""
        assert compute_window(TRACK_HEAD, 3, 50) == [2, 1, 0]

    def test_empty_chain(self) -> None:
        """An empty chain has an empty window."""
        assert compute_window(TRACK_HEAD, 0, 50) == []
        assert compute_window(10, 0, 50) == []

    def test_clamp_anchor(self) -> None:
        """Negative and out-of-range anchors clamp to the head."""
        assert clamp_anchor(-1, 10) == 9
        assert clamp_anchor(10, 10) == 9
        assert clamp_anchor(0, 10) == 0

    @given(
        anchor=st.integers(min_value=-1, max_value=1000),
        chain_height=st.integers(min_value=0, max_value=1000),
        page_size=st.integers(min_value=1, max_value=100),
    )
    def test_window_invariants(self, anchor: int, chain_height: int, page_size: int) -> None:
        """Windows are contiguous, descending, in range and at most a page long."""
        window = compute_window(anchor, chain_height, page_size)

        assert len(window) <= page_size
        assert all(0 <= height < chain_height for height in window)
        assert all(a - b == 1 for a, b in zip(window, window[1:], strict=False))
        if chain_height > 0:
            assert window[0] == clamp_anchor(anchor, chain_height)
            assert len(window) == min(page_size, window[0] + 1)


class TestReanchorForSelection:
    """Tests for re-anchoring around a selected block."""

    def test_lookahead_above_selection(self) -> None:
        """The window starts `distance` blocks above the selection."""
        assert reanchor_for_selection(10, 1000, 15) == 25

    def test_clamped_to_head(self) -> None:
        """Near the head, the window starts at the head."""
        assert reanchor_for_selection(995, 1000, 15) == 999

    @given(
        chain_height=st.integers(min_value=1, max_value=10_000),
        data=st.data(),
    )
    def test_selection_stays_visible(self, chain_height: int, data: st.DataObject) -> None:
        """With the default page, the selected block is inside the new window."""
        selected = data.draw(st.integers(min_value=0, max_value=chain_height - 1))

        anchor = reanchor_for_selection(selected, chain_height)

        assert selected in compute_window(anchor, chain_height)
