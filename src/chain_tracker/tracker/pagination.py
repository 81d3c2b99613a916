"""
Pagination of the displayed block window.

The display shows one page of blocks at a time, newest first. The page is
described by an anchor: the height of its topmost block.

- An anchor of -1 tracks the live head. The window slides as blocks arrive.
- Any other anchor pins the window so the user's scroll position survives new
  blocks.

Selecting a block (directly or through one of its transactions) re-anchors
the window a few blocks above the selection so the selected block is visible
with some context above it.
"""

from __future__ import annotations

from .config import BLOCKS_PER_PAGE, PAGINATION_DISTANCE

TRACK_HEAD = -1
"""Anchor value meaning "follow the live head"."""


def clamp_anchor(anchor: int, chain_height: int) -> int:
    """
    Resolve an anchor to a concrete block height.

    Anchors that are negative or at/above the chain height resolve to the
    head, ``chain_height - 1``.
    """
    if anchor < 0 or anchor >= chain_height:
        return chain_height - 1
    return anchor


def compute_window(
    anchor: int,
    chain_height: int,
    page_size: int = BLOCKS_PER_PAGE,
) -> list[int]:
    """
    Compute the block heights to display.

    Args:
        anchor: Requested top of the window. -1 tracks the head.
        chain_height: Number of blocks in the chain.
        page_size: Maximum number of heights returned.

    Returns:
        Contiguous heights, descending from the clamped anchor. Stops early
        at height 0. Empty when the chain is empty.

    Example:
        >>> compute_window(3, 100, 50)
        [3, 2, 1, 0]
    """
    top = clamp_anchor(anchor, chain_height)
    bottom = max(top - page_size, -1)
    return list(range(top, bottom, -1))


def reanchor_for_selection(
    selected_height: int,
    chain_height: int,
    distance: int = PAGINATION_DISTANCE,
) -> int:
    """
    Anchor that keeps a selected block visible with lookahead above it.

    Args:
        selected_height: Height of the selected block.
        chain_height: Number of blocks in the chain.
        distance: Blocks of lookahead above the selection.

    Returns:
        ``min(chain_height - 1, selected_height + distance)``.
    """
    return min(chain_height - 1, selected_height + distance)
