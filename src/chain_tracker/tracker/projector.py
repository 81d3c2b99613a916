"""
Request handling: turning display requests into the next view state.

How It Works
------------
The projector receives the live `ViewState` and a `TrackerRequest`. It applies
every facet present in the request, in a fixed order:

1. **Address selection**: fetch the account (never cached) or clear it
2. **Anchor**: set the pagination anchor and rebuild the window
3. **Block selection**: resolve the block, re-anchor near it, rebuild
4. **Transaction selection**: resolve the transaction and its block,
   re-anchor near the block, rebuild, select both

Each step works on the draft produced by the previous one, so when several
facets rebuild the window in one request the last one wins.

No Partial Updates
------------------
The projector never publishes anything. It returns the final draft, and only
the caller makes it live. If any resolution fails (after the fetcher's
retries), the exception propagates and the live snapshot is left exactly as
it was.

Chain height and the head-caching rule both come from the snapshot the
request started from; a request never moves ``block_height``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chain_tracker.ledger import Block

from .fetcher import ResilientFetcher
from .pagination import TRACK_HEAD, compute_window, reanchor_for_selection
from .view_state import TrackerRequest, ViewState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ViewStateProjector:
    """Computes the next view state for a request."""

    fetcher: ResilientFetcher
    """Reader used to resolve selections and fill windows."""

    async def apply(self, state: ViewState, request: TrackerRequest) -> ViewState:
        """
        Apply every facet of a request.

        Args:
            state: The live snapshot.
            request: The request from the display.

        Returns:
            The next snapshot. Equal to `state` when the request is empty.

        Raises:
            FetchExhaustedError: If any entity could not be resolved.
        """
        draft = state
        for facet in request.facets:
            apply_facet = getattr(self, f"_{facet}")
            draft = await apply_facet(draft, getattr(request, facet))
        return draft

    async def window(self, anchor: int, block_height: int, page_size: int) -> tuple[Block, ...]:
        """Fetch the blocks of the window anchored at `anchor`."""
        heights = compute_window(anchor, block_height, page_size)
        return tuple(await self.fetcher.get_blocks(heights, block_height))

    async def _select_address(self, draft: ViewState, address: str | None) -> ViewState:
        if not address:
            return draft.replace(selected_address=None)
        account = await self.fetcher.get_account(address)
        return draft.replace(selected_address=account)

    async def _set_start_at_block(self, draft: ViewState, anchor: int | None) -> ViewState:
        # Null and negative anchors go back to tracking the head.
        start_at_block = TRACK_HEAD if anchor is None or anchor < 0 else anchor
        blocks = await self.window(start_at_block, draft.block_height, draft.blocks_per_page)
        return draft.replace(start_at_block=start_at_block, blocks=blocks)

    async def _select_block(self, draft: ViewState, key: int | str | None) -> ViewState:
        if not key:
            return draft.replace(selected_block=None)
        block = await self.fetcher.get_block(key, draft.block_height)
        return await self._focus(draft, block, selected_block=block.hash)

    async def _select_transaction(self, draft: ViewState, tx_hash: str | None) -> ViewState:
        if not tx_hash:
            return draft.replace(selected_transaction=None)
        transaction = await self.fetcher.get_transaction(tx_hash)
        block = await self.fetcher.get_block(transaction.blockhash, draft.block_height)
        return await self._focus(
            draft,
            block,
            selected_block=block.hash,
            selected_transaction=transaction.hash,
        )

    async def _focus(self, draft: ViewState, block: Block, **selection: str) -> ViewState:
        """Re-anchor the window near `block` and record the selection."""
        start_at_block = reanchor_for_selection(
            block.index, draft.block_height, draft.pagination_distance
        )
        blocks = await self.window(start_at_block, draft.block_height, draft.blocks_per_page)
        logger.debug("Focusing block %d, window anchored at %d", block.index, start_at_block)
        return draft.replace(start_at_block=start_at_block, blocks=blocks, **selection)
