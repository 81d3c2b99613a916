"""
View-state snapshots and display requests.

ViewState
---------
A `ViewState` is a complete, immutable description of what the display
should render. Exactly one is live per session. Every change produces a new
instance, so the display can diff the previous snapshot against the next one
and re-render.

TrackerRequest
--------------
A `TrackerRequest` is a sparse patch sent by the display. Each facet has three
states:

- **absent**: the field was not sent; nothing changes for that facet,
- **present and falsy** (``null``, ``""`` or ``0``): clear that selection,
- **present with a value**: resolve it and apply it.

Absence is read from pydantic's ``model_fields_set``, so an explicit ``null``
is distinguishable from a missing key.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from chain_tracker.ledger import Account, Block
from chain_tracker.types import StrictBaseModel

from .config import BLOCKS_PER_PAGE, PAGINATION_DISTANCE, TrackerConfig
from .pagination import TRACK_HEAD

RequestFacet = Literal[
    "select_address",
    "set_start_at_block",
    "select_block",
    "select_transaction",
]
"""Request facets, in the order they are applied."""

FACET_ORDER: tuple[RequestFacet, ...] = (
    "select_address",
    "set_start_at_block",
    "select_block",
    "select_transaction",
)
"""Fixed processing order of request facets."""


class ViewState(StrictBaseModel):
    """Immutable snapshot of the tracker display."""

    view: Literal["tracker"] = "tracker"
    """Which view the display should render."""

    panel_title: str = ""
    """Title of the panel hosting the view."""

    block_height: int = Field(default=0, ge=0)
    """Highest known chain height. The head block is at ``block_height - 1``."""

    start_at_block: int = Field(default=TRACK_HEAD, ge=TRACK_HEAD)
    """Pagination anchor. -1 tracks the live head."""

    blocks: tuple[Block, ...] = ()
    """Displayed blocks, descending by height."""

    blocks_per_page: int = BLOCKS_PER_PAGE
    """Page size in effect."""

    pagination_distance: int = PAGINATION_DISTANCE
    """Lookahead kept above a selected block."""

    selected_address: Account | None = None
    """State of the selected account, if any."""

    selected_block: str | None = None
    """Hash of the selected block, if any."""

    selected_transaction: str | None = None
    """Hash of the selected transaction, if any."""

    @classmethod
    def initial(cls, rpc_url: str, config: TrackerConfig | None = None) -> ViewState:
        """Build the empty snapshot a new session starts from."""
        config = config or TrackerConfig()
        return cls(
            panel_title=f"Block Explorer: {rpc_url}",
            blocks_per_page=config.blocks_per_page,
            pagination_distance=config.pagination_distance,
        )

    @property
    def is_tracking_head(self) -> bool:
        """Whether the window follows the live head."""
        return self.start_at_block < 0


class TrackerRequest(StrictBaseModel):
    """A sparse request from the display. Absent facets mean "no change"."""

    select_address: str | None = None
    """Address to select. Falsy clears the selection."""

    set_start_at_block: int | None = None
    """New pagination anchor. ``None`` or any negative value tracks the head."""

    select_block: int | str | None = None
    """Block height or hash to select. Falsy clears the selection."""

    select_transaction: str | None = None
    """Transaction hash to select. Falsy clears the selection."""

    def has(self, facet: RequestFacet) -> bool:
        """Whether the display sent this facet at all."""
        return facet in self.model_fields_set

    @property
    def facets(self) -> list[RequestFacet]:
        """Facets present in this request, in processing order."""
        return [facet for facet in FACET_ORDER if self.has(facet)]
