"""View-state synchronization engine for a live ledger explorer."""
