"""HTTP surface of the warehouse ledger."""
