"""In-memory selection bookkeeping."""

from shotlist.selection.ledger import SelectionLedger

__all__ = ["SelectionLedger"]
