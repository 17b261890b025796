"""Double-entry ledger engine."""
