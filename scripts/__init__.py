"""Command-line tooling for the batch ledger."""
