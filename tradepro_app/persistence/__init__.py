"""Local persistence for user-entered trade journal entries."""
