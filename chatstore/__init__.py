"""Local JSON storage for chat conversations."""
