"""Session-scoped repositories over the lesson store."""
