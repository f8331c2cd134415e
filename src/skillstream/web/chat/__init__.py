"""Chat endpoint: one POST per task."""
