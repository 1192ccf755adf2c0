"""Row export helpers."""
