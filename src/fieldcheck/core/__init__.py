"""Value classification helpers."""
