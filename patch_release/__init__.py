"""Build versioned, patched release packages from a maintenance branch."""
