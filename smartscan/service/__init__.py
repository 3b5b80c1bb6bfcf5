"""HTTP service launcher."""
