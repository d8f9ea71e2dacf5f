"""Route modules for the ClipLink HTTP API."""
