"""HTTP binding for ClipLink."""

from cliplink.api.app import create_app

__all__ = ["create_app"]
