"""Rolling checksums, block signatures and signature loading for network deltas."""

__version__ = "1.0.0"

__all__ = ["core", "util", "rollsum", "trace", "stats", "sumset", "stream", "readsums"]