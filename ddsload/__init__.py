"""Read DDS texture files, work out their formats and lay out their subresources."""

__version__ = "0.1.0"
__all__ = ["errors", "formats", "header", "loader"]