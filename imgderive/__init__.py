"""
imgderive - derived image artifacts (thumbnails, crops, views and formats)
memoized on disk under deterministic names.
"""

__version__ = "1.0.0"
