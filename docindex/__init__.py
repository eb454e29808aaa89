"""Indexing/search SDK: semantic segmentation and multi-modal result fusion."""

__version__ = "0.1.0"
