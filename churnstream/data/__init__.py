"""Data module for loading datasets."""

from .data_loader import DatasetLoader

__all__ = ["DatasetLoader"]
