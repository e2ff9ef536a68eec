"""Repo Finder - multi-leg repo detection in settlement ledgers."""

from repofinder.detector import Detector, get_default_detector

__version__ = "0.1.0"
__all__ = ["Detector", "get_default_detector", "__version__"]
