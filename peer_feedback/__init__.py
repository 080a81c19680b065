"""Peer feedback: GitHub contribution ingestion and analysis."""

__version__ = "0.1.0"
