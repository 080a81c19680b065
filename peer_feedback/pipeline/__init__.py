"""Phase-driven contribution pipeline."""
