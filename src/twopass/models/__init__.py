"""Data models for probed media, selections and compiled plans."""
