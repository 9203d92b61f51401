"""Geometry, animation, and encoder helpers shared by the capture pipeline."""
