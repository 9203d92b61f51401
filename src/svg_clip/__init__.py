"""Render animated SVG graphics into fixed-length video clips."""
