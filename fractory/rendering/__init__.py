"""Colour maps, the pixel sweep and image export."""
