"""Fractal specifications and per-point iteration kernels."""
