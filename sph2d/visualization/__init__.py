"""Renderers for SPH particle state."""
