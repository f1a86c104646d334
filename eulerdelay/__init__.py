"""Stereo delay effect with ping-pong, filtered feedback, tempo sync and XML presets."""

__version__ = "1.0.0"

__all__ = [
    "delay",
    "feedback",
    "filters",
    "output",
    "panning",
    "parameters",
    "presets",
    "processor",
    "smoother",
]