"""
Turing patterns from a picture: Gray-Scott reaction-diffusion seeded by an
image, with the image's edges modulating the feed rate.
"""

__version__ = "0.1.0"
