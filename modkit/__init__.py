"""modkit: rewrite extended-syntax Ruby into plain Ruby."""

__version__ = "0.1.0"
