"""Recovery portal backend: case documents and video evidence retention."""

__version__ = "0.1.0"
