"""Static blog builder: Markdown posts with front matter in, a linked HTML site out."""

__version__ = "0.1.0"
