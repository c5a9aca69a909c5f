"""Line bookmarks that follow their text through edits, closes and restarts."""

__version__ = "0.1.0"
