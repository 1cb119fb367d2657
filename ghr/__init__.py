"""ghr - publish a GitHub release and upload its assets from the command line."""

__version__ = "0.3.0"
