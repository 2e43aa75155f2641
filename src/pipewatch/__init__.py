"""PipeWatch - GitLab pipeline monitor with transition notifications."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed PipeWatch version."""
    return __version__
