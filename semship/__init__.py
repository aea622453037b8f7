"""semship: semantic-version releases for forge-hosted projects."""

__version__ = "0.1.0"
