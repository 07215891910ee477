"""templatehub - discover, install and update templates hosted on GitHub."""

__version__ = "0.1.0"
