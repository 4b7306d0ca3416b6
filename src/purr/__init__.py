"""Purr - a package installer for the FUR package registry."""

__version__ = "0.3.0"
