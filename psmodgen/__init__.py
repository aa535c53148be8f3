"""Regenerate PowerShell module loaders and manifests from the function files on disk."""

__version__ = "0.1.0"
