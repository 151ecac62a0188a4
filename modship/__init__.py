"""modship: bootstrap, publish and release PowerShell modules through GitHub Packages."""

__version__ = "0.3.0"
