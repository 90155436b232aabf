"""content_upgrade — upgrades content parameters to newer library versions."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("content-upgrade")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
