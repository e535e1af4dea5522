"""dross — Dross Manager backend. Schema bootstrap and domain storage."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("dross-manager")
except PackageNotFoundError:
    __version__ = "0.2.3"  # fallback for development
