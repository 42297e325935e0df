"""Runtime package for the plan-parity toolkit."""

from . import azure, commands, reconcile, terraform

__all__ = [
    "__version__",
    "azure",
    "commands",
    "reconcile",
    "terraform",
]

__version__ = "0.1.0"
