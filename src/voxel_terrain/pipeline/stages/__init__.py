"""Built-in terrain generation stages."""

from . import terrain  # noqa: F401
