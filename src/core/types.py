"""Type aliases shared by the routing engine.

This module centralizes type definitions for values that cannot be statically
typed, giving them a clear semantic meaning.
"""

from collections.abc import Callable
from typing import Any

from starlette.requests import Request

# A function converting an inbound request into one positional argument
type BindingCallback = Callable[[Request], Any]

# A controller class; anything the dependency resolver knows how to build
type ControllerType = type[Any]
