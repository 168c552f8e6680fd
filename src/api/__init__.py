"""HTTP layer of Waypost, built on FastAPI.

Key components:
- **main**: Application factory wiring logging, error handling, middleware
  and the discovered controllers into one FastAPI app
- **middleware**: Correlation IDs, request logging and the centralized
  exception handlers every controller failure ends up in
- **schemas**: The ``ErrorResponse`` model all error bodies follow
- **utils**: Request body parsing and the orjson response class

The routing engine itself lives in ``src.routing``; this package is the
transport it plugs into.
"""
