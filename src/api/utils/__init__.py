"""Request and response helpers used by the dispatch handlers.

- **body**: Parses the request body once and stores it on the request state
- **responses**: orjson-backed JSON response class
"""
