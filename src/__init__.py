"""Waypost - declarative controller routing for FastAPI.

Controllers are plain classes whose methods carry an HTTP verb, a path and
per-parameter binding rules. Waypost discovers them, builds a dispatch table
and serves each request by extracting arguments, resolving a controller
instance, invoking the method and rendering the result as JSON.

Packages:
- **core**: Configuration, logging, exceptions and request context
- **routing**: Metadata store, annotations, discovery, resolvers, dispatch
- **api**: FastAPI application factory, middleware and error handling
"""
