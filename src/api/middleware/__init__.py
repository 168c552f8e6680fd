"""Middleware and exception handlers for the Waypost application.

- **RequestContextMiddleware**: Correlation ID handling
- **RequestLoggingMiddleware**: Request/response logging with timing
- **error_handler**: Centralized exception handlers turning controller
  failures into ``ErrorResponse`` bodies

Order on the way in:
1. Request context (sets up correlation IDs)
2. Request logging (logs with correlation context)
3. Controller dispatch; failures propagate to the exception handlers
"""
