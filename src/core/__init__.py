"""Cross-cutting infrastructure shared by the routing engine and the API.

- **config**: Settings loaded from the environment
- **constants**: Shared constants and naming conventions
- **context**: Correlation ID storage for the current request
- **error_context**: Redaction of sensitive data before logging
- **exceptions**: Exception hierarchy with error codes and severities
- **logging**: Loguru configuration and standard-library interception
- **types**: Type aliases
"""
