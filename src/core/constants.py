"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Security and redaction
REDACTED = "[REDACTED]"

# Naming conventions used when scanning controller classes
CONSTRUCTOR_NAME = "__init__"
RESERVED_NAME_MARKER = "__"
PRIVATE_NAME_PREFIX = "_"
PYTHON_SOURCE_SUFFIX = ".py"
