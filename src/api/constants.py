"""API-related constants."""

# HTTP Status Codes
HTTP_422_UNPROCESSABLE = 422
HTTP_500_INTERNAL_SERVER_ERROR = 500

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Content types understood by the body parser
JSON_CONTENT_TYPES = {"application/json", "text/json"}
URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_SUFFIX = "+json"

# Key under request.state holding the parsed body
REQUEST_BODY_STATE_KEY = "body"
