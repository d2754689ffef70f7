"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_NAME_LENGTH = 100
MAX_ROLE_TYPE_LENGTH = 20
MAX_PERMISSION_NAME_LENGTH = 100
MAX_PROJECT_ID_LENGTH = 255
MAX_ENVIRONMENT_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 255

# Bootstrap defaults
DEFAULT_PROJECT = "default"
DEFAULT_ENVIRONMENT = "development"
