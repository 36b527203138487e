"""
User-facing message strings.
"""

# Database errors
DB_CONNECT_FAILED = "failed to connect to database"
DB_OPERATION_FAILED = (
    "request failed. Verify data meets any requirements "
    "(i.e. uniqueness, null, etc...) and try again"
)

# Request errors
INVALID_DATA = "invalid data passing."
UNSUPPORTED_CONTENT_TYPE = "unsupported Content-Type."
FIELD_EMPTY = "field is empty or not define.  Please fill out all required fields"
LOG_FILE_FAILED = "fail to save log:"
BAD_REQUEST = "bad Request. Please check your relative path"

# Warnings
FIELDS_NOT_UPDATED = "following fields were not included in the update:"
NO_DATA_UPDATE = "no data update"
NO_QUERY_DATA = "no data to pass in query. All string fields were empty and/or book_id is 0"

# Success
HOMEPAGE = "Welcome To Book Library!"
ADD_SUCCESS = "Data successfully added."
UPDATE_SUCCESS = "Data successfully updated."
DELETE_SUCCESS = "Data successfully deleted."
