"""Application constants."""

USER_AGENT = "feed311/1.0 (+311 incident viewer)"
MAX_RESULTS = 100
STAGES = (
    "fetch",
    "normalise",
    "export",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
INVALID_SAMPLE_LIMIT = 50
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "rows_in",
    "rows_out",
    "error_code",
    "row_number",
    "field",
    "message",
)
DROP_FIELD_COUNT_MISMATCH = "FIELD_COUNT_MISMATCH"
DROP_ROW_INVALID = "ROW_INVALID"
