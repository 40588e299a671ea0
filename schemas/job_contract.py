# User value: This file names every stage a translation job moves through.
CONTRACT_VERSION = "2024-05-01-doc-batch"

JOB_STATE_CREATED = "CREATED"
JOB_STATE_SOURCE_UPLOADED = "SOURCE_UPLOADED"
JOB_STATE_GRANT_ISSUED = "GRANT_ISSUED"
JOB_STATE_SUBMITTED = "SUBMITTED"
JOB_STATE_POLLING = "POLLING"
JOB_STATE_CLEANING_UP = "CLEANING_UP"
JOB_STATE_SUCCEEDED = "SUCCEEDED"
JOB_STATE_FAILED = "FAILED"

JOB_STATES = (
    JOB_STATE_CREATED,
    JOB_STATE_SOURCE_UPLOADED,
    JOB_STATE_GRANT_ISSUED,
    JOB_STATE_SUBMITTED,
    JOB_STATE_POLLING,
    JOB_STATE_CLEANING_UP,
    JOB_STATE_SUCCEEDED,
    JOB_STATE_FAILED,
)

TERMINAL_STATES = (
    JOB_STATE_SUCCEEDED,
    JOB_STATE_FAILED,
)
