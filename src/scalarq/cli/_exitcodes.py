"""Process exit codes for the scalarq CLI."""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
DATA_ERROR = 3
EXECUTION_FAILURE = 4
