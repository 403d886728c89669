"""Tags and field names written by the transaction time filter"""

# Reserved tags, never use them as filter_tag
TRANSACTION_TIME_TAG = "TransactionTime"
TRANSACTION_TIME_EXPIRED_TAG = "TransactionTimeExpired"

HOST_FIELD = "host"
TRANSACTION_TIME_FIELD = "transaction_time"
TRANSACTION_UID_FIELD = "transaction_uid"
TIMESTAMP_START_FIELD = "timestamp_start"
TRANSACTION_DATA_FIELD = "transaction_data"

OLDEST_DATA_KEY = "oldest"
NEWEST_DATA_KEY = "newest"
