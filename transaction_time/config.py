"""Configuration for the transaction time filter using Pydantic Settings"""
import json
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from transaction_time.constants import TRANSACTION_TIME_EXPIRED_TAG, TRANSACTION_TIME_TAG
from transaction_time.events import TIMESTAMP_FIELD


class AttachEvent(str, Enum):
    """Which event of a transaction seeds the generated event"""
    NONE = "none"
    FIRST = "first"
    LAST = "last"
    OLDEST = "oldest"
    NEWEST = "newest"


class ReplaceTimestamp(str, Enum):
    """Which timestamp the generated event carries"""
    KEEP = "keep"
    OLDEST = "oldest"
    NEWEST = "newest"


class TransactionTimeSettings(BaseSettings):
    """
    Settings for one transaction time filter instance

    Only ``uid_field`` is required. Values can be passed directly or loaded
    from ``TRANSACTION_TIME_*`` environment variables.

    Example:
        settings = TransactionTimeSettings(
            uid_field="uid",
            filter_tag="Transaction",
            attach_event="oldest",
            store_data_oldest=["message_type", "work_unit"],
        )
    """

    uid_field: str = Field(..., min_length=1, description="Field identifying the events of a transaction")
    timeout: float = Field(default=300, gt=0, description="Seconds before an open transaction is dropped")
    timestamp_tag: str = Field(
        default=TIMESTAMP_FIELD,
        min_length=1,
        description="Field holding the timestamp used for the elapsed time"
    )
    replace_timestamp: ReplaceTimestamp = Field(
        default=ReplaceTimestamp.KEEP,
        description="Timestamp of the generated event (keep, oldest, newest)"
    )
    filter_tag: Optional[str] = Field(
        default=None,
        description="Only events carrying this tag take part in transactions"
    )
    attach_event: AttachEvent = Field(
        default=AttachEvent.NONE,
        description="Event copied into the generated event (none, first, last, oldest, newest)"
    )
    release_expired: bool = Field(default=True, description="Release the stored events of expired transactions")
    store_data_oldest: Annotated[List[str], NoDecode] = Field(default_factory=list, description="Fields copied from the oldest event")
    store_data_newest: Annotated[List[str], NoDecode] = Field(default_factory=list, description="Fields copied from the newest event")
    ignore_uids: Annotated[List[Any], NoDecode] = Field(default_factory=list, description="UID values never opened as transactions")
    periodic_flush: bool = Field(default=True, description="Run the periodic flusher")
    flush_interval: float = Field(default=5, gt=0, description="Seconds between two flush calls")

    class Config:
        env_prefix = "TRANSACTION_TIME_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @field_validator("filter_tag")
    @classmethod
    def reject_reserved_tags(cls, v):
        if v in (TRANSACTION_TIME_TAG, TRANSACTION_TIME_EXPIRED_TAG):
            raise ValueError(f"'{v}' is reserved for events created by the filter")
        return v

    @field_validator("store_data_oldest", "store_data_newest", "ignore_uids", mode="before")
    @classmethod
    def parse_list(cls, v):
        if v is None:
            return []
        # env values arrive raw: a JSON array or comma separated names
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [x.strip() for x in v.split(",") if x.strip()]
        return v

    @property
    def attach_data(self) -> bool:
        """Whether any store_data field list is configured"""
        return bool(self.store_data_oldest or self.store_data_newest)

    @property
    def store_event(self) -> bool:
        """Whether transactions must keep their events"""
        return self.attach_event is not AttachEvent.NONE or self.attach_data
