"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Value objects shared by requests and responses.

Attribute objects are partially settable: a field left as None is not sent.
Fields marked read-only are assigned by the service and ignored on writes.
"""

import base64
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NotifyStrategy(str, Enum):
    """Retry strategy for pushing topic messages to an endpoint."""
    BACKOFF_RETRY = "BACKOFF_RETRY"
    EXPONENTIAL_DECAY_RETRY = "EXPONENTIAL_DECAY_RETRY"


class NotifyContentFormat(str, Enum):
    """Format of the notification delivered to a subscription endpoint."""
    XML = "XML"
    JSON = "JSON"
    SIMPLIFIED = "SIMPLIFIED"


@dataclass
class QueueAttributes:
    """
    Queue attributes.

    Settable: delay_seconds, maximum_message_size, message_retention_period,
    visibility_timeout, polling_wait_seconds, logging_enabled.
    """
    delay_seconds: Optional[int] = None
    maximum_message_size: Optional[int] = None
    message_retention_period: Optional[int] = None
    visibility_timeout: Optional[int] = None
    polling_wait_seconds: Optional[int] = None
    logging_enabled: Optional[bool] = None

    # read-only
    queue_name: Optional[str] = None
    create_time: Optional[int] = None
    last_modify_time: Optional[int] = None
    active_messages: Optional[int] = None
    inactive_messages: Optional[int] = None
    delay_messages: Optional[int] = None


@dataclass
class TopicAttributes:
    """Topic attributes. Settable: maximum_message_size, logging_enabled."""
    maximum_message_size: Optional[int] = None
    logging_enabled: Optional[bool] = None

    # read-only
    topic_name: Optional[str] = None
    create_time: Optional[int] = None
    last_modify_time: Optional[int] = None
    message_retention_period: Optional[int] = None
    message_count: Optional[int] = None


@dataclass
class SubscriptionAttributes:
    """
    Subscription attributes.

    ``subscription_name`` addresses the subscription and travels in the
    resource path. On update only ``strategy`` can change.
    """
    subscription_name: Optional[str] = None
    endpoint: Optional[str] = None
    strategy: Optional[NotifyStrategy] = None
    content_format: Optional[NotifyContentFormat] = None
    filter_tag: Optional[str] = None

    # read-only
    topic_owner: Optional[str] = None
    topic_name: Optional[str] = None
    create_time: Optional[int] = None
    last_modify_time: Optional[int] = None


@dataclass
class AccountAttributes:
    """Account-wide settings independent of any queue or topic."""
    logging_bucket: Optional[str] = None


@dataclass
class Message:
    """
    A message as delivered by receive or peek.

    Peeked messages carry no receipt handle and cannot be deleted.
    """
    message_id: str
    body: str = ""
    body_md5: Optional[str] = None
    receipt_handle: Optional[str] = None
    enqueue_time: Optional[int] = None
    first_dequeue_time: Optional[int] = None
    next_visible_time: Optional[int] = None
    dequeue_count: Optional[int] = None
    priority: Optional[int] = None

    @property
    def is_peeked(self) -> bool:
        return self.receipt_handle is None


@dataclass
class SendMessageResult:
    """Per-message outcome of a batch send."""
    message_id: Optional[str] = None
    message_body_md5: Optional[str] = None
    receipt_handle: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeed(self) -> bool:
        return self.error_code is None


@dataclass
class DeleteMessageFailure:
    """Per-handle failure of a batch delete."""
    receipt_handle: str
    error_code: str
    error_message: str = ""


def body_md5(body: str) -> str:
    """MD5 of a message body as the service reports it (upper-case hex)."""
    return hashlib.md5(body.encode("utf-8")).hexdigest().upper()


def encode_body(body: str) -> str:
    return base64.b64encode(body.encode("utf-8")).decode("ascii")


def decode_body(body: str) -> str:
    return base64.b64decode(body.encode("ascii"), validate=True).decode("utf-8")
