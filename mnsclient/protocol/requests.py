"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Typed requests, one class per service operation.

Requests are immutable. validate() runs before anything is sent and raises
InvalidArgumentError so that malformed input never reaches the network.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from mnsclient.exceptions import InvalidArgumentError
from mnsclient.models import (
    AccountAttributes,
    QueueAttributes,
    SubscriptionAttributes,
    TopicAttributes,
)

NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]{0,255}$")

MAX_BATCH_SIZE = 16
MAX_MESSAGE_BYTES = 65536
MAX_LIST_SIZE = 1000

# Characters outside the XML 1.0 Char production
INVALID_XML_CHARS = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _check_name(kind: str, name: Optional[str]) -> None:
    if not name:
        raise InvalidArgumentError(f"{kind} name is required")
    if not NAME_PATTERN.match(name):
        raise InvalidArgumentError(
            f"invalid {kind} name {name!r}: must start with a letter and contain "
            "only letters, digits and hyphens (at most 256 characters)"
        )


def _check_range(label: str, value: Optional[int], low: int, high: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{label} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidArgumentError(f"{label} must be between {low} and {high}, got {value}")


def _check_body(body: Optional[str]) -> None:
    if body is None or body == "":
        raise InvalidArgumentError("message body is required")
    if not isinstance(body, str):
        raise InvalidArgumentError(f"message body must be str, got {type(body).__name__}")
    _check_xml_text("message body", body)
    if len(body.encode("utf-8")) > MAX_MESSAGE_BYTES:
        raise InvalidArgumentError(f"message body exceeds {MAX_MESSAGE_BYTES} bytes")


def _check_xml_text(label: str, value: Optional[str]) -> None:
    if value is None:
        return
    match = INVALID_XML_CHARS.search(value)
    if match:
        raise InvalidArgumentError(
            f"{label} contains U+{ord(match.group()):04X}, which XML cannot carry"
        )


def _check_receipt_handle(handle: Optional[str]) -> None:
    if not handle:
        raise InvalidArgumentError("receipt handle is required")


def _check_queue_attributes(attributes: Optional[QueueAttributes]) -> None:
    if attributes is None:
        return
    _check_range("DelaySeconds", attributes.delay_seconds, 0, 604800)
    _check_range("MaximumMessageSize", attributes.maximum_message_size, 1024, MAX_MESSAGE_BYTES)
    _check_range("MessageRetentionPeriod", attributes.message_retention_period, 60, 604800)
    _check_range("VisibilityTimeout", attributes.visibility_timeout, 1, 43200)
    _check_range("PollingWaitSeconds", attributes.polling_wait_seconds, 0, 30)


def _check_topic_attributes(attributes: Optional[TopicAttributes]) -> None:
    if attributes is None:
        return
    _check_range("MaximumMessageSize", attributes.maximum_message_size, 1024, MAX_MESSAGE_BYTES)


class MNSRequest:
    """Base class for all requests."""

    def validate(self) -> None:
        """Raise InvalidArgumentError if the request cannot be sent."""


class _ListRequest(MNSRequest):

    def validate(self) -> None:
        _check_range("ret_num", self.ret_num, 1, MAX_LIST_SIZE)


# Queue management

@dataclass(frozen=True)
class CreateQueueRequest(MNSRequest):
    queue_name: str
    attributes: Optional[QueueAttributes] = None

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        _check_queue_attributes(self.attributes)


@dataclass(frozen=True)
class DeleteQueueRequest(MNSRequest):
    queue_name: str

    def validate(self) -> None:
        _check_name("queue", self.queue_name)


@dataclass(frozen=True)
class ListQueueRequest(_ListRequest):
    """List queues, optionally filtered by name prefix and paged by marker."""
    ret_num: Optional[int] = None
    prefix: Optional[str] = None
    marker: Optional[str] = None


@dataclass(frozen=True)
class GetQueueAttributeRequest(MNSRequest):
    queue_name: str

    def validate(self) -> None:
        _check_name("queue", self.queue_name)


@dataclass(frozen=True)
class SetQueueAttributeRequest(MNSRequest):
    queue_name: str
    attributes: QueueAttributes = field(default_factory=QueueAttributes)

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        _check_queue_attributes(self.attributes)


# Queue messages

@dataclass(frozen=True)
class SendMessageRequest(MNSRequest):
    """
    Send one message.

    ``queue_name`` is bound by the Queue handle; callers normally leave it
    unset.
    """
    message_body: str
    delay_seconds: Optional[int] = None
    priority: Optional[int] = None
    queue_name: Optional[str] = None

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        _check_body(self.message_body)
        _check_range("DelaySeconds", self.delay_seconds, 0, 604800)
        _check_range("Priority", self.priority, 1, 16)


@dataclass(frozen=True)
class SendMessageRequestItem:
    message_body: str
    delay_seconds: Optional[int] = None
    priority: Optional[int] = None


@dataclass(frozen=True)
class BatchSendMessageRequest(MNSRequest):
    items: Tuple[SendMessageRequestItem, ...]
    queue_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        if not self.items:
            raise InvalidArgumentError("batch send requires at least one message")
        if len(self.items) > MAX_BATCH_SIZE:
            raise InvalidArgumentError(
                f"batch send accepts at most {MAX_BATCH_SIZE} messages, got {len(self.items)}"
            )
        for item in self.items:
            _check_body(item.message_body)
            _check_range("DelaySeconds", item.delay_seconds, 0, 604800)
            _check_range("Priority", item.priority, 1, 16)


@dataclass(frozen=True)
class ReceiveMessageRequest(MNSRequest):
    """
    Receive one message.

    ``wait_seconds`` is the long-poll window the server waits for a message
    to arrive. None uses the queue's PollingWaitSeconds.
    """
    queue_name: str
    wait_seconds: Optional[int] = None

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        _check_range("wait_seconds", self.wait_seconds, 0, 30)


@dataclass(frozen=True)
class BatchReceiveMessageRequest(MNSRequest):
    queue_name: str
    num_of_messages: int
    wait_seconds: Optional[int] = None

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        if self.num_of_messages is None:
            raise InvalidArgumentError("num_of_messages is required")
        _check_range("num_of_messages", self.num_of_messages, 1, MAX_BATCH_SIZE)
        _check_range("wait_seconds", self.wait_seconds, 0, 30)


@dataclass(frozen=True)
class PeekMessageRequest(MNSRequest):
    queue_name: str

    def validate(self) -> None:
        _check_name("queue", self.queue_name)


@dataclass(frozen=True)
class BatchPeekMessageRequest(MNSRequest):
    queue_name: str
    num_of_messages: int

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        if self.num_of_messages is None:
            raise InvalidArgumentError("num_of_messages is required")
        _check_range("num_of_messages", self.num_of_messages, 1, MAX_BATCH_SIZE)


@dataclass(frozen=True)
class DeleteMessageRequest(MNSRequest):
    queue_name: str
    receipt_handle: str

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        _check_receipt_handle(self.receipt_handle)


@dataclass(frozen=True)
class BatchDeleteMessageRequest(MNSRequest):
    queue_name: str
    receipt_handles: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "receipt_handles", tuple(self.receipt_handles))

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        if not self.receipt_handles:
            raise InvalidArgumentError("batch delete requires at least one receipt handle")
        if len(self.receipt_handles) > MAX_BATCH_SIZE:
            raise InvalidArgumentError(
                f"batch delete accepts at most {MAX_BATCH_SIZE} receipt handles, "
                f"got {len(self.receipt_handles)}"
            )
        for handle in self.receipt_handles:
            _check_receipt_handle(handle)


@dataclass(frozen=True)
class ChangeMessageVisibilityRequest(MNSRequest):
    queue_name: str
    receipt_handle: str
    visibility_timeout: int

    def validate(self) -> None:
        _check_name("queue", self.queue_name)
        _check_receipt_handle(self.receipt_handle)
        if self.visibility_timeout is None:
            raise InvalidArgumentError("visibility_timeout is required")
        _check_range("visibility_timeout", self.visibility_timeout, 1, 43200)


# Topic management

@dataclass(frozen=True)
class CreateTopicRequest(MNSRequest):
    topic_name: str
    attributes: Optional[TopicAttributes] = None

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_topic_attributes(self.attributes)


@dataclass(frozen=True)
class DeleteTopicRequest(MNSRequest):
    topic_name: str

    def validate(self) -> None:
        _check_name("topic", self.topic_name)


@dataclass(frozen=True)
class ListTopicRequest(_ListRequest):
    ret_num: Optional[int] = None
    prefix: Optional[str] = None
    marker: Optional[str] = None


@dataclass(frozen=True)
class GetTopicAttributeRequest(MNSRequest):
    topic_name: str

    def validate(self) -> None:
        _check_name("topic", self.topic_name)


@dataclass(frozen=True)
class SetTopicAttributeRequest(MNSRequest):
    topic_name: str
    attributes: TopicAttributes = field(default_factory=TopicAttributes)

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_topic_attributes(self.attributes)


@dataclass(frozen=True)
class PublishMessageRequest(MNSRequest):
    """Publish one message to a topic; ``topic_name`` is bound by the Topic handle."""
    message_body: str
    message_tag: Optional[str] = None
    topic_name: Optional[str] = None

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_body(self.message_body)
        if self.message_tag is not None and len(self.message_tag) > 16:
            raise InvalidArgumentError("message tag must be at most 16 characters")
        _check_xml_text("message tag", self.message_tag)


# Subscriptions

@dataclass(frozen=True)
class SubscribeRequest(MNSRequest):
    topic_name: str
    attributes: SubscriptionAttributes

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_name("subscription", self.attributes.subscription_name)
        if not self.attributes.endpoint:
            raise InvalidArgumentError("subscription endpoint is required")
        if self.attributes.filter_tag is not None and len(self.attributes.filter_tag) > 16:
            raise InvalidArgumentError("filter tag must be at most 16 characters")
        _check_xml_text("filter tag", self.attributes.filter_tag)
        _check_xml_text("subscription endpoint", self.attributes.endpoint)


@dataclass(frozen=True)
class UnsubscribeRequest(MNSRequest):
    topic_name: str
    subscription_name: str

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_name("subscription", self.subscription_name)


@dataclass(frozen=True)
class ListSubscriptionRequest(_ListRequest):
    topic_name: str
    ret_num: Optional[int] = None
    prefix: Optional[str] = None
    marker: Optional[str] = None

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        super().validate()


@dataclass(frozen=True)
class GetSubscriptionAttributeRequest(MNSRequest):
    topic_name: str
    subscription_name: str

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_name("subscription", self.subscription_name)


@dataclass(frozen=True)
class SetSubscriptionAttributeRequest(MNSRequest):
    topic_name: str
    attributes: SubscriptionAttributes

    def validate(self) -> None:
        _check_name("topic", self.topic_name)
        _check_name("subscription", self.attributes.subscription_name)


# Account

@dataclass(frozen=True)
class GetAccountAttributesRequest(MNSRequest):
    pass


@dataclass(frozen=True)
class SetAccountAttributesRequest(MNSRequest):
    attributes: AccountAttributes = field(default_factory=AccountAttributes)
