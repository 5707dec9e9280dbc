"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Typed responses, one class per service operation.

A response object is created empty by the caller (the "template"), handed to
the transport together with its request, and filled in by the codec from the
reply.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from mnsclient.models import (
    AccountAttributes,
    Message,
    QueueAttributes,
    SendMessageResult,
    SubscriptionAttributes,
    TopicAttributes,
)


@dataclass
class MNSResponse:
    """Fields common to every response."""
    status_code: int = 0
    request_id: Optional[str] = None

    @property
    def succeed(self) -> bool:
        return 200 <= self.status_code < 300


# Queue management

@dataclass
class CreateQueueResponse(MNSResponse):
    queue_name: Optional[str] = None
    queue_url: Optional[str] = None


@dataclass
class DeleteQueueResponse(MNSResponse):
    pass


@dataclass
class ListQueueResponse(MNSResponse):
    queue_names: List[str] = field(default_factory=list)
    next_marker: Optional[str] = None


@dataclass
class GetQueueAttributeResponse(MNSResponse):
    attributes: QueueAttributes = field(default_factory=QueueAttributes)


@dataclass
class SetQueueAttributeResponse(MNSResponse):
    pass


# Queue messages

@dataclass
class SendMessageResponse(MNSResponse):
    """``receipt_handle`` is only returned for delayed messages."""
    message_id: Optional[str] = None
    message_body_md5: Optional[str] = None
    receipt_handle: Optional[str] = None


@dataclass
class BatchSendMessageResponse(MNSResponse):
    results: List[SendMessageResult] = field(default_factory=list)


@dataclass
class ReceiveMessageResponse(MNSResponse):
    """``message`` is None when the wait window passed without a message."""
    message: Optional[Message] = None

    @property
    def is_empty(self) -> bool:
        return self.message is None


@dataclass
class BatchReceiveMessageResponse(MNSResponse):
    messages: List[Message] = field(default_factory=list)


@dataclass
class PeekMessageResponse(MNSResponse):
    message: Optional[Message] = None

    @property
    def is_empty(self) -> bool:
        return self.message is None


@dataclass
class BatchPeekMessageResponse(MNSResponse):
    messages: List[Message] = field(default_factory=list)


@dataclass
class DeleteMessageResponse(MNSResponse):
    pass


@dataclass
class BatchDeleteMessageResponse(MNSResponse):
    pass


@dataclass
class ChangeMessageVisibilityResponse(MNSResponse):
    receipt_handle: Optional[str] = None
    next_visible_time: Optional[int] = None


# Topic management

@dataclass
class CreateTopicResponse(MNSResponse):
    topic_name: Optional[str] = None
    topic_url: Optional[str] = None


@dataclass
class DeleteTopicResponse(MNSResponse):
    pass


@dataclass
class ListTopicResponse(MNSResponse):
    topic_names: List[str] = field(default_factory=list)
    next_marker: Optional[str] = None


@dataclass
class GetTopicAttributeResponse(MNSResponse):
    attributes: TopicAttributes = field(default_factory=TopicAttributes)


@dataclass
class SetTopicAttributeResponse(MNSResponse):
    pass


@dataclass
class PublishMessageResponse(MNSResponse):
    message_id: Optional[str] = None
    message_body_md5: Optional[str] = None


# Subscriptions

@dataclass
class SubscribeResponse(MNSResponse):
    subscription_url: Optional[str] = None


@dataclass
class UnsubscribeResponse(MNSResponse):
    pass


@dataclass
class ListSubscriptionResponse(MNSResponse):
    subscription_names: List[str] = field(default_factory=list)
    next_marker: Optional[str] = None


@dataclass
class GetSubscriptionAttributeResponse(MNSResponse):
    attributes: SubscriptionAttributes = field(default_factory=SubscriptionAttributes)


@dataclass
class SetSubscriptionAttributeResponse(MNSResponse):
    pass


# Account

@dataclass
class GetAccountAttributesResponse(MNSResponse):
    attributes: AccountAttributes = field(default_factory=AccountAttributes)


@dataclass
class SetAccountAttributesResponse(MNSResponse):
    pass
