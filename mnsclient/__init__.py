"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

mnsclient - Queue and topic client for the MNS message service

Signed HTTP/XML transport, typed requests and responses, queue and topic
handles, and a promise-based async layer.
"""

from mnsclient._version import __version__
from mnsclient.client import Client
from mnsclient.config import ClientOptions, MNSConfig, RetryPolicy
from mnsclient.models import (
    AccountAttributes,
    Message,
    NotifyContentFormat,
    NotifyStrategy,
    QueueAttributes,
    SubscriptionAttributes,
    TopicAttributes,
)
from mnsclient.promise import AsyncCallback, MNSPromise, PromiseState
from mnsclient.protocol.requests import (
    BatchSendMessageRequest,
    PublishMessageRequest,
    SendMessageRequest,
    SendMessageRequestItem,
)
from mnsclient.queue import Queue
from mnsclient.topic import Topic

__all__ = [
    "__version__",
    "Client",
    "ClientOptions",
    "MNSConfig",
    "RetryPolicy",
    "AccountAttributes",
    "Message",
    "NotifyContentFormat",
    "NotifyStrategy",
    "QueueAttributes",
    "SubscriptionAttributes",
    "TopicAttributes",
    "AsyncCallback",
    "MNSPromise",
    "PromiseState",
    "BatchSendMessageRequest",
    "PublishMessageRequest",
    "SendMessageRequest",
    "SendMessageRequestItem",
    "Queue",
    "Topic",
]
