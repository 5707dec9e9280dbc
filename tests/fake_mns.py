"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

In-process fake of the MNS service for tests.

FakeMNSServer is a requests transport adapter. Mount it on a Session (or use
FakeMNSServer.session()) and every request sent through that session is
verified, decoded with the service side of the codec, applied to in-memory
queues and topics, and answered with an encoded reply. No sockets are used.
"""

import threading
import time
import uuid
import xml.etree.ElementTree as ET
from collections import deque
from dataclasses import dataclass, field, fields, replace
from functools import singledispatchmethod
from typing import Deque, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlsplit

import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from mnsclient.exceptions import ParseError, ServiceError
from mnsclient.http import signer
from mnsclient.http.base import HttpRequest, HttpResponse
from mnsclient.models import (
    AccountAttributes,
    Message,
    QueueAttributes,
    SendMessageResult,
    SubscriptionAttributes,
    TopicAttributes,
    body_md5,
)
from mnsclient.protocol import codec
from mnsclient.protocol import requests as rq
from mnsclient.protocol import responses as rs
from mnsclient.protocol import xmlutil as xu

DEFAULT_VISIBILITY_TIMEOUT = 30


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return uuid.uuid4().hex.upper()


def _merge(current, update):
    """Copy the non-None fields of ``update`` onto ``current``."""
    changes = {f.name: getattr(update, f.name) for f in fields(update)
               if getattr(update, f.name) is not None}
    return replace(current, **changes)


def _same_settings(current, requested, names) -> bool:
    return all(
        getattr(requested, name) is None or getattr(requested, name) == getattr(current, name)
        for name in names
    )


@dataclass
class StoredMessage:
    message_id: str
    body: str
    enqueue_time: int
    visible_at: float
    priority: int = 8
    dequeue_count: int = 0
    first_dequeue_time: Optional[int] = None
    receipt_handle: Optional[str] = None

    def to_message(self, with_handle: bool) -> Message:
        return Message(
            message_id=self.message_id,
            body=self.body,
            body_md5=body_md5(self.body),
            receipt_handle=self.receipt_handle if with_handle else None,
            enqueue_time=self.enqueue_time,
            first_dequeue_time=self.first_dequeue_time,
            next_visible_time=int((time.time() + max(self.visible_at - time.monotonic(), 0)) * 1000),
            dequeue_count=self.dequeue_count,
            priority=self.priority,
        )


@dataclass
class FakeQueue:
    attributes: QueueAttributes
    messages: List[StoredMessage] = field(default_factory=list)


@dataclass
class FakeTopic:
    attributes: TopicAttributes
    subscriptions: Dict[str, SubscriptionAttributes] = field(default_factory=dict)
    published: List[Tuple[str, Optional[str]]] = field(default_factory=list)


class FakeMNSServer(BaseAdapter):
    """
    Fake message service behind a requests adapter.

    Args:
        access_id: Access key id requests must be signed with
        access_key: Access key secret requests must be signed with
        base_url: Base URL used in Location headers and list replies
    """

    def __init__(
        self,
        access_id: str = "test-access-id",
        access_key: str = "test-access-key",
        base_url: str = "http://fake-mns.local",
    ):
        super().__init__()
        self.access_id = access_id
        self.access_key = access_key
        self.base_url = base_url
        self.queues: Dict[str, FakeQueue] = {}
        self.topics: Dict[str, FakeTopic] = {}
        self.account = AccountAttributes()
        self.received: List[HttpRequest] = []
        self._injected: Deque[Union[HttpResponse, Exception]] = deque()
        self._cond = threading.Condition()

    def session(self) -> requests.Session:
        """Return a new Session whose requests are served by this fake."""
        session = requests.Session()
        session.mount("http://", self)
        session.mount("https://", self)
        return session

    def inject(self, reply: Union[HttpResponse, Exception]) -> None:
        """Answer the next request with ``reply`` (or raise it) instead of serving it."""
        self._injected.append(reply)

    @property
    def operations(self) -> List[str]:
        """Decoded operation names of every served request, in order."""
        names = []
        for http_request in self.received:
            try:
                names.append(type(codec.decode_request(http_request)).__name__)
            except ParseError:
                names.append("Unknown")
        return names

    # requests adapter interface

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parts = urlsplit(request.url)
        body = request.body
        if isinstance(body, str):
            body = body.encode("utf-8")
        http_request = HttpRequest(
            method=request.method,
            path=parts.path or "/",
            params=dict(parse_qsl(parts.query, keep_blank_values=True)),
            headers=dict(request.headers),
            body=body or None,
        )
        http_response = self.handle(http_request)

        response = requests.Response()
        response.status_code = http_response.status_code
        response.headers = CaseInsensitiveDict(http_response.headers)
        response._content = http_response.body
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        response.reason = "OK" if http_response.ok else "Error"
        return response

    def close(self):
        pass

    # Service

    def handle(self, http_request: HttpRequest) -> HttpResponse:
        self.received.append(http_request)
        request_id = _new_id()[:24]

        if self._injected:
            reply = self._injected.popleft()
            if isinstance(reply, Exception):
                raise reply
            return reply

        if not signer.verify(
            self.access_id, self.access_key, http_request.method,
            http_request.resource, http_request.headers,
        ):
            return codec.encode_error(
                "SignatureDoesNotMatch", "The request signature does not match.", 403, request_id
            )

        try:
            request = codec.decode_request(http_request)
        except ParseError as e:
            return codec.encode_error("MalformedXML", str(e), 400, request_id)

        try:
            response = self.apply(request)
        except ServiceError as e:
            return codec.encode_error(e.code, e.message, e.status_code or 400, request_id)

        if isinstance(response, HttpResponse):
            return response
        response.request_id = request_id
        return codec.encode_response(response, self.base_url)

    @singledispatchmethod
    def apply(self, request):
        raise ServiceError("InvalidArgument", f"unsupported operation {type(request).__name__}",
                           status_code=400)

    # Queues

    def _queue(self, name: str) -> FakeQueue:
        if name not in self.queues:
            raise ServiceError("QueueNotExist", "The queue name you provided is not exist.",
                               status_code=404)
        return self.queues[name]

    @apply.register
    def _(self, request: rq.CreateQueueRequest):
        requested = request.attributes or QueueAttributes()
        with self._cond:
            existing = self.queues.get(request.queue_name)
            if existing is not None:
                if _same_settings(existing.attributes, requested, codec.QUEUE_SETTABLE):
                    return rs.CreateQueueResponse(status_code=204)
                raise ServiceError("QueueAlreadyExist", "The queue you want to create is already exist.",
                                   status_code=409)
            now = _now_ms()
            attributes = _merge(
                QueueAttributes(
                    delay_seconds=0,
                    maximum_message_size=65536,
                    message_retention_period=345600,
                    visibility_timeout=DEFAULT_VISIBILITY_TIMEOUT,
                    polling_wait_seconds=0,
                    logging_enabled=False,
                ),
                requested,
            )
            attributes = replace(attributes, queue_name=request.queue_name,
                                 create_time=now, last_modify_time=now)
            self.queues[request.queue_name] = FakeQueue(attributes)
        return rs.CreateQueueResponse(queue_url=f"{self.base_url}/queues/{request.queue_name}")

    @apply.register
    def _(self, request: rq.DeleteQueueRequest):
        with self._cond:
            self._queue(request.queue_name)
            del self.queues[request.queue_name]
        return rs.DeleteQueueResponse()

    @apply.register
    def _(self, request: rq.ListQueueRequest):
        names, marker = self._page(self.queues, request)
        return rs.ListQueueResponse(queue_names=names, next_marker=marker)

    @apply.register
    def _(self, request: rq.GetQueueAttributeRequest):
        with self._cond:
            queue = self._queue(request.queue_name)
            now = time.monotonic()
            active = sum(1 for m in queue.messages if m.visible_at <= now)
            attributes = replace(
                queue.attributes,
                active_messages=active,
                inactive_messages=sum(1 for m in queue.messages if m.dequeue_count and m.visible_at > now),
                delay_messages=sum(1 for m in queue.messages if not m.dequeue_count and m.visible_at > now),
            )
        return rs.GetQueueAttributeResponse(attributes=attributes)

    @apply.register
    def _(self, request: rq.SetQueueAttributeRequest):
        with self._cond:
            queue = self._queue(request.queue_name)
            queue.attributes = replace(_merge(queue.attributes, request.attributes),
                                       last_modify_time=_now_ms())
        return rs.SetQueueAttributeResponse()

    # Queue messages

    def _store(self, queue: FakeQueue, body: str, delay: Optional[int], priority: Optional[int]):
        delay = queue.attributes.delay_seconds if delay is None else delay
        stored = StoredMessage(
            message_id=_new_id(),
            body=body,
            enqueue_time=_now_ms(),
            visible_at=time.monotonic() + (delay or 0),
            priority=priority or 8,
        )
        if delay:
            stored.receipt_handle = f"rh-{_new_id()}"
        queue.messages.append(stored)
        return stored

    @apply.register
    def _(self, request: rq.SendMessageRequest):
        with self._cond:
            queue = self._queue(request.queue_name)
            stored = self._store(queue, request.message_body, request.delay_seconds, request.priority)
            self._cond.notify_all()
        return rs.SendMessageResponse(
            message_id=stored.message_id,
            message_body_md5=body_md5(stored.body),
            receipt_handle=stored.receipt_handle,
        )

    @apply.register
    def _(self, request: rq.BatchSendMessageRequest):
        results = []
        with self._cond:
            queue = self._queue(request.queue_name)
            for item in request.items:
                stored = self._store(queue, item.message_body, item.delay_seconds, item.priority)
                results.append(SendMessageResult(
                    message_id=stored.message_id,
                    message_body_md5=body_md5(stored.body),
                    receipt_handle=stored.receipt_handle,
                ))
            self._cond.notify_all()
        return rs.BatchSendMessageResponse(results=results)

    def _visible(self, queue: FakeQueue, limit: int) -> List[StoredMessage]:
        now = time.monotonic()
        ready = [m for m in queue.messages if m.visible_at <= now]
        ready.sort(key=lambda m: (m.priority, m.enqueue_time))
        return ready[:limit]

    def _receive(self, queue_name: str, limit: int, wait_seconds: Optional[int]) -> List[Message]:
        with self._cond:
            queue = self._queue(queue_name)
            if wait_seconds is None:
                wait_seconds = queue.attributes.polling_wait_seconds or 0
            deadline = time.monotonic() + wait_seconds
            while True:
                ready = self._visible(queue, limit)
                remaining = deadline - time.monotonic()
                if ready or remaining <= 0:
                    break
                # Timed-out messages become visible without a notify
                self._cond.wait(min(remaining, 0.1))
            received = []
            for stored in ready:
                stored.dequeue_count += 1
                if stored.first_dequeue_time is None:
                    stored.first_dequeue_time = _now_ms()
                stored.receipt_handle = f"rh-{_new_id()}"
                stored.visible_at = time.monotonic() + queue.attributes.visibility_timeout
                received.append(stored.to_message(with_handle=True))
            return received

    @apply.register
    def _(self, request: rq.ReceiveMessageRequest):
        messages = self._receive(request.queue_name, 1, request.wait_seconds)
        return rs.ReceiveMessageResponse(message=messages[0] if messages else None)

    @apply.register
    def _(self, request: rq.BatchReceiveMessageRequest):
        messages = self._receive(request.queue_name, request.num_of_messages, request.wait_seconds)
        return rs.BatchReceiveMessageResponse(messages=messages)

    @apply.register
    def _(self, request: rq.PeekMessageRequest):
        with self._cond:
            ready = self._visible(self._queue(request.queue_name), 1)
            return rs.PeekMessageResponse(
                message=ready[0].to_message(with_handle=False) if ready else None
            )

    @apply.register
    def _(self, request: rq.BatchPeekMessageRequest):
        with self._cond:
            ready = self._visible(self._queue(request.queue_name), request.num_of_messages)
            return rs.BatchPeekMessageResponse(
                messages=[m.to_message(with_handle=False) for m in ready]
            )

    def _find_by_handle(self, queue: FakeQueue, handle: str) -> StoredMessage:
        if not handle.startswith("rh-"):
            raise ServiceError("ReceiptHandleError", f"The receipt handle {handle} is not valid.",
                               status_code=400)
        for stored in queue.messages:
            if stored.receipt_handle == handle:
                return stored
        raise ServiceError("MessageNotExist", "Message not exist.", status_code=404)

    @apply.register
    def _(self, request: rq.DeleteMessageRequest):
        with self._cond:
            queue = self._queue(request.queue_name)
            queue.messages.remove(self._find_by_handle(queue, request.receipt_handle))
        return rs.DeleteMessageResponse()

    @apply.register
    def _(self, request: rq.BatchDeleteMessageRequest):
        failures = []
        with self._cond:
            queue = self._queue(request.queue_name)
            for handle in request.receipt_handles:
                try:
                    queue.messages.remove(self._find_by_handle(queue, handle))
                except ServiceError as e:
                    failures.append((handle, e))
        if not failures:
            return rs.BatchDeleteMessageResponse()
        root = xu.new_document("Errors")
        for handle, error in failures:
            element = ET.SubElement(root, "Error")
            ET.SubElement(element, "ErrorCode").text = error.code
            ET.SubElement(element, "ErrorMessage").text = error.message
            ET.SubElement(element, "ReceiptHandle").text = handle
        return HttpResponse(
            status_code=404,
            headers={"content-type": codec.CONTENT_TYPE},
            body=xu.to_bytes(root),
        )

    @apply.register
    def _(self, request: rq.ChangeMessageVisibilityRequest):
        with self._cond:
            queue = self._queue(request.queue_name)
            stored = self._find_by_handle(queue, request.receipt_handle)
            stored.receipt_handle = f"rh-{_new_id()}"
            stored.visible_at = time.monotonic() + request.visibility_timeout
            self._cond.notify_all()
            return rs.ChangeMessageVisibilityResponse(
                receipt_handle=stored.receipt_handle,
                next_visible_time=_now_ms() + request.visibility_timeout * 1000,
            )

    # Topics

    def _topic(self, name: str) -> FakeTopic:
        if name not in self.topics:
            raise ServiceError("TopicNotExist", "The topic name you provided is not exist.",
                               status_code=404)
        return self.topics[name]

    @apply.register
    def _(self, request: rq.CreateTopicRequest):
        requested = request.attributes or TopicAttributes()
        with self._cond:
            existing = self.topics.get(request.topic_name)
            if existing is not None:
                if _same_settings(existing.attributes, requested, codec.TOPIC_SETTABLE):
                    return rs.CreateTopicResponse(status_code=204)
                raise ServiceError("TopicAlreadyExist", "The topic you want to create is already exist.",
                                   status_code=409)
            now = _now_ms()
            attributes = _merge(TopicAttributes(maximum_message_size=65536, logging_enabled=False),
                                requested)
            self.topics[request.topic_name] = FakeTopic(replace(
                attributes,
                topic_name=request.topic_name,
                create_time=now,
                last_modify_time=now,
                message_retention_period=86400,
                message_count=0,
            ))
        return rs.CreateTopicResponse(topic_url=f"{self.base_url}/topics/{request.topic_name}")

    @apply.register
    def _(self, request: rq.DeleteTopicRequest):
        with self._cond:
            self._topic(request.topic_name)
            del self.topics[request.topic_name]
        return rs.DeleteTopicResponse()

    @apply.register
    def _(self, request: rq.ListTopicRequest):
        names, marker = self._page(self.topics, request)
        return rs.ListTopicResponse(topic_names=names, next_marker=marker)

    @apply.register
    def _(self, request: rq.GetTopicAttributeRequest):
        with self._cond:
            topic = self._topic(request.topic_name)
            return rs.GetTopicAttributeResponse(
                attributes=replace(topic.attributes, message_count=len(topic.published))
            )

    @apply.register
    def _(self, request: rq.SetTopicAttributeRequest):
        with self._cond:
            topic = self._topic(request.topic_name)
            topic.attributes = replace(_merge(topic.attributes, request.attributes),
                                       last_modify_time=_now_ms())
        return rs.SetTopicAttributeResponse()

    @apply.register
    def _(self, request: rq.PublishMessageRequest):
        with self._cond:
            topic = self._topic(request.topic_name)
            topic.published.append((request.message_body, request.message_tag))
        return rs.PublishMessageResponse(
            message_id=_new_id(), message_body_md5=body_md5(request.message_body)
        )

    # Subscriptions

    def _subscription(self, topic: FakeTopic, name: str) -> SubscriptionAttributes:
        if name not in topic.subscriptions:
            raise ServiceError("SubscriptionNotExist", "The subscription you provided is not exist.",
                               status_code=404)
        return topic.subscriptions[name]

    @apply.register
    def _(self, request: rq.SubscribeRequest):
        requested = request.attributes
        name = requested.subscription_name
        with self._cond:
            topic = self._topic(request.topic_name)
            existing = topic.subscriptions.get(name)
            if existing is not None:
                if _same_settings(existing, requested, codec.SUBSCRIBE_SETTABLE):
                    return rs.SubscribeResponse(status_code=204)
                raise ServiceError("SubscriptionAlreadyExist",
                                   "The subscription you want to create is already exist.",
                                   status_code=409)
            now = _now_ms()
            topic.subscriptions[name] = replace(
                requested,
                topic_name=request.topic_name,
                topic_owner=self.access_id,
                create_time=now,
                last_modify_time=now,
            )
        return rs.SubscribeResponse(
            subscription_url=f"{self.base_url}/topics/{request.topic_name}/subscriptions/{name}"
        )

    @apply.register
    def _(self, request: rq.UnsubscribeRequest):
        with self._cond:
            topic = self._topic(request.topic_name)
            self._subscription(topic, request.subscription_name)
            del topic.subscriptions[request.subscription_name]
        return rs.UnsubscribeResponse()

    @apply.register
    def _(self, request: rq.ListSubscriptionRequest):
        with self._cond:
            topic = self._topic(request.topic_name)
        names, marker = self._page(topic.subscriptions, request)
        return rs.ListSubscriptionResponse(subscription_names=names, next_marker=marker)

    @apply.register
    def _(self, request: rq.GetSubscriptionAttributeRequest):
        with self._cond:
            topic = self._topic(request.topic_name)
            return rs.GetSubscriptionAttributeResponse(
                attributes=self._subscription(topic, request.subscription_name)
            )

    @apply.register
    def _(self, request: rq.SetSubscriptionAttributeRequest):
        name = request.attributes.subscription_name
        with self._cond:
            topic = self._topic(request.topic_name)
            current = self._subscription(topic, name)
            topic.subscriptions[name] = replace(
                current,
                strategy=request.attributes.strategy or current.strategy,
                last_modify_time=_now_ms(),
            )
        return rs.SetSubscriptionAttributeResponse()

    # Account

    @apply.register
    def _(self, request: rq.GetAccountAttributesRequest):
        return rs.GetAccountAttributesResponse(attributes=replace(self.account))

    @apply.register
    def _(self, request: rq.SetAccountAttributesRequest):
        with self._cond:
            self.account = _merge(self.account, request.attributes)
        return rs.SetAccountAttributesResponse()

    # Paging

    def _page(self, items: Dict[str, object], request) -> Tuple[List[str], Optional[str]]:
        with self._cond:
            names = sorted(name for name in items if name.startswith(request.prefix or ""))
        if request.marker:
            names = [name for name in names if name >= request.marker]
        size = request.ret_num or 1000
        if len(names) > size:
            return names[:size], names[size]
        return names, None
