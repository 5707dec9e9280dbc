"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Codec between typed requests/responses and the HTTP/XML wire format.

Client side:
- encode_request(request) -> HttpRequest
- decode_response(response, http_response) fills the response template or
  raises a ServiceError subtype (structured error reply) or ParseError
  (anything that cannot be decoded)

Service side (used by test doubles and for round-trip checks):
- decode_request(http_request) -> request
- encode_response(response) -> HttpResponse
- encode_error(...) -> HttpResponse
"""

import xml.etree.ElementTree as ET
from functools import singledispatch
from typing import Any, Dict, List, Optional, Type

from mnsclient.exceptions import (
    AccessDeniedError,
    BatchDeleteError,
    BatchSendError,
    InvalidArgumentServiceError,
    InvalidReceiptHandleError,
    MessageNotExistError,
    ParseError,
    QueueAlreadyExistError,
    QueueNotExistError,
    ServiceError,
    SubscriptionAlreadyExistError,
    SubscriptionNotExistError,
    ThrottledError,
    TopicAlreadyExistError,
    TopicNotExistError,
)
from mnsclient.http.base import HttpRequest, HttpResponse
from mnsclient.models import (
    AccountAttributes,
    DeleteMessageFailure,
    Message,
    NotifyContentFormat,
    NotifyStrategy,
    QueueAttributes,
    SendMessageResult,
    SubscriptionAttributes,
    TopicAttributes,
)
from mnsclient.protocol import requests as rq
from mnsclient.protocol import responses as rs
from mnsclient.protocol import xmlutil as xu

API_VERSION = "2015-06-06"
CONTENT_TYPE = "text/xml;charset=utf-8"

HEADER_RET_NUMBER = "x-mns-ret-number"
HEADER_PREFIX = "x-mns-prefix"
HEADER_MARKER = "x-mns-marker"
HEADER_REQUEST_ID = "x-mns-request-id"

QUEUE_FIELDS = [
    ("delay_seconds", "DelaySeconds", int),
    ("maximum_message_size", "MaximumMessageSize", int),
    ("message_retention_period", "MessageRetentionPeriod", int),
    ("visibility_timeout", "VisibilityTimeout", int),
    ("polling_wait_seconds", "PollingWaitSeconds", int),
    ("logging_enabled", "LoggingEnabled", bool),
    ("queue_name", "QueueName", str),
    ("create_time", "CreateTime", int),
    ("last_modify_time", "LastModifyTime", int),
    ("active_messages", "ActiveMessages", int),
    ("inactive_messages", "InactiveMessages", int),
    ("delay_messages", "DelayMessages", int),
]
QUEUE_SETTABLE = (
    "delay_seconds", "maximum_message_size", "message_retention_period",
    "visibility_timeout", "polling_wait_seconds", "logging_enabled",
)

TOPIC_FIELDS = [
    ("maximum_message_size", "MaximumMessageSize", int),
    ("logging_enabled", "LoggingEnabled", bool),
    ("topic_name", "TopicName", str),
    ("create_time", "CreateTime", int),
    ("last_modify_time", "LastModifyTime", int),
    ("message_retention_period", "MessageRetentionPeriod", int),
    ("message_count", "MessageCount", int),
]
TOPIC_SETTABLE = ("maximum_message_size", "logging_enabled")

SUBSCRIPTION_FIELDS = [
    ("subscription_name", "SubscriptionName", str),
    ("endpoint", "Endpoint", str),
    ("strategy", "NotifyStrategy", NotifyStrategy),
    ("content_format", "NotifyContentFormat", NotifyContentFormat),
    ("filter_tag", "FilterTag", str),
    ("topic_owner", "TopicOwner", str),
    ("topic_name", "TopicName", str),
    ("create_time", "CreateTime", int),
    ("last_modify_time", "LastModifyTime", int),
]
SUBSCRIBE_SETTABLE = ("endpoint", "strategy", "content_format", "filter_tag")
SUBSCRIPTION_UPDATABLE = ("strategy",)

ACCOUNT_FIELDS = [
    ("logging_bucket", "LoggingBucket", str),
]

MESSAGE_FIELDS = [
    ("message_id", "MessageId", str),
    ("receipt_handle", "ReceiptHandle", str),
    ("body_md5", "MessageBodyMD5", str),
    ("body", "MessageBody", str),
    ("enqueue_time", "EnqueueTime", int),
    ("next_visible_time", "NextVisibleTime", int),
    ("first_dequeue_time", "FirstDequeueTime", int),
    ("dequeue_count", "DequeueCount", int),
    ("priority", "Priority", int),
]

SEND_ITEM_FIELDS = [
    ("message_body", "MessageBody", str),
    ("delay_seconds", "DelaySeconds", int),
    ("priority", "Priority", int),
]

SEND_RESULT_FIELDS = [
    ("message_id", "MessageId", str),
    ("message_body_md5", "MessageBodyMD5", str),
    ("receipt_handle", "ReceiptHandle", str),
    ("error_code", "ErrorCode", str),
    ("error_message", "ErrorMessage", str),
]

ERROR_CLASSES: Dict[str, Type[ServiceError]] = {
    "QueueAlreadyExist": QueueAlreadyExistError,
    "TopicAlreadyExist": TopicAlreadyExistError,
    "SubscriptionAlreadyExist": SubscriptionAlreadyExistError,
    "QueueNotExist": QueueNotExistError,
    "TopicNotExist": TopicNotExistError,
    "SubscriptionNotExist": SubscriptionNotExistError,
    "MessageNotExist": MessageNotExistError,
    "ReceiptHandleError": InvalidReceiptHandleError,
    "InvalidArgument": InvalidArgumentServiceError,
    "MalformedXML": InvalidArgumentServiceError,
    "InvalidQueueName": InvalidArgumentServiceError,
    "InvalidTopicName": InvalidArgumentServiceError,
    "InvalidSubscriptionName": InvalidArgumentServiceError,
    "MessageBodyTooLarge": InvalidArgumentServiceError,
    "AccessDenied": AccessDeniedError,
    "SignatureDoesNotMatch": AccessDeniedError,
    "InvalidAccessKeyId": AccessDeniedError,
    "TimeExpired": AccessDeniedError,
    "SecurityTokenExpired": AccessDeniedError,
    "QpsLimitExceeded": ThrottledError,
    "Throttling": ThrottledError,
    "ServerBusy": ThrottledError,
}

DEFAULT_STATUS = {
    rs.CreateQueueResponse: 201,
    rs.SendMessageResponse: 201,
    rs.BatchSendMessageResponse: 201,
    rs.CreateTopicResponse: 201,
    rs.PublishMessageResponse: 201,
    rs.SubscribeResponse: 201,
    rs.DeleteQueueResponse: 204,
    rs.SetQueueAttributeResponse: 204,
    rs.DeleteMessageResponse: 204,
    rs.BatchDeleteMessageResponse: 204,
    rs.DeleteTopicResponse: 204,
    rs.SetTopicAttributeResponse: 204,
    rs.UnsubscribeResponse: 204,
    rs.SetSubscriptionAttributeResponse: 204,
    rs.SetAccountAttributesResponse: 204,
}


def _document(root_tag: str, obj: Any, fields, only=None) -> bytes:
    root = xu.new_document(root_tag)
    xu.write_fields(root, obj, fields, only)
    return xu.to_bytes(root)


def _xml_request(method: str, path: str, body: Optional[bytes] = None, **params: Any) -> HttpRequest:
    return HttpRequest(
        method=method,
        path=path,
        params={k: xu.format_value(v).lower() if isinstance(v, bool) else xu.format_value(v)
                for k, v in params.items() if v is not None},
        body=body,
    )


def _list_headers(request) -> Dict[str, str]:
    headers = {}
    if request.ret_num is not None:
        headers[HEADER_RET_NUMBER] = str(request.ret_num)
    if request.prefix:
        headers[HEADER_PREFIX] = request.prefix
    if request.marker:
        headers[HEADER_MARKER] = request.marker
    return headers


def _name_from_url(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# Client side: request encoding
# ---------------------------------------------------------------------------

@singledispatch
def encode_request(request) -> HttpRequest:
    """Encode a typed request into its wire representation."""
    raise TypeError(f"no encoder for {type(request).__name__}")


@encode_request.register
def _(request: rq.CreateQueueRequest) -> HttpRequest:
    body = _document("Queue", request.attributes or QueueAttributes(), QUEUE_FIELDS, QUEUE_SETTABLE)
    return _xml_request("PUT", f"/queues/{request.queue_name}", body)


@encode_request.register
def _(request: rq.DeleteQueueRequest) -> HttpRequest:
    return _xml_request("DELETE", f"/queues/{request.queue_name}")


@encode_request.register
def _(request: rq.ListQueueRequest) -> HttpRequest:
    http_request = _xml_request("GET", "/queues")
    http_request.headers.update(_list_headers(request))
    return http_request


@encode_request.register
def _(request: rq.GetQueueAttributeRequest) -> HttpRequest:
    return _xml_request("GET", f"/queues/{request.queue_name}")


@encode_request.register
def _(request: rq.SetQueueAttributeRequest) -> HttpRequest:
    body = _document("Queue", request.attributes, QUEUE_FIELDS, QUEUE_SETTABLE)
    return _xml_request("PUT", f"/queues/{request.queue_name}", body, metaoverride=True)


@encode_request.register
def _(request: rq.SendMessageRequest) -> HttpRequest:
    body = _document("Message", request, SEND_ITEM_FIELDS)
    return _xml_request("POST", f"/queues/{request.queue_name}/messages", body)


@encode_request.register
def _(request: rq.BatchSendMessageRequest) -> HttpRequest:
    root = xu.new_document("Messages")
    for item in request.items:
        element = ET.SubElement(root, "Message")
        xu.write_fields(element, item, SEND_ITEM_FIELDS)
    return _xml_request("POST", f"/queues/{request.queue_name}/messages", xu.to_bytes(root))


@encode_request.register
def _(request: rq.ReceiveMessageRequest) -> HttpRequest:
    return _xml_request(
        "GET", f"/queues/{request.queue_name}/messages", waitseconds=request.wait_seconds
    )


@encode_request.register
def _(request: rq.BatchReceiveMessageRequest) -> HttpRequest:
    return _xml_request(
        "GET",
        f"/queues/{request.queue_name}/messages",
        numOfMessages=request.num_of_messages,
        waitseconds=request.wait_seconds,
    )


@encode_request.register
def _(request: rq.PeekMessageRequest) -> HttpRequest:
    return _xml_request("GET", f"/queues/{request.queue_name}/messages", peekonly=True)


@encode_request.register
def _(request: rq.BatchPeekMessageRequest) -> HttpRequest:
    return _xml_request(
        "GET",
        f"/queues/{request.queue_name}/messages",
        peekonly=True,
        numOfMessages=request.num_of_messages,
    )


@encode_request.register
def _(request: rq.DeleteMessageRequest) -> HttpRequest:
    return _xml_request(
        "DELETE", f"/queues/{request.queue_name}/messages", ReceiptHandle=request.receipt_handle
    )


@encode_request.register
def _(request: rq.BatchDeleteMessageRequest) -> HttpRequest:
    root = xu.new_document("ReceiptHandles")
    for handle in request.receipt_handles:
        ET.SubElement(root, "ReceiptHandle").text = handle
    return _xml_request("DELETE", f"/queues/{request.queue_name}/messages", xu.to_bytes(root))


@encode_request.register
def _(request: rq.ChangeMessageVisibilityRequest) -> HttpRequest:
    return _xml_request(
        "PUT",
        f"/queues/{request.queue_name}/messages",
        receiptHandle=request.receipt_handle,
        visibilityTimeout=request.visibility_timeout,
    )


@encode_request.register
def _(request: rq.CreateTopicRequest) -> HttpRequest:
    body = _document("Topic", request.attributes or TopicAttributes(), TOPIC_FIELDS, TOPIC_SETTABLE)
    return _xml_request("PUT", f"/topics/{request.topic_name}", body)


@encode_request.register
def _(request: rq.DeleteTopicRequest) -> HttpRequest:
    return _xml_request("DELETE", f"/topics/{request.topic_name}")


@encode_request.register
def _(request: rq.ListTopicRequest) -> HttpRequest:
    http_request = _xml_request("GET", "/topics")
    http_request.headers.update(_list_headers(request))
    return http_request


@encode_request.register
def _(request: rq.GetTopicAttributeRequest) -> HttpRequest:
    return _xml_request("GET", f"/topics/{request.topic_name}")


@encode_request.register
def _(request: rq.SetTopicAttributeRequest) -> HttpRequest:
    body = _document("Topic", request.attributes, TOPIC_FIELDS, TOPIC_SETTABLE)
    return _xml_request("PUT", f"/topics/{request.topic_name}", body, metaoverride=True)


@encode_request.register
def _(request: rq.PublishMessageRequest) -> HttpRequest:
    root = xu.new_document("Message")
    ET.SubElement(root, "MessageBody").text = request.message_body
    if request.message_tag is not None:
        ET.SubElement(root, "MessageTag").text = request.message_tag
    return _xml_request("POST", f"/topics/{request.topic_name}/messages", xu.to_bytes(root))


@encode_request.register
def _(request: rq.SubscribeRequest) -> HttpRequest:
    attributes = request.attributes
    body = _document("Subscription", attributes, SUBSCRIPTION_FIELDS, SUBSCRIBE_SETTABLE)
    return _xml_request(
        "PUT", f"/topics/{request.topic_name}/subscriptions/{attributes.subscription_name}", body
    )


@encode_request.register
def _(request: rq.UnsubscribeRequest) -> HttpRequest:
    return _xml_request(
        "DELETE", f"/topics/{request.topic_name}/subscriptions/{request.subscription_name}"
    )


@encode_request.register
def _(request: rq.ListSubscriptionRequest) -> HttpRequest:
    http_request = _xml_request("GET", f"/topics/{request.topic_name}/subscriptions")
    http_request.headers.update(_list_headers(request))
    return http_request


@encode_request.register
def _(request: rq.GetSubscriptionAttributeRequest) -> HttpRequest:
    return _xml_request(
        "GET", f"/topics/{request.topic_name}/subscriptions/{request.subscription_name}"
    )


@encode_request.register
def _(request: rq.SetSubscriptionAttributeRequest) -> HttpRequest:
    attributes = request.attributes
    body = _document("Subscription", attributes, SUBSCRIPTION_FIELDS, SUBSCRIPTION_UPDATABLE)
    return _xml_request(
        "PUT",
        f"/topics/{request.topic_name}/subscriptions/{attributes.subscription_name}",
        body,
        metaoverride=True,
    )


@encode_request.register
def _(request: rq.GetAccountAttributesRequest) -> HttpRequest:
    return _xml_request("GET", "/", accountmeta=True)


@encode_request.register
def _(request: rq.SetAccountAttributesRequest) -> HttpRequest:
    body = _document("Account", request.attributes, ACCOUNT_FIELDS)
    return _xml_request("PUT", "/", body, accountmeta=True)


# ---------------------------------------------------------------------------
# Client side: response decoding
# ---------------------------------------------------------------------------

def error_from_response(http_response: HttpResponse) -> ServiceError:
    """
    Build the typed error for a non-2xx reply.

    Raises:
        ParseError: If the body is not a structured error document
    """
    status = http_response.status_code
    root = xu.parse_document(http_response.body, status)
    xu.expect_root(root, "Error", status)
    code = xu.required_text(root, "Code", status)
    error_class = ERROR_CLASSES.get(code, ServiceError)
    return error_class(
        code,
        xu.child_text(root, "Message") or "",
        request_id=xu.child_text(root, "RequestId") or http_response.request_id,
        host_id=xu.child_text(root, "HostId"),
        status_code=status,
    )


def _message(element, status: int) -> Message:
    xu.required_text(element, "MessageId", status)
    return xu.build(Message, element, MESSAGE_FIELDS)


def _messages(root, status: int) -> List[Message]:
    xu.expect_root(root, "Messages", status)
    return [_message(element, status) for element in xu.children(root, "Message")]


def _is_empty_reply(error: ServiceError) -> bool:
    return isinstance(error, MessageNotExistError)


@singledispatch
def decode_response(response, http_response: HttpResponse):
    """
    Fill ``response`` from the reply and return it.

    Raises:
        ServiceError: The service answered with a structured error
        ParseError: The reply could not be decoded
    """
    raise TypeError(f"no decoder for {type(response).__name__}")


def _prepare(response: rs.MNSResponse, http_response: HttpResponse) -> None:
    response.status_code = http_response.status_code
    response.request_id = http_response.request_id


def _empty_success(response: rs.MNSResponse, http_response: HttpResponse) -> rs.MNSResponse:
    _prepare(response, http_response)
    if not http_response.ok:
        raise error_from_response(http_response)
    return response


for _type in (
    rs.SetQueueAttributeResponse,
    rs.DeleteMessageResponse,
    rs.SetTopicAttributeResponse,
    rs.SetSubscriptionAttributeResponse,
    rs.SetAccountAttributesResponse,
):
    decode_response.register(_type, _empty_success)


def _idempotent_delete(not_found: Type[ServiceError]):
    def decode(response: rs.MNSResponse, http_response: HttpResponse) -> rs.MNSResponse:
        _prepare(response, http_response)
        if http_response.ok:
            return response
        error = error_from_response(http_response)
        if isinstance(error, not_found):
            # Already gone counts as deleted
            return response
        raise error
    return decode


decode_response.register(rs.DeleteQueueResponse, _idempotent_delete(QueueNotExistError))
decode_response.register(rs.DeleteTopicResponse, _idempotent_delete(TopicNotExistError))
decode_response.register(rs.UnsubscribeResponse, _idempotent_delete(SubscriptionNotExistError))


@decode_response.register
def _(response: rs.CreateQueueResponse, http_response: HttpResponse):
    _empty_success(response, http_response)
    response.queue_url = http_response.header("location")
    return response


@decode_response.register
def _(response: rs.CreateTopicResponse, http_response: HttpResponse):
    _empty_success(response, http_response)
    response.topic_url = http_response.header("location")
    return response


@decode_response.register
def _(response: rs.SubscribeResponse, http_response: HttpResponse):
    _empty_success(response, http_response)
    response.subscription_url = http_response.header("location")
    return response


def _decode_list(root_tag: str, item_tag: str, url_tag: str):
    def decode(response, http_response: HttpResponse):
        _empty_success(response, http_response)
        status = http_response.status_code
        root = xu.expect_root(xu.parse_document(http_response.body, status), root_tag, status)
        names = [
            _name_from_url(xu.required_text(item, url_tag, status))
            for item in xu.children(root, item_tag)
        ]
        marker = xu.child_text(root, "NextMarker")
        return names, (marker or None)
    return decode


_decode_queue_list = _decode_list("Queues", "Queue", "QueueURL")
_decode_topic_list = _decode_list("Topics", "Topic", "TopicURL")
_decode_subscription_list = _decode_list("Subscriptions", "Subscription", "SubscriptionURL")


@decode_response.register
def _(response: rs.ListQueueResponse, http_response: HttpResponse):
    response.queue_names, response.next_marker = _decode_queue_list(response, http_response)
    return response


@decode_response.register
def _(response: rs.ListTopicResponse, http_response: HttpResponse):
    response.topic_names, response.next_marker = _decode_topic_list(response, http_response)
    return response


@decode_response.register
def _(response: rs.ListSubscriptionResponse, http_response: HttpResponse):
    response.subscription_names, response.next_marker = _decode_subscription_list(
        response, http_response
    )
    return response


def _decode_attributes(root_tag: str, cls: Type, fields):
    def decode(response, http_response: HttpResponse):
        _empty_success(response, http_response)
        status = http_response.status_code
        root = xu.expect_root(xu.parse_document(http_response.body, status), root_tag, status)
        response.attributes = xu.build(cls, root, fields)
        return response
    return decode


decode_response.register(
    rs.GetQueueAttributeResponse, _decode_attributes("Queue", QueueAttributes, QUEUE_FIELDS)
)
decode_response.register(
    rs.GetTopicAttributeResponse, _decode_attributes("Topic", TopicAttributes, TOPIC_FIELDS)
)
decode_response.register(
    rs.GetSubscriptionAttributeResponse,
    _decode_attributes("Subscription", SubscriptionAttributes, SUBSCRIPTION_FIELDS),
)
decode_response.register(
    rs.GetAccountAttributesResponse, _decode_attributes("Account", AccountAttributes, ACCOUNT_FIELDS)
)


@decode_response.register
def _(response: rs.SendMessageResponse, http_response: HttpResponse):
    _empty_success(response, http_response)
    status = http_response.status_code
    root = xu.expect_root(xu.parse_document(http_response.body, status), "Message", status)
    response.message_id = xu.required_text(root, "MessageId", status)
    response.message_body_md5 = xu.child_text(root, "MessageBodyMD5")
    response.receipt_handle = xu.child_text(root, "ReceiptHandle")
    return response


@decode_response.register
def _(response: rs.PublishMessageResponse, http_response: HttpResponse):
    _empty_success(response, http_response)
    status = http_response.status_code
    root = xu.expect_root(xu.parse_document(http_response.body, status), "Message", status)
    response.message_id = xu.required_text(root, "MessageId", status)
    response.message_body_md5 = xu.child_text(root, "MessageBodyMD5")
    return response


@decode_response.register
def _(response: rs.BatchSendMessageResponse, http_response: HttpResponse):
    _prepare(response, http_response)
    status = http_response.status_code
    root = xu.parse_document(http_response.body, status)
    if xu.local_name(root.tag) == "Error":
        raise error_from_response(http_response)
    xu.expect_root(root, "Messages", status)
    response.results = [
        xu.build(SendMessageResult, element, SEND_RESULT_FIELDS)
        for element in xu.children(root, "Message")
    ]
    if not http_response.ok:
        failed = [r for r in response.results if not r.succeed]
        raise BatchSendError(
            "BatchSendFail",
            f"{len(failed)} of {len(response.results)} messages failed",
            results=response.results,
            request_id=response.request_id,
            status_code=status,
        )
    return response


@decode_response.register
def _(response: rs.BatchDeleteMessageResponse, http_response: HttpResponse):
    _prepare(response, http_response)
    if http_response.ok:
        return response
    status = http_response.status_code
    root = xu.parse_document(http_response.body, status)
    if xu.local_name(root.tag) == "Error":
        raise error_from_response(http_response)
    xu.expect_root(root, "Errors", status)
    failures = [
        DeleteMessageFailure(
            receipt_handle=xu.required_text(element, "ReceiptHandle", status),
            error_code=xu.required_text(element, "ErrorCode", status),
            error_message=xu.child_text(element, "ErrorMessage") or "",
        )
        for element in xu.children(root, "Error")
    ]
    raise BatchDeleteError(
        "BatchDeleteFail",
        f"{len(failures)} receipt handles failed",
        failures=failures,
        request_id=response.request_id,
        status_code=status,
    )


def _decode_single_message(response, http_response: HttpResponse):
    _prepare(response, http_response)
    if not http_response.ok:
        error = error_from_response(http_response)
        if _is_empty_reply(error):
            # No message within the wait window
            response.message = None
            return response
        raise error
    status = http_response.status_code
    root = xu.expect_root(xu.parse_document(http_response.body, status), "Message", status)
    response.message = _message(root, status)
    return response


def _decode_message_batch(response, http_response: HttpResponse):
    _prepare(response, http_response)
    if not http_response.ok:
        error = error_from_response(http_response)
        if _is_empty_reply(error):
            response.messages = []
            return response
        raise error
    response.messages = _messages(
        xu.parse_document(http_response.body, http_response.status_code),
        http_response.status_code,
    )
    return response


decode_response.register(rs.ReceiveMessageResponse, _decode_single_message)
decode_response.register(rs.PeekMessageResponse, _decode_single_message)
decode_response.register(rs.BatchReceiveMessageResponse, _decode_message_batch)
decode_response.register(rs.BatchPeekMessageResponse, _decode_message_batch)


@decode_response.register
def _(response: rs.ChangeMessageVisibilityResponse, http_response: HttpResponse):
    _empty_success(response, http_response)
    status = http_response.status_code
    root = xu.expect_root(
        xu.parse_document(http_response.body, status), "ChangeVisibility", status
    )
    response.receipt_handle = xu.required_text(root, "ReceiptHandle", status)
    response.next_visible_time = xu.parse_value(
        xu.required_text(root, "NextVisibleTime", status), int, "NextVisibleTime"
    )
    return response


# ---------------------------------------------------------------------------
# Service side: request decoding
# ---------------------------------------------------------------------------

def _body_root(http_request: HttpRequest):
    return xu.parse_document(http_request.body or b"")


def _list_args(http_request: HttpRequest) -> Dict[str, Any]:
    headers = {k.lower(): v for k, v in http_request.headers.items()}
    ret_num = headers.get(HEADER_RET_NUMBER)
    return {
        "ret_num": int(ret_num) if ret_num is not None else None,
        "prefix": headers.get(HEADER_PREFIX),
        "marker": headers.get(HEADER_MARKER),
    }


def _int_param(params: Dict[str, str], name: str) -> Optional[int]:
    value = params.get(name)
    if value is None:
        return None
    return xu.parse_value(value, int, name)


def _attributes_from_body(http_request: HttpRequest, root_tag: str, cls: Type, fields, only):
    root = xu.expect_root(_body_root(http_request), root_tag)
    allowed = [field for field in fields if field[0] in only]
    return xu.build(cls, root, allowed)


def decode_request(http_request: HttpRequest):
    """
    Recover the typed request from its wire representation.

    Raises:
        ParseError: If the request does not map to a known operation
    """
    method = http_request.method.upper()
    params = http_request.params
    parts = [part for part in http_request.path.split("/") if part]

    if not parts and "accountmeta" in params:
        if method == "GET":
            return rq.GetAccountAttributesRequest()
        if method == "PUT":
            root = xu.expect_root(_body_root(http_request), "Account")
            return rq.SetAccountAttributesRequest(xu.build(AccountAttributes, root, ACCOUNT_FIELDS))

    if parts and parts[0] == "queues":
        decoded = _decode_queue_request(method, parts[1:], params, http_request)
        if decoded is not None:
            return decoded

    if parts and parts[0] == "topics":
        decoded = _decode_topic_request(method, parts[1:], params, http_request)
        if decoded is not None:
            return decoded

    raise ParseError(f"unknown operation: {method} {http_request.resource}")


def _decode_queue_request(method: str, parts: List[str], params, http_request: HttpRequest):
    if not parts:
        if method == "GET":
            return rq.ListQueueRequest(**_list_args(http_request))
        return None

    queue_name = parts[0]
    if len(parts) == 1:
        if method == "PUT":
            attributes = _attributes_from_body(
                http_request, "Queue", QueueAttributes, QUEUE_FIELDS, QUEUE_SETTABLE
            )
            if "metaoverride" in params:
                return rq.SetQueueAttributeRequest(queue_name, attributes)
            return rq.CreateQueueRequest(queue_name, attributes)
        if method == "DELETE":
            return rq.DeleteQueueRequest(queue_name)
        if method == "GET":
            return rq.GetQueueAttributeRequest(queue_name)
        return None

    if len(parts) != 2 or parts[1] != "messages":
        return None

    if method == "POST":
        root = _body_root(http_request)
        if xu.local_name(root.tag) == "Messages":
            items = [
                xu.build(rq.SendMessageRequestItem, element, SEND_ITEM_FIELDS)
                for element in xu.children(root, "Message")
            ]
            return rq.BatchSendMessageRequest(items, queue_name=queue_name)
        xu.expect_root(root, "Message")
        return xu.build(rq.SendMessageRequest, root, SEND_ITEM_FIELDS, queue_name=queue_name)
    if method == "GET":
        num = _int_param(params, "numOfMessages")
        if params.get("peekonly") == "true":
            if num is not None:
                return rq.BatchPeekMessageRequest(queue_name, num)
            return rq.PeekMessageRequest(queue_name)
        wait = _int_param(params, "waitseconds")
        if num is not None:
            return rq.BatchReceiveMessageRequest(queue_name, num, wait)
        return rq.ReceiveMessageRequest(queue_name, wait)
    if method == "DELETE":
        if "ReceiptHandle" in params:
            return rq.DeleteMessageRequest(queue_name, params["ReceiptHandle"])
        root = xu.expect_root(_body_root(http_request), "ReceiptHandles")
        handles = [element.text or "" for element in xu.children(root, "ReceiptHandle")]
        return rq.BatchDeleteMessageRequest(queue_name, handles)
    if method == "PUT":
        return rq.ChangeMessageVisibilityRequest(
            queue_name,
            params.get("receiptHandle", ""),
            _int_param(params, "visibilityTimeout"),
        )
    return None


def _decode_topic_request(method: str, parts: List[str], params, http_request: HttpRequest):
    if not parts:
        if method == "GET":
            return rq.ListTopicRequest(**_list_args(http_request))
        return None

    topic_name = parts[0]
    if len(parts) == 1:
        if method == "PUT":
            attributes = _attributes_from_body(
                http_request, "Topic", TopicAttributes, TOPIC_FIELDS, TOPIC_SETTABLE
            )
            if "metaoverride" in params:
                return rq.SetTopicAttributeRequest(topic_name, attributes)
            return rq.CreateTopicRequest(topic_name, attributes)
        if method == "DELETE":
            return rq.DeleteTopicRequest(topic_name)
        if method == "GET":
            return rq.GetTopicAttributeRequest(topic_name)
        return None

    if parts[1] == "messages" and len(parts) == 2 and method == "POST":
        root = xu.expect_root(_body_root(http_request), "Message")
        return rq.PublishMessageRequest(
            message_body=xu.required_text(root, "MessageBody"),
            message_tag=xu.child_text(root, "MessageTag"),
            topic_name=topic_name,
        )

    if parts[1] != "subscriptions":
        return None
    if len(parts) == 2:
        if method == "GET":
            return rq.ListSubscriptionRequest(topic_name, **_list_args(http_request))
        return None

    subscription_name = parts[2]
    if method == "PUT":
        if "metaoverride" in params:
            attributes = _attributes_from_body(
                http_request, "Subscription", SubscriptionAttributes,
                SUBSCRIPTION_FIELDS, SUBSCRIPTION_UPDATABLE,
            )
            attributes.subscription_name = subscription_name
            return rq.SetSubscriptionAttributeRequest(topic_name, attributes)
        attributes = _attributes_from_body(
            http_request, "Subscription", SubscriptionAttributes,
            SUBSCRIPTION_FIELDS, SUBSCRIBE_SETTABLE,
        )
        attributes.subscription_name = subscription_name
        return rq.SubscribeRequest(topic_name, attributes)
    if method == "DELETE":
        return rq.UnsubscribeRequest(topic_name, subscription_name)
    if method == "GET":
        return rq.GetSubscriptionAttributeRequest(topic_name, subscription_name)
    return None


# ---------------------------------------------------------------------------
# Service side: response encoding
# ---------------------------------------------------------------------------

def _reply(response: rs.MNSResponse, body: Optional[bytes] = None, **headers: str) -> HttpResponse:
    all_headers = {k.replace("_", "-"): v for k, v in headers.items() if v is not None}
    if response.request_id:
        all_headers[HEADER_REQUEST_ID] = response.request_id
    if body is not None:
        all_headers["content-type"] = CONTENT_TYPE
    status = response.status_code or DEFAULT_STATUS.get(type(response), 200)
    return HttpResponse(status_code=status, headers=all_headers, body=body or b"")


def encode_error(
    code: str,
    message: str,
    status_code: int,
    request_id: Optional[str] = None,
    host_id: Optional[str] = None,
) -> HttpResponse:
    """Build a structured error reply."""
    root = xu.new_document("Error")
    ET.SubElement(root, "Code").text = code
    ET.SubElement(root, "Message").text = message
    if request_id:
        ET.SubElement(root, "RequestId").text = request_id
    if host_id:
        ET.SubElement(root, "HostId").text = host_id
    headers = {"content-type": CONTENT_TYPE}
    if request_id:
        headers[HEADER_REQUEST_ID] = request_id
    return HttpResponse(status_code=status_code, headers=headers, body=xu.to_bytes(root))


@singledispatch
def encode_response(response, base_url: str = "http://localhost") -> HttpResponse:
    """Encode a typed response into its wire representation."""
    if type(response) in DEFAULT_STATUS:
        return _reply(response)
    raise TypeError(f"no encoder for {type(response).__name__}")


@encode_response.register
def _(response: rs.CreateQueueResponse, base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, location=response.queue_url)


@encode_response.register
def _(response: rs.CreateTopicResponse, base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, location=response.topic_url)


@encode_response.register
def _(response: rs.SubscribeResponse, base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, location=response.subscription_url)


def _encode_list(root_tag: str, item_tag: str, url_tag: str, names: List[str],
                 marker: Optional[str], url_prefix: str) -> bytes:
    root = xu.new_document(root_tag)
    for name in names:
        item = ET.SubElement(root, item_tag)
        ET.SubElement(item, url_tag).text = f"{url_prefix}/{name}"
    if marker:
        ET.SubElement(root, "NextMarker").text = marker
    return xu.to_bytes(root)


@encode_response.register
def _(response: rs.ListQueueResponse, base_url: str = "http://localhost") -> HttpResponse:
    body = _encode_list("Queues", "Queue", "QueueURL", response.queue_names,
                        response.next_marker, f"{base_url}/queues")
    return _reply(response, body)


@encode_response.register
def _(response: rs.ListTopicResponse, base_url: str = "http://localhost") -> HttpResponse:
    body = _encode_list("Topics", "Topic", "TopicURL", response.topic_names,
                        response.next_marker, f"{base_url}/topics")
    return _reply(response, body)


@encode_response.register
def _(response: rs.ListSubscriptionResponse, base_url: str = "http://localhost") -> HttpResponse:
    body = _encode_list("Subscriptions", "Subscription", "SubscriptionURL",
                        response.subscription_names, response.next_marker,
                        f"{base_url}/subscriptions")
    return _reply(response, body)


@encode_response.register
def _(response: rs.GetQueueAttributeResponse, base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, _document("Queue", response.attributes, QUEUE_FIELDS))


@encode_response.register
def _(response: rs.GetTopicAttributeResponse, base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, _document("Topic", response.attributes, TOPIC_FIELDS))


@encode_response.register
def _(response: rs.GetSubscriptionAttributeResponse,
      base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, _document("Subscription", response.attributes, SUBSCRIPTION_FIELDS))


@encode_response.register
def _(response: rs.GetAccountAttributesResponse, base_url: str = "http://localhost") -> HttpResponse:
    return _reply(response, _document("Account", response.attributes, ACCOUNT_FIELDS))


@encode_response.register
def _(response: rs.SendMessageResponse, base_url: str = "http://localhost") -> HttpResponse:
    root = xu.new_document("Message")
    ET.SubElement(root, "MessageId").text = response.message_id
    ET.SubElement(root, "MessageBodyMD5").text = response.message_body_md5
    if response.receipt_handle:
        ET.SubElement(root, "ReceiptHandle").text = response.receipt_handle
    return _reply(response, xu.to_bytes(root))


@encode_response.register
def _(response: rs.PublishMessageResponse, base_url: str = "http://localhost") -> HttpResponse:
    root = xu.new_document("Message")
    ET.SubElement(root, "MessageId").text = response.message_id
    ET.SubElement(root, "MessageBodyMD5").text = response.message_body_md5
    return _reply(response, xu.to_bytes(root))


@encode_response.register
def _(response: rs.BatchSendMessageResponse, base_url: str = "http://localhost") -> HttpResponse:
    root = xu.new_document("Messages")
    for result in response.results:
        xu.write_fields(ET.SubElement(root, "Message"), result, SEND_RESULT_FIELDS)
    return _reply(response, xu.to_bytes(root))


def _encode_message_reply(response, messages: List[Message], single: bool) -> HttpResponse:
    if not messages:
        return encode_error(
            "MessageNotExist", "Message not exist.", 404, request_id=response.request_id
        )
    if single:
        return _reply(response, _document("Message", messages[0], MESSAGE_FIELDS))
    root = xu.new_document("Messages")
    for message in messages:
        xu.write_fields(ET.SubElement(root, "Message"), message, MESSAGE_FIELDS)
    return _reply(response, xu.to_bytes(root))


@encode_response.register(rs.ReceiveMessageResponse)
@encode_response.register(rs.PeekMessageResponse)
def _(response, base_url: str = "http://localhost") -> HttpResponse:
    return _encode_message_reply(response, [response.message] if response.message else [], True)


@encode_response.register(rs.BatchReceiveMessageResponse)
@encode_response.register(rs.BatchPeekMessageResponse)
def _(response, base_url: str = "http://localhost") -> HttpResponse:
    return _encode_message_reply(response, response.messages, False)


@encode_response.register
def _(response: rs.ChangeMessageVisibilityResponse,
      base_url: str = "http://localhost") -> HttpResponse:
    root = xu.new_document("ChangeVisibility")
    ET.SubElement(root, "ReceiptHandle").text = response.receipt_handle
    ET.SubElement(root, "NextVisibleTime").text = str(response.next_visible_time)
    return _reply(response, xu.to_bytes(root))
