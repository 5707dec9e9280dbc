"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Queue handle.

A Queue is a reference bound to one queue name and a shared transport. It
holds no other state; creating one does not create the queue.
"""

from dataclasses import replace
from typing import Iterable, List, Optional

from mnsclient.exceptions import ParseError
from mnsclient.http.transport import MNSHttpClient
from mnsclient.models import Message, QueueAttributes, decode_body, encode_body
from mnsclient.promise import CallbackLike, MNSPromise
from mnsclient.protocol.requests import (
    BatchDeleteMessageRequest,
    BatchPeekMessageRequest,
    BatchReceiveMessageRequest,
    BatchSendMessageRequest,
    ChangeMessageVisibilityRequest,
    DeleteMessageRequest,
    GetQueueAttributeRequest,
    PeekMessageRequest,
    ReceiveMessageRequest,
    SendMessageRequest,
    SetQueueAttributeRequest,
)
from mnsclient.protocol.responses import (
    BatchDeleteMessageResponse,
    BatchPeekMessageResponse,
    BatchReceiveMessageResponse,
    BatchSendMessageResponse,
    ChangeMessageVisibilityResponse,
    DeleteMessageResponse,
    GetQueueAttributeResponse,
    PeekMessageResponse,
    ReceiveMessageResponse,
    SendMessageResponse,
    SetQueueAttributeResponse,
)


class Queue:
    """
    Message-level operations on one queue.

    Args:
        client: Shared transport
        queue_name: Queue name
        base64: Encode bodies as base64 on send and decode them on receive
    """

    def __init__(self, client: MNSHttpClient, queue_name: str, base64: bool = True):
        self._client = client
        self.queue_name = queue_name
        self.base64 = base64

    def __repr__(self) -> str:
        return f"Queue({self.queue_name!r}, base64={self.base64})"

    # Encoding

    def _encode(self, body: str) -> str:
        if self.base64 and isinstance(body, str) and body:
            return encode_body(body)
        return body

    def _decode_message(self, message: Optional[Message]) -> Optional[Message]:
        if message is None or not self.base64:
            return message
        try:
            return replace(message, body=decode_body(message.body))
        except ValueError as e:
            raise ParseError(
                f"message {message.message_id} body is not valid base64: {e}"
            ) from e

    def _decode_all(self, messages: List[Message]) -> List[Message]:
        return [self._decode_message(message) for message in messages]

    def _bind_send(self, request: SendMessageRequest) -> SendMessageRequest:
        return replace(
            request,
            queue_name=self.queue_name,
            message_body=self._encode(request.message_body),
        )

    def _bind_batch(self, request: BatchSendMessageRequest) -> BatchSendMessageRequest:
        items = [
            replace(item, message_body=self._encode(item.message_body))
            for item in request.items
        ]
        return replace(request, queue_name=self.queue_name, items=tuple(items))

    # Attributes

    def get_attribute(self) -> GetQueueAttributeResponse:
        return self._client.send_request(
            GetQueueAttributeRequest(self.queue_name), GetQueueAttributeResponse()
        )

    def get_attribute_async(self, callback: Optional[CallbackLike] = None) -> MNSPromise:
        return self._client.send_request_async(
            GetQueueAttributeRequest(self.queue_name), GetQueueAttributeResponse(), callback
        )

    def set_attribute(self, attributes: QueueAttributes) -> SetQueueAttributeResponse:
        return self._client.send_request(
            SetQueueAttributeRequest(self.queue_name, attributes), SetQueueAttributeResponse()
        )

    def set_attribute_async(
        self, attributes: QueueAttributes, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            SetQueueAttributeRequest(self.queue_name, attributes),
            SetQueueAttributeResponse(),
            callback,
        )

    # Send

    def send_message(self, request: SendMessageRequest) -> SendMessageResponse:
        """
        Send one message.

        Returns:
            Response with the message id and body MD5 (and a receipt
            handle for delayed messages)
        """
        return self._client.send_request(self._bind_send(request), SendMessageResponse())

    def send_message_async(
        self, request: SendMessageRequest, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            self._bind_send(request), SendMessageResponse(), callback
        )

    def batch_send_message(self, request: BatchSendMessageRequest) -> BatchSendMessageResponse:
        """
        Send up to 16 messages in one request.

        Raises:
            BatchSendError: If some messages failed; ``results`` tells which
        """
        return self._client.send_request(self._bind_batch(request), BatchSendMessageResponse())

    def batch_send_message_async(
        self, request: BatchSendMessageRequest, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            self._bind_batch(request), BatchSendMessageResponse(), callback
        )

    # Receive

    def receive_message(self, wait_seconds: Optional[int] = None) -> ReceiveMessageResponse:
        """
        Receive one message, long-polling up to ``wait_seconds``.

        The server holds the request open until a message arrives or the
        window passes. An empty window yields a response whose ``message``
        is None; it is not an error.
        """
        response = self._client.send_request(
            ReceiveMessageRequest(self.queue_name, wait_seconds), ReceiveMessageResponse()
        )
        response.message = self._decode_message(response.message)
        return response

    def receive_message_async(
        self, wait_seconds: Optional[int] = None, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        # Body decoding happens in receive_message, so route through it
        return self._async(
            lambda: self.receive_message(wait_seconds),
            ReceiveMessageRequest(self.queue_name, wait_seconds),
            callback,
        )

    def batch_receive_message(
        self, num_of_messages: int, wait_seconds: Optional[int] = None
    ) -> BatchReceiveMessageResponse:
        response = self._client.send_request(
            BatchReceiveMessageRequest(self.queue_name, num_of_messages, wait_seconds),
            BatchReceiveMessageResponse(),
        )
        response.messages = self._decode_all(response.messages)
        return response

    def batch_receive_message_async(
        self,
        num_of_messages: int,
        wait_seconds: Optional[int] = None,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        return self._async(
            lambda: self.batch_receive_message(num_of_messages, wait_seconds),
            BatchReceiveMessageRequest(self.queue_name, num_of_messages, wait_seconds),
            callback,
        )

    # Peek

    def peek_message(self) -> PeekMessageResponse:
        """Read the next message without consuming it. No receipt handle is returned."""
        response = self._client.send_request(
            PeekMessageRequest(self.queue_name), PeekMessageResponse()
        )
        response.message = self._decode_message(response.message)
        return response

    def peek_message_async(self, callback: Optional[CallbackLike] = None) -> MNSPromise:
        return self._async(self.peek_message, PeekMessageRequest(self.queue_name), callback)

    def batch_peek_message(self, num_of_messages: int) -> BatchPeekMessageResponse:
        response = self._client.send_request(
            BatchPeekMessageRequest(self.queue_name, num_of_messages), BatchPeekMessageResponse()
        )
        response.messages = self._decode_all(response.messages)
        return response

    def batch_peek_message_async(
        self, num_of_messages: int, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._async(
            lambda: self.batch_peek_message(num_of_messages),
            BatchPeekMessageRequest(self.queue_name, num_of_messages),
            callback,
        )

    # Delete

    def delete_message(self, receipt_handle: str) -> DeleteMessageResponse:
        """
        Delete a received message.

        Raises:
            MessageNotExistError: The message was already deleted
            InvalidReceiptHandleError: The handle expired or is malformed
        """
        return self._client.send_request(
            DeleteMessageRequest(self.queue_name, receipt_handle), DeleteMessageResponse()
        )

    def delete_message_async(
        self, receipt_handle: str, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            DeleteMessageRequest(self.queue_name, receipt_handle), DeleteMessageResponse(), callback
        )

    def batch_delete_message(self, receipt_handles: Iterable[str]) -> BatchDeleteMessageResponse:
        """
        Delete up to 16 messages in one request.

        Raises:
            BatchDeleteError: If some handles failed; ``failures`` tells which
        """
        return self._client.send_request(
            BatchDeleteMessageRequest(self.queue_name, tuple(receipt_handles)),
            BatchDeleteMessageResponse(),
        )

    def batch_delete_message_async(
        self, receipt_handles: Iterable[str], callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            BatchDeleteMessageRequest(self.queue_name, tuple(receipt_handles)),
            BatchDeleteMessageResponse(),
            callback,
        )

    # Visibility

    def change_message_visibility(
        self, receipt_handle: str, visibility_timeout: int
    ) -> ChangeMessageVisibilityResponse:
        """
        Extend or shorten how long a received message stays invisible.

        Returns:
            Response with the new receipt handle and next visible time
        """
        return self._client.send_request(
            ChangeMessageVisibilityRequest(self.queue_name, receipt_handle, visibility_timeout),
            ChangeMessageVisibilityResponse(),
        )

    def change_message_visibility_async(
        self, receipt_handle: str, visibility_timeout: int, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            ChangeMessageVisibilityRequest(self.queue_name, receipt_handle, visibility_timeout),
            ChangeMessageVisibilityResponse(),
            callback,
        )

    def _async(self, operation, request, callback: Optional[CallbackLike]) -> MNSPromise:
        request.validate()
        return self._client.wrap_async(operation, callback, name=type(request).__name__)
