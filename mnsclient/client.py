"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Account-level client.

Client is the entry point: it owns one transport and hands out Queue and
Topic references that share it. Queue/topic lifecycle and account
attributes are managed here; message-level operations live on the handles.
"""

from typing import Optional

import requests

from mnsclient.config import ClientOptions, MNSConfig
from mnsclient.http.transport import MNSHttpClient
from mnsclient.logging_config import get_logger
from mnsclient.models import AccountAttributes, QueueAttributes, TopicAttributes
from mnsclient.promise import CallbackLike, MNSPromise
from mnsclient.protocol.requests import (
    CreateQueueRequest,
    CreateTopicRequest,
    DeleteQueueRequest,
    DeleteTopicRequest,
    GetAccountAttributesRequest,
    ListQueueRequest,
    ListTopicRequest,
    SetAccountAttributesRequest,
)
from mnsclient.protocol.responses import (
    CreateQueueResponse,
    CreateTopicResponse,
    DeleteQueueResponse,
    DeleteTopicResponse,
    GetAccountAttributesResponse,
    ListQueueResponse,
    ListTopicResponse,
    SetAccountAttributesResponse,
)
from mnsclient.queue import Queue
from mnsclient.topic import Topic

logger = get_logger(__name__)


class Client:
    """
    Client for one account of the message service.

    Args:
        endpoint: Account endpoint, e.g. ``https://1234.mns.cn-hangzhou.aliyuncs.com``
        access_id: Access key id
        access_key: Access key secret
        security_token: Optional STS token for temporary credentials
        options: Optional tuning (timeouts, retry, async mode)
        session: Optional ``requests.Session`` to send through

    Raises:
        SDKConfigurationError: If the endpoint or credentials are invalid
    """

    def __init__(
        self,
        endpoint: str,
        access_id: str,
        access_key: str,
        security_token: Optional[str] = None,
        options: Optional[ClientOptions] = None,
        session: Optional[requests.Session] = None,
    ):
        config = MNSConfig(
            endpoint=endpoint,
            access_id=access_id,
            access_key=access_key,
            security_token=security_token,
            options=options or ClientOptions(),
        )
        self._transport = MNSHttpClient(config, session=session)

    @classmethod
    def from_config(cls, config: MNSConfig, session: Optional[requests.Session] = None) -> "Client":
        """Build a client from an existing MNSConfig."""
        return cls(
            endpoint=config.endpoint,
            access_id=config.access_id,
            access_key=config.access_key,
            security_token=config.security_token,
            options=config.options,
            session=session,
        )

    @property
    def config(self) -> MNSConfig:
        return self._transport.config

    def get_transport(self) -> MNSHttpClient:
        """Return the shared transport."""
        return self._transport

    # References

    def get_queue_ref(self, queue_name: str, base64: bool = True) -> Queue:
        """
        Return a handle for ``queue_name``.

        No request is made; the queue does not have to exist.
        """
        return Queue(self._transport, queue_name, base64=base64)

    def get_topic_ref(self, topic_name: str) -> Topic:
        """Return a handle for ``topic_name``. No request is made."""
        return Topic(self._transport, topic_name)

    # Queues

    def create_queue(
        self, queue_name: str, attributes: Optional[QueueAttributes] = None
    ) -> CreateQueueResponse:
        """
        Create a queue.

        Creating a queue that exists with the same attributes succeeds.

        Raises:
            QueueAlreadyExistError: If it exists with different attributes
        """
        response = self._transport.send_request(
            CreateQueueRequest(queue_name, attributes), CreateQueueResponse()
        )
        response.queue_name = queue_name
        logger.info("queue_created", queue_name=queue_name, request_id=response.request_id)
        return response

    def create_queue_async(
        self,
        queue_name: str,
        attributes: Optional[QueueAttributes] = None,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        return self._transport.send_request_async(
            CreateQueueRequest(queue_name, attributes),
            CreateQueueResponse(queue_name=queue_name),
            callback,
        )

    def delete_queue(self, queue_name: str) -> DeleteQueueResponse:
        """Delete a queue. Deleting a queue that does not exist succeeds."""
        response = self._transport.send_request(
            DeleteQueueRequest(queue_name), DeleteQueueResponse()
        )
        logger.info("queue_deleted", queue_name=queue_name, request_id=response.request_id)
        return response

    def delete_queue_async(
        self, queue_name: str, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._transport.send_request_async(
            DeleteQueueRequest(queue_name), DeleteQueueResponse(), callback
        )

    def list_queue(
        self,
        prefix: Optional[str] = None,
        ret_num: Optional[int] = None,
        marker: Optional[str] = None,
    ) -> ListQueueResponse:
        """
        List queue names.

        Args:
            prefix: Only names starting with this prefix
            ret_num: Page size (1-1000)
            marker: ``next_marker`` of the previous page

        Returns:
            Response with ``queue_names`` and ``next_marker`` (None on the last page)
        """
        return self._transport.send_request(
            ListQueueRequest(ret_num=ret_num, prefix=prefix, marker=marker), ListQueueResponse()
        )

    def list_queue_async(
        self,
        prefix: Optional[str] = None,
        ret_num: Optional[int] = None,
        marker: Optional[str] = None,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        return self._transport.send_request_async(
            ListQueueRequest(ret_num=ret_num, prefix=prefix, marker=marker),
            ListQueueResponse(),
            callback,
        )

    # Topics

    def create_topic(
        self, topic_name: str, attributes: Optional[TopicAttributes] = None
    ) -> CreateTopicResponse:
        """
        Create a topic.

        Raises:
            TopicAlreadyExistError: If it exists with different attributes
        """
        response = self._transport.send_request(
            CreateTopicRequest(topic_name, attributes), CreateTopicResponse()
        )
        response.topic_name = topic_name
        logger.info("topic_created", topic_name=topic_name, request_id=response.request_id)
        return response

    def create_topic_async(
        self,
        topic_name: str,
        attributes: Optional[TopicAttributes] = None,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        return self._transport.send_request_async(
            CreateTopicRequest(topic_name, attributes),
            CreateTopicResponse(topic_name=topic_name),
            callback,
        )

    def delete_topic(self, topic_name: str) -> DeleteTopicResponse:
        """Delete a topic. Deleting a topic that does not exist succeeds."""
        response = self._transport.send_request(
            DeleteTopicRequest(topic_name), DeleteTopicResponse()
        )
        logger.info("topic_deleted", topic_name=topic_name, request_id=response.request_id)
        return response

    def delete_topic_async(
        self, topic_name: str, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._transport.send_request_async(
            DeleteTopicRequest(topic_name), DeleteTopicResponse(), callback
        )

    def list_topic(
        self,
        prefix: Optional[str] = None,
        ret_num: Optional[int] = None,
        marker: Optional[str] = None,
    ) -> ListTopicResponse:
        return self._transport.send_request(
            ListTopicRequest(ret_num=ret_num, prefix=prefix, marker=marker), ListTopicResponse()
        )

    def list_topic_async(
        self,
        prefix: Optional[str] = None,
        ret_num: Optional[int] = None,
        marker: Optional[str] = None,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        return self._transport.send_request_async(
            ListTopicRequest(ret_num=ret_num, prefix=prefix, marker=marker),
            ListTopicResponse(),
            callback,
        )

    # Account

    def get_account_attributes(self) -> GetAccountAttributesResponse:
        return self._transport.send_request(
            GetAccountAttributesRequest(), GetAccountAttributesResponse()
        )

    def get_account_attributes_async(self, callback: Optional[CallbackLike] = None) -> MNSPromise:
        return self._transport.send_request_async(
            GetAccountAttributesRequest(), GetAccountAttributesResponse(), callback
        )

    def set_account_attributes(self, attributes: AccountAttributes) -> SetAccountAttributesResponse:
        """Update account attributes. Fields left as None are not changed."""
        return self._transport.send_request(
            SetAccountAttributesRequest(attributes), SetAccountAttributesResponse()
        )

    def set_account_attributes_async(
        self, attributes: AccountAttributes, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._transport.send_request_async(
            SetAccountAttributesRequest(attributes), SetAccountAttributesResponse(), callback
        )

    # Lifecycle

    def close(self) -> None:
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
