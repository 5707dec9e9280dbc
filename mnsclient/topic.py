"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Topic handle.

Publishing fans a message out to every subscription of the topic. Topic
message bodies are sent as given; callers that need base64 encode first.
"""

from dataclasses import replace
from typing import Optional

from mnsclient.http.transport import MNSHttpClient
from mnsclient.models import SubscriptionAttributes, TopicAttributes
from mnsclient.promise import CallbackLike, MNSPromise
from mnsclient.protocol.requests import (
    GetSubscriptionAttributeRequest,
    GetTopicAttributeRequest,
    ListSubscriptionRequest,
    PublishMessageRequest,
    SetSubscriptionAttributeRequest,
    SetTopicAttributeRequest,
    SubscribeRequest,
    UnsubscribeRequest,
)
from mnsclient.protocol.responses import (
    GetSubscriptionAttributeResponse,
    GetTopicAttributeResponse,
    ListSubscriptionResponse,
    PublishMessageResponse,
    SetSubscriptionAttributeResponse,
    SetTopicAttributeResponse,
    SubscribeResponse,
    UnsubscribeResponse,
)


class Topic:
    """
    Publish and subscription operations on one topic.

    Args:
        client: Shared transport
        topic_name: Topic name
    """

    def __init__(self, client: MNSHttpClient, topic_name: str):
        self._client = client
        self.topic_name = topic_name

    def __repr__(self) -> str:
        return f"Topic({self.topic_name!r})"

    def get_attribute(self) -> GetTopicAttributeResponse:
        return self._client.send_request(
            GetTopicAttributeRequest(self.topic_name), GetTopicAttributeResponse()
        )

    def set_attribute(self, attributes: TopicAttributes) -> SetTopicAttributeResponse:
        return self._client.send_request(
            SetTopicAttributeRequest(self.topic_name, attributes), SetTopicAttributeResponse()
        )

    # Publish

    def publish_message(self, request: PublishMessageRequest) -> PublishMessageResponse:
        """
        Publish one message.

        Args:
            request: Body and optional tag; subscriptions with a filter tag
                only receive messages carrying that tag

        Returns:
            Response with the message id and body MD5
        """
        return self._client.send_request(
            replace(request, topic_name=self.topic_name), PublishMessageResponse()
        )

    def publish_message_async(
        self, request: PublishMessageRequest, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            replace(request, topic_name=self.topic_name), PublishMessageResponse(), callback
        )

    # Subscriptions

    def subscribe(self, attributes: SubscriptionAttributes) -> SubscribeResponse:
        """
        Create a subscription.

        Raises:
            SubscriptionAlreadyExistError: If a subscription with the same name
                but different attributes exists
        """
        return self._client.send_request(
            SubscribeRequest(self.topic_name, attributes), SubscribeResponse()
        )

    def subscribe_async(
        self, attributes: SubscriptionAttributes, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            SubscribeRequest(self.topic_name, attributes), SubscribeResponse(), callback
        )

    def unsubscribe(self, subscription_name: str) -> UnsubscribeResponse:
        """Delete a subscription. Deleting one that does not exist succeeds."""
        return self._client.send_request(
            UnsubscribeRequest(self.topic_name, subscription_name), UnsubscribeResponse()
        )

    def unsubscribe_async(
        self, subscription_name: str, callback: Optional[CallbackLike] = None
    ) -> MNSPromise:
        return self._client.send_request_async(
            UnsubscribeRequest(self.topic_name, subscription_name), UnsubscribeResponse(), callback
        )

    def list_subscription(
        self,
        prefix: Optional[str] = None,
        ret_num: Optional[int] = None,
        marker: Optional[str] = None,
    ) -> ListSubscriptionResponse:
        return self._client.send_request(
            ListSubscriptionRequest(self.topic_name, ret_num, prefix, marker),
            ListSubscriptionResponse(),
        )

    def list_subscription_async(
        self,
        prefix: Optional[str] = None,
        ret_num: Optional[int] = None,
        marker: Optional[str] = None,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        return self._client.send_request_async(
            ListSubscriptionRequest(self.topic_name, ret_num, prefix, marker),
            ListSubscriptionResponse(),
            callback,
        )

    def get_subscription_attributes(self, subscription_name: str) -> GetSubscriptionAttributeResponse:
        return self._client.send_request(
            GetSubscriptionAttributeRequest(self.topic_name, subscription_name),
            GetSubscriptionAttributeResponse(),
        )

    def set_subscription_attributes(
        self, attributes: SubscriptionAttributes
    ) -> SetSubscriptionAttributeResponse:
        """Update a subscription. Only the notify strategy can change."""
        return self._client.send_request(
            SetSubscriptionAttributeRequest(self.topic_name, attributes),
            SetSubscriptionAttributeResponse(),
        )
