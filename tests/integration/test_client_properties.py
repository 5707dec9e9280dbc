"""
Integration tests for client-wide guarantees.

Tests behavior that holds across operations:
- Deletes are idempotent
- Long-poll receive honors the wait window and returns empty, not an error
- Async callbacks fire exactly once in both dispatch modes
- One client is safe to share between threads
- Malformed replies surface as ParseError
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from mnsclient import (
    AsyncCallback,
    Client,
    ClientOptions,
    MNSConfig,
    QueueAttributes,
    SendMessageRequest,
)
from mnsclient.exceptions import (
    InvalidArgumentError,
    ParseError,
    QueueNotExistError,
    SDKConfigurationError,
    ServiceError,
)
from mnsclient.http.base import HttpResponse

pytestmark = pytest.mark.integration


class TestLifecycle:
    """Test create -> delete -> list."""

    def test_deleted_queue_not_listed(self, client):
        client.create_queue("orders")
        client.create_queue("billing")

        client.delete_queue("orders")

        assert client.list_queue().queue_names == ["billing"]

    def test_delete_missing_queue_succeeds(self, client):
        response = client.delete_queue("never-existed")

        assert response.request_id

    def test_delete_then_use(self, client):
        client.create_queue("orders")
        client.delete_queue("orders")

        with pytest.raises(QueueNotExistError):
            client.get_queue_ref("orders").send_message(SendMessageRequest("x"))

    def test_paging_visits_every_queue_once(self, client):
        names = [f"q{i:02d}" for i in range(25)]
        for name in names:
            client.create_queue(name)

        seen = []
        marker = None
        while True:
            page = client.list_queue(ret_num=10, marker=marker)
            seen.extend(page.queue_names)
            marker = page.next_marker
            if marker is None:
                break

        assert seen == names

    def test_from_config(self, fake_server, mns_config):
        with Client.from_config(mns_config, session=fake_server.session()) as mns_client:
            mns_client.create_queue("orders")

            assert mns_client.config == mns_config
        assert "orders" in fake_server.queues


class TestLongPoll:
    """Test receive wait windows."""

    def test_empty_receive_waits_for_window(self, client):
        client.create_queue("orders")
        queue = client.get_queue_ref("orders")

        start = time.monotonic()
        response = queue.receive_message(wait_seconds=1)
        elapsed = time.monotonic() - start

        assert response.is_empty
        assert elapsed >= 0.9

    def test_queue_polling_wait_is_default(self, client):
        client.create_queue("orders", QueueAttributes(polling_wait_seconds=1))
        queue = client.get_queue_ref("orders")

        start = time.monotonic()
        assert queue.receive_message().is_empty

        assert time.monotonic() - start >= 0.9

    def test_zero_wait_returns_immediately(self, client):
        client.create_queue("orders", QueueAttributes(polling_wait_seconds=5))
        queue = client.get_queue_ref("orders")

        start = time.monotonic()
        assert queue.receive_message(wait_seconds=0).is_empty

        assert time.monotonic() - start < 1

    def test_wait_window_validated(self, client):
        with pytest.raises(InvalidArgumentError):
            client.get_queue_ref("orders").receive_message(wait_seconds=31)


class TestCallbacks:
    """Test completion callbacks fire exactly once."""

    def test_deferred_success(self, client):
        client.create_queue("orders")
        queue = client.get_queue_ref("orders")
        on_success = []
        on_failed = []

        promise = queue.send_message_async(
            SendMessageRequest("hi"), AsyncCallback(on_success.append, on_failed.append)
        )
        assert on_success == []

        response = promise.wait()
        promise.wait()

        assert on_success == [response]
        assert on_failed == []

    def test_deferred_failure(self, client):
        failures = []
        promise = client.get_queue_ref("ghost").peek_message_async(
            AsyncCallback(on_failed=failures.append)
        )

        with pytest.raises(QueueNotExistError):
            promise.wait()

        assert len(failures) == 1
        assert isinstance(failures[0], QueueNotExistError)
        assert promise.error is failures[0]

    def test_async_receive_decodes_body(self, client):
        client.create_queue("orders")
        queue = client.get_queue_ref("orders")
        queue.send_message(SendMessageRequest("encoded"))

        response = queue.receive_message_async(wait_seconds=0).wait()

        assert response.message.body == "encoded"

    def test_background_callbacks(self, background_client):
        background_client.create_queue("orders")
        queue = background_client.get_queue_ref("orders")
        calls = []
        lock = threading.Lock()
        done = threading.Event()

        def record(response):
            with lock:
                calls.append(response.message_id)
                if len(calls) == 10:
                    done.set()

        promises = [
            queue.send_message_async(SendMessageRequest(f"m{i}"), record) for i in range(10)
        ]

        assert done.wait(10)
        results = [p.wait(timeout=5) for p in promises]
        assert sorted(calls) == sorted(r.message_id for r in results)
        assert len(set(calls)) == 10

    def test_background_failure_callback(self, background_client):
        failed = threading.Event()
        errors = []

        def on_failed(error):
            errors.append(error)
            failed.set()

        queue = background_client.get_queue_ref("ghost")
        promise = queue.get_attribute_async(AsyncCallback(on_failed=on_failed))

        assert failed.wait(5)
        with pytest.raises(QueueNotExistError):
            promise.wait(timeout=5)
        assert len(errors) == 1


class TestConcurrency:
    """Test one client shared between threads."""

    def test_concurrent_sends(self, client, fake_server):
        client.create_queue("orders")
        queue = client.get_queue_ref("orders")

        with ThreadPoolExecutor(max_workers=8) as executor:
            responses = list(executor.map(
                lambda i: queue.send_message(SendMessageRequest(f"msg-{i}")), range(50)
            ))

        assert len({r.message_id for r in responses}) == 50
        assert len(fake_server.queues["orders"].messages) == 50
        # every request carried a valid signature
        assert all(r.status_code == 201 for r in responses)

    def test_concurrent_consumers_share_nothing(self, client):
        client.create_queue("orders")
        queue = client.get_queue_ref("orders")
        for i in range(20):
            queue.send_message(SendMessageRequest(f"msg-{i}"))

        def drain(_):
            bodies = []
            while True:
                response = queue.receive_message(wait_seconds=0)
                if response.is_empty:
                    return bodies
                bodies.append(response.message.body)
                queue.delete_message(response.message.receipt_handle)

        with ThreadPoolExecutor(max_workers=4) as executor:
            drained = [body for bodies in executor.map(drain, range(4)) for body in bodies]

        assert sorted(drained) == sorted(f"msg-{i}" for i in range(20))


class TestMalformedReplies:
    """Test replies that cannot be decoded."""

    @pytest.mark.parametrize("reply", [
        HttpResponse(200, {}, b""),
        HttpResponse(200, {}, b"<Message><MessageId>M1"),
        HttpResponse(200, {}, b"<Queues/>"),
        HttpResponse(502, {}, b"<html>Bad Gateway</html>"),
        HttpResponse(500, {}, b"<Error><Message>no code</Message></Error>"),
    ])
    def test_parse_error(self, client, fake_server, reply):
        client.create_queue("orders")
        fake_server.inject(reply)

        with pytest.raises(ParseError) as exc_info:
            client.get_queue_ref("orders").receive_message(wait_seconds=0)
        assert not isinstance(exc_info.value, ServiceError)

    def test_bad_base64_body(self, client, fake_server):
        client.create_queue("orders")
        raw = client.get_queue_ref("orders", base64=False)
        raw.send_message(SendMessageRequest("%%% not base64 %%%"))

        with pytest.raises(ParseError, match="base64"):
            client.get_queue_ref("orders").peek_message()

    def test_client_keeps_working_after_parse_error(self, client, fake_server):
        client.create_queue("orders")
        fake_server.inject(HttpResponse(200, {}, b"garbage"))

        with pytest.raises(ParseError):
            client.list_queue()
        assert client.list_queue().queue_names == ["orders"]


class TestConfiguration:
    """Test configuration errors surface at construction."""

    def test_bad_endpoint(self):
        with pytest.raises(SDKConfigurationError):
            Client("ftp://example.com", "id", "key")

    def test_bad_options(self):
        with pytest.raises(SDKConfigurationError):
            MNSConfig("http://fake-mns.local", "id", "key", options=ClientOptions(read_timeout=10))
