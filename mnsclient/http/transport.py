"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

HTTP transport for the message service.

Owns the credentials and the connection pool. Every request is signed with a
fresh header dict, so one transport can be shared by any number of threads.
The transport only moves HttpRequest/HttpResponse values; the codec turns
them into typed requests and responses.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from mnsclient.config import MNSConfig
from mnsclient.exceptions import (
    ParseError,
    ServiceError,
    TransportError,
    TransportTimeoutError,
)
from mnsclient.http.base import HttpRequest, HttpResponse
from mnsclient.http import signer
from mnsclient.logging_config import get_logger, log_http_request, log_service_error
from mnsclient.promise import CallbackLike, MNSPromise
from mnsclient.protocol.codec import API_VERSION, CONTENT_TYPE, decode_response, encode_request
from mnsclient.protocol.requests import MNSRequest
from mnsclient.protocol.responses import MNSResponse
from mnsclient.retry import call_with_retry

logger = get_logger(__name__)


class MNSHttpClient:
    """
    Signs and sends requests for one account.

    Args:
        config: Endpoint, credentials and tuning
        session: Optional pre-built ``requests.Session``. When omitted the
            transport creates one with a pooled ``HTTPAdapter``.
    """

    def __init__(self, config: MNSConfig, session: Optional[requests.Session] = None):
        self.config = config
        self._options = config.options
        self._owns_session = session is None

        if session is None:
            session = requests.Session()
            # Retries are decided by RetryPolicy, never by urllib3
            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=10,
                pool_maxsize=self._options.pool_maxsize,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._closing = False
        self._closed = False
        self._worker_state = threading.local()

        logger.info(
            "transport_initialized",
            endpoint=config.endpoint,
            access_id=config.access_id,
            async_mode=self._options.async_mode,
        )

    # Wire level

    def _build_headers(self, http_request: HttpRequest, body: bytes) -> dict:
        headers = {
            "Host": self.config.host,
            "Date": signer.http_date(),
            "Content-Type": CONTENT_TYPE,
            "Content-Length": str(len(body)),
            "User-Agent": self._options.user_agent,
            "x-mns-version": API_VERSION,
        }
        headers.update(http_request.headers)
        if body:
            headers["Content-MD5"] = signer.content_md5(body)
        if self.config.security_token:
            headers["security-token"] = self.config.security_token
        signature = signer.sign(
            self.config.access_key, http_request.method, http_request.resource, headers
        )
        headers["Authorization"] = signer.authorization_header(self.config.access_id, signature)
        return headers

    def send(self, http_request: HttpRequest) -> HttpResponse:
        """
        Sign and send one request and return the raw reply.

        Raises:
            TransportTimeoutError: If the connect or read timeout expires
            TransportError: If the request could not be delivered
        """
        if self._closed:
            raise TransportError("transport is closed")

        body = http_request.body or b""
        resource = http_request.resource
        url = f"{self.config.endpoint}{resource}"
        headers = self._build_headers(http_request, body)

        start = time.monotonic()
        try:
            reply = self.session.request(
                method=http_request.method,
                url=url,
                headers=headers,
                data=body if body else None,
                timeout=(self._options.connect_timeout, self._options.read_timeout),
            )
        except requests.exceptions.Timeout as e:
            logger.error("request_timeout", method=http_request.method, resource=resource)
            raise TransportTimeoutError(f"Request timeout: {e}") from e
        except requests.exceptions.ConnectionError as e:
            logger.error("connection_error", method=http_request.method, resource=resource)
            raise TransportError(f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error("request_failed", method=http_request.method, resource=resource,
                         exc_info=True)
            raise TransportError(f"Request failed: {e}") from e

        elapsed = round((time.monotonic() - start) * 1000, 2)
        http_response = HttpResponse(
            status_code=reply.status_code,
            headers=dict(reply.headers),
            body=reply.content or b"",
            elapsed_ms=elapsed,
        )
        log_http_request(
            logger,
            http_request.method,
            resource,
            http_response.status_code,
            elapsed,
            request_id=http_response.request_id,
        )
        return http_response

    # Typed requests

    def _send_once(self, request: MNSRequest, response: MNSResponse) -> MNSResponse:
        http_request = encode_request(request)
        http_response = self.send(http_request)
        try:
            return decode_response(response, http_response)
        except ServiceError as e:
            log_service_error(
                logger,
                http_request.method,
                http_request.resource,
                e.code,
                e.status_code,
                request_id=e.request_id,
            )
            raise
        except ParseError as e:
            logger.error(
                "response_parse_error",
                method=http_request.method,
                resource=http_request.resource,
                status_code=e.status_code,
                error=str(e),
            )
            raise

    def send_request(self, request: MNSRequest, response: MNSResponse) -> MNSResponse:
        """
        Send a typed request and fill ``response`` from the reply.

        Blocks until the server replies, including any long-poll wait.

        Args:
            request: The typed request
            response: Empty response object of the matching type

        Returns:
            ``response``, filled in

        Raises:
            InvalidArgumentError: If the request fails validation (nothing is sent)
            TransportError: If the request could not be delivered
            ServiceError: If the service answered with an error
            ParseError: If the reply could not be decoded
        """
        request.validate()
        return call_with_retry(
            lambda: self._send_once(request, response),
            type(request).__name__,
            self._options.retry,
        )

    def send_request_async(
        self,
        request: MNSRequest,
        response: MNSResponse,
        callback: Optional[CallbackLike] = None,
    ) -> MNSPromise:
        """
        Return a promise for the request without blocking.

        Validation still happens immediately. In deferred mode the request
        is sent when the promise is waited on; in background mode it is
        submitted to the transport's thread pool now.

        Raises:
            InvalidArgumentError: If the request fails validation
        """
        request.validate()
        return self.wrap_async(
            lambda: self.send_request(request, response),
            callback,
            name=type(request).__name__,
        )

    def wrap_async(
        self,
        operation,
        callback: Optional[CallbackLike] = None,
        name: str = "request",
    ) -> MNSPromise:
        """Wrap a zero-argument operation in a promise honoring the async mode."""
        promise = MNSPromise(operation, callback, name=name)
        if self._options.async_mode == "background":
            promise.dispatch(self._get_executor())
        return promise

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._closing:
                raise TransportError("transport is closed")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._options.max_workers,
                    thread_name_prefix="mnsclient",
                    initializer=self._mark_worker,
                )
            return self._executor

    def _mark_worker(self) -> None:
        self._worker_state.is_worker = True

    # Lifecycle

    def close(self) -> None:
        """
        Release the connection pool and the background executor.

        Pending background requests are allowed to finish. Called from a
        background callback, it does not wait for the pool.
        """
        with self._executor_lock:
            if self._closing:
                return
            self._closing = True
            executor, self._executor = self._executor, None
        # A worker cannot join its own pool, e.g. when close() runs in a callback
        on_worker = getattr(self._worker_state, "is_worker", False)
        try:
            if executor is not None:
                executor.shutdown(wait=not on_worker)
        finally:
            self._closed = True
            if self._owns_session:
                self.session.close()
        logger.debug("transport_closed", endpoint=self.config.endpoint)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
