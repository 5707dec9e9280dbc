"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Request signing.

The signature is an HMAC-SHA1, keyed with the access key, over:

    VERB + "\\n"
    + Content-MD5 + "\\n"
    + Content-Type + "\\n"
    + Date + "\\n"
    + CanonicalizedMNSHeaders
    + CanonicalizedResource

CanonicalizedMNSHeaders is every ``x-mns-*`` header, lower-cased, sorted by
name, rendered as ``name:value\\n``. CanonicalizedResource is the path plus
the sorted query string.

Everything here is a pure function of its arguments, so one signer can be
shared freely between threads.
"""

import base64
import hashlib
import hmac
from email.utils import formatdate
from typing import Dict, Mapping, Optional

AUTHORIZATION_SCHEME = "MNS"
MNS_HEADER_PREFIX = "x-mns-"


def http_date(timestamp: Optional[float] = None) -> str:
    """RFC 1123 date in GMT, e.g. ``Thu, 17 Oct 2026 10:00:00 GMT``."""
    return formatdate(timestamp, usegmt=True)


def content_md5(body: bytes) -> str:
    """Base64 of the hex MD5 digest of the body."""
    digest = hashlib.md5(body).hexdigest()
    return base64.b64encode(digest.encode("ascii")).decode("ascii")


def _lower(headers: Mapping[str, str]) -> Dict[str, str]:
    return {name.lower(): value for name, value in headers.items()}


def canonicalize_mns_headers(headers: Mapping[str, str]) -> str:
    lowered = _lower(headers)
    names = sorted(name for name in lowered if name.startswith(MNS_HEADER_PREFIX))
    return "".join(f"{name}:{lowered[name].strip()}\n" for name in names)


def string_to_sign(method: str, resource: str, headers: Mapping[str, str]) -> str:
    lowered = _lower(headers)
    return "\n".join([
        method.upper(),
        lowered.get("content-md5", ""),
        lowered.get("content-type", ""),
        lowered.get("date", ""),
        canonicalize_mns_headers(headers) + resource,
    ])


def sign(access_key: str, method: str, resource: str, headers: Mapping[str, str]) -> str:
    """
    Compute the request signature.

    Args:
        access_key: Secret access key
        method: HTTP verb
        resource: Path plus sorted query string
        headers: Request headers (any case)

    Returns:
        Base64-encoded HMAC-SHA1 signature
    """
    payload = string_to_sign(method, resource, headers).encode("utf-8")
    digest = hmac.new(access_key.encode("utf-8"), payload, hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def authorization_header(access_id: str, signature: str) -> str:
    return f"{AUTHORIZATION_SCHEME} {access_id}:{signature}"


def verify(
    access_id: str,
    access_key: str,
    method: str,
    resource: str,
    headers: Mapping[str, str],
) -> bool:
    """Check the Authorization header of a received request."""
    expected = authorization_header(access_id, sign(access_key, method, resource, headers))
    return hmac.compare_digest(_lower(headers).get("authorization", ""), expected)
