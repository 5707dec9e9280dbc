"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Wire-level request and response representations.

These are what the codec produces and consumes and what the transport signs
and sends. The transport never looks past them into operation semantics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import quote, urlencode


@dataclass
class HttpRequest:
    """Outbound request representation."""
    method: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    @property
    def query_string(self) -> str:
        if not self.params:
            return ""
        return urlencode(sorted(self.params.items()), quote_via=quote)

    @property
    def resource(self) -> str:
        """Path plus sorted query string, as sent and as signed."""
        query = self.query_string
        return f"{self.path}?{query}" if query else self.path


@dataclass
class HttpResponse:
    """
    Inbound response representation.

    Header names are stored lower-cased.
    """
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    elapsed_ms: float = 0.0

    def __post_init__(self):
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    @property
    def request_id(self) -> Optional[str]:
        return self.header("x-mns-request-id")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
