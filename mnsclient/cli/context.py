"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

CLI context for mnsclient.

Provides shared context object and decorators for CLI commands.
"""

from typing import Optional

import click
import requests

from mnsclient.client import Client


# Global context object to share connection settings across commands
class CLIContext:
    """Context object for CLI commands."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.endpoint = None
        self.access_id = None
        self.access_key = None
        self.security_token = None
        self.verbose = False
        self.session = session
        self._client: Optional[Client] = None

    def get_client(self) -> Client:
        """
        Build the client on first use.

        Raises:
            SDKConfigurationError: If the endpoint or credentials are missing
        """
        if self._client is None:
            self._client = Client(
                endpoint=self.endpoint,
                access_id=self.access_id,
                access_key=self.access_key,
                security_token=self.security_token,
                session=self.session,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
