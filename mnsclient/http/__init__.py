"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

HTTP layer: wire values, request signing and the transport.
"""
