"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Typed requests and responses and the XML codec that maps them to the wire.
"""
