"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Command-line interface for mnsclient.
"""
