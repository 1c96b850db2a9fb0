#!/usr/bin/env python

"""
    Bibliolend, the lending core of a library management system

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = "0.1.0"
