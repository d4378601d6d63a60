# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

from .client import main

__all__ = ['main']
