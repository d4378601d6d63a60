#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

from .client import main

if __name__ == '__main__':
    main()
