# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import logging
import typing

import requests

TIMEOUT = 10


class Webhook:
    """Best-effort chat notifications, a failed post is only logged."""

    def __init__(self, url: typing.Optional[str] = None):
        self.url = url

    def send(self, text: str):
        if not self.url:
            return
        try:
            response = requests.post(self.url, json={'text': text}, timeout=TIMEOUT)
            if response.status_code >= 300:
                logging.debug('Webhook returned HTTP {}: {}'.format(response.status_code, response.text))
        except requests.exceptions.RequestException as exception:
            logging.debug('Webhook delivery failed: {}'.format(exception))
