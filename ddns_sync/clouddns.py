# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import logging
import typing

import requests
from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import dns

from .errors import CollaboratorFailure

TYPE_IPV4 = 'A'
TYPE_IPV6 = 'AAAA'

DEFAULT_TTL = 60

# transport errors from the authorized session are not wrapped by the client
GOOGLE_ERRORS = (
    api_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    requests.exceptions.RequestException,
)


class CloudDNSZone:
    """A Google Cloud DNS managed zone."""

    def __init__(self, zone_name: str, project: typing.Optional[str] = None):
        self.zone_name = zone_name
        self.project = project
        self._zone = None

    @property
    def zone(self):
        if self._zone is None:
            logging.info('[DNS] Connecting to managed zone {}'.format(self.zone_name))
            try:
                client = dns.Client(project=self.project)
            except GOOGLE_ERRORS as exception:
                raise CollaboratorFailure('Cloud DNS client: {}'.format(exception)) from exception
            self._zone = client.zone(self.zone_name)
        return self._zone

    def get_record(self, name: str, record_type: str):
        try:
            for record in self.zone.list_resource_record_sets():
                if record.name == name and record.record_type == record_type:
                    return record
        except GOOGLE_ERRORS as exception:
            raise CollaboratorFailure('Reading {} {}: {}'.format(name, record_type, exception)) from exception
        return None

    def create_record(self, name: str, record_type: str, value: str, ttl: int):
        record = self.zone.resource_record_set(name, record_type, ttl, [value])
        changes = self.zone.changes()
        changes.add_record_set(record)
        self.apply(changes, name, record_type)
        return record

    def replace_record(self, existing, value: str, ttl: int = DEFAULT_TTL):
        record = self.zone.resource_record_set(existing.name, existing.record_type, existing.ttl or ttl, [value])
        changes = self.zone.changes()
        changes.delete_record_set(existing)
        changes.add_record_set(record)
        self.apply(changes, existing.name, existing.record_type)
        return record

    # noinspection PyMethodMayBeStatic
    def apply(self, changes, name: str, record_type: str):
        try:
            changes.create()
        except GOOGLE_ERRORS as exception:
            raise CollaboratorFailure('Writing {} {}: {}'.format(name, record_type, exception)) from exception
        logging.debug('[DNS] Change {} submitted for {} {}'.format(changes.name, name, record_type))
