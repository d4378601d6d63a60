# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import logging
import typing

import requests
import urllib3

from .config import UnifiSettings
from .errors import CollaboratorFailure

TIMEOUT = 15


class UnifiController:
    """Firewall groups on a UniFi Network controller."""

    settings = None
    session = None
    logged_in = False

    def __init__(self, settings: UnifiSettings):
        self.settings = settings
        self.session = requests.Session()
        self.session.verify = settings.verify
        if not settings.verify:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        self.session.headers.update({'Content-Type': 'application/json'})

    def url(self, pattern, *args):
        if pattern[0] != '/':
            pattern = '/' + pattern
        return 'https://{}:{}{}'.format(self.settings.host, self.settings.port, pattern.format(*args))

    def api_url(self, pattern, *args):
        prefix = '/proxy/network' if self.settings.unifi_os else ''
        return self.url(prefix + '/api/s/{}' + pattern, self.settings.site, *args)

    def request(self, context: str, method: str, url: str, **kwargs) -> dict:
        try:
            response = self.session.request(method, url, timeout=TIMEOUT, **kwargs)
            if response.status_code >= 300:
                logging.debug(response.text)
            response.raise_for_status()
        except requests.exceptions.RequestException as exception:
            raise CollaboratorFailure('{}: {}'.format(context, exception)) from exception
        # UniFi OS wants the latest CSRF token echoed back
        token = response.headers.get('X-Updated-CSRF-Token') or response.headers.get('X-CSRF-Token')
        if token:
            self.session.headers['X-CSRF-Token'] = token
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        if not isinstance(data, dict):
            raise CollaboratorFailure('{}: unexpected response'.format(context))
        meta = data.get('meta', {})
        if meta.get('rc', 'ok') != 'ok':
            raise CollaboratorFailure('{}: {}'.format(context, meta.get('msg', 'request refused')))
        return data

    def login(self):
        path = '/api/auth/login' if self.settings.unifi_os else '/api/login'
        response_data = self.request('login', 'POST', self.url(path), json={
            'username': self.settings.username,
            'password': self.settings.password,
        })
        logging.debug('[UniFi] Logged in to {}'.format(self.settings.host))
        self.logged_in = True
        return response_data

    def logout(self):
        if not self.logged_in:
            return
        path = '/api/auth/logout' if self.settings.unifi_os else '/api/logout'
        self.request('logout', 'POST', self.url(path))
        self.logged_in = False

    def get_groups(self) -> typing.List[dict]:
        data = self.request('firewall groups', 'GET', self.api_url('/rest/firewallgroup'))
        return [group for group in data.get('data') or [] if isinstance(group, dict)]

    def edit_group(self, group: dict, members: typing.List[str]):
        context = 'firewall group {}'.format(group.get('name'))
        group_id = group.get('_id')
        if not group_id:
            raise CollaboratorFailure('{}: missing _id'.format(context))
        return self.request(
            context,
            'PUT',
            self.api_url('/rest/firewallgroup/{}', group_id),
            json={
                '_id': group_id,
                'site_id': group.get('site_id'),
                'name': group.get('name'),
                'group_type': group.get('group_type'),
                'group_members': members,
            }
        )
