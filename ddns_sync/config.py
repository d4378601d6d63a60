# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import json
import logging
import types
import typing

from pathlib import Path

from .errors import ConfigMissing
from .myip import DEFAULT_PROVIDER

DEFAULT_CONFIG_FILE = '~/.ddns/sync.json'

DEFAULT_TTL = 60

REQUIRED = ['GOOGLE_APPLICATION_CREDENTIALS', 'GCLOUD_DNS_ZONE']

KEYS = REQUIRED + [
    'GCLOUD_PROJECT',
    'GCLOUD_DNS_NAME',
    'GCLOUD_DNS_NAME6',
    'GCLOUD_DNS_TTL',
    'UNIFI_HOST',
    'UNIFI_USERNAME',
    'UNIFI_PASSWORD',
    'UNIFI_SITE',
    'UNIFI_PORT',
    'UNIFI_VERIFY_SSL',
    'UNIFI_OS',
    'UNIFI_FIREWALL_MAPPING',
    'K8S_SERVICE_MAPPING',
    'K8S_METALLB_POOL_MAPPING',
    'WEBHOOK_URL',
    'MYIP_PROVIDER',
]


class ServiceTarget(typing.NamedTuple):
    namespace: str
    name: str


class PoolTarget(typing.NamedTuple):
    namespace: str
    pool: str
    suffix: str


class UnifiSettings(typing.NamedTuple):
    host: typing.Optional[str] = None
    username: typing.Optional[str] = None
    password: typing.Optional[str] = None
    site: str = 'default'
    port: int = 443
    verify: bool = False
    unifi_os: bool = False

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.username)


class Config(typing.NamedTuple):
    credentials: typing.Optional[str] = None
    zone: typing.Optional[str] = None
    project: typing.Optional[str] = None
    names4: typing.Tuple[str, ...] = ()
    names6: typing.Tuple[typing.Tuple[str, str], ...] = ()
    ttl: int = DEFAULT_TTL
    firewall_groups: typing.Mapping[str, str] = types.MappingProxyType({})
    services: typing.Mapping[str, ServiceTarget] = types.MappingProxyType({})
    pools: typing.Tuple[PoolTarget, ...] = ()
    unifi: UnifiSettings = UnifiSettings()
    webhook_url: typing.Optional[str] = None
    myip_provider: str = DEFAULT_PROVIDER

    def validate(self):
        if not self.credentials:
            raise ConfigMissing('Missing GOOGLE_APPLICATION_CREDENTIALS')
        if not self.zone:
            raise ConfigMissing('Missing GCLOUD_DNS_ZONE')
        return self


def ensure_trailing_dot(name: str) -> str:
    if not name:
        return ''
    return name if name.endswith('.') else name + '.'


def split_list(value: typing.Optional[str]) -> typing.List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def as_bool(value, default: bool = False) -> bool:
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ['1', 'true', 'yes', 'on']


def as_int(key: str, value, default: int) -> int:
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        logging.warning('Ignoring non-numeric {} value {!r}'.format(key, value))
        return default


def parse_pairs(key: str, value: typing.Optional[str]) -> typing.List[typing.Tuple[str, str]]:
    # "a=b,c=d" keeping order, skipping malformed items
    pairs = []
    for item in split_list(value):
        left, sep, right = item.partition('=')
        left, right = left.strip(), right.strip()
        if not sep or not left or not right:
            logging.warning('Ignoring malformed {} entry {!r}'.format(key, item))
            continue
        pairs.append((left, right))
    return pairs


def parse_names6(value: typing.Optional[str]) -> typing.Tuple[typing.Tuple[str, str], ...]:
    return tuple(
        (ensure_trailing_dot(name), suffix)
        for name, suffix in parse_pairs('GCLOUD_DNS_NAME6', value)
    )


def parse_firewall_mapping(value: typing.Optional[str]) -> typing.Mapping[str, str]:
    return types.MappingProxyType({
        ensure_trailing_dot(domain): group
        for domain, group in parse_pairs('UNIFI_FIREWALL_MAPPING', value)
    })


def parse_service_mapping(value: typing.Optional[str]) -> typing.Mapping[str, ServiceTarget]:
    services = {}
    for domain, path in parse_pairs('K8S_SERVICE_MAPPING', value):
        namespace, _, name = path.partition('/')
        if not namespace or not name:
            logging.warning('Ignoring malformed K8S_SERVICE_MAPPING entry {!r}'.format(path))
            continue
        services[ensure_trailing_dot(domain)] = ServiceTarget(namespace, name)
    return types.MappingProxyType(services)


def parse_pool_mapping(value: typing.Optional[str]) -> typing.Tuple[PoolTarget, ...]:
    pools = []
    for item in split_list(value):
        parts = item.split('/')
        if len(parts) != 3 or not all(parts):
            logging.warning('Ignoring malformed K8S_METALLB_POOL_MAPPING entry {!r}'.format(item))
            continue
        pools.append(PoolTarget(*parts))
    return tuple(pools)


def read_config_file(file: typing.Optional[str]) -> dict:
    #
    # The configuration file holds defaults for the
    #  environment variables, keyed by variable name.
    #
    #  e.g. {"GCLOUD_DNS_ZONE": "example-zone"}
    #
    if file is None or str(file).lower()[-5:] != '.json':
        return {}
    path = Path(file).expanduser()
    try:
        file = str(path.resolve())
        logging.debug('Loading from configuration file {}'.format(file))
        with open(file) as fh:
            data = json.load(fh)
    except (IOError, ValueError) as exception:
        logging.debug(str(exception))
        return {}
    if not isinstance(data, dict):
        logging.warning('Ignoring configuration file {}, expected an object'.format(file))
        return {}
    logging.info('Loaded configuration file')
    return data


def load_config(environ: typing.Mapping[str, str], file_values: typing.Optional[dict] = None) -> Config:
    values = {}
    for key in KEYS:
        value = environ.get(key)
        if value is None and file_values:
            value = file_values.get(key)
        values[key] = value if value is None or isinstance(value, (bool, int)) else str(value)
    get = values.get
    return Config(
        credentials=get('GOOGLE_APPLICATION_CREDENTIALS') or None,
        zone=get('GCLOUD_DNS_ZONE') or None,
        project=get('GCLOUD_PROJECT') or None,
        names4=tuple(ensure_trailing_dot(name) for name in split_list(get('GCLOUD_DNS_NAME'))),
        names6=parse_names6(get('GCLOUD_DNS_NAME6')),
        ttl=as_int('GCLOUD_DNS_TTL', get('GCLOUD_DNS_TTL'), DEFAULT_TTL),
        firewall_groups=parse_firewall_mapping(get('UNIFI_FIREWALL_MAPPING')),
        services=parse_service_mapping(get('K8S_SERVICE_MAPPING')),
        pools=parse_pool_mapping(get('K8S_METALLB_POOL_MAPPING')),
        unifi=UnifiSettings(
            host=get('UNIFI_HOST') or None,
            username=get('UNIFI_USERNAME') or None,
            password=get('UNIFI_PASSWORD') or None,
            site=get('UNIFI_SITE') or 'default',
            port=as_int('UNIFI_PORT', get('UNIFI_PORT'), 443),
            verify=as_bool(get('UNIFI_VERIFY_SSL')),
            unifi_os=as_bool(get('UNIFI_OS')),
        ),
        webhook_url=get('WEBHOOK_URL') or None,
        myip_provider=get('MYIP_PROVIDER') or DEFAULT_PROVIDER,
    )
