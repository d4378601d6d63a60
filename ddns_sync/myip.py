# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import logging
import typing

import dns.exception
import dns.resolver
import requests

from .errors import DetectionFailure
from .ip import normalise_ip_address

IPV4 = 'IPv4'
IPV6 = 'IPv6'

FMT_TEXT = 'text'
FMT_JSON = 'json'
FMT_DNS = 'dns'

DEFAULT_PROVIDER = 'opendns'

TIMEOUT = 10

PROVIDERS_IPV4 = {
    'opendns': {
        'format': FMT_DNS,
        'nameservers': ['208.67.222.220'],  # resolver4.opendns.com
        'qname': 'myip.opendns.com',
        'rdtype': 'A'
    },
    'google': {
        'format': FMT_DNS,
        'nameservers': ['216.239.32.10'],  # ns1.google.com
        'qname': 'o-o.myaddr.l.google.com',
        'rdtype': 'TXT'
    },
    'dnsme': {
        'url': 'http://myip.dnsmadeeasy.com/',
        'format': FMT_TEXT
    },
    'httpbin': {
        'url': 'https://httpbin.org/ip',
        'format': FMT_JSON,
        'key': 'origin'
    },
    'ipify': {
        'url': 'https://api.ipify.org?format=json',
        'format': FMT_JSON,
        'key': 'ip'
    },
    'ipinfo': {
        'url': 'https://ipinfo.io',
        'format': FMT_JSON,
        'key': 'ip'
    }
}

PROVIDERS_IPV6 = {
    'opendns': {
        'format': FMT_DNS,
        'nameservers': ['2620:119:35::35'],  # resolver1.opendns.com
        'qname': 'myip.opendns.com',
        'rdtype': 'AAAA'
    },
    'google': {
        'format': FMT_DNS,
        'nameservers': ['2001:4860:4802:32::a'],  # ns1.google.com
        'qname': 'o-o.myaddr.l.google.com',
        'rdtype': 'TXT'
    },
    'ipify': {
        # This URL is actually dual stack, so you only get
        #  an IPv6 result if you use IPv6 to connect to it.
        'url': 'https://api6.ipify.org?format=json',
        'format': FMT_JSON,
        'key': 'ip'
    },
}


class UnknownAddressFamily(Exception):
    pass


class UnknownMyIpProvider(DetectionFailure):
    pass


def get_providers(address_family: typing.Optional[str] = None) -> typing.Dict[str, typing.Dict[str, typing.Any]]:
    if address_family is None:
        return {**PROVIDERS_IPV4, **PROVIDERS_IPV6}
    if address_family == IPV4:
        return PROVIDERS_IPV4
    elif address_family == IPV6:
        return PROVIDERS_IPV6
    else:
        raise UnknownAddressFamily('Unknown address family {}'.format(address_family))


def query_dns(settings: dict) -> str:
    resolver = dns.resolver.Resolver(configure=False)
    resolver.nameservers = settings.get('nameservers')
    resolver.lifetime = TIMEOUT
    answer = resolver.resolve(settings.get('qname'), settings.get('rdtype'))
    for rdata in answer:
        # TXT records come back with quotes
        return rdata.to_text().strip('"')
    return ''


def query_http(settings: dict) -> str:
    response = requests.get(settings.get('url'), timeout=TIMEOUT)
    response.raise_for_status()
    if settings.get('format') == FMT_JSON:
        json = response.json()
        if not isinstance(json, dict):
            raise ValueError('Unexpected response {!r}'.format(json))
        return json.get(settings.get('key'))
    return response.text.strip()


def get_myip(provider: str, address_family: str) -> str:
    providers = get_providers(address_family)
    if provider not in providers:
        raise UnknownMyIpProvider('Unknown {} address provider {}'.format(address_family, provider))
    settings = providers[provider]
    logging.debug('Attempting to find {} address via {}'.format(address_family, provider))
    try:
        if settings.get('format') == FMT_DNS:
            ip = query_dns(settings)
        else:
            ip = query_http(settings)
        ip = normalise_ip_address(ip)
    except (dns.exception.DNSException, requests.exceptions.RequestException, ValueError) as exception:
        raise DetectionFailure('Cannot determine public {} via {}: {}'.format(
            address_family, provider, exception
        )) from exception
    if (address_family == IPV4 and '.' not in ip) or (address_family == IPV6 and ':' not in ip):
        raise DetectionFailure('Invalid {} address {} returned by {}'.format(address_family, ip, provider))
    logging.info('Discovered {} address {} via {}'.format(address_family, ip, provider))
    return ip


class Detector:
    """Public address lookups through one provider."""

    def __init__(self, provider: str = DEFAULT_PROVIDER):
        self.provider = provider

    def ipv4(self) -> str:
        return get_myip(self.provider, IPV4)

    def ipv6(self) -> str:
        return get_myip(self.provider, IPV6)
