#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import argparse
import logging
import json
import os
import sys
import typing

from . import ip
from . import myip
from .clouddns import CloudDNSZone
from .compose import compose_text, network_address
from .config import DEFAULT_CONFIG_FILE, Config, load_config, read_config_file
from .errors import ConfigMissing, DetectionFailure, InvalidAddress
from .kube import Cluster
from .notify import Webhook
from .reconcile import Reconciler
from .unifi import UnifiController

FMT_TABLE = 'table'
FMT_TEXT = 'text'
FMT_JSON = 'json'

EPILOG = 'Settings come from the environment, the configuration file supplies defaults'

LOG_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]


def print_table(rows: typing.List[typing.List[str]]):
    widths = [min(max(len(str(cell)) for cell in column), 80) for column in zip(*rows)]
    fmt = ' | '.join('{!s:' + str(width) + '}' for width in widths)
    header, body = rows[0], rows[1:]
    print(fmt.format(*header))
    print('-' * min(sum(widths) + 3 * len(widths) + 1, 80))
    for row in body:
        print(fmt.format(*row))


def selected_families(args: dict) -> typing.Tuple[bool, bool]:
    # neither or both of -4/-6 means both families
    if bool(args.get('4')) == bool(args.get('6')):
        return True, True
    return bool(args.get('4')), bool(args.get('6'))


def lookup_myip(provider: str, address_family: str) -> str:
    if provider not in myip.get_providers(address_family):
        return 'Unsupported'
    try:
        return myip.get_myip(provider, address_family)
    except DetectionFailure as exception:
        logging.info(str(exception))
        return 'Error'


def show_myip_providers_table(args: dict, addresses: bool = False):
    ipv4, ipv6 = selected_families(args)
    providers4 = list(myip.get_providers(myip.IPV4).keys())
    providers6 = list(myip.get_providers(myip.IPV6).keys())
    if args.get('provider') is not None:
        providers = [args.get('provider')]
    elif ipv4 and ipv6:
        providers = set(providers4 + providers6)
    elif ipv4:
        providers = providers4
    else:
        providers = providers6
    results = [
        ['Provider', 'IPv4', 'IPv6']
    ]
    for provider in sorted(providers):
        column4 = column6 = 'Disabled'
        if ipv4:
            column4 = lookup_myip(provider, myip.IPV4) if addresses else str(provider in providers4)
        if ipv6:
            column6 = lookup_myip(provider, myip.IPV6) if addresses else str(provider in providers6)
        results.append([provider, column4, column6])
    print_table(results)


def show_myip_providers(args: dict):
    result_format = args.get('format')
    if result_format is None or result_format == FMT_TABLE:
        show_myip_providers_table(args, addresses=False)
        return
    ipv4, ipv6 = selected_families(args)
    results = {'ipv4': [], 'ipv6': []}
    if ipv4:
        results['ipv4'] = sorted(myip.get_providers(myip.IPV4).keys())
    if ipv6:
        results['ipv6'] = sorted(myip.get_providers(myip.IPV6).keys())
    if result_format == FMT_JSON:
        print(json.dumps(results, sort_keys=True, indent=4))
    else:
        for provider in sorted(set(results['ipv4'] + results['ipv6'])):
            print(provider)


def show_myip(args: dict):
    result_format = args.get('format')
    if result_format is None or result_format == FMT_TABLE:
        show_myip_providers_table(args, addresses=True)
        return
    provider = args.get('provider')
    if provider is None:
        provider = myip.DEFAULT_PROVIDER
    results = {}
    ipv4, ipv6 = selected_families(args)
    if ipv4:
        results['ipv4'] = lookup_myip(provider, myip.IPV4)
    if ipv6:
        results['ipv6'] = lookup_myip(provider, myip.IPV6)
    results = {key: value for key, value in results.items() if value not in ['Error', 'Unsupported']}
    if result_format == FMT_JSON:
        print(json.dumps(results, sort_keys=True, indent=4))
    else:
        for value in results.values():
            print(value)


def show_composed(args: dict, parser: argparse.ArgumentParser):
    try:
        if args.get('network'):
            print(network_address(ip.parse(args.get('address')), args.get('suffix')))
        else:
            print(compose_text(args.get('address'), args.get('suffix')))
    except InvalidAddress as exception:
        parser.error(str(exception))


def build_reconciler(config: Config) -> Reconciler:
    firewall = None
    if config.unifi.enabled:
        firewall = UnifiController(config.unifi)
    return Reconciler(
        config,
        detector=myip.Detector(config.myip_provider),
        zone=CloudDNSZone(config.zone, config.project),
        firewall=firewall,
        cluster=Cluster(),
        notifier=Webhook(config.webhook_url),
    )


def run_sync(args: dict):
    # a scheduled run logs its changes unless asked for more
    if args.get('verbose', 0) < 2:
        configure_logging(2)
    config = load_config(os.environ, read_config_file(args.get('config')))
    try:
        config.validate()
    except ConfigMissing as exception:
        logging.error('FATAL ERROR: {}'.format(exception))
        Webhook(config.webhook_url).send('FATAL DDNS ERROR: {}'.format(exception))
        sys.exit(1)
    result = build_reconciler(config).run()
    if result.failures:
        logging.warning('{} target(s) failed, see above'.format(len(result.failures)))


def configure_argument_parser(myip_provider_choices: list) -> argparse.ArgumentParser:
    # Global (common)
    global_common = argparse.ArgumentParser(add_help=False)
    global_common.add_argument(
        '-v', '--verbose', action='count', default=0,
        help='increase logging verbosity (use up to 3 times)'
    )
    global_common.add_argument(
        '-c', '--config', help='configuration file (default: {})'.format(DEFAULT_CONFIG_FILE),
        metavar='FILE', default=DEFAULT_CONFIG_FILE
    )

    # Address family (myip)
    family_common = argparse.ArgumentParser(add_help=False)
    family_common.add_argument('-4', action='store_true', help='only IPv4')
    family_common.add_argument('-6', action='store_true', help='only IPv6')

    # Global (main parser)
    parser = argparse.ArgumentParser(
        parents=[global_common], epilog=EPILOG,
        description='Dynamic DNS, firewall and Kubernetes address sync',
    )
    parser.set_defaults(func=run_sync, cmd='run')
    subparsers = parser.add_subparsers()

    # run
    run_parser = subparsers.add_parser(
        'run', parents=[global_common], epilog=EPILOG,
        help='reconcile every configured target once',
        description='Detect the public addresses and update every configured target')
    run_parser.set_defaults(func=run_sync, cmd='run')

    # myip
    myip_subparser = subparsers.add_parser(
        'myip', epilog=EPILOG,
        help='external IP lookup',
        description='Looking up your external IP via various providers'
    )
    myip_subparser.set_defaults(func=lambda a: myip_subparser.error('choose providers or query'), cmd='myip')
    myip_subparsers = myip_subparser.add_subparsers()

    # myip > providers
    myip_providers_parser = myip_subparsers.add_parser(
        'providers', parents=[global_common, family_common], epilog=EPILOG,
        help='list external IP lookup providers',
        description='List of providers who will inform you of your public IP')
    myip_providers_parser.set_defaults(func=show_myip_providers, cmd='myip.providers')
    myip_providers_parser.add_argument(
        '-f', '--format', help='display format of the result',
        choices=sorted([FMT_JSON, FMT_TABLE, FMT_TEXT]))

    # myip > query
    myip_query_provider = myip_subparsers.add_parser(
        'query', parents=[global_common, family_common], epilog=EPILOG,
        help='query providers for your external IP',
        description='Query one or more providers for your public IP')
    myip_query_provider.set_defaults(func=show_myip, cmd='myip.query')
    myip_query_provider.add_argument(
        '-f', '--format', help='display format of the result',
        choices=sorted([FMT_JSON, FMT_TABLE, FMT_TEXT]))
    myip_query_provider.add_argument(
        '-p', '--provider', help='provider to query against',
        choices=myip_provider_choices)

    # compose
    compose_parser = subparsers.add_parser(
        'compose', parents=[global_common], epilog=EPILOG,
        help='preview a composed IPv6 address',
        description='Combine the 56 bit prefix of ADDRESS with SUFFIX')
    compose_parser.set_defaults(func=lambda a: show_composed(a, compose_parser), cmd='compose')
    compose_parser.add_argument('address', help='IPv6 address providing the prefix')
    compose_parser.add_argument('suffix', help='suffix filling the last 9 bytes, e.g. ::1')
    compose_parser.add_argument(
        '--network', action='store_true', help='print the /120 pool network instead')

    return parser


def configure_logging(verbosity: int = 0):
    level = LOG_LEVELS[max(0, min(verbosity, len(LOG_LEVELS) - 1))]
    logging.basicConfig(format='%(levelname)-8s - %(message)s', level=level)
    root = logging.getLogger()
    if root.level != level:
        root.setLevel(level)
        logging.debug('Log level {}'.format(logging.getLevelName(level)))


def main(argv: typing.Optional[typing.List[str]] = None):
    try:
        configure_logging()

        # parse cli arguments
        myip_provider_choices = sorted(myip.get_providers(None).keys())
        parser = configure_argument_parser(myip_provider_choices)
        args = parser.parse_args(argv)

        if args.verbose > 0:
            configure_logging(args.verbose)

        # dispatch to the arguments selected function
        args.func(vars(args))

    except KeyboardInterrupt:
        sys.exit(3)  # ignore the exception and exit


if __name__ == '__main__':
    main()
