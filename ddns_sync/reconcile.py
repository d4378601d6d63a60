# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import logging
import typing

from . import ip
from .compose import PREFIX_BYTES, compose, network_address
from .config import Config, PoolTarget, ServiceTarget
from .errors import CollaboratorFailure, SyncError

TYPE_IPV4 = 'A'
TYPE_IPV6 = 'AAAA'

LB_ANNOTATION = 'metallb.io/loadBalancerIPs'


class RunResult:
    """Changes and failures collected during one run."""

    def __init__(self):
        self.changes = []  # type: typing.List[str]
        self.failures = []  # type: typing.List[str]

    @property
    def changed(self) -> bool:
        return len(self.changes) > 0


class Reconciler:
    """
    One pass over every configured target.

    The collaborators are duck typed:
     - detector: ipv4(), ipv6()
     - zone: get_record(), create_record(), replace_record()
     - firewall: login(), get_groups(), edit_group(), logout()
     - cluster: read_service_annotations(), patch_service_annotation(),
       get_pool_addresses(), patch_pool_addresses()
     - notifier: send()
    """

    def __init__(self, config: Config, detector, zone, firewall=None, cluster=None, notifier=None):
        self.config = config.validate()
        self.detector = detector
        self.zone = zone
        self.firewall = firewall
        self.cluster = cluster
        self.notifier = notifier
        self.result = RunResult()

    def notify(self, text: str):
        if self.notifier is not None:
            self.notifier.send(text)

    def fail(self, message: str):
        logging.error(message)
        self.result.failures.append(message)
        self.notify(message)

    def attempt(self, context: str, action, *args):
        # noinspection PyBroadException
        try:
            return action(*args)
        except Exception as exception:
            self.fail('{}: {}'.format(context, exception))
            return None

    def run(self) -> RunResult:
        self.result = RunResult()

        if self.config.names4:
            self.sync_ipv4()

        if self.config.names6 or self.config.pools:
            self.sync_ipv6()

        changes = self.result.changes
        if self.result.changed:
            logging.info('Changes: {}'.format('; '.join(changes)))
            self.notify('DNS, Firewall & K8s updates:\n{}'.format('\n'.join(changes)))
        else:
            logging.info('No changes needed.')
        return self.result

    def sync_ipv4(self):
        # noinspection PyBroadException
        try:
            address = self.detector.ipv4()
        except Exception as exception:
            self.fail('[IPv4] {}, skipping A records.'.format(exception))
            return
        for name in self.config.names4:
            if self.attempt('[DNS] DNS Error {} A'.format(name), self.update_or_create, name, TYPE_IPV4, address):
                self.result.changes.append('{} A -> {}'.format(name, address))

    def sync_ipv6(self):
        # noinspection PyBroadException
        try:
            detected = self.detector.ipv6()
            prefix = ip.parse(detected)[:PREFIX_BYTES]
        except Exception as exception:
            self.fail('[IPv6] {}, skipping AAAA records.'.format(exception))
            return

        for pool in self.config.pools:
            self.attempt(
                '[MetalLB] Error while updating {}/{}'.format(pool.namespace, pool.pool),
                self.update_pool, pool, prefix
            )

        for name, suffix in self.config.names6:
            self.sync_domain(name, suffix, prefix)

    def sync_domain(self, name: str, suffix: str, prefix: bytes):
        try:
            address = ip.serialize(compose(prefix, suffix))
        except SyncError as exception:
            self.fail('[IPv6] Error AAAA {}={}: {}'.format(name, suffix, exception))
            return

        if self.attempt('[DNS] DNS Error {} AAAA'.format(name), self.update_or_create, name, TYPE_IPV6, address):
            self.result.changes.append('{} AAAA -> {}'.format(name, address))

        group = self.config.firewall_groups.get(name)
        if group:
            self.attempt(
                '[UniFi] Error while updating {}'.format(group),
                self.update_firewall_group, group, address
            )

        service = self.config.services.get(name)
        if service:
            self.attempt(
                '[Kubernetes] Error while updating {}/{}'.format(service.namespace, service.name),
                self.update_service, service, address
            )

    def update_or_create(self, name: str, record_type: str, value: str) -> bool:
        record = self.zone.get_record(name, record_type)
        if record is None:
            self.zone.create_record(name, record_type, value, self.config.ttl)
            logging.info('[DNS] Created {} {}: {}'.format(record_type, name, value))
            return True
        existing = record.rrdatas[0] if record.rrdatas else None
        if existing is not None and same_address(existing, value):
            logging.info('[DNS] {} {} up-to-date ({})'.format(name, record_type, value))
            return False
        self.zone.replace_record(record, value, self.config.ttl)
        logging.info('[DNS] Updated {} {}: {} -> {}'.format(record_type, name, existing, value))
        return True

    def update_pool(self, pool: PoolTarget, prefix: bytes) -> bool:
        network = network_address(prefix, pool.suffix)
        addresses = self.cluster.get_pool_addresses(pool.namespace, pool.pool)
        ipv4_range = next((address for address in addresses if ':' not in address), None)
        current = next((address for address in addresses if ':' in address), None)
        if current == network:
            logging.info('[MetalLB] IPAddressPool {} up-to-date.'.format(pool.pool))
            return False
        new_addresses = [ipv4_range, network] if ipv4_range else [network]
        self.cluster.patch_pool_addresses(pool.namespace, pool.pool, new_addresses)
        logging.info('[MetalLB] IPAddressPool {} updated: {}'.format(pool.pool, network))
        self.result.changes.append('{}/{} pool -> {}'.format(pool.namespace, pool.pool, network))
        return True

    def update_firewall_group(self, group_name: str, address: str) -> bool:
        if self.firewall is None:
            logging.debug('[UniFi] Controller not configured, skipping {}'.format(group_name))
            return False
        self.firewall.login()
        try:
            group = next((g for g in self.firewall.get_groups() if g.get('name') == group_name), None)
            if group is None:
                raise CollaboratorFailure('Unknown firewall group: {}'.format(group_name))
            if group.get('group_members') == [address]:
                logging.info('[UniFi] Firewall group {} up-to-date.'.format(group_name))
                return False
            self.firewall.edit_group(group, [address])
            logging.info('[UniFi] Firewall group {} updated: {}'.format(group_name, address))
            self.result.changes.append('{} firewall -> {}'.format(group_name, address))
            return True
        finally:
            self.logout_firewall()

    def logout_firewall(self):
        # the outcome of the update stands whatever logout does
        # noinspection PyBroadException
        try:
            self.firewall.logout()
        except Exception as exception:
            logging.warning('[UniFi] Logout failed: {}'.format(exception))

    def update_service(self, service: ServiceTarget, address: str) -> bool:
        annotations = self.cluster.read_service_annotations(service.namespace, service.name)
        current = annotations.get(LB_ANNOTATION, '')
        existing = [value.strip() for value in current.split(',') if value.strip()]
        ipv4 = next((value for value in existing if ':' not in value), None)
        value = '{},{}'.format(ipv4, address) if ipv4 else address
        if current == value:
            logging.info('[Kubernetes] Service {}/{} up-to-date.'.format(service.namespace, service.name))
            return False
        self.cluster.patch_service_annotation(service.namespace, service.name, LB_ANNOTATION, value)
        logging.info('[Kubernetes] Service {}/{} updated: {} = {}'.format(
            service.namespace, service.name, LB_ANNOTATION, value
        ))
        self.result.changes.append('{}/{} service -> {}'.format(service.namespace, service.name, value))
        return True


def same_address(existing: str, value: str) -> bool:
    try:
        return ip.normalise_ip_address(existing) == ip.normalise_ip_address(value)
    except ValueError:
        return existing == value
