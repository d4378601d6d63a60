# -*- coding: utf-8 -*-

"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import logging
import typing

from kr8s.objects import Service, new_class

from .errors import CollaboratorFailure

IPAddressPool = new_class(
    kind='IPAddressPool',
    version='metallb.io/v1beta1',
    namespaced=True,
    plural='ipaddresspools',
)


class Cluster:
    """Services and MetalLB address pools of the current kube context."""

    def read_service_annotations(self, namespace: str, name: str) -> typing.Dict[str, str]:
        service = self.get(Service, namespace, name)
        return dict(service.raw.get('metadata', {}).get('annotations') or {})

    def patch_service_annotation(self, namespace: str, name: str, key: str, value: str):
        service = self.get(Service, namespace, name)
        self.patch(service, {'metadata': {'annotations': {key: value}}})

    def get_pool_addresses(self, namespace: str, name: str) -> typing.List[str]:
        pool = self.get(IPAddressPool, namespace, name)
        return list(pool.raw.get('spec', {}).get('addresses') or [])

    def patch_pool_addresses(self, namespace: str, name: str, addresses: typing.List[str]):
        pool = self.get(IPAddressPool, namespace, name)
        self.patch(pool, {'spec': {'addresses': addresses}})

    @staticmethod
    def get(kind, namespace: str, name: str):
        # noinspection PyBroadException
        try:
            return kind.get(name, namespace=namespace)
        except Exception as exception:
            raise CollaboratorFailure('Cannot read {} {}/{}: {}'.format(
                kind.kind, namespace, name, exception
            )) from exception

    @staticmethod
    def patch(resource, body: dict):
        # noinspection PyBroadException
        try:
            # kr8s sends merge patches unless told otherwise
            resource.patch(body)
        except Exception as exception:
            raise CollaboratorFailure('Cannot patch {} {}/{}: {}'.format(
                resource.kind, resource.namespace, resource.name, exception
            )) from exception
        logging.debug('[Kubernetes] Patched {} {}/{}'.format(resource.kind, resource.namespace, resource.name))
