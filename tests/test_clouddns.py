from __future__ import annotations

import pytest
import requests
from google.api_core import exceptions as api_exceptions

from ddns_sync import clouddns
from ddns_sync.errors import CollaboratorFailure


class FakeRecordSet:
    def __init__(self, name: str, record_type: str, ttl: int | None, rrdatas: list[str]) -> None:
        self.name = name
        self.record_type = record_type
        self.ttl = ttl
        self.rrdatas = rrdatas


class FakeChanges:
    def __init__(self, zone: "FakeManagedZone") -> None:
        self.zone = zone
        self.name = "change-1"
        self.additions: list[FakeRecordSet] = []
        self.deletions: list[FakeRecordSet] = []

    def add_record_set(self, record: FakeRecordSet) -> None:
        self.additions.append(record)

    def delete_record_set(self, record: FakeRecordSet) -> None:
        self.deletions.append(record)

    def create(self) -> None:
        if self.zone.error is not None:
            raise self.zone.error
        self.zone.submitted.append(self)


class FakeManagedZone:
    def __init__(self, name: str) -> None:
        self.name = name
        self.records: list[FakeRecordSet] = []
        self.submitted: list[FakeChanges] = []
        self.error: Exception | None = None

    def list_resource_record_sets(self):
        if self.error is not None:
            raise self.error
        return iter(self.records)

    def resource_record_set(self, name, record_type, ttl, rrdatas):
        return FakeRecordSet(name, record_type, ttl, rrdatas)

    def changes(self) -> FakeChanges:
        return FakeChanges(self)


class FakeClient:
    instances: list["FakeClient"] = []

    def __init__(self, project=None) -> None:
        self.project = project
        self.zones: dict[str, FakeManagedZone] = {}
        FakeClient.instances.append(self)

    def zone(self, name: str) -> FakeManagedZone:
        return self.zones.setdefault(name, FakeManagedZone(name))


@pytest.fixture
def zone(monkeypatch) -> clouddns.CloudDNSZone:
    FakeClient.instances = []
    monkeypatch.setattr(clouddns.dns, "Client", FakeClient)
    zone = clouddns.CloudDNSZone("example-zone", project="my-project")
    zone.zone.records = [
        FakeRecordSet("example.com.", "A", 300, ["198.51.100.7"]),
        FakeRecordSet("example.com.", "AAAA", 300, ["2001:db8::1"]),
    ]
    return zone


def test_client_created_once_with_project(zone) -> None:
    assert zone.zone is zone.zone
    assert zone.zone.name == "example-zone"
    assert len(FakeClient.instances) == 1
    assert FakeClient.instances[0].project == "my-project"


def test_get_record_matches_name_and_type(zone) -> None:
    assert zone.get_record("example.com.", "AAAA").rrdatas == ["2001:db8::1"]
    assert zone.get_record("www.example.com.", "AAAA") is None


def test_create_record_submits_one_addition(zone) -> None:
    zone.create_record("www.example.com.", "AAAA", "2001:db8::2", 60)

    (change,) = zone.zone.submitted
    assert change.deletions == []
    assert [(r.name, r.record_type, r.ttl, r.rrdatas) for r in change.additions] == [
        ("www.example.com.", "AAAA", 60, ["2001:db8::2"]),
    ]


def test_replace_record_keeps_ttl(zone) -> None:
    existing = zone.zone.records[1]

    zone.replace_record(existing, "2001:db8::3", 60)

    (change,) = zone.zone.submitted
    assert change.deletions == [existing]
    assert [(r.ttl, r.rrdatas) for r in change.additions] == [(300, ["2001:db8::3"])]


def test_replace_record_default_ttl(zone) -> None:
    existing = FakeRecordSet("example.com.", "A", None, ["198.51.100.1"])

    zone.replace_record(existing, "198.51.100.7")

    assert zone.zone.submitted[0].additions[0].ttl == clouddns.DEFAULT_TTL


def test_api_errors_become_collaborator_failures(zone) -> None:
    zone.zone.error = api_exceptions.Forbidden("no access")

    with pytest.raises(CollaboratorFailure):
        zone.get_record("example.com.", "A")
    with pytest.raises(CollaboratorFailure):
        zone.create_record("example.com.", "A", "198.51.100.7", 60)


def test_transport_errors_become_collaborator_failures(zone) -> None:
    zone.zone.error = requests.exceptions.ConnectionError("dns.googleapis.com unreachable")

    with pytest.raises(CollaboratorFailure, match="unreachable"):
        zone.get_record("example.com.", "A")
    with pytest.raises(CollaboratorFailure, match="unreachable"):
        zone.replace_record(zone.zone.records[0], "198.51.100.8", 60)
