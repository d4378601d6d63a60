from __future__ import annotations

import json
import logging

import pytest

from ddns_sync import client, myip
from ddns_sync.reconcile import RunResult


def test_compose_command(capsys) -> None:
    client.main(["compose", "2001:db8::abcd", "::1"])
    assert capsys.readouterr().out.strip() == "2001:db8::1"


def test_compose_network_command(capsys) -> None:
    client.main(["compose", "2001:db8::abcd", "de::", "--network"])
    assert capsys.readouterr().out.strip() == "2001:db8:0:de::/120"


def test_compose_command_rejects_bad_suffix(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        client.main(["compose", "2001:db8::abcd", "1234:5678:9abc:def0:1234"])
    assert excinfo.value.code == 2
    assert "Suffix" in capsys.readouterr().err


def test_myip_providers_json(capsys) -> None:
    client.main(["myip", "providers", "-6", "-f", "json"])
    data = json.loads(capsys.readouterr().out)
    assert data["ipv4"] == []
    assert data["ipv6"] == sorted(myip.get_providers(myip.IPV6))


def test_myip_query_text(monkeypatch, capsys) -> None:
    monkeypatch.setattr(myip, "get_myip", lambda provider, family: "2001:db8::abcd")

    client.main(["myip", "query", "-6", "-f", "text"])

    assert capsys.readouterr().out.strip() == "2001:db8::abcd"


def test_run_exits_on_missing_configuration(monkeypatch, tmp_path) -> None:
    for key in ["GOOGLE_APPLICATION_CREDENTIALS", "GCLOUD_DNS_ZONE", "WEBHOOK_URL"]:
        monkeypatch.delenv(key, raising=False)
    sent = []
    monkeypatch.setattr(client.Webhook, "send", lambda self, text: sent.append(text))

    with pytest.raises(SystemExit) as excinfo:
        client.main(["run", "-c", str(tmp_path / "absent.json")])

    assert excinfo.value.code == 1
    assert sent == ["FATAL DDNS ERROR: Missing GOOGLE_APPLICATION_CREDENTIALS"]


def test_run_reconciles_once(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/secrets/key.json")
    monkeypatch.setenv("GCLOUD_DNS_ZONE", "example-zone")
    runs = []

    class FakeReconciler:
        def run(self):
            runs.append(True)
            result = RunResult()
            result.failures.append("[DNS] DNS Error example.com. A: boom")
            return result

    def fake_build(config):
        assert config.zone == "example-zone"
        return FakeReconciler()

    monkeypatch.setattr(client, "build_reconciler", fake_build)

    client.main(["run", "-c", str(tmp_path / "absent.json")])

    assert runs == [True]


def test_build_reconciler_skips_firewall_without_controller() -> None:
    config = client.load_config({
        "GOOGLE_APPLICATION_CREDENTIALS": "/secrets/key.json",
        "GCLOUD_DNS_ZONE": "example-zone",
        "MYIP_PROVIDER": "google",
    })

    reconciler = client.build_reconciler(config)

    assert reconciler.firewall is None
    assert reconciler.detector.provider == "google"
    assert reconciler.zone.zone_name == "example-zone"


def test_print_table_aligns_columns(capsys) -> None:
    client.print_table([["Provider", "IPv4"], ["ipify", "198.51.100.7"]])

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Provider | IPv4        "
    assert set(lines[1]) == {"-"}
    assert lines[2] == "ipify    | 198.51.100.7"


@pytest.mark.parametrize("flags, expected", [
    ({}, (True, True)),
    ({"4": True, "6": True}, (True, True)),
    ({"4": True}, (True, False)),
    ({"6": True}, (False, True)),
])
def test_selected_families(flags, expected) -> None:
    assert client.selected_families(flags) == expected


def test_verbosity_maps_to_log_level() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        client.configure_logging(2)
        assert root.level == logging.INFO
        client.configure_logging(5)
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_myip_without_subcommand_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        client.main(["myip"])
    assert excinfo.value.code == 2
