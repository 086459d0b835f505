from __future__ import annotations

import json

from toolbox.config import RegistryConfig
from toolbox.directory import build_telephony_directory, generate_telephony_directory
from toolbox.loader import assemble_registry

CONFIG = RegistryConfig()


def test_end_to_end_single_exchange_directory(registry, tmp_path) -> None:
    registry.write_org(
        "acme",
        name="ACME Hackspace",
        telephony={
            "exchanges": [{"id": "ex1", "address": "10.0.0.1:5060", "codecs": ["g722"], "protocol": "sip"}],
            "prefixes": [{"prefix": "1", "exchange": "ex1"}],
        },
    )
    output = tmp_path / "out" / "telephony-directory.json"

    result = generate_telephony_directory(registry.root, output, config=CONFIG)

    assert result["ok"] is True
    assert result["organizations"] == 1
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload == {
        "orgs": [
            {
                "orgId": "acme",
                "name": "ACME Hackspace",
                "phonebooks": [],
                "exchanges": [
                    {
                        "id": "ex1",
                        "endpoint": "10.0.0.1:5060",
                        "protocol": "sip",
                        "codecs": ["g722"],
                        "prefixes": ["1"],
                    }
                ],
            }
        ]
    }


def test_directory_omits_orgs_without_telephony_and_keeps_unrouted_exchanges(registry) -> None:
    registry.write_org("acme", nebula=[{"address": "fd79:7636:1f08:883d::1", "certificates": []}])
    registry.write_org(
        "beta",
        telephony={
            "exchanges": [
                {"id": "main", "address": "pbx.beta.example:5060", "codecs": ["opus"], "protocol": "sip"},
                {"id": "spare", "address": "pbx2.beta.example:5060", "codecs": [], "protocol": "iax2"},
            ],
            "prefixes": [
                {"prefix": "20", "exchange": "main"},
                {"prefix": "21", "exchange": "main"},
            ],
            "phonebook": [{"name": "Front desk", "number": "200"}, "https://beta.example/phonebook.xml"],
        },
    )
    orgs = assemble_registry(registry.root, config=CONFIG)

    directory = build_telephony_directory(orgs)

    assert [org.org_id for org in directory.orgs] == ["beta"]
    beta = directory.orgs[0]
    assert beta.phonebooks == [{"name": "Front desk", "number": "200"}, "https://beta.example/phonebook.xml"]
    assert [(exchange.id, exchange.prefixes) for exchange in beta.exchanges] == [
        ("main", ["20", "21"]),
        ("spare", []),
    ]


def test_directory_follows_registry_and_declaration_order(registry) -> None:
    for org_id in ("zeta", "alpha"):
        registry.write_org(
            org_id,
            telephony={
                "exchanges": [
                    {"id": "b", "address": "10.0.0.2:5060", "codecs": [], "protocol": "sip"},
                    {"id": "a", "address": "10.0.0.1:5060", "codecs": [], "protocol": "sip"},
                ],
                "prefixes": [
                    {"prefix": f"{org_id[0]}9", "exchange": "a"},
                    {"prefix": f"{org_id[0]}1", "exchange": "a"},
                ],
            },
        )
    orgs = assemble_registry(registry.root, config=CONFIG)

    directory = build_telephony_directory(orgs)

    assert [org.org_id for org in directory.orgs] == ["alpha", "zeta"]
    assert [exchange.id for exchange in directory.orgs[0].exchanges] == ["b", "a"]
    assert directory.orgs[0].exchanges[1].prefixes == ["a9", "a1"]


def test_generation_is_idempotent(registry, tmp_path) -> None:
    registry.write_org(
        "acme",
        telephony={
            "exchanges": [{"id": "ex1", "address": "10.0.0.1:5060", "codecs": ["g722", "pcmu"], "protocol": "sip"}],
            "prefixes": [{"prefix": "1", "exchange": "ex1"}, {"prefix": "12", "exchange": "ex1"}],
        },
    )
    output = tmp_path / "telephony-directory.json"

    generate_telephony_directory(registry.root, output, config=CONFIG)
    first = output.read_bytes()
    generate_telephony_directory(registry.root, output, config=CONFIG)

    assert output.read_bytes() == first


def test_generation_does_not_run_consistency_checks(registry, tmp_path) -> None:
    registry.write_org(
        "acme",
        filename="misnamed.yaml",
        telephony={
            "exchanges": [{"id": "ex1", "address": "not an address", "codecs": [], "protocol": "sip"}],
            "prefixes": [{"prefix": "1", "exchange": "nowhere"}],
        },
    )
    output = tmp_path / "telephony-directory.json"

    generate_telephony_directory(registry.root, output, config=CONFIG)

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["orgs"][0]["exchanges"][0]["prefixes"] == []


def test_generation_overwrites_and_handles_empty_registry(registry, tmp_path) -> None:
    output = tmp_path / "telephony-directory.json"
    output.write_text("stale", encoding="utf-8")

    result = generate_telephony_directory(registry.root, output, config=CONFIG)

    assert result["organizations"] == 0
    assert json.loads(output.read_text(encoding="utf-8")) == {"orgs": []}
