"""
End-to-end tests for the command line entry point (HTTP replaced by a scripted client).
"""
import json
from unittest.mock import patch

import pytest

from WebPageCheck import cli


@pytest.fixture
def pages_file(tmp_path):
    path = tmp_path / "pages.json"
    path.write_text(
        json.dumps(
            [
                {"name": "Alpha", "url": "https://alpha.example/", "success": "Alpha home"},
                {"name": "Beta", "url": "https://beta.example/", "success": "Beta home", "maint": "maintenance"},
            ]
        ),
        encoding="utf-8",
    )
    return path


def _run(args, client):
    with patch("WebPageCheck.cli.create_client_from_config", return_value=client):
        return cli.main(args)


def test_all_up_exits_zero(pages_file, fake_client, capsys):
    client = fake_client({"https://alpha.example/": "Alpha home", "https://beta.example/": "Beta home"})

    code = _run(["--pages", str(pages_file), "--width", "60", "--no-color"], client)

    assert code == cli.EXIT_OK
    assert client.closed
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0] == "Web Page Availability Status Checks"
    assert "Beginning scan..." in lines
    assert any(ln.startswith("Alpha (https://alpha.example/)") and ln.endswith("[ UP  ]") for ln in lines)
    assert all(len(ln) == 60 for ln in lines if ln.endswith("]"))
    assert lines[-1] == "2 pages checked: 2 up, 0 maintenance, 0 down"
    assert "\x1b[" not in out


def test_any_down_exits_one(pages_file, fake_client, capsys):
    client = fake_client({"https://alpha.example/": "Alpha home", "https://beta.example/": "Bad gateway"})

    code = _run(["--pages", str(pages_file), "--no-color"], client)

    assert code == cli.EXIT_DOWN
    out = capsys.readouterr().out
    assert "[DOWN!]" in out
    assert "1 up, 0 maintenance, 1 down" in out


def test_maintenance_is_not_a_failure(pages_file, fake_client, capsys):
    client = fake_client({"https://alpha.example/": "Alpha home", "https://beta.example/": "Under Maintenance"})

    assert _run(["--pages", str(pages_file), "--no-color"], client) == cli.EXIT_OK
    assert "[MAINT]" in capsys.readouterr().out


def test_switches_ignore_case(pages_file, fake_client, capsys):
    client = fake_client({"https://alpha.example/": "Alpha home", "https://beta.example/": "Beta home"})

    _run(["--pages", str(pages_file), "-V", "--SHOW-RESPONSE", "--no-color"], client)

    out = capsys.readouterr().out
    assert "Name:        Alpha" in out
    assert "Success:     Beta home" in out
    assert "Alpha home\n----\n" in out


def test_unknown_arguments_are_ignored(pages_file, fake_client, capsys):
    client = fake_client({"https://alpha.example/": "Alpha home", "https://beta.example/": "Beta home"})

    assert _run(["--pages", str(pages_file), "--bogus", "extra", "--no-color"], client) == cli.EXIT_OK


def test_max_hops_option(tmp_path, fake_client, capsys):
    path = tmp_path / "loop.json"
    path.write_text(json.dumps([{"name": "Loop", "url": "https://loop.example/", "success": "never"}]), encoding="utf-8")
    client = fake_client({"https://loop.example/": '<meta http-equiv="refresh" content="0; url=https://loop.example/">'})

    code = _run(["--pages", str(path), "--max-hops", "2", "--no-color"], client)

    assert code == cli.EXIT_DOWN
    assert len(client.calls) == 3


def test_bad_page_file_exits_two(tmp_path, fake_client, capsys):
    code = _run(["--pages", str(tmp_path / "missing.json")], fake_client({}))

    assert code == cli.EXIT_CONFIG
    assert "not found" in capsys.readouterr().err


def test_invalid_environment_exits_two(monkeypatch, fake_client, capsys):
    monkeypatch.setenv("WEBPAGECHECK_MAX_HOPS", "0")

    assert _run([], fake_client({})) == cli.EXIT_CONFIG
    assert "Invalid configuration" in capsys.readouterr().err


def test_missing_env_file_exits_two(tmp_path, fake_client, capsys):
    client = fake_client({})
    code = _run(["--env-file", str(tmp_path / "nope.env")], client)

    assert code == cli.EXIT_CONFIG
    assert "nope.env" in capsys.readouterr().err
    assert client.calls == []


def test_normalize_switches():
    assert cli.normalize_switches(["-V", "--Verbose", "-R", "-VR", "--No-Color", "--pages", "My.JSON", "-X"]) == [
        "-v",
        "--verbose",
        "-r",
        "-vr",
        "--no-color",
        "--pages",
        "My.JSON",
        "-X",
    ]
