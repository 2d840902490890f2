import json

import pytest
import yaml
from click.testing import CliRunner

import ietf_groups.cli as cli_module
from ietf_groups.cli import cli
from ietf_groups.models.collection import GroupCollection
from ietf_groups.models.group import Group


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli_module, "setup_logging", lambda level=None: None)


@pytest.fixture
def runner():
    return CliRunner()


def test_fetch_rejects_unknown_format_before_scraping(runner, monkeypatch):
    async def fail(**kwargs):
        raise AssertionError("scraper should not run")

    monkeypatch.setattr(cli_module, "fetch_all", fail)

    result = runner.invoke(cli, ["fetch", "--format", "xml"])

    assert result.exit_code == 1
    assert "Unsupported format" in result.output


def test_fetch_writes_snapshot(runner, monkeypatch, tmp_path):
    seen = {}

    async def fake_fetch_all(**kwargs):
        seen.update(kwargs)
        return GroupCollection(
            groups=[Group(abbreviation="httpbis", name="HTTP", organization="ietf", type="wg")]
        )

    monkeypatch.setattr(cli_module, "fetch_all", fake_fetch_all)
    target = tmp_path / "groups.json"

    result = runner.invoke(cli, ["fetch", str(target), "--format", "json", "--ietf-only"])

    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text())["groups"][0]["abbreviation"] == "httpbis"
    assert seen["include_ietf"] is True
    assert seen["include_irtf"] is False


def test_integrate_copies_valid_snapshot(runner, fixture_path, tmp_path):
    target = tmp_path / "data" / "groups.yaml"

    result = runner.invoke(cli, ["integrate", str(fixture_path()), "--target", str(target)])

    assert result.exit_code == 0, result.output
    assert "Integrated 6 groups" in result.output
    assert yaml.safe_load(target.read_text()) == yaml.safe_load(fixture_path().read_text())


def test_integrate_rejects_corrupt_snapshot(runner, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("groups: [oops")
    target = tmp_path / "groups.yaml"

    result = runner.invoke(cli, ["integrate", str(bad), "--target", str(target)])

    assert result.exit_code == 1
    assert "Error reading snapshot" in result.output
    assert not target.exists()


def test_names_prints_json_array(runner, fixture_path):
    result = runner.invoke(cli, ["names", "--snapshot", str(fixture_path())])

    assert result.exit_code == 0, result.output
    names = json.loads(result.output)
    assert names[:2] == ["HTTP", "QUIC"]
    assert "CFRG" in names


def test_list_filters_groups(runner, fixture_path):
    result = runner.invoke(
        cli, ["list", "--snapshot", str(fixture_path()), "--organization", "irtf"]
    )

    assert result.exit_code == 0, result.output
    assert "CFRG" in result.output
    assert "ASRG" in result.output
    assert "httpbis" not in result.output


def test_show_is_case_insensitive(runner, fixture_path):
    result = runner.invoke(cli, ["show", "HTTPBIS", "--snapshot", str(fixture_path())])

    assert result.exit_code == 0, result.output
    assert "Mark Nottingham" in result.output


def test_show_unknown_group(runner, tmp_path):
    result = runner.invoke(cli, ["show", "nope", "--snapshot", str(tmp_path / "none.yaml")])

    assert result.exit_code == 1
    assert "No group named" in result.output


def test_log_level_is_validated_by_click(runner, fixture_path, monkeypatch):
    levels = []
    monkeypatch.setattr(cli_module, "setup_logging", levels.append)

    result = runner.invoke(cli, ["--log-level", "foo", "names", "--snapshot", str(fixture_path())])

    assert result.exit_code == 2
    assert "Invalid value for '--log-level'" in result.output
    assert levels == []

    result = runner.invoke(cli, ["--log-level", "debug", "names", "--snapshot", str(fixture_path())])

    assert result.exit_code == 0, result.output
    assert levels == ["DEBUG"]
