"""Signing client credential caching and maintenance CLI tests."""

import json

import pytest

from buzzpulse.client import PulseClient
from buzzpulse.manage import build_parser


class TestClientCredentials:
    def test_credentials_are_saved_and_reused(self, client, clock, tmp_path):
        path = tmp_path / "device.json"

        first = PulseClient(client, credentials_path=path, clock=clock)
        creds = first.ensure_device()
        saved = json.loads(path.read_text())
        assert saved == {"deviceId": creds.device_id, "secret": creds.secret}

        # a new session picks the same identity up without registering again
        second = PulseClient(client, credentials_path=path, clock=clock)
        assert second.ensure_device() == creds
        assert second.ingest("b:eng-quad")["presence"] == 1

    def test_incomplete_credentials_file_re_registers(self, client, clock, tmp_path):
        path = tmp_path / "device.json"
        path.write_text(json.dumps({"deviceId": "stale"}))

        creds = PulseClient(client, credentials_path=path, clock=clock).ensure_device()
        assert creds.device_id != "stale"
        assert json.loads(path.read_text())["deviceId"] == creds.device_id


class TestManageParser:
    def test_prune_hits_days(self):
        args = build_parser().parse_args(["prune-hits", "--days", "9"])
        assert args.command == "prune-hits"
        assert args.days == 9

    def test_disable_device(self):
        args = build_parser().parse_args(["disable-device", "abc"])
        assert args.device_id == "abc"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
