"""Device registration and request signing tests."""

import hashlib

import pytest

from buzzpulse.core.auth import authenticate, compute_signature
from buzzpulse.core.errors import NotFound, Unauthorized
from buzzpulse.models.device import Device
from buzzpulse.services.devices import disable_device, enable_device, register_device

from conftest import T0

BODY = '{"cellId": "b:eng-quad"}'


@pytest.fixture
def device(db_session):
    return register_device(db_session, T0 - 1000)


def _auth(db_session, settings, device, *, now=T0, ts=None, body=BODY, signature=None, device_id=None):
    ts = str(T0 if ts is None else ts)
    device_id = device_id or device.device_id
    if signature is None:
        signature = compute_signature(device.device_id, ts, body, device.secret)
    return authenticate(db_session, settings, now, device_id, ts, signature, BODY)


class TestSignature:
    def test_matches_sha256_of_dotted_message(self):
        expected = hashlib.sha256(b"dev.123.{}.s3cret").hexdigest()
        assert compute_signature("dev", "123", "{}", "s3cret") == expected


class TestRegister:
    def test_register_persists_device(self, db_session, device):
        row = db_session.get(Device, device.device_id)
        assert row.secret == device.secret
        assert row.created_at == T0 - 1000
        assert row.last_seen == T0 - 1000
        assert row.disabled is False
        # 32 random bytes, base64
        assert len(device.secret) == 44

    def test_ids_and_secrets_are_unique(self, db_session):
        a = register_device(db_session, T0)
        b = register_device(db_session, T0)
        assert a.device_id != b.device_id
        assert a.secret != b.secret


class TestAuthenticate:
    def test_valid_request_updates_last_seen(self, db_session, settings, device):
        assert _auth(db_session, settings, device) == device.device_id
        assert db_session.get(Device, device.device_id).last_seen == T0

    def test_uppercase_signature_accepted(self, db_session, settings, device):
        sig = compute_signature(device.device_id, str(T0), BODY, device.secret).upper()
        assert _auth(db_session, settings, device, signature=sig) == device.device_id

    def test_tampered_body_rejected(self, db_session, settings, device):
        with pytest.raises(Unauthorized):
            _auth(db_session, settings, device, body='{"cellId": "b:main-quad"}')

    @pytest.mark.parametrize("skew", [301, -301, 10_000])
    def test_stale_timestamp_rejected(self, db_session, settings, device, skew):
        with pytest.raises(Unauthorized):
            _auth(db_session, settings, device, ts=T0 - skew)

    @pytest.mark.parametrize("skew", [300, -300, 0])
    def test_skew_inside_window_accepted(self, db_session, settings, device, skew):
        assert _auth(db_session, settings, device, ts=T0 - skew) == device.device_id

    def test_unknown_device_rejected(self, db_session, settings, device):
        with pytest.raises(Unauthorized):
            _auth(db_session, settings, device, device_id="not-a-device")

    def test_disabled_device_rejected(self, db_session, settings, device):
        disable_device(db_session, device.device_id)
        with pytest.raises(Unauthorized):
            _auth(db_session, settings, device)

        enable_device(db_session, device.device_id)
        assert _auth(db_session, settings, device) == device.device_id

    @pytest.mark.parametrize("missing", ["device_id", "timestamp", "signature"])
    def test_missing_header_rejected(self, db_session, settings, device, missing):
        args = {
            "device_id": device.device_id,
            "timestamp": str(T0),
            "signature": compute_signature(device.device_id, str(T0), BODY, device.secret),
        }
        args[missing] = None
        with pytest.raises(Unauthorized):
            authenticate(db_session, settings, T0, body=BODY, **args)

    def test_failures_share_one_message(self, db_session, settings, device):
        messages = set()
        for kwargs in ({"device_id": "nope"}, {"ts": T0 - 999}, {"signature": "0" * 64}):
            with pytest.raises(Unauthorized) as exc:
                _auth(db_session, settings, device, **kwargs)
            messages.add(exc.value.message)
        assert messages == {"Unauthorized"}

    def test_kill_switch_unknown_device(self, db_session):
        with pytest.raises(NotFound):
            disable_device(db_session, "missing")
