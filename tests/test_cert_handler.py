import subprocess

import pytest
from asn1crypto import pem

from signcheck.src.core import cert_handler
from signcheck.src.core.cert_handler import (
    APNS_DEVELOPMENT_OID,
    APNS_PRODUCTION_OID,
    APNS_UNIVERSAL_OID,
    identity_from_certificate,
    identity_from_subject,
    load_signing_identity,
)
from signcheck.src.core.models import ArtifactError


def test_universal_push_certificate() -> None:
    identity = identity_from_subject(
        {
            "user_id": "com.acme.App",
            "common_name": "Apple Push Services: com.acme.App",
            "organizational_unit_name": "ABCDE12345",
        },
        {APNS_UNIVERSAL_OID},
    )

    assert identity.is_apns is True
    assert identity.is_production is True
    assert identity.bundle_id == "com.acme.App"
    assert identity.name == "Apple Push Services: com.acme.App"


def test_development_push_certificate_from_common_name() -> None:
    identity = identity_from_subject(
        {"common_name": "Apple Development IOS Push Services: com.acme.App"}
    )

    assert identity.is_apns is True
    assert identity.is_production is False
    assert identity.bundle_id == "com.acme.App"


def test_production_extension_wins() -> None:
    identity = identity_from_subject(
        {"common_name": "Push cert", "user_id": "com.acme.App"}, {APNS_PRODUCTION_OID}
    )
    assert identity.is_apns is True
    assert identity.is_production is True


def test_development_extension() -> None:
    identity = identity_from_subject(
        {"common_name": "Push cert", "user_id": "com.acme.App"}, {APNS_DEVELOPMENT_OID}
    )
    assert identity.is_apns is True
    assert identity.is_production is False


def test_code_signing_certificate_is_not_push() -> None:
    identity = identity_from_subject(
        {"common_name": "Apple Distribution: Acme Inc (ABCDE12345)"}
    )
    assert identity.is_apns is False
    assert identity.is_production is False


def test_missing_certificate_file(tmp_path) -> None:
    with pytest.raises(ArtifactError):
        load_signing_identity(tmp_path / "aps.cer")


def test_garbage_certificate(tmp_path) -> None:
    path = tmp_path / "aps.cer"
    path.write_bytes(b"not a certificate")
    with pytest.raises(ArtifactError):
        load_signing_identity(path)


PUSH_SUBJECT = {
    "user_id": "com.acme.App",
    "common_name": "Apple Push Services: com.acme.App",
    "organizational_unit_name": "ABCDE12345",
}


def test_identity_from_certificate(make_certificate) -> None:
    cert = make_certificate(PUSH_SUBJECT, [APNS_UNIVERSAL_OID])
    identity = identity_from_certificate(cert)

    assert identity.bundle_id == "com.acme.App"
    assert identity.is_apns is True
    assert identity.is_production is True


def test_load_der_certificate(make_certificate, tmp_path) -> None:
    cert = make_certificate(
        {"common_name": "Apple Development IOS Push Services: com.acme.App"},
        [APNS_DEVELOPMENT_OID],
    )
    path = tmp_path / "aps_development.cer"
    path.write_bytes(cert.dump())
    identity = load_signing_identity(path)

    assert identity.name == "Apple Development IOS Push Services: com.acme.App"
    assert identity.bundle_id == "com.acme.App"
    assert identity.is_apns is True
    assert identity.is_production is False


def test_load_pem_certificate(make_certificate, tmp_path) -> None:
    cert = make_certificate(PUSH_SUBJECT, [APNS_UNIVERSAL_OID])
    path = tmp_path / "aps.pem"
    path.write_bytes(pem.armor("CERTIFICATE", cert.dump()))
    identity = load_signing_identity(path)

    assert identity.bundle_id == "com.acme.App"
    assert identity.is_production is True


def test_load_code_signing_certificate(make_certificate, tmp_path) -> None:
    cert = make_certificate({"common_name": "Apple Distribution: Acme Inc (ABCDE12345)"})
    path = tmp_path / "distribution.cer"
    path.write_bytes(cert.dump())
    assert load_signing_identity(path).is_apns is False


def test_load_p12_retries_with_legacy(make_certificate, tmp_path, monkeypatch) -> None:
    cert = make_certificate(PUSH_SUBJECT, [APNS_UNIVERSAL_OID])
    # openssl prints bag attributes ahead of the PEM block
    pem_output = b"Bag Attributes\n    localKeyID: 01\n" + pem.armor(
        "CERTIFICATE", cert.dump()
    )
    path = tmp_path / "aps.p12"
    path.write_bytes(b"p12 bytes")
    calls = []

    def fake_run(cmd, capture_output, env):
        calls.append(cmd)
        assert env["SIGNCHECK_P12_PASS"] == "secret"
        if "-legacy" not in cmd:
            return subprocess.CompletedProcess(
                cmd, 1, b"", b"error:0308010C:digital envelope routines::unsupported"
            )
        return subprocess.CompletedProcess(cmd, 0, pem_output, b"")

    monkeypatch.setattr(cert_handler.subprocess, "run", fake_run)
    identity = load_signing_identity(path, "secret")

    assert len(calls) == 2
    assert calls[0][:2] == ["openssl", "pkcs12"]
    assert identity.bundle_id == "com.acme.App"
    assert identity.is_apns is True


def test_load_p12_wrong_password(tmp_path, monkeypatch) -> None:
    path = tmp_path / "aps.p12"
    path.write_bytes(b"p12 bytes")
    monkeypatch.setattr(
        cert_handler.subprocess,
        "run",
        lambda cmd, capture_output, env: subprocess.CompletedProcess(
            cmd, 1, b"", b"Mac verify error: invalid password?"
        ),
    )
    with pytest.raises(ArtifactError, match="wrong password"):
        load_signing_identity(path, "nope")
