import pytest

from signcheck.src.core.models import (
    Bundle,
    Environment,
    ProvisioningProfile,
    SigningIdentity,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's config file and SIGNCHECK_* variables out of the tests"""
    for name in (
        "SIGNCHECK_UDID",
        "SIGNCHECK_CERTIFICATE",
        "SIGNCHECK_CERT_PASSWORD",
        "SIGNCHECK_VERBOSE",
    ):
        monkeypatch.delenv(name, raising=False)
    config_path = tmp_path / "config.toml"
    monkeypatch.setenv("SIGNCHECK_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def make_profile():
    def _make(**overrides) -> ProvisioningProfile:
        fields = dict(
            bundle_id="com.acme.App",
            team_name="Acme Inc",
            display_name="Acme Dev Profile",
            is_app_store_build=False,
            get_task_allow=True,
            app_environment=Environment.DEVELOPMENT,
            apns_environment=Environment.DEVELOPMENT,
            provisioned_devices={"UDID1", "UDID2"},
        )
        fields.update(overrides)
        return ProvisioningProfile(**fields)

    return _make


@pytest.fixture
def bundle() -> Bundle:
    return Bundle(bundle_id="com.acme.App", display_name="Acme")


@pytest.fixture
def push_identity() -> SigningIdentity:
    return SigningIdentity(
        name="Apple Push Services: com.acme.App",
        bundle_id="com.acme.App",
        is_apns=True,
        is_production=True,
    )


@pytest.fixture
def make_certificate():
    """Build an (unsigned) X.509 certificate with the given subject and extensions"""
    from datetime import datetime, timezone

    from asn1crypto import keys, x509

    def _make(subject, extension_oids=()) -> x509.Certificate:
        tbs = {
            "version": "v3",
            "serial_number": 0x5EED,
            "signature": {"algorithm": "sha256_rsa"},
            "issuer": x509.Name.build(
                {"common_name": "Apple Worldwide Developer Relations Certification Authority"}
            ),
            "validity": {
                "not_before": x509.Time(
                    name="utc_time", value=datetime(2025, 1, 1, tzinfo=timezone.utc)
                ),
                "not_after": x509.Time(
                    name="utc_time", value=datetime(2026, 1, 1, tzinfo=timezone.utc)
                ),
            },
            "subject": x509.Name.build(subject),
            "subject_public_key_info": keys.PublicKeyInfo.wrap(
                keys.RSAPublicKey(
                    {"modulus": (1 << 2047) + 12345, "public_exponent": 65537}
                ),
                "rsa",
            ),
        }
        if extension_oids:
            # Apple's marker extensions carry an ASN.1 NULL
            tbs["extensions"] = [
                {"extn_id": oid, "critical": False, "extn_value": b"\x05\x00"}
                for oid in extension_oids
            ]
        return x509.Certificate(
            {
                "tbs_certificate": x509.TbsCertificate(tbs),
                "signature_algorithm": {"algorithm": "sha256_rsa"},
                "signature_value": b"\x00" * 32,
            }
        )

    return _make


@pytest.fixture
def write_mobileprovision(tmp_path):
    """Wrap a profile plist in a CMS SignedData envelope, like embedded.mobileprovision"""
    import plistlib

    from asn1crypto import cms

    def _write(data, name="embedded.mobileprovision"):
        signed_data = cms.SignedData(
            {
                "version": "v1",
                "digest_algorithms": [],
                "encap_content_info": {
                    "content_type": "data",
                    "content": plistlib.dumps(data),
                },
                "signer_infos": [],
            }
        )
        content_info = cms.ContentInfo(
            {"content_type": "signed_data", "content": signed_data}
        )
        path = tmp_path / name
        path.write_bytes(content_info.dump())
        return path

    return _write
