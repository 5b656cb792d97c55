import os
import subprocess
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from asn1crypto import pem, x509

from signcheck.logger import get_log_console
from signcheck.src.core.models import ArtifactError, SigningIdentity

# Apple marker extensions on push certificates
APNS_DEVELOPMENT_OID = "1.2.840.113635.100.6.3.1"
APNS_PRODUCTION_OID = "1.2.840.113635.100.6.3.2"
APNS_UNIVERSAL_OID = "1.2.840.113635.100.6.3.6"
APNS_OIDS = {APNS_DEVELOPMENT_OID, APNS_PRODUCTION_OID, APNS_UNIVERSAL_OID}

USER_ID_OID = "0.9.2342.19200300.100.1.1"


def _p12_to_pem(p12_path: Path, password: Optional[str]) -> bytes:
    """Pull the client certificate out of a PKCS#12 bundle with openssl"""
    env = dict(os.environ, SIGNCHECK_P12_PASS=password or "")
    cmd = [
        "openssl",
        "pkcs12",
        "-in",
        str(p12_path),
        "-nokeys",
        "-clcerts",
        "-passin",
        "env:SIGNCHECK_P12_PASS",
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, env=env)
        # OpenSSL 3 refuses the RC2 encryption older Keychain exports use
        if result.returncode != 0 and b"unsupported" in result.stderr.lower():
            get_log_console().log("[yellow]Retrying p12 conversion with -legacy")
            result = subprocess.run(cmd + ["-legacy"], capture_output=True, env=env)
    except FileNotFoundError:
        raise ArtifactError("openssl is required to read .p12 certificates")

    if result.returncode != 0:
        raise ArtifactError(
            f"Failed to read {p12_path.name} (wrong password?): "
            f"{result.stderr.decode('utf-8', errors='replace').strip()}"
        )
    return result.stdout


def _load_certificate(data: bytes) -> x509.Certificate:
    try:
        if pem.detect(data):
            _, _, data = pem.unarmor(data)
        cert = x509.Certificate.load(data)
        # Force a parse so garbage fails here rather than later
        cert["tbs_certificate"]["subject"].native
        return cert
    except (ValueError, TypeError) as e:
        raise ArtifactError(f"Not a valid X.509 certificate: {e}")


def extension_oids(cert: x509.Certificate) -> set:
    extensions = cert["tbs_certificate"]["extensions"]
    if not extensions:
        return set()
    return {ext["extn_id"].dotted for ext in extensions}


def identity_from_subject(
    subject: Mapping[str, Any], oids: Iterable[str] = ()
) -> SigningIdentity:
    """Build a SigningIdentity from a parsed certificate subject.

    Push certificates look like ``CN=Apple Push Services: com.example.app``
    with the bundle id repeated in the UID attribute.
    """
    oids = set(oids)
    common_name = subject.get("common_name") or ""
    if isinstance(common_name, list):
        common_name = common_name[0]

    bundle_id = subject.get("user_id") or subject.get(USER_ID_OID)
    if not bundle_id and ": " in common_name:
        bundle_id = common_name.split(": ", 1)[1].strip()

    is_apns = "Push Services" in common_name or bool(oids & APNS_OIDS)
    is_production = is_apns and (
        bool(oids & {APNS_PRODUCTION_OID, APNS_UNIVERSAL_OID})
        or common_name.startswith("Apple Production")
        or common_name.startswith("Apple Push Services")
    )

    return SigningIdentity(
        name=common_name,
        bundle_id=bundle_id or "",
        is_apns=is_apns,
        is_production=is_production,
    )


def identity_from_certificate(cert: x509.Certificate) -> SigningIdentity:
    return identity_from_subject(cert.subject.native, extension_oids(cert))


def load_signing_identity(
    cert_path: Path, password: Optional[str] = None
) -> SigningIdentity:
    """Load a .p12, .pem or .cer push certificate"""
    cert_path = Path(cert_path)
    if not cert_path.exists():
        raise ArtifactError(f"Certificate not found: {cert_path}")

    if cert_path.suffix.lower() in (".p12", ".pfx"):
        data = _p12_to_pem(cert_path, password)
    else:
        data = cert_path.read_bytes()

    return identity_from_certificate(_load_certificate(data))
