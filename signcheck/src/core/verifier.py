from pathlib import Path
from typing import Optional

from signcheck.logger import get_log_console
from signcheck.src.core.cert_handler import load_signing_identity
from signcheck.src.core.consistency import (
    check_bundle_identity,
    check_certificate_consistency,
    check_device_enrollment,
    check_environment_consistency,
)
from signcheck.src.core.models import Bundle, ProvisioningProfile, SigningIdentity
from signcheck.src.core.report import (
    BUNDLE_IDENTITY,
    CERTIFICATE_CONSISTENCY,
    DEVICE_ENROLLMENT,
    ENVIRONMENT_CONSISTENCY,
    DiagnosticReport,
)
from signcheck.src.ipa.ipa_inspector import IPAInspector
from signcheck.src.ipa.provisioning_profile_analyser import load_profile


def build_report(
    profile: ProvisioningProfile,
    bundle: Optional[Bundle] = None,
    identity: Optional[SigningIdentity] = None,
    udid: Optional[str] = None,
) -> DiagnosticReport:
    """Run every check the given inputs allow and collect the results.

    Checks whose input wasn't supplied are left out of the report entirely.
    """
    results = {ENVIRONMENT_CONSISTENCY: check_environment_consistency(profile)}
    if bundle is not None:
        results[BUNDLE_IDENTITY] = check_bundle_identity(bundle, profile)
    if identity is not None:
        results[CERTIFICATE_CONSISTENCY] = check_certificate_consistency(
            identity, profile
        )
    if udid is not None:
        results[DEVICE_ENROLLMENT] = check_device_enrollment(profile, udid)
    return DiagnosticReport(results)


class AppVerifier:
    """Loads the artifacts for an app and runs the consistency checks on them."""

    def __init__(
        self,
        ipa_path: Path,
        certificate_path: Optional[Path] = None,
        certificate_password: Optional[str] = None,
        udid: Optional[str] = None,
    ):
        self.ipa_path = Path(ipa_path)
        self.certificate_path = Path(certificate_path) if certificate_path else None
        self.certificate_password = certificate_password
        self.udid = udid
        self.console = get_log_console()

        self.bundle: Optional[Bundle] = None
        self.profile: Optional[ProvisioningProfile] = None
        self.identity: Optional[SigningIdentity] = None

    def load_artifacts(self) -> None:
        """Parse the bundle, its embedded profile and the certificate, if any.

        Raises ArtifactError before anything is checked, so a broken input
        never yields a partial report.
        """
        with IPAInspector(self.ipa_path) as inspector:
            self.bundle = inspector.get_bundle()
            self.console.log(
                f"[blue]Bundle:[/] {self.bundle.display_name} ({self.bundle.bundle_id})"
            )
            self.profile = load_profile(inspector.get_embedded_profile_path())
            self.console.log(
                f"[blue]Provisioning profile:[/] {self.profile.display_name} "
                f"({self.profile.team_name})"
            )

        if self.certificate_path:
            self.identity = load_signing_identity(
                self.certificate_path, self.certificate_password
            )
            self.console.log(f"[blue]Certificate:[/] {self.identity.name}")

    def verify(self) -> DiagnosticReport:
        """Run all verification checks and return the report."""
        self.console.log(f"[bold]Starting verification for {self.ipa_path.name}[/]")
        self.load_artifacts()
        return build_report(
            self.profile, bundle=self.bundle, identity=self.identity, udid=self.udid
        )
