"""Consistency checks between a bundle, its provisioning profile and an APNs certificate.

Every check is a pure function returning a ``CheckResult``. None of them raise:
when a precondition doesn't hold (no push entitlement, a non-push certificate,
a distribution profile without devices) the result is ``NOT_APPLICABLE``.
"""

from signcheck.src.core.models import (
    Bundle,
    Environment,
    ProvisioningProfile,
    SigningIdentity,
)
from signcheck.src.core.report import CheckResult, CheckStatus, environment_label


def check_bundle_identity(
    bundle: Bundle, profile: ProvisioningProfile
) -> CheckResult:
    """Bundle identifier must match the profile's exactly (no case folding, no trimming)."""
    values = {
        "bundle_bundle_id": bundle.bundle_id,
        "profile_bundle_id": profile.bundle_id,
    }
    if bundle.bundle_id == profile.bundle_id:
        return CheckResult(
            CheckStatus.PASS,
            f"Bundle identifier {bundle.bundle_id} matches the provisioning profile",
            values,
        )

    return CheckResult(
        CheckStatus.FAIL,
        f"Bundle identifier {bundle.bundle_id!r} does not match the provisioning "
        f"profile's {profile.bundle_id!r}. Sign the app with a profile created for "
        f"{bundle.bundle_id}.",
        values,
    )


def check_environment_consistency(profile: ProvisioningProfile) -> CheckResult:
    """The app environment and the aps-environment entitlement must agree."""
    values = {
        "app_environment": profile.app_environment,
        "apns_environment": profile.apns_environment,
        "get_task_allow": profile.get_task_allow,
    }
    if profile.apns_environment is Environment.ABSENT:
        return CheckResult(
            CheckStatus.NOT_APPLICABLE,
            "The app has no push notification entitlement, nothing to compare",
            values,
        )

    if profile.app_environment is profile.apns_environment:
        return CheckResult(
            CheckStatus.PASS,
            f"App and push environments are both {profile.app_environment.value}",
            values,
        )

    return CheckResult(
        CheckStatus.FAIL,
        f"The bundle was built with get-task-allow = {str(profile.get_task_allow).lower()} "
        f"({profile.app_environment.value}) while aps-environment = "
        f"{profile.apns_environment.value}. Regenerate the provisioning profile so "
        f"both environments match.",
        values,
    )


def check_certificate_consistency(
    identity: SigningIdentity, profile: ProvisioningProfile
) -> CheckResult:
    """A push certificate must be for the profile's bundle id and APNs environment."""
    if not identity.is_apns:
        return CheckResult(
            CheckStatus.NOT_APPLICABLE,
            f"{identity.name} is not an APNs certificate, skipping comparison",
            {"certificate_name": identity.name, "is_apns": False},
        )

    bundle_id_match = identity.bundle_id == profile.bundle_id
    environment_match = identity.is_production == (
        profile.apns_environment is Environment.PRODUCTION
    )
    values = {
        "certificate_name": identity.name,
        "is_apns": True,
        "bundle_id_match": bundle_id_match,
        "environment_match": environment_match,
        "certificate_bundle_id": identity.bundle_id,
        "profile_bundle_id": profile.bundle_id,
        "certificate_environment": identity.environment,
        "profile_apns_environment": profile.apns_environment,
    }

    if bundle_id_match and environment_match:
        return CheckResult(
            CheckStatus.PASS,
            f"Certificate matches {profile.bundle_id} in the "
            f"{identity.environment.value} environment",
            values,
        )

    problems = []
    if not bundle_id_match:
        problems.append(
            f"The certificate is for {identity.bundle_id!r} but the profile is for "
            f"{profile.bundle_id!r}. Export a push certificate for {profile.bundle_id}."
        )
    if not environment_match:
        profile_env = environment_label(profile.apns_environment)
        cert_env = identity.environment.value
        problems.append(
            f"The certificate is for {cert_env} push but the profile's aps-environment "
            f"is {profile_env}. Either export the {profile_env} certificate, or rebuild "
            f"the app with a provisioning profile for {cert_env}."
        )

    return CheckResult(CheckStatus.FAIL, " ".join(problems), values)


def check_device_enrollment(profile: ProvisioningProfile, udid: str) -> CheckResult:
    """The device must be listed in the profile. App Store profiles list no devices."""
    values = {"udid": udid, "device_count": len(profile.provisioned_devices)}
    if profile.is_app_store_build:
        return CheckResult(
            CheckStatus.NOT_APPLICABLE,
            "Distribution profiles carry no device list",
            values,
        )

    if udid in profile.provisioned_devices:
        return CheckResult(
            CheckStatus.PASS,
            f"Device {udid} is one of {len(profile.provisioned_devices)} provisioned devices",
            values,
        )

    return CheckResult(
        CheckStatus.FAIL,
        f"Device {udid} is not among the {len(profile.provisioned_devices)} devices in "
        f"the provisioning profile. Register it in the developer portal and "
        f"regenerate the profile.",
        values,
    )
