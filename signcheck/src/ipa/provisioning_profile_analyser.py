from pathlib import Path
import plistlib
from typing import Any, Dict

from asn1crypto.cms import ContentInfo

from signcheck.src.core.models import (
    ArtifactError,
    Environment,
    InvalidInput,
    ProvisioningProfile,
)


def dump_prov(prov_file: Path) -> dict:
    """Read a provisioning profile without using macOS security command"""
    try:
        with open(prov_file, "rb") as f:
            content_info = ContentInfo.load(f.read())
        signed_data = content_info["content"]
        # The plist is the encapsulated content of the signed data
        plist_data = signed_data["encap_content_info"]["content"].native
        return plistlib.loads(plist_data)
    except OSError as e:
        raise ArtifactError(f"Can't read provisioning profile {prov_file}: {e}")
    except (ValueError, TypeError, KeyError, plistlib.InvalidFileException) as e:
        raise ArtifactError(f"Malformed provisioning profile {prov_file}: {e}")


def bundle_id_from_app_identifier(app_identifier: str) -> str:
    """Strip the team prefix: TEAMID.com.example.app -> com.example.app"""
    if "." not in app_identifier:
        raise InvalidInput(f"Unexpected application-identifier: {app_identifier!r}")
    return app_identifier.split(".", 1)[1]


def profile_from_plist(data: Dict[str, Any]) -> ProvisioningProfile:
    """Map the decoded profile plist onto a ProvisioningProfile"""
    entitlements = data.get("Entitlements", {})
    app_identifier = entitlements.get("application-identifier")
    if not isinstance(app_identifier, str):
        raise InvalidInput("Provisioning profile has no application-identifier")

    get_task_allow = bool(entitlements.get("get-task-allow", False))
    devices = data.get("ProvisionedDevices")
    # App Store and enterprise (ProvisionsAllDevices) profiles don't list devices
    is_app_store_build = devices is None

    return ProvisioningProfile(
        bundle_id=bundle_id_from_app_identifier(app_identifier),
        team_name=data.get("TeamName", ""),
        display_name=data.get("Name") or data.get("AppIDName", ""),
        is_app_store_build=is_app_store_build,
        get_task_allow=get_task_allow,
        app_environment=(
            Environment.DEVELOPMENT if get_task_allow else Environment.PRODUCTION
        ),
        apns_environment=Environment.parse(
            entitlements.get("aps-environment"), allow_absent=True
        ),
        provisioned_devices=frozenset(devices or ()),
    )


def load_profile(prov_file: Path) -> ProvisioningProfile:
    return profile_from_plist(dump_prov(prov_file))
