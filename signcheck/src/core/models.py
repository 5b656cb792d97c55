"""Value types for the artifacts that get cross-checked.

Instances are built by the loaders in ``signcheck.src.ipa`` and
``signcheck.src.core.cert_handler`` (or directly by callers that already have
the parsed data) and are validated once, at construction time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Union


class ArtifactError(Exception):
    """Raised when a signing artifact can't be loaded."""


class InvalidInput(ArtifactError, ValueError):
    """Raised when an artifact is constructed with a missing or malformed field."""


class Environment(Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    # No push entitlement at all. Not the same thing as development push.
    ABSENT = "absent"

    @classmethod
    def parse(
        cls, value: Union["Environment", str, None], allow_absent: bool = False
    ) -> "Environment":
        """Turn an enum member or an entitlement string into an Environment."""
        if value is None:
            result = cls.ABSENT
        elif isinstance(value, cls):
            result = value
        elif isinstance(value, str):
            try:
                result = cls(value.lower())
            except ValueError:
                raise InvalidInput(f"Unknown environment: {value!r}")
        else:
            raise InvalidInput(f"Unknown environment: {value!r}")

        if result is cls.ABSENT and not allow_absent:
            raise InvalidInput("Environment is required here and can't be absent")
        return result


def _require_str(owner: str, name: str, value) -> None:
    if not isinstance(value, str):
        raise InvalidInput(f"{owner}.{name} must be a string, got {value!r}")


def _require_bool(owner: str, name: str, value) -> None:
    if not isinstance(value, bool):
        raise InvalidInput(f"{owner}.{name} must be a bool, got {value!r}")


@dataclass(frozen=True)
class Bundle:
    """The application bundle being checked"""

    bundle_id: str
    display_name: str

    def __post_init__(self):
        _require_str("Bundle", "bundle_id", self.bundle_id)
        _require_str("Bundle", "display_name", self.display_name)


@dataclass(frozen=True)
class ProvisioningProfile:
    """Signing authorization embedded in the bundle"""

    bundle_id: str
    team_name: str
    display_name: str
    is_app_store_build: bool  # distribution profiles carry no device list
    get_task_allow: bool
    app_environment: Environment
    apns_environment: Environment = Environment.ABSENT
    provisioned_devices: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        for name in ("bundle_id", "team_name", "display_name"):
            _require_str("ProvisioningProfile", name, getattr(self, name))
        for name in ("is_app_store_build", "get_task_allow"):
            _require_bool("ProvisioningProfile", name, getattr(self, name))

        # frozen, so normalise through object.__setattr__
        object.__setattr__(
            self, "app_environment", Environment.parse(self.app_environment)
        )
        object.__setattr__(
            self,
            "apns_environment",
            Environment.parse(self.apns_environment, allow_absent=True),
        )

        devices: Optional[Iterable[str]] = self.provisioned_devices
        if devices is None or isinstance(devices, (str, bytes)):
            raise InvalidInput(
                f"ProvisioningProfile.provisioned_devices must be a collection of UDIDs, got {devices!r}"
            )
        devices = frozenset(devices)
        for udid in devices:
            _require_str("ProvisioningProfile", "provisioned_devices[]", udid)
        object.__setattr__(self, "provisioned_devices", devices)


@dataclass(frozen=True)
class SigningIdentity:
    """A push (APNs) certificate, or whatever certificate the caller handed in"""

    name: str
    bundle_id: str
    is_apns: bool
    is_production: bool = False  # only meaningful when is_apns

    def __post_init__(self):
        _require_str("SigningIdentity", "name", self.name)
        _require_str("SigningIdentity", "bundle_id", self.bundle_id)
        _require_bool("SigningIdentity", "is_apns", self.is_apns)
        _require_bool("SigningIdentity", "is_production", self.is_production)

    @property
    def environment(self) -> Environment:
        if not self.is_apns:
            return Environment.ABSENT
        return Environment.PRODUCTION if self.is_production else Environment.DEVELOPMENT
