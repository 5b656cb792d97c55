#!/usr/bin/env python3

from pathlib import Path
import plistlib
import shutil
import tempfile
import zipfile
from typing import Any, Dict, Optional

from signcheck.src.core.models import ArtifactError, Bundle


class IPAInspector:
    """Opens an .ipa (or an already extracted .app) and reads what the checks need."""

    def __init__(self, ipa_path: Path):
        self.ipa_path = Path(ipa_path)
        self.temp_dir: Optional[str] = None
        self.app_dir: Optional[Path] = None
        self._info_plist: Optional[Dict[str, Any]] = None

    def __enter__(self):
        """Extract IPA to a temporary directory"""
        if not self.ipa_path.exists():
            raise ArtifactError(f"IPA file not found: {self.ipa_path}")

        if self.ipa_path.suffix.lower() == ".ipa":
            self.temp_dir = tempfile.mkdtemp(prefix="signcheck-")
            try:
                with zipfile.ZipFile(self.ipa_path) as zf:
                    # Only Payload/ matters, skip iTunesArtwork, SwiftSupport and friends
                    members = [n for n in zf.namelist() if n.startswith("Payload/")]
                    zf.extractall(self.temp_dir, members=members)
            except zipfile.BadZipFile as e:
                self._cleanup()
                raise ArtifactError(f"Not a valid IPA archive: {self.ipa_path} ({e})")
            except Exception:
                # __exit__ doesn't run when __enter__ raises
                self._cleanup()
                raise

            payload_dir = Path(self.temp_dir) / "Payload"
            self.app_dir = next(payload_dir.glob("*.app"), None)
            if self.app_dir is None:
                self._cleanup()
                raise ArtifactError(f"No .app bundle found in Payload of {self.ipa_path}")
        else:
            # Assume it's already an .app directory
            self.app_dir = self.ipa_path
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up temporary directory"""
        self._cleanup()

    def _cleanup(self) -> None:
        if self.temp_dir:
            shutil.rmtree(self.temp_dir, ignore_errors=True)
            self.temp_dir = None

    def get_info_plist(self) -> Dict[str, Any]:
        """Read the main app's Info.plist"""
        if self._info_plist is not None:
            return self._info_plist

        info_plist = self.app_dir / "Info.plist"
        if not info_plist.exists():
            raise ArtifactError("No Info.plist found in main app bundle")

        try:
            with open(info_plist, "rb") as f:
                self._info_plist = plistlib.load(f)
        except plistlib.InvalidFileException as e:
            raise ArtifactError(f"Unreadable Info.plist in {self.app_dir.name}: {e}")
        return self._info_plist

    def get_main_app_bundle_id(self) -> str:
        """Get the main app's bundle ID"""
        info = self.get_info_plist()
        bundle_id = info.get("CFBundleIdentifier")
        if not bundle_id:
            raise ArtifactError("Info.plist has no CFBundleIdentifier")
        return bundle_id

    def get_bundle(self) -> Bundle:
        info = self.get_info_plist()
        display_name = (
            info.get("CFBundleDisplayName")
            or info.get("CFBundleName")
            or self.app_dir.stem
        )
        return Bundle(bundle_id=self.get_main_app_bundle_id(), display_name=display_name)

    def get_embedded_profile_path(self) -> Path:
        profile_path = self.app_dir / "embedded.mobileprovision"
        if not profile_path.exists():
            raise ArtifactError(
                f"No embedded.mobileprovision in {self.app_dir.name}, was the app signed?"
            )
        return profile_path
