"""Emulated client applications for the InnerTube player API."""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from ..core.config import settings
from ..core.exceptions import ConfigurationError


class ClientProfile(BaseModel):
    """One official client application as seen by the player API."""
    name: str
    version: str
    user_agent: str
    reliability: float = Field(..., ge=0.0, le=1.0)
    device_make: Optional[str] = None
    device_model: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    android_sdk_version: Optional[int] = None

    def client_context(self) -> Dict[str, object]:
        """Build the ``context.client`` body block for this profile."""
        context: Dict[str, object] = {
            "clientName": self.name,
            "clientVersion": self.version,
        }
        optional = {
            "deviceMake": self.device_make,
            "deviceModel": self.device_model,
            "osName": self.os_name,
            "osVersion": self.os_version,
            "androidSdkVersion": self.android_sdk_version,
        }
        context.update({key: value for key, value in optional.items() if value is not None})
        return context


DEFAULT_PROFILES = [
    ClientProfile(
        name="WEB",
        version="2.20241217.01.00",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        reliability=0.7,
    ),
    ClientProfile(
        name="ANDROID",
        version="20.10.38",
        user_agent="com.google.android.youtube/20.10.38 (Linux; U; Android 11) gzip",
        reliability=0.9,
        os_name="Android",
        os_version="11",
        android_sdk_version=30,
    ),
    ClientProfile(
        name="IOS",
        version="19.14.3",
        user_agent="com.google.ios.youtube/19.14.3 (iPhone16,2; U; CPU iOS 17_5_1 like Mac OS X)",
        reliability=0.8,
        device_make="Apple",
        device_model="iPhone16,2",
        os_name="iOS",
        os_version="17.5.1.21F90",
    ),
]


class ClientProfileRegistry:
    """Ordered set of client profiles ranked by reliability weight."""

    def __init__(
        self,
        profiles: Optional[List[ClientProfile]] = None,
        weights: Optional[Dict[str, float]] = None
    ):
        source = profiles if profiles is not None else DEFAULT_PROFILES
        overrides = weights if weights is not None else settings.client_profile_weights

        self._profiles: List[ClientProfile] = []
        for profile in source:
            weight = overrides.get(profile.name.upper()) if overrides else None
            if weight is not None:
                profile = profile.model_copy(update={"reliability": weight})
            self._profiles.append(profile)

    def __len__(self) -> int:
        return len(self._profiles)

    def ranked(self) -> List[ClientProfile]:
        """Profiles in descending reliability; ties keep declaration order."""
        return sorted(self._profiles, key=lambda p: p.reliability, reverse=True)

    def get(self, name: str) -> ClientProfile:
        """Look up a profile by client name."""
        for profile in self._profiles:
            if profile.name.upper() == name.upper():
                return profile
        raise ConfigurationError("client_profile", f"Unknown client profile: {name}")

    def preferred(self, name: str) -> List[ClientProfile]:
        """Ranked profiles with the named one moved to the front."""
        first = self.get(name)
        return [first] + [p for p in self.ranked() if p.name != first.name]
