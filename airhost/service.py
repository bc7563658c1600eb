"""Service advertisement details and client admission for the AirPlay server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable

_log = logging.getLogger(__name__)

GLOBAL_MODEL = "AppleTV3,2"
GLOBAL_VERSION = "220.68"
MAX_HWADDR_LEN = 6

# Features word advertised before adjustment: bit 27 ("supports legacy pairing") on.
DEFAULT_FEATURES = 0x5A7FFEE6

# TXT record of the RAOP (AirTunes) service.
RAOP_TXT = {
    "txtvers": "1",
    "ch": "2",
    "cn": "0,1,2,3",
    "et": "0,3,5",
    "vv": "2",
    "rhd": "5.6.0.0",
    "sf": "0x4",
    "sv": "false",
    "da": "true",
    "sr": "44100",
    "ss": "16",
    "vs": GLOBAL_VERSION,
    "tp": "UDP",
    "md": "0,1,2",
    "vn": "65537",
}

# TXT record of the AirPlay service.
AIRPLAY_TXT = {
    "srcvers": GLOBAL_VERSION,
    "flags": "0x4",
    "vv": "2",
    "pi": "2e388006-13ba-4041-9a67-25dd4a43d536",
    "model": GLOBAL_MODEL,
}

# Bits 0-31 of the features word as the server advertises them.
_FEATURE_BITS = {
    0: False,   # AirPlay video
    1: True,    # photo
    2: True,    # video protected with FairPlay DRM
    3: False,   # volume control for videos
    4: False,   # HTTP live streaming
    5: True,    # slideshow
    6: True,
    7: True,    # mirroring
    8: False,   # screen rotation
    9: True,    # audio
    10: True,
    11: True,   # audio packet redundancy
    12: True,   # FairPlay secure auth
    13: True,   # photo preloading
    14: True,   # FairPlay authentication
    15: True,   # metadata: artwork
    16: True,   # metadata: progress
    17: True,   # metadata: text
    18: True,   # audio format 1
    19: True,   # audio format 2
    20: True,   # audio format 3
    21: True,   # audio format 4
    22: True,   # authentication type 4
    23: False,  # authentication type 1 (RSA)
    24: False,
    25: True,
    26: False,  # unified advertiser info
    27: True,   # legacy pairing
    28: True,
    29: False,
    30: True,   # RAOP support
    31: False,
}

_HLS_BITS = (0, 4)
_H265_BIT = 42
_LEGACY_PAIRING_BIT = 27

ERR_UNKNOWN = -65537
ERR_NAME_CONFLICT = -65548


def _with_bit(features: int, bit: int, value: bool) -> int:
    return features | (1 << bit) if value else features & ~(1 << bit)


def airplay_features(
    hls_support: bool = False,
    h265_support: bool = False,
    legacy_pairing: bool = False,
) -> int:
    """Return the 64-bit AirPlay features word for the chosen capabilities."""
    features = DEFAULT_FEATURES
    for bit, value in _FEATURE_BITS.items():
        features = _with_bit(features, bit, value)
    for bit in _HLS_BITS:
        features = _with_bit(features, bit, hls_support)
    features = _with_bit(features, _H265_BIT, h265_support)
    return _with_bit(features, _LEGACY_PAIRING_BIT, legacy_pairing)


def features_text(features: int) -> str:
    """Format a features word as the "low,high" pair of 32-bit hex values."""
    if not 0 <= features < 1 << 64:
        raise ValueError(f"features out of range: {features}")
    low = features & 0xFFFFFFFF
    high = features >> 32
    return f"0x{low:X},0x{high:X}"


def describe_dnssd_error(code: int) -> str:
    """Explain an error code returned while registering the mDNS service."""
    if code == ERR_UNKNOWN:
        return "No DNS-SD Server found (DNSServiceRegister call returned kDNSServiceErr_Unknown)"
    if code == ERR_NAME_CONFLICT:
        return (
            "DNSServiceRegister call returned kDNSServiceErr_NameConflict\n"
            "Is another instance of UxPlay running with the same DeviceID (MAC address) "
            "or using same network ports?\n"
            "Use options -m ... and -p ... to allow multiple instances of UxPlay "
            "to run concurrently"
        )
    return (
        f"dnssd registration failed with error code {code}\n"
        "mDNS Error codes are in range FFFE FF00 (-65792) to FFFE FFFF (-65537) "
        "(see Apple's dns_sd.h)"
    )


@dataclass
class ClientPolicy:
    """Decides which client devices may connect."""

    allowed: list[str] = field(default_factory=list)
    blocked: list[str] = field(default_factory=list)
    restrict: bool = False

    @classmethod
    def from_lists(
        cls, allowed: Iterable[str], blocked: Iterable[str], restrict: bool
    ) -> ClientPolicy:
        return cls(list(allowed), list(blocked), restrict)

    def admit(self, device_id: str) -> bool:
        """Return True if the client with ``device_id`` may connect."""
        if self.restrict:
            admitted = device_id in self.allowed
            if not admitted:
                _log.info(
                    "client connections have been restricted to those with listed "
                    'deviceID,\nuse "-allow %s" to allow this client to connect.',
                    device_id,
                )
        else:
            admitted = True
        if device_id in self.blocked:
            _log.info(
                "*** attempt to connect by blocked client (clientID %s): DENIED", device_id
            )
            admitted = False
        return admitted


# A 32-byte public key in base64 is 44 characters.
_KEY_LENGTH = 44


@dataclass
class PairingRegister:
    """Public keys of clients that completed pin pairing, optionally kept in a file.

    When ``enabled`` is false no register is kept and every client passes.
    """

    path: str | None = None
    enabled: bool = True
    keys: list[str] = field(default_factory=list)

    def load(self) -> int:
        """Read registered keys from the file; return how many were read."""
        if not self.enabled or not self.path or not os.path.exists(self.path):
            return 0
        count = 0
        with open(self.path, encoding="utf-8") as handle:
            for line in handle:
                self.keys.append(line.rstrip("\n")[:_KEY_LENGTH])
                count += 1
        if count:
            _log.info("Register %s lists %d pin-registered clients", self.path, count)
        return count

    def register(self, device_id: str, client_pk: str, client_name: str) -> None:
        """Record a newly paired client, appending it to the file if there is one."""
        if not self.enabled:
            return
        _log.info(
            "registered new client: %s DeviceID = %s PK = \n%s",
            client_name, device_id, client_pk,
        )
        self.keys.append(client_pk)
        if self.path:
            try:
                with open(self.path, "a", encoding="utf-8") as handle:
                    handle.write(f"{client_pk},{device_id},{client_name}\n")
            except OSError as exc:
                _log.error("could not write pairing register %s: %s", self.path, exc)

    def check(self, client_pk: str) -> bool:
        """Return True if a returning client's key is registered (or no register is kept)."""
        if not self.enabled:
            return True
        if client_pk in self.keys:
            _log.debug("registration found: PK=%s", client_pk)
            return True
        _log.error("returning client's pairing registration not found: PK=%s", client_pk)
        return False