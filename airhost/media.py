"""Media packets, clock alignment, volume mapping and stream dumps."""

from __future__ import annotations

import enum
import logging
import math
import os
import struct
from dataclasses import dataclass, replace
from typing import BinaryIO

_log = logging.getLogger(__name__)

_UINT64 = 1 << 64

# H.264 Annex-B start code, appended when a dump file is finished.
MARK = b"\x00\x00\x00\x01"
_SPS_NAL_TYPE = 0x07

MUTE_VOLUME = -144.0
MIN_VOLUME = -30.0
MAX_VOLUME = 0.0

# A 95-byte PNG holding one white pixel: placeholder cover art.
EMPTY_IMAGE = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452"
    "00000001000000010103000000 25db56".replace(" ", "")
    + "ca000000035" "04c5445000000a77a3dda"
    "0000000174524e530040e6d866000000"
    "0a49444154 08d7636000000002 0001e2".replace(" ", "")
    + "21bc330000000049454e44ae426082"
)


class AudioType(enum.IntEnum):
    """Audio stream kinds as used when naming dump files."""

    OTHER = 0x10
    ALAC = 0x20
    AAC_ELD = 0x80


_AUDIO_SUFFIX = {
    AudioType.ALAC: "alac",
    AudioType.AAC_ELD: "aac",
    AudioType.OTHER: "aud",
}


@dataclass(frozen=True)
class AudioPacket:
    """A decrypted audio frame with its timing information."""

    data: bytes
    ct: int
    seqnum: int = 0
    ntp_time_local: int = 0
    ntp_time_remote: int = 0
    rtp_time: int = 0
    sync_status: int = 0


@dataclass(frozen=True)
class VideoPacket:
    """A decrypted video frame (one or more NAL units) with its timing information."""

    data: bytes
    nal_count: int = 1
    ntp_time_local: int = 0
    ntp_time_remote: int = 0
    is_h265: bool = False


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def airplay_volume_to_gain(
    volume: float,
    db_low: float = -30.0,
    db_high: float = 0.0,
    taper: bool = False,
) -> float:
    """Convert an AirPlay volume in dB (-30..0, -144 = mute) to a linear gain."""
    volume = _f32(volume)
    if volume == MUTE_VOLUME:
        frac = 0.0
    elif volume < MIN_VOLUME:
        _log.error(" invalid AirPlay volume %f", volume)
        frac = 0.0
    elif volume > MAX_VOLUME:
        _log.error(" invalid AirPlay volume %f", volume)
        frac = 1.0
    elif volume == MIN_VOLUME:
        frac = 0.0
    elif volume == MAX_VOLUME:
        frac = 1.0
    else:
        frac = min(_f32(_f32(30.0 + volume) / 30.0), 1.0)

    if frac == 0.0:
        return 0.0
    db_flat = db_low + (db_high - db_low) * frac
    if taper:
        # Each halving of the slider length lowers the level by 10 dB.
        db = max(db_high + 10.0 * (math.log10(frac) / math.log10(2.0)), db_flat)
    else:
        db = db_flat
    return 10.0 ** (0.05 * db)


def audio_type_for_ct(ct: int) -> AudioType:
    """Map an AirPlay compression type to the audio kind."""
    return {2: AudioType.ALAC, 8: AudioType.AAC_ELD}.get(ct, AudioType.OTHER)


def write_coverart(path, image: bytes = EMPTY_IMAGE) -> int:
    """Write cover-art image bytes to ``path``; return the number of bytes written."""
    with open(os.fspath(path), "wb") as handle:
        return handle.write(image)


class ClockSync:
    """Maps client timestamps onto the local clock, with optional audio delays (ns)."""

    def __init__(self, audio_delay_alac: int = 0, audio_delay_aac: int = 0):
        self.audio_delay_alac = audio_delay_alac
        self.audio_delay_aac = audio_delay_aac
        self.offset = 0

    def _shift(self, local: int, remote: int) -> int:
        if not self.offset:
            self.offset = (local - remote) % _UINT64
        return (remote + self.offset) % _UINT64

    def adjust_audio(self, packet: AudioPacket) -> AudioPacket:
        """Return the packet with its remote time moved to the local clock."""
        remote = self._shift(packet.ntp_time_local, packet.ntp_time_remote)
        if packet.ct == 2 and self.audio_delay_alac:
            remote = (remote + self.audio_delay_alac) % _UINT64
        elif packet.ct in (4, 8) and self.audio_delay_aac:
            remote = (remote + self.audio_delay_aac) % _UINT64
        return replace(packet, ntp_time_remote=remote)

    def adjust_video(self, packet: VideoPacket) -> VideoPacket:
        """Return the packet with its remote time moved to the local clock."""
        remote = self._shift(packet.ntp_time_local, packet.ntp_time_remote)
        return replace(packet, ntp_time_remote=remote)

    def reset(self) -> None:
        """Forget the clock offset; the next packet sets it again."""
        self.offset = 0


class AudioDumper:
    """Writes audio packets to ``<basename>.<n>.<alac|aac|aud>`` files.

    A new file starts whenever the audio format changes; with a non-zero
    ``limit`` each file holds at most that many packets.
    """

    def __init__(self, basename="audiodump", limit: int = 0):
        self.basename = os.fspath(basename)
        self.limit = limit
        self.paths: list[str] = []
        self._type: AudioType | None = None
        self._previous: AudioType | None = None
        self._file: BinaryIO | None = None
        self._file_count = 0
        self._count = 0

    def __enter__(self) -> AudioDumper:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def set_format(self, ct: int) -> AudioType:
        """Record the format of the coming packets, closing a file of another format."""
        kind = audio_type_for_ct(ct)
        if self._file is not None and kind != self._type:
            self.close()
        self._type = kind
        return kind

    def write(self, data: bytes) -> bool:
        """Dump one packet; return True if it was written."""
        if self._file is None and self._type != self._previous:
            self._previous = self._type
            self._file_count += 1
            self._count = 0
            path = f"{self.basename}.{self._file_count}.{_AUDIO_SUFFIX[self._type]}"
            self._file = open(path, "wb")
            self.paths.append(path)
        if self._file is None:
            return False
        self._file.write(data)
        if self.limit:
            self._count += 1
            if self._count == self.limit:
                self.close()
        return True

    def close(self) -> None:
        """Close the current file, if any."""
        if self._file is not None:
            self._file.close()
            self._file = None


class VideoDumper:
    """Writes H.264 NAL units to ``<basename>.h264`` or ``<basename>.<n>.h264``.

    With a non-zero ``limit`` a new numbered file starts at each SPS NAL unit
    and each file holds at most ``limit`` packets.
    """

    def __init__(self, basename="videodump", limit: int = 0):
        self.basename = os.fspath(basename)
        self.limit = limit
        self.paths: list[str] = []
        self._file: BinaryIO | None = None
        self._file_count = 0
        self._count = 0

    def __enter__(self) -> VideoDumper:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def write(self, data: bytes) -> bool:
        """Dump one packet; return True if it was written."""
        is_sps = len(data) > 4 and (data[4] & 0x1F) == _SPS_NAL_TYPE
        if is_sps and self._file is not None and self.limit:
            self.close()
            self._count = 0
        if self._file is None:
            name = self.basename
            if self.limit:
                self._file_count += 1
                name += f".{self._file_count}"
            path = name + ".h264"
            self._file = open(path, "wb")
            self.paths.append(path)
        if self.limit and self._count >= self.limit:
            return False
        if self.limit:
            self._count += 1
        self._file.write(data)
        return True

    def close(self) -> None:
        """Finish the current file with a start code and close it."""
        if self._file is not None:
            self._file.write(MARK)
            self._file.close()
            self._file = None