"""Command-line and configuration-file options for the AirPlay server."""

from __future__ import annotations

import enum
import math
import os
import random
import re
import struct
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Mapping

VERSION = "1.71"
DEFAULT_NAME = "UxPlay"
LOWEST_ALLOWED_PORT = 1024
HIGHEST_PORT = 65535
NTP_TIMEOUT_LIMIT = 5
SECOND_IN_USECS = 1_000_000

LEGACY_TCP_PORTS = (7100, 7000, 7001)
LEGACY_UDP_PORTS = (7011, 6001, 6000)

# Linux and the BSDs need the AirPlay colormap converted to full-range sRGB.
DEFAULT_SRGB_FIX = sys.platform not in ("darwin", "win32", "cygwin")

_DECIMAL = re.compile(r"\s*\+?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_HEX_PREFIX = re.compile(r"[0-9a-fA-F]+")
_MAC_PATTERN = re.compile(r"[0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{2}){5}")


class VideoFlip(enum.Enum):
    """Flip or rotation applied to the displayed video."""

    NONE = "none"
    LEFT = "left"
    RIGHT = "right"
    INVERT = "invert"
    VFLIP = "vflip"
    HFLIP = "hflip"


class OptionError(ValueError):
    """An option or its value was rejected."""


@dataclass
class Options:
    """Every setting that can be given on the command line or in a config file."""

    server_name: str = DEFAULT_NAME
    append_hostname: bool = True
    audio_sync: bool = False
    video_sync: bool = True
    audio_delay_alac: int = 0
    audio_delay_aac: int = 0
    videosink: str = "autovideosink"
    videosink_options: str = ""
    flip: VideoFlip = VideoFlip.NONE
    rotation: VideoFlip = VideoFlip.NONE
    audiosink: str = "autoaudiosink"
    audiodelay: int = -1
    use_audio: bool = True
    new_window_closing_behavior: bool = True
    video_parser: str = "h264parse"
    video_decoder: str = "decodebin"
    video_converter: str = "videoconvert"
    show_client_fps_data: bool = False
    max_ntp_timeouts: int = NTP_TIMEOUT_LIMIT
    dump_video: bool = False
    video_dumpfile_name: str = "videodump"
    video_dump_limit: int = 0
    dump_audio: bool = False
    audio_dumpfile_name: str = "audiodump"
    audio_dump_limit: int = 0
    fullscreen: bool = False
    coverart_filename: str = ""
    use_random_hw_addr: bool = False
    display_width: int = 0
    display_height: int = 0
    refresh_rate: int = 0
    max_fps: int = 0
    overscanned: bool = False
    tcp_ports: list[int] = field(default_factory=lambda: [0, 0, 0])
    udp_ports: list[int] = field(default_factory=lambda: [0, 0, 0])
    debug_log: bool = False
    bt709_fix: bool = False
    srgb_fix: bool = DEFAULT_SRGB_FIX
    nohold: bool = False
    nofreeze: bool = False
    allowed_clients: list[str] = field(default_factory=list)
    blocked_clients: list[str] = field(default_factory=list)
    restrict_clients: bool = False
    setup_legacy_pairing: bool = False
    require_password: bool = False
    pin: int = 0
    keyfile: str = ""
    mac_address: str = ""
    dacpfile: str = ""
    registration_list: bool = False
    pairing_register: str = ""
    db_low: float = -30.0
    db_high: float = 0.0
    taper_volume: bool = False
    h265_support: bool = False
    hls_support: bool = False
    show_help: bool = False
    show_version: bool = False


def file_has_write_access(path) -> bool:
    """Return True if ``path`` can be written, creating and removing it if absent."""
    path = os.fspath(path)
    if os.path.exists(path):
        return os.access(path, os.W_OK)
    try:
        with open(path, "w"):
            pass
    except OSError:
        return False
    try:
        os.remove(path)
    except OSError:
        pass
    return True


def home_dir(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the directory used for per-user files."""
    if environ is None:
        environ = os.environ
    home = environ.get("XDG_CONFIG_HOMEDIR") or environ.get("HOME")
    if home:
        return home
    try:
        import pwd
    except ImportError:
        return None
    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return None


def _strtoul(text: str) -> int:
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"not a decimal number: {text!r}")
    return int(text)


def _float_prefix(text: str) -> tuple[float, int]:
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return 0.0, 0
    return float(match.group()), match.end()


def _whole_float(text: str) -> float | None:
    """Parse ``text`` as a float if all of it is consumed; an empty string reads as 0."""
    if text == "":
        return 0.0
    value, end = _float_prefix(text)
    if end == 0 or end != len(text):
        return None
    return value


def _f32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _scaled(value: float, factor: int) -> int | None:
    product = _f32(_f32(value) * factor)
    if not math.isfinite(product):
        return None
    return int(product)


def _dimension(text: str, max_len: int) -> int:
    if not text or len(text) > max_len or text[0] == "-":
        raise ValueError(f"invalid dimension {text!r}")
    number = _strtoul(text)
    if number == 0:
        raise ValueError("dimension must be positive")
    return number


def parse_display_settings(value: str) -> tuple[int, int, int | None]:
    """Parse ``wxh`` or ``wxh@r`` into (width, height, refresh or None)."""
    width_text, sep, rest = value.partition("x")
    if not sep:
        raise ValueError(f"no 'x' in display setting {value!r}")
    width = _dimension(width_text, 4)
    height_text, at, refresh_text = rest.partition("@")
    refresh = None
    if at:
        refresh = _dimension(refresh_text, 3)
        if refresh > 255:
            raise ValueError("refresh rate must be at most 255")
    height = _dimension(height_text, 4)
    return width, height, refresh


def parse_bounded_value(text: str, limit: int) -> int:
    """Parse a decimal; in 1..limit when limit > 0, otherwise any non-negative value."""
    if not text or len(text) > 10 or text[0] == "-":
        raise ValueError(f"invalid value {text!r}")
    number = _strtoul(text)
    if limit and (number == 0 or number > limit):
        raise ValueError(f"value {number} not in range 1..{limit}")
    return number & 0xFFFFFFFF


def parse_ports(text: str, count: int) -> list[int]:
    """Parse comma-separated ports; missing trailing ports follow the last one given."""
    ports: list[int] = []
    remaining = text
    for index in range(count):
        item, comma, remaining = remaining.partition(",")
        if not item or len(item) > 5 or item[0] == "-":
            break
        try:
            port = _strtoul(item)
        except ValueError:
            break
        if not LOWEST_ALLOWED_PORT <= port <= HIGHEST_PORT:
            break
        ports.append(port)
        if not comma:
            if count + port > index + 1 + HIGHEST_PORT:
                break
            ports.extend(range(port + 1, port + count - index))
            return ports
    raise ValueError(
        f"all {count} ports must be in range [{LOWEST_ALLOWED_PORT},{HIGHEST_PORT}]"
    )


def parse_videoflip(text: str) -> VideoFlip:
    """Map H, V or I to a flip."""
    choices = {"I": VideoFlip.INVERT, "H": VideoFlip.HFLIP, "V": VideoFlip.VFLIP}
    if len(text) != 1 or text not in choices:
        raise ValueError(f"unknown flip type {text!r}")
    return choices[text]


def parse_videorotate(text: str) -> VideoFlip:
    """Map L or R to a rotation."""
    choices = {"L": VideoFlip.LEFT, "R": VideoFlip.RIGHT}
    if len(text) != 1 or text not in choices:
        raise ValueError(f"unknown rotation type {text!r}")
    return choices[text]


def validate_mac(address: str) -> bool:
    """Return True for an address of the form xx:xx:xx:xx:xx:xx with hex digits."""
    return bool(_MAC_PATTERN.fullmatch(address))


def random_mac(rng: random.Random | None = None) -> str:
    """Return a random locally administered unicast MAC address."""
    if rng is None:
        rng = random.Random()
    first = (rng.randrange(64) << 2) | 0b10
    octets = [first] + [rng.randrange(256) for _ in range(5)]
    return ":".join(f"{octet:02x}" for octet in octets)


def parse_hw_addr(address: str) -> bytes:
    """Convert a colon-separated MAC address into its raw bytes."""
    octets = []
    for start in range(0, len(address), 3):
        match = _HEX_PREFIX.match(address, start)
        if not match:
            raise ValueError(f"invalid hardware address {address!r}")
        octets.append(int(match.group(), 16) & 0xFF)
    return bytes(octets)


class _Arguments:
    """Queue of remaining arguments with look-ahead."""

    def __init__(self, args: Iterable[str]):
        self._items = deque(args)

    def __bool__(self) -> bool:
        return bool(self._items)

    def peek(self) -> str | None:
        return self._items[0] if self._items else None

    def pop(self) -> str:
        return self._items.popleft()

    def has_value(self) -> bool:
        return bool(self._items) and not self._items[0].startswith("-")

    def take_if(self, text: str) -> bool:
        if self.peek() == text:
            self.pop()
            return True
        return False

    def require_value(self, option: str) -> str:
        if not self.has_value():
            raise OptionError(f'invalid: "{option}" had no argument')
        return self.pop()

    def require_any(self, option: str) -> str:
        if not self._items:
            raise OptionError(f'invalid: "{option}" had no argument')
        return self.pop()


def _sync_delay(queue: _Arguments, option: str) -> int | None:
    """Consume an optional delay in milliseconds; return it in nanoseconds."""
    text = queue.peek()
    if text is None:
        return None
    value = _whole_float(text)
    if value is None:
        return None
    queue.pop()
    millis = _scaled(value, 1000)
    if millis is None or not -SECOND_IN_USECS < millis < SECOND_IN_USECS:
        raise OptionError(
            f"invalid {option} {text}: requested delays must be smaller than +/- 1000 millisecs"
        )
    return millis * 1000


def _check_writable(path: str, option: str) -> None:
    if not file_has_write_access(path):
        raise OptionError(
            f'{path} cannot be written to:\noption "{option} <fn>" must be to a file with write access'
        )


def _dump_settings(queue: _Arguments, option: str, limit: int, name: str) -> tuple[int, str]:
    if not queue.has_value():
        return limit, name
    text = queue.pop()
    try:
        number = parse_bounded_value(text, 0)
    except ValueError:
        name = text
    else:
        if number == 0:
            raise OptionError(
                f'invalid "{option} 0 {text}"; {option} n  needs a non-zero value of n'
            )
        limit = number
        if queue.has_value():
            name = queue.pop()
    _check_writable(name, option)
    return limit, name


def _db_range(text: str | None, option: str) -> tuple[float, float]:
    error = OptionError(
        f'invalid {option} {text}: db value must be "low" or "low:high", '
        "low < 0 and high > low are decibel gains"
    )
    if text is None:
        raise error
    low, end = _float_prefix(text)
    if end > 0 and text[end:end + 1] == ":":
        rest = text[end + 1:]
        high, end2 = _float_prefix(rest)
        if end2 > 0 and end2 == len(rest) and low < 0 and low < high:
            return low, high
    elif end > 0 and end == len(text) and low < 0:
        return low, 0.0
    raise error


_RPI_MESSAGE = (
    "*** -rpi* options do not apply to Raspberry Pi model 5, and have been removed\n"
    "     For models 3 and 4, use their equivalents, if needed:\n"
    '     -rpi   was equivalent to "-v4l2"\n'
    '     -rpifb was equivalent to "-v4l2 -vs kmssink"\n'
    '     -rpigl was equivalent to "-v4l2 -vs glimagesink"\n'
    '     -rpiwl was equivalent to "-v4l2 -vs waylandsink"\n'
    '     Option "-bt709" may also be needed for R Pi model 4B and earlier'
)

_T_MESSAGE = (
    'The option "-t" has been removed: it was a workaround for an  Avahi issue.\n'
    "The correct solution is to open network port UDP 5353 in the firewall for mDNS queries"
)


def parse_arguments(args: Iterable[str], options: Options | None = None) -> Options:
    """Apply command-line style arguments (without the program name) to ``options``.

    Parsing stops at a help or version request, which is recorded on the result.
    """
    if options is None:
        options = Options()
    queue = _Arguments(args)
    while queue:
        arg = queue.pop()
        if arg == "-allow":
            options.allowed_clients.append(queue.require_value(arg))
        elif arg == "-block":
            options.blocked_clients.append(queue.require_value(arg))
        elif arg == "-restrict":
            options.restrict_clients = not queue.take_if("no")
        elif arg == "-n":
            options.server_name = queue.require_value(arg)
        elif arg == "-nh":
            options.append_hostname = False
        elif arg == "-async":
            options.audio_sync = True
            if queue.take_if("no"):
                options.audio_sync = False
                continue
            delay = _sync_delay(queue, arg)
            if delay is not None:
                options.audio_delay_alac = delay
        elif arg == "-vsync":
            options.video_sync = True
            if queue.take_if("no"):
                options.video_sync = False
                continue
            delay = _sync_delay(queue, arg)
            if delay is not None:
                options.audio_delay_aac = delay
        elif arg == "-s":
            value = queue.require_value(arg)
            try:
                width, height, refresh = parse_display_settings(value)
            except ValueError:
                raise OptionError(
                    f'invalid "-s {value}"; -s wxh : max w,h=9999; -s wxh@r : max r=255'
                ) from None
            options.display_width, options.display_height = width, height
            if refresh is not None:
                options.refresh_rate = refresh
        elif arg == "-fps":
            value = queue.require_value(arg)
            try:
                options.max_fps = parse_bounded_value(value, 255)
            except ValueError:
                raise OptionError(
                    f'invalid "-fps {value}"; -fps n : max n=255, default n=30'
                ) from None
        elif arg == "-o":
            options.overscanned = True
        elif arg == "-f":
            value = queue.require_value(arg)
            try:
                options.flip = parse_videoflip(value)
            except ValueError:
                raise OptionError(
                    f'invalid "-f {value}" , unknown flip type, choices are H, V, I'
                ) from None
        elif arg == "-r":
            value = queue.require_value(arg)
            try:
                options.rotation = parse_videorotate(value)
            except ValueError:
                raise OptionError(
                    f'invalid "-r {value}" , unknown rotation  type, choices are R, L'
                ) from None
        elif arg == "-p":
            _apply_ports(queue, options)
        elif arg == "-m":
            if queue.has_value():
                value = queue.pop()
                if not validate_mac(value):
                    raise OptionError(
                        f'invalid mac address "{value}": address must have form '
                        '"xx:xx:xx:xx:xx:xx", x = 0-9, A-F or a-f'
                    )
                options.mac_address = value
                options.use_random_hw_addr = False
            else:
                options.use_random_hw_addr = True
        elif arg == "-a":
            options.use_audio = False
        elif arg == "-d":
            options.debug_log = not options.debug_log
        elif arg in ("-h", "--help", "-?", "-help"):
            options.show_help = True
            return options
        elif arg == "-v":
            options.show_version = True
            return options
        elif arg == "-vp":
            options.video_parser = queue.require_value(arg)
        elif arg == "-vd":
            options.video_decoder = queue.require_value(arg)
        elif arg == "-vc":
            options.video_converter = queue.require_value(arg)
        elif arg == "-vs":
            value = queue.require_value(arg)
            sink, space, rest = value.partition(" ")
            options.videosink = sink
            if space:
                options.videosink_options = space + rest
        elif arg == "-as":
            options.audiosink = queue.require_value(arg)
        elif arg == "-t":
            raise OptionError(_T_MESSAGE)
        elif arg == "-nc":
            options.new_window_closing_behavior = False
        elif arg == "-avdec":
            options.video_parser = "h264parse"
            options.video_decoder = "avdec_h264"
            options.video_converter = "videoconvert"
        elif arg == "-v4l2":
            options.video_decoder = "v4l2h264dec"
            options.video_converter = "v4l2convert"
        elif arg in ("-rpi", "-rpifb", "-rpigl", "-rpiwl"):
            raise OptionError(_RPI_MESSAGE)
        elif arg == "-fs":
            options.fullscreen = True
        elif arg == "-FPSdata":
            options.show_client_fps_data = True
        elif arg == "-reset":
            value = queue.require_any(arg)
            try:
                options.max_ntp_timeouts = parse_bounded_value(value, 0)
            except ValueError:
                raise OptionError(
                    f'invalid "-reset {value}"; -reset n must have n >= 0,  '
                    f"default n = {NTP_TIMEOUT_LIMIT}"
                ) from None
        elif arg == "-vdmp":
            options.dump_video = True
            options.video_dump_limit, options.video_dumpfile_name = _dump_settings(
                queue, arg, options.video_dump_limit, options.video_dumpfile_name
            )
        elif arg == "-admp":
            options.dump_audio = True
            options.audio_dump_limit, options.audio_dumpfile_name = _dump_settings(
                queue, arg, options.audio_dump_limit, options.audio_dumpfile_name
            )
        elif arg == "-ca":
            if not queue.has_value():
                raise OptionError(
                    "option -ca must be followed by a filename for cover-art output"
                )
            options.coverart_filename = queue.pop()
            _check_writable(options.coverart_filename, arg)
        elif arg == "-bt709":
            options.bt709_fix = True
        elif arg == "-srgb":
            options.srgb_fix = not queue.take_if("no")
        elif arg == "-nohold":
            options.nohold = True
        elif arg == "-al":
            shown = arg
            if queue.has_value():
                shown = queue.pop()
                value = _whole_float(shown)
                micros = None if value is None else _scaled(value, SECOND_IN_USECS)
                if micros is not None and 0 <= micros <= 10 * SECOND_IN_USECS:
                    options.audiodelay = micros
                    continue
            raise OptionError(
                f"invalid -al {shown}: value must be a decimal time offset in seconds, "
                "range [0,10]\n(like 5 or 4.8, which will be converted to a whole "
                "number of microseconds)"
            )
        elif arg == "-pin":
            options.setup_legacy_pairing = True
            options.require_password = True
            if queue.has_value():
                value = queue.pop()
                try:
                    options.pin = parse_bounded_value(value, 9999) + 10000
                except ValueError:
                    raise OptionError(
                        f'invalid "-pin {value}"; -pin nnnn : max nnnn=9999, (4 digits)'
                    ) from None
        elif arg == "-reg":
            options.registration_list = True
            options.pairing_register = ""
            if queue.has_value():
                options.pairing_register = queue.pop()
                _check_writable(options.pairing_register, "-key")
        elif arg == "-key":
            if queue.has_value():
                options.keyfile = queue.pop()
                _check_writable(options.keyfile, arg)
            else:
                options.keyfile = "0"
        elif arg == "-dacp":
            if queue.has_value():
                options.dacpfile = queue.pop()
                _check_writable(options.dacpfile, arg)
            else:
                options.dacpfile = (home_dir() or "") + "/.uxplay.dacp"
        elif arg == "-taper":
            options.taper_volume = True
        elif arg == "-db":
            options.db_low, options.db_high = _db_range(queue.peek(), arg)
            queue.pop()
        elif arg == "-hls":
            options.hls_support = True
        elif arg == "-h265":
            options.h265_support = True
        elif arg == "-nofreeze":
            options.nofreeze = True
        else:
            raise OptionError(f'unknown option {arg}, stopping (for help use option "-h")')
    return options


def _apply_ports(queue: _Arguments, options: Options) -> None:
    if not queue.has_value():
        options.tcp_ports = list(LEGACY_TCP_PORTS)
        options.udp_ports = list(LEGACY_UDP_PORTS)
        return
    value = queue.pop()
    option = "-p"
    if value in ("tcp", "udp"):
        option = f"-p {value}"
        text = queue.require_any(option)
    else:
        text = value
    try:
        ports = parse_ports(text, 3)
    except ValueError:
        raise OptionError(
            f'invalid "{option} {text}", all 3 ports must be in range '
            f"[{LOWEST_ALLOWED_PORT},{HIGHEST_PORT}]"
        ) from None
    if value == "udp":
        options.udp_ports = ports
    else:
        options.tcp_ports = ports
        if value != "tcp":
            options.udp_ports[1:] = ports[1:]


def tokenize_config_line(line: str) -> list[str]:
    """Split one configuration line into items; quoted items may hold spaces."""
    if line.startswith("#"):
        return []
    tokens: list[str] = []
    current: list[str] | None = None
    endchar = " "
    quoted = False
    for index, char in enumerate(line):
        if current is None:
            if char == " ":
                continue
            if char in "'\"":
                endchar, quoted, current = char, True, []
            else:
                endchar, quoted, current = " ", False, [char]
        elif char == endchar:
            if quoted and (
                (index > 0 and line[index - 1] == "\\")
                or (index + 1 < len(line) and line[index + 1] != " ")
            ):
                current.append(char)
                continue
            tokens.append("".join(current))
            current = None
        else:
            current.append(char)
    if current is not None:
        tokens.append("".join(current))
    return [token for token in tokens if token]


def read_config_file(path, options: Options | None = None) -> Options:
    """Apply the options in a configuration file: one option per line, no leading '-'."""
    if options is None:
        options = Options()
    path = os.fspath(path)
    arguments: list[str] = []
    try:
        with open(path, encoding="utf-8") as handle:
            print(f"UxPlay: reading configuration from  {path}")
            for line in handle:
                tokens = tokenize_config_line(line.rstrip("\n"))
                if tokens:
                    arguments.append("-" + tokens[0])
                    arguments.extend(tokens[1:])
    except OSError:
        print(f"UxPlay: failed to open configuration file at {path}", file=sys.stderr)
    if arguments:
        parse_arguments(arguments, options)
    return options


def find_config_file(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the first existing of $UXPLAYRC, ~/.uxplayrc and ~/.config/uxplayrc."""
    if environ is None:
        environ = os.environ
    explicit = environ.get("UXPLAYRC")
    if explicit and os.path.exists(explicit):
        return explicit
    home = home_dir(environ)
    if home:
        for candidate in (home + "/.uxplayrc", home + "/.config/uxplayrc"):
            if os.path.exists(candidate):
                return candidate
    return None


def help_text(program: str) -> str:
    """Return the usage text."""
    lines = [
        f"UxPlay {VERSION}: An open-source AirPlay mirroring server.",
        f"Usage: {program} [-n name] [-s wxh] [-p [n]] [(other options)]",
        "Options:",
        "-n name   Specify the network name of the AirPlay server",
        '-nh       Do not add "@hostname" at the end of AirPlay server name',
        "-h265     Support h265 (4K) video (with h265 versions of h264 plugins)",
        "-hls      Support HTTP Live Streaming (currently Youtube video only) ",
        "-pin[xxxx]Use a 4-digit pin code to control client access (default: no)",
        "          default pin is random: optionally use fixed pin xxxx",
        "-reg [fn] Keep a register in $HOME/.uxplay.register to verify returning",
        '          client pin-registration; (option: use file "fn" for this)',
        "-vsync [x]Mirror mode: sync audio to video using timestamps (default)",
        "          x is optional audio delay: millisecs, decimal, can be neg.",
        "-vsync no Switch off audio/(server)video timestamp synchronization ",
        "-async [x]Audio-Only mode: sync audio to client video (default: no)",
        "-async no Switch off audio/(client)video timestamp synchronization",
        "-db l[:h] Set minimum volume attenuation to l dB (decibels, negative);",
        "          optional: set maximum to h dB (+ or -) default: -30.0:0.0 dB",
        '-taper    Use a "tapered" AirPlay volume-control profile',
        "-s wxh[@r]Request to client for video display resolution [refresh_rate]",
        "          default 1920x1080[@60] (or 3840x2160[@60] with -h265 option)",
        '-o        Set display "overscanned" mode on (not usually needed)',
        "-fs       Full-screen (only works with X11, Wayland, VAAPI, D3D11)",
        "-p        Use legacy ports UDP 6000:6001:7011 TCP 7000:7001:7100",
        f"-p n      Use TCP and UDP ports n,n+1,n+2. range {LOWEST_ALLOWED_PORT}-{HIGHEST_PORT}",
        '          use "-p n1,n2,n3" to set each port, "n1,n2" for n3 = n2+1',
        '          "-p tcp n" or "-p udp n" sets TCP or UDP ports separately',
        "-avdec    Force software h264 video decoding with libav decoder",
        '-vp ...   Choose the GSteamer h264 parser: default "h264parse"',
        '-vd ...   Choose the GStreamer h264 decoder; default "decodebin"',
        "          choices: (software) avdec_h264; (hardware) v4l2h264dec,",
        "          nvdec, nvh264dec, vaapih64dec, vtdec,etc.",
        "          choices: avdec_h264,vaapih264dec,nvdec,nvh264dec,v4l2h264dec",
        '-vc ...   Choose the GStreamer videoconverter; default "videoconvert"',
        "          another choice when using v4l2h264dec: v4l2convert",
        '-vs ...   Choose the GStreamer videosink; default "autovideosink"',
        "          some choices: ximagesink,xvimagesink,vaapisink,glimagesink,",
        "          gtksink,waylandsink,osxvideosink,kmssink,d3d11videosink etc.",
        "-vs 0     Streamed audio only, with no video display window",
        "-v4l2     Use Video4Linux2 for GPU hardware h264 decoding",
        "-bt709    Sometimes needed for Raspberry Pi models using Video4Linux2 ",
        '-srgb     Display "Full range" [0-255] color, not "Limited Range"[16-235]',
        "          This is a workaround for a GStreamer problem, until it is fixed",
        "-srgb no  Disable srgb option (use when enabled by default: Linux, *BSD)",
        '-as ...   Choose the GStreamer audiosink; default "autoaudiosink"',
        "          some choices:pulsesink,alsasink,pipewiresink,jackaudiosink,",
        "          osssink,oss4sink,osxaudiosink,wasapisink,directsoundsink.",
        "-as 0     (or -a)  Turn audio off, streamed video only",
        "-al x     Audio latency in seconds (default 0.25) reported to client.",
        "-ca <fn>  In Airplay Audio (ALAC) mode, write cover-art to file <fn>",
        f"-reset n  Reset after 3n seconds client silence (default {NTP_TIMEOUT_LIMIT}, 0=never)",
        "-nofreeze Do NOT leave frozen screen in place after reset",
        "-nc       Do NOT Close video window when client stops mirroring",
        "-nohold   Drop current connection when new client connects.",
        '-restrict Restrict clients to those specified by "-allow <deviceID>"',
        "          UxPlay displays deviceID when a client attempts to connect",
        '          Use "-restrict no" for no client restrictions (default)',
        "-allow <i>Permit deviceID = <i> to connect if restrictions are imposed",
        "-block <i>Always block connections from deviceID = <i>",
        "-FPSdata  Show video-streaming performance reports sent by client.",
        "-fps n    Set maximum allowed streaming framerate, default 30",
        "-f {H|V|I}Horizontal|Vertical flip, or both=Inversion=rotate 180 deg",
        "-r {R|L}  Rotate 90 degrees Right (cw) or Left (ccw)",
        "-m [mac]  Set MAC address (also Device ID);use for concurrent UxPlays",
        "          if mac xx:xx:xx:xx:xx:xx is not given, a random MAC is used",
        '-key [fn] Store private key in $HOME/.uxplay.pem (or in file "fn")',
        "-dacp [fn]Export client DACP information to file $HOME/.uxplay.dacp",
        '          (option to use file "fn" instead); used for client remote',
        '-vdmp [n] Dump h264 video output to "fn.h264"; fn="videodump",change',
        '          with "-vdmp [n] filename". If [n] is given, file fn.x.h264',
        "          x=1,2,.. opens whenever a new SPS/PPS NAL arrives, and <=n",
        "          NAL units are dumped.",
        '-admp [n] Dump audio output to "fn.x.fmt", fmt ={aac, alac, aud}, x',
        '          =1,2,..; fn="audiodump"; change with "-admp [n] filename".',
        "          x increases when audio format changes. If n is given, <= n",
        '          audio packets are dumped. "aud"= unknown format.',
        "-d        Enable debug logging",
        "-v        Displays version information",
        "-h        Displays this help",
        "Startup options in $UXPLAYRC, ~/.uxplayrc, or ~/.config/uxplayrc are",
        "applied first (command-line options may modify them): format is one ",
        'option per line, no initial "-"; lines starting with "#" are ignored.',
    ]
    return "\n".join(lines) + "\n"