"""Start-up of the AirPlay server: logging, option resolution and the command entry point."""

from __future__ import annotations

import enum
import logging
import os
import platform
import random
import sys
import uuid
from dataclasses import dataclass, field
from typing import Sequence, TextIO

from .options import (
    VERSION,
    OptionError,
    Options,
    find_config_file,
    help_text,
    home_dir,
    parse_arguments,
    parse_hw_addr,
    random_mac,
    read_config_file,
)
from .service import ClientPolicy, PairingRegister, airplay_features, features_text

BT709_FIX = 'capssetter caps="video/x-h264, colorimetry=bt709"'
SRGB_FIX = " ! video/x-raw,colorimetry=sRGB,format=RGB  ! "
D3D11_FULLSCREEN = (
    " fullscreen-toggle-mode=GST_D3D11_WINDOW_FULLSCREEN_TOGGLE_MODE_PROPERTY fullscreen=true "
)
D3D11_WINDOWED = " fullscreen-toggle-mode=GST_D3D11_WINDOW_FULLSCREEN_TOGGLE_MODE_ALT_ENTER "


class LogLevel(enum.IntEnum):
    """Message severities; lower values are more severe."""

    ERR = 3
    WARNING = 4
    INFO = 6
    DEBUG = 7


@dataclass
class Logger:
    """Writes messages at or above a severity threshold to a text stream."""

    level: int = LogLevel.INFO
    stream: TextIO | None = None

    def log(self, level: int, message: str) -> bool:
        """Write ``message`` if ``level`` passes the threshold; return True if written."""
        if level > self.level:
            return False
        if level <= LogLevel.ERR:
            prefix = "*** ERROR: "
        elif level == LogLevel.WARNING:
            prefix = "*** WARNING: "
        else:
            prefix = ""
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(f"{prefix}{message}\n")
        stream.flush()
        return True


class _LoggingBridge(logging.Handler):
    """Forwards records of the package's modules to a Logger."""

    def __init__(self, target: Logger):
        super().__init__(logging.DEBUG)
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.ERROR:
            level = LogLevel.ERR
        elif record.levelno >= logging.WARNING:
            level = LogLevel.WARNING
        elif record.levelno >= logging.INFO:
            level = LogLevel.INFO
        else:
            level = LogLevel.DEBUG
        self.target.log(level, record.getMessage())


@dataclass
class Settings:
    """The server configuration after defaults and interdependent options are applied."""

    server_name: str
    log_level: int
    use_audio: bool
    use_video: bool
    dump_audio: bool
    dump_video: bool
    audiosink: str
    videosink: str
    videosink_options: str
    video_parser: str
    video_decoder: str
    video_converter: str
    close_window: bool
    display_width: int
    display_height: int
    refresh_rate: int
    max_fps: int
    overscanned: bool
    keyfile: str
    pairing_register: str
    mac_address: str
    hw_addr: bytes
    features: int
    policy: ClientPolicy
    register: PairingRegister
    notes: list[tuple[int, str]] = field(default_factory=list)


def _system_mac() -> str:
    node = uuid.getnode()
    if (node >> 40) & 1:
        # uuid.getnode() falls back to a random multicast address.
        return ""
    return ":".join(f"{(node >> shift) & 0xFF:02x}" for shift in range(40, -8, -8))


def resolve_settings(options: Options, home: str | None = None) -> Settings:
    """Combine parsed options into the settings the server runs with."""
    notes: list[tuple[int, str]] = []

    def info(message: str) -> None:
        notes.append((LogLevel.INFO, message))

    use_audio = options.use_audio
    dump_audio = options.dump_audio
    if options.audiosink == "0":
        use_audio = False
        dump_audio = False
    if options.dump_video:
        if options.video_dump_limit > 0:
            info(f'dump video using "-vdmp {options.video_dump_limit} {options.video_dumpfile_name}"')
        else:
            info(f'dump video using "-vdmp {options.video_dumpfile_name}"')
    if dump_audio:
        if options.audio_dump_limit > 0:
            info(f'dump audio using "-admp {options.audio_dump_limit} {options.audio_dumpfile_name}"')
        else:
            info(f'dump audio using "-admp {options.audio_dumpfile_name}"')

    close_window = options.new_window_closing_behavior
    if sys.platform == "darwin":
        info("macOS detected: using -nc option as workaround for GStreamer problem")
        close_window = False

    use_video = True
    videosink = options.videosink
    videosink_options = options.videosink_options
    max_fps = options.max_fps
    if videosink == "0":
        use_video = False
        videosink = "fakesink"
        videosink_options = ""
        info("video_disabled")
        max_fps = 1

    if options.fullscreen and use_video and videosink in ("waylandsink", "vaapisink"):
        videosink_options += " fullscreen=true"

    if videosink == "d3d11videosink" and not videosink_options and use_video:
        videosink_options += D3D11_FULLSCREEN if options.fullscreen else D3D11_WINDOWED
        info(
            "d3d11videosink is being used with option fullscreen-toggle-mode=alt-enter\n"
            "Use Alt-Enter key combination to toggle into/out of full-screen mode"
        )

    video_parser = options.video_parser
    if options.bt709_fix and use_video:
        video_parser += " ! " + BT709_FIX

    video_converter = options.video_converter
    if options.srgb_fix and use_video:
        video_converter = video_converter + SRGB_FIX + video_converter

    pairing_register = options.pairing_register
    if options.require_password and options.registration_list and not pairing_register and home:
        pairing_register = home + "/.uxplay.register"

    keyfile = options.keyfile
    if options.require_password and keyfile == "0":
        if home:
            keyfile = home + "/.uxplay.pem"
        else:
            notes.append((
                LogLevel.ERR,
                "could not determine $HOME: public key wiil not be saved, "
                "and so will not be persistent",
            ))
    if keyfile:
        info(f"public key storage (for persistence) is in {keyfile}")

    server_name = options.server_name
    if options.append_hostname:
        hostname = platform.node()
        if hostname:
            server_name = f"{server_name}@{hostname}"

    if not use_audio:
        info("audio_disabled")

    udp, tcp = options.udp_ports, options.tcp_ports
    if udp[0]:
        info(
            "using network ports UDP %d %d %d TCP %d %d %d"
            % (udp[0], udp[1], udp[2], tcp[0], tcp[1], tcp[2])
        )

    mac_address = options.mac_address
    if not options.use_random_hw_addr:
        if not mac_address:
            mac_address = _system_mac()
            info(f"using system MAC address {mac_address}")
        else:
            info(f"using user-set MAC address {mac_address}")
    if not mac_address:
        mac_address = random_mac(random.Random())
        info(f"using randomly-generated MAC address {mac_address}")

    if options.coverart_filename:
        info(f"any AirPlay audio cover-art will be written to file  {options.coverart_filename}")

    width, height = options.display_width, options.display_height
    if not width and not height:
        width, height = (3840, 2160) if options.h265_support else (1920, 1080)

    return Settings(
        server_name=server_name,
        log_level=LogLevel.DEBUG if options.debug_log else LogLevel.INFO,
        use_audio=use_audio,
        use_video=use_video,
        dump_audio=dump_audio,
        dump_video=options.dump_video,
        audiosink=options.audiosink,
        videosink=videosink,
        videosink_options=videosink_options,
        video_parser=video_parser,
        video_decoder=options.video_decoder,
        video_converter=video_converter,
        close_window=close_window,
        display_width=width,
        display_height=height,
        refresh_rate=options.refresh_rate,
        max_fps=max_fps,
        overscanned=options.overscanned,
        keyfile=keyfile,
        pairing_register=pairing_register,
        mac_address=mac_address,
        hw_addr=parse_hw_addr(mac_address),
        features=airplay_features(
            options.hls_support, options.h265_support, options.setup_legacy_pairing
        ),
        policy=ClientPolicy.from_lists(
            options.allowed_clients, options.blocked_clients, options.restrict_clients
        ),
        register=PairingRegister(
            path=pairing_register or None, enabled=options.registration_list
        ),
        notes=notes,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Read the configuration file and arguments, then report the resolved server setup."""
    if argv is None:
        argv = sys.argv[1:]
    program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "uxplay"

    try:
        options = Options()
        config_file = find_config_file()
        if config_file:
            read_config_file(config_file, options)
        if not (options.show_help or options.show_version):
            parse_arguments(argv, options)
    except OptionError as exc:
        print(exc, file=sys.stderr)
        return 1

    if options.show_help:
        sys.stdout.write(help_text(program))
        return 0
    if options.show_version:
        print(f'UxPlay version {VERSION}; for help, use option "-h"')
        return 0

    logger = Logger(LogLevel.DEBUG if options.debug_log else LogLevel.INFO)
    bridge = _LoggingBridge(logger)
    package_log = logging.getLogger(__package__ or "airhost")
    package_log.addHandler(bridge)
    previous_level = package_log.level
    package_log.setLevel(logging.DEBUG)
    try:
        logger.log(
            LogLevel.INFO,
            f"UxPlay {VERSION}: An Open-Source AirPlay mirroring and audio-streaming server.",
        )
        try:
            settings = resolve_settings(options, home_dir())
        except ValueError as exc:
            logger.log(LogLevel.ERR, str(exc))
            return 1
        for level, message in settings.notes:
            logger.log(level, message)
        if options.require_password and options.registration_list:
            settings.register.load()
        logger.log(
            LogLevel.DEBUG,
            'advertised AirPlay service with "Features" code = '
            f"{features_text(settings.features)}",
        )
        return 0
    finally:
        package_log.removeHandler(bridge)
        package_log.setLevel(previous_level)