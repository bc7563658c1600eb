import io
import platform

import pytest

from airhost.cli import (
    BT709_FIX,
    D3D11_WINDOWED,
    SRGB_FIX,
    LogLevel,
    Logger,
    resolve_settings,
    main,
)
from airhost.options import VERSION, Options, parse_hw_addr, validate_mac
from airhost.service import airplay_features

MAC = "02:00:00:00:00:01"


def make_options(**kwargs):
    kwargs.setdefault("append_hostname", False)
    kwargs.setdefault("mac_address", MAC)
    return Options(**kwargs)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("UXPLAYRC", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOMEDIR", raising=False)
    return tmp_path


def test_logger_error_prefix():
    stream = io.StringIO()
    logger = Logger(LogLevel.INFO, stream)
    assert logger.log(LogLevel.ERR, "boom") is True
    assert stream.getvalue() == "*** ERROR: boom\n"


def test_logger_warning_prefix_and_filter():
    stream = io.StringIO()
    logger = Logger(LogLevel.INFO, stream)
    logger.log(LogLevel.WARNING, "careful")
    assert logger.log(LogLevel.DEBUG, "hidden") is False
    assert stream.getvalue() == "*** WARNING: careful\n"


def test_logger_debug_level_shows_debug():
    stream = io.StringIO()
    logger = Logger(LogLevel.DEBUG, stream)
    logger.log(LogLevel.DEBUG, "detail")
    assert stream.getvalue() == "detail\n"


def test_video_disabled():
    settings = resolve_settings(make_options(videosink="0", videosink_options=" x=1"))
    assert settings.use_video is False
    assert settings.videosink == "fakesink"
    assert settings.videosink_options == ""
    assert settings.max_fps == 1
    assert (LogLevel.INFO, "video_disabled") in settings.notes


def test_audio_disabled_by_sink_zero():
    settings = resolve_settings(make_options(audiosink="0", dump_audio=True))
    assert settings.use_audio is False
    assert settings.dump_audio is False


def test_bt709_fix_appended_to_parser():
    settings = resolve_settings(make_options(bt709_fix=True))
    assert settings.video_parser == "h264parse ! " + BT709_FIX


def test_srgb_fix_wraps_converter():
    settings = resolve_settings(make_options(srgb_fix=True))
    assert settings.video_converter == "videoconvert" + SRGB_FIX + "videoconvert"


def test_srgb_fix_ignored_without_video():
    settings = resolve_settings(make_options(srgb_fix=True, videosink="0"))
    assert settings.video_converter == "videoconvert"


def test_fullscreen_waylandsink():
    settings = resolve_settings(make_options(fullscreen=True, videosink="waylandsink"))
    assert settings.videosink_options.endswith(" fullscreen=true")


def test_d3d11_windowed_toggle():
    settings = resolve_settings(make_options(videosink="d3d11videosink"))
    assert settings.videosink_options == D3D11_WINDOWED


def test_keyfile_and_register_under_home(tmp_path):
    options = make_options(require_password=True, registration_list=True, keyfile="0")
    settings = resolve_settings(options, str(tmp_path))
    assert settings.keyfile == str(tmp_path) + "/.uxplay.pem"
    assert settings.pairing_register == str(tmp_path) + "/.uxplay.register"
    assert settings.register.path == settings.pairing_register


def test_keyfile_without_home_reports_error():
    settings = resolve_settings(make_options(require_password=True, keyfile="0"), None)
    assert settings.keyfile == "0"
    assert any(level == LogLevel.ERR for level, _ in settings.notes)


def test_hostname_appended(monkeypatch):
    monkeypatch.setattr(platform, "node", lambda: "den")
    settings = resolve_settings(make_options(append_hostname=True, server_name="Box"))
    assert settings.server_name == "Box@den"


def test_user_mac_gives_hw_addr():
    settings = resolve_settings(make_options())
    assert settings.mac_address == MAC
    assert settings.hw_addr == parse_hw_addr(MAC)


def test_random_mac_is_local_unicast():
    settings = resolve_settings(make_options(mac_address="", use_random_hw_addr=True))
    assert validate_mac(settings.mac_address)
    assert settings.hw_addr[0] & 0b11 == 0b10
    assert len(settings.hw_addr) == 6


def test_display_defaults():
    assert (resolve_settings(make_options()).display_width,
            resolve_settings(make_options()).display_height) == (1920, 1080)
    h265 = resolve_settings(make_options(h265_support=True))
    assert (h265.display_width, h265.display_height) == (3840, 2160)
    given = resolve_settings(make_options(display_width=1280, display_height=720))
    assert (given.display_width, given.display_height) == (1280, 720)


def test_features_follow_options():
    settings = resolve_settings(make_options(hls_support=True, setup_legacy_pairing=True))
    assert settings.features == airplay_features(True, False, True)
    assert settings.features & 1 and settings.features & (1 << 4)


def test_policy_from_options():
    settings = resolve_settings(
        make_options(restrict_clients=True, allowed_clients=["a"], blocked_clients=["b"])
    )
    assert settings.policy.admit("a") is True
    assert settings.policy.admit("c") is False


def test_ports_note():
    options = make_options(tcp_ports=[7100, 7000, 7001], udp_ports=[7011, 6001, 6000])
    settings = resolve_settings(options)
    assert (LogLevel.INFO, "using network ports UDP 7011 6001 6000 TCP 7100 7000 7001") in settings.notes


def test_main_help(clean_env, capsys):
    assert main(["-h"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_main_version(clean_env, capsys):
    assert main(["-v"]) == 0
    assert VERSION in capsys.readouterr().out


def test_main_unknown_option(clean_env, capsys):
    assert main(["-bogus"]) == 1
    assert "unknown option -bogus" in capsys.readouterr().err


def test_main_reads_config_file(clean_env, capsys):
    (clean_env / ".uxplayrc").write_text("# comment\nvs 0\nnh\n")
    assert main(["-m", MAC]) == 0
    out = capsys.readouterr().out
    assert "reading configuration from" in out
    assert "video_disabled" in out
    assert f"using user-set MAC address {MAC}" in out


def test_main_bad_config_option(clean_env, capsys):
    (clean_env / ".uxplayrc").write_text("nonsense\n")
    assert main([]) == 1
    assert "unknown option -nonsense" in capsys.readouterr().err


def test_main_loads_pairing_register(clean_env, capsys):
    register = clean_env / "reg.txt"
    register.write_text("A" * 44 + ",id,name\n")
    assert main(["-nh", "-m", MAC, "-pin", "-reg", str(register)]) == 0
    assert "lists 1 pin-registered clients" in capsys.readouterr().out