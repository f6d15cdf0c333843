"""Tests for SessionConfig and scrcpy argument generation."""

from __future__ import annotations

import pathlib

import pytest

from scrcpyhub.core.args_cls import SessionConfig


def _value_after(args, flag):
    return args[args.index(flag) + 1]


class TestSessionConfig:
    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            SessionConfig(session_mode="hologram")

    def test_load_ignores_unknown(self):
        config = SessionConfig.load(device="abc", legacy_flag=True)
        assert config.device == "abc"

    def test_load_resets_unsupported_mode(self):
        config = SessionConfig.load(session_mode="hologram", fps=30)
        assert config.session_mode == SessionConfig.MODE_MIRROR
        assert config.fps == 30

    def test_dump_round_trips(self):
        config = SessionConfig(device="abc", bitrate=16)
        assert SessionConfig.load(**config.dump()) == config

    def test_network_device(self):
        assert SessionConfig(device="192.168.1.4:5555").is_network_device
        assert not SessionConfig(device="R58M123ABC").is_network_device

    def test_record_file(self):
        path = SessionConfig(device="10.0.0.1:5555", record_path="/videos").record_file()
        assert path.parent == pathlib.Path("/videos")
        assert path.name.startswith("scrcpy_10.0.0.1-5555_")
        assert path.suffix == ".mkv"

    def test_record_file_fallback(self):
        path = SessionConfig(device="abc").record_file("/fallback")
        assert path.parent == pathlib.Path("/fallback")


class TestToArgs:
    def test_mirror_defaults(self):
        args = SessionConfig(device="abc").to_args()
        assert args[:2] == ["-s", "abc"]
        assert "--video-codec=h264" in args
        assert _value_after(args, "--video-bit-rate") == "8M"
        assert _value_after(args, "--max-fps") == "60"
        assert "--max-size" not in args
        assert "--no-audio" not in args

    def test_mirror_options(self):
        args = SessionConfig(
            device="abc", codec="h265", res="1024", rotation="90",
            audio_enabled=False, stay_awake=True, turn_off=True,
            always_on_top=True, fullscreen=True, borderless=True,
        ).to_args()
        assert "--video-codec=h265" in args
        assert _value_after(args, "--max-size") == "1024"
        assert _value_after(args, "--orientation") == "90"
        for flag in ("--no-audio", "--stay-awake", "--turn-screen-off", "--no-power-on",
                     "--always-on-top", "--fullscreen", "--window-borderless"):
            assert flag in args

    def test_camera_mode(self):
        args = SessionConfig(
            device="abc", session_mode="camera", camera_id="1", camera_ar="16:9",
            camera_high_speed=True, fps=30, stay_awake=True,
        ).to_args()
        assert "--video-source=camera" in args
        assert "--camera-id=1" in args
        assert "--camera-ar=16:9" in args
        assert "--camera-high-speed" in args
        assert _value_after(args, "--camera-fps") == "30"
        assert "--max-fps" not in args
        assert "--stay-awake" not in args

    def test_camera_facing_without_id(self):
        args = SessionConfig(device="abc", session_mode="camera", camera_facing="front").to_args()
        assert "--camera-facing=front" in args

    def test_desktop_mode(self):
        args = SessionConfig(
            device="abc", session_mode="desktop", vd_width=2560, vd_height=1440, vd_dpi=320
        ).to_args()
        assert "--new-display=2560x1440/320" in args
        assert "--video-buffer=100" in args

    def test_otg_input(self):
        args = SessionConfig(device="abc", otg_enabled=True).to_args()
        assert "--keyboard=uhid" in args
        assert "--mouse=uhid" in args
        assert "--otg" not in args

    def test_otg_pure_usb(self):
        args = SessionConfig(device="R58M123ABC", otg_enabled=True, otg_pure=True).to_args()
        assert args == ["-s", "R58M123ABC", "--video-codec=h264", "--otg"]

    def test_otg_pure_network(self):
        args = SessionConfig(device="10.0.0.1:5555", otg_enabled=True, otg_pure=True).to_args()
        assert "--otg" not in args
        assert "--no-video" in args
        assert "--video-bit-rate" not in args

    def test_record(self):
        args = SessionConfig(device="abc", record=True, record_path="/videos").to_args()
        record = [a for a in args if a.startswith("--record=")]
        assert len(record) == 1
        assert record[0].startswith("--record=" + str(pathlib.Path("/videos")))

    def test_describe(self):
        lines = SessionConfig(device="abc", session_mode="camera").describe()
        assert lines[0] == "[SYSTEM] Starting Camera Mode session..."
        assert lines[1] == "[SYSTEM] Target: abc | Config: Original @ 8Mbps, 60fps"
