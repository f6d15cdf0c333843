"""Tests for CapabilityParser: modern and legacy camera listings."""

from __future__ import annotations

from scrcpyhub.core.capability import CapabilityDescriptor, CapabilityParser


MODERN_OUTPUT = """[server] INFO: List of cameras:
    --camera-id=0    (back, 4080x3060, fps=[15, 20, 24, 30])
    --camera-id=1    (front, 3264x2448, fps=[15, 20, 24, 30])
"""

LEGACY_OUTPUT = """INFO: List of cameras:
    - [0] (3264x2448) back, macro\r
    - [1] (1920x1080)
"""


class TestCapabilityParser:
    def test_modern_listing(self):
        cameras = CapabilityParser.parse(MODERN_OUTPUT)
        assert cameras == [
            CapabilityDescriptor("0", "0: back, 4080x3060, fps=[15, 20, 24, 30]"),
            CapabilityDescriptor("1", "1: front, 3264x2448, fps=[15, 20, 24, 30]"),
        ]

    def test_legacy_listing(self):
        cameras = CapabilityParser.parse(LEGACY_OUTPUT)
        assert cameras[0] == CapabilityDescriptor("0", "0: back, macro (3264x2448)")

    def test_legacy_without_metadata(self):
        assert CapabilityParser.parse_line("[1] (1920x1080)") == CapabilityDescriptor(
            "1", "1: Camera (1920x1080)"
        )

    def test_legacy_without_dash(self):
        descriptor = CapabilityParser.parse_line("  [2] (640x480) external  ")
        assert descriptor.id == "2"
        assert descriptor.name == "2: external (640x480)"

    def test_unmatched_lines_skipped(self):
        raw = "scrcpy 3.1 <https://github.com/Genymobile/scrcpy>\nERROR: no camera\n\n"
        assert CapabilityParser.parse(raw) == []

    def test_parse_is_idempotent(self):
        raw = MODERN_OUTPUT + LEGACY_OUTPUT
        assert CapabilityParser.parse(raw) == CapabilityParser.parse(raw)

    def test_mixed_output_keeps_order(self):
        ids = [c.id for c in CapabilityParser.parse(LEGACY_OUTPUT + MODERN_OUTPUT)]
        assert ids == ["0", "1", "0", "1"]
