"""pytest configuration and shared fakes for scrcpyhub tests."""

from __future__ import annotations

import asyncio

import pytest

from scrcpyhub.core.collaborator import (
    BinaryStatus,
    CommandOutput,
    ConnectionAttempt,
    DeviceCollaborator,
    DeviceListResult,
    FileResult,
    OptionsOutput,
)
from scrcpyhub.core.events import DownloadingEvent, SessionStatus
from scrcpyhub.core.history import HistoryStore
from scrcpyhub.core.log_stream import LogStream
from scrcpyhub.core.registry import DeviceRegistry
from scrcpyhub.utils import KVManager


class FakeCollaborator(DeviceCollaborator):
    """Scripted collaborator that records every call."""

    def __init__(self):
        super().__init__()
        self.calls: list[tuple] = []

        self.devices: list[str] = []
        self.list_error: str | None = None
        self.list_exception: Exception | None = None
        self.list_gate: asyncio.Event | None = None

        self.connect_results: list[ConnectionAttempt] = []
        self.connect_gate: asyncio.Event | None = None
        self.pair_result = ConnectionAttempt(True, "Successfully paired to 10.0.0.2:37000")
        self.pair_exception: Exception | None = None

        self.options_output = OptionsOutput(True, "")
        self.binary_status = BinaryStatus(True, "Scrcpy Ready")
        self.start_exception: Exception | None = None
        self.command_output = CommandOutput(True, "adb")
        self.download_exception: Exception | None = None

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def list_devices(self, path=None):
        self.calls.append(("list_devices", path))
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.list_exception is not None:
            raise self.list_exception
        if self.list_error:
            return DeviceListResult([], self.list_error)
        return DeviceListResult(list(self.devices))

    async def connect(self, endpoint, path=None):
        self.calls.append(("connect", endpoint, path))
        if self.connect_gate is not None:
            await self.connect_gate.wait()
        if self.connect_results:
            return self.connect_results.pop(0)
        return ConnectionAttempt(True, f"connected to {endpoint}")

    async def disconnect(self, endpoint, path=None):
        self.calls.append(("disconnect", endpoint, path))

    async def pair(self, endpoint, code, path=None):
        self.calls.append(("pair", endpoint, code, path))
        if self.pair_exception is not None:
            raise self.pair_exception
        return self.pair_result

    async def list_options(self, device, arg, path=None):
        self.calls.append(("list_options", device, arg, path))
        return self.options_output

    async def start_session(self, config):
        self.calls.append(("start_session", config.device))
        if self.start_exception is not None:
            raise self.start_exception
        self.emit_status(SessionStatus(config.device, True))

    async def stop_session(self, device):
        self.calls.append(("stop_session", device))
        self.emit_status(SessionStatus(device, False))

    async def push_file(self, device, file_path, path=None):
        self.calls.append(("push_file", device, file_path))
        return FileResult(True, "File pushed to Downloads")

    async def install_package(self, device, file_path, path=None):
        self.calls.append(("install_package", device, file_path))
        return FileResult(True, "Success")

    async def run_command(self, device, command, path=None):
        self.calls.append(("run_command", device, command))
        return self.command_output

    async def check_binary(self, path=None):
        self.calls.append(("check_binary", path))
        return self.binary_status

    async def download_binary(self):
        self.calls.append(("download_binary",))
        self.emit_status(DownloadingEvent("Extracting binaries..."))
        if self.download_exception is not None:
            raise self.download_exception

    async def kill_server(self, path=None):
        self.calls.append(("kill_server", path))


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake():
    return FakeCollaborator()


@pytest.fixture
def kvm(tmp_path):
    return KVManager("test", db_path=tmp_path / "kvm_test.db")


@pytest.fixture
def log_stream():
    return LogStream()


@pytest.fixture
def history(kvm):
    return HistoryStore(kvm)


@pytest.fixture
def registry(fake, log_stream):
    return DeviceRegistry(fake, log_stream)


@pytest.fixture
def sleeper():
    return SleepRecorder()
