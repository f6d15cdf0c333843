# -*- coding: utf-8 -*-
"""
    ScrcpyHub
    ~~~~~~~~~~~~~~~~~~
    组件装配，事件订阅生命周期

    async with ScrcpyHub(collaborator, kvm) as hub:
        await hub.registry.refresh()
        await hub.orchestrator.connect('192.168.1.2:5555')

    Log:
        2026-10-20 0.3.1 Me2sY  下载失败经 SessionRegistry 队列结束下载状态

        2026-10-06 0.3.0 Me2sY  新增 文件推送 / APK 安装 / 命令执行

        2026-09-26 0.2.0 Me2sY  close 时确定性移除事件订阅

        2026-09-20 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.3.1'

__all__ = [
    'ScrcpyHub'
]

import pathlib
from typing import List

from loguru import logger

from scrcpyhub.core.capability import CapabilityDescriptor, CapabilityParser
from scrcpyhub.core.collaborator import (
    BinaryStatus, CommandOutput, DeviceCollaborator, FileResult, OptionsOutput
)
from scrcpyhub.core.config_store import ConfigStore
from scrcpyhub.core.errors import CollaboratorError, DownloadError, SessionError
from scrcpyhub.core.events import DownloadFailedEvent
from scrcpyhub.core.history import HistoryStore
from scrcpyhub.core.log_stream import LogStream
from scrcpyhub.core.orchestrator import ConnectionOrchestrator
from scrcpyhub.core.registry import DeviceRegistry
from scrcpyhub.core.session import SessionRegistry
from scrcpyhub.utils import KVManager


class ScrcpyHub:
    """
        Orchestrating context
    """

    LIST_CAMERAS = '--list-cameras'

    def __init__(
            self,
            collaborator: DeviceCollaborator,
            kvm: KVManager,
            log_window: int = LogStream.DEFAULT_WINDOW,
            default_record_path: str | None = None,
            **orchestrator_kwargs
    ):
        self.collaborator = collaborator

        self.log_stream = LogStream(log_window)
        self.config_store = ConfigStore(kvm, default_record_path=default_record_path)
        self.history = HistoryStore(kvm)

        self.registry = DeviceRegistry(
            collaborator, self.log_stream,
            path_provider=self.scrcpy_path,
            on_active_changed=self._on_active_changed,
        )

        self.orchestrator = ConnectionOrchestrator(
            collaborator, self.registry, self.log_stream, self.history,
            path_provider=self.scrcpy_path,
            **orchestrator_kwargs
        )

        self.sessions = SessionRegistry(
            on_download_complete=self._on_download_complete,
            on_check_binary=self.check_binary,
        )

        self.cameras: List[CapabilityDescriptor] = []
        self.binary_status = BinaryStatus(False, 'Checking...')

        self.is_open = False

    def __repr__(self):
        return f"ScrcpyHub > {self.registry} {self.sessions}"

    async def __aenter__(self) -> 'ScrcpyHub':
        self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def scrcpy_path(self) -> str | None:
        return self.config_store.config.scrcpy_path or None

    def open(self):
        """
            加载配置，订阅 collaborator 事件
        :return:
        """
        if self.is_open:
            return

        self.config_store.hydrate()
        if self.registry.active_device:
            self.config_store.sync_device(self.registry.active_device)

        self.sessions.start()
        self.collaborator.status_events.add(self.sessions.feed)
        self.collaborator.log_events.add(self.log_stream.append)

        self.is_open = True
        logger.info('ScrcpyHub opened')

    async def close(self):
        """
            移除事件订阅后再停止消费者
        :return:
        """
        if not self.is_open:
            return

        self.collaborator.status_events.remove(self.sessions.feed)
        self.collaborator.log_events.remove(self.log_stream.append)
        await self.sessions.close()

        self.is_open = False
        logger.info('ScrcpyHub closed')

    @property
    def active_device(self) -> str:
        return self.registry.active_device

    @property
    def session_running(self) -> bool:
        return self.sessions.is_running(self.registry.active_device)

    def _on_active_changed(self, device_id: str):
        self.config_store.sync_device(device_id)
        self.cameras = []

    async def _on_download_complete(self, path: str):
        await self.registry.refresh(path)

    async def check_binary(self, path: str | None = None) -> BinaryStatus:
        """
            scrcpy 是否可用
        :param path:
        :return:
        """
        try:
            self.binary_status = await self.collaborator.check_binary(path or self.scrcpy_path())
        except CollaboratorError as e:
            self.binary_status = BinaryStatus(False, f"Error: {e}")
        return self.binary_status

    async def download_binary(self) -> bool:
        try:
            await self.collaborator.download_binary()
        except (DownloadError, CollaboratorError) as e:
            logger.error(f"Download scrcpy failed => {e}")
            failed = DownloadFailedEvent(str(e))
            # queued behind the downloader's own progress events
            if self.sessions.is_started:
                self.sessions.feed(failed)
            else:
                await self.sessions.handle(failed)
            self.log_stream.append(f"Download Error: {e}")
            return False
        return True

    async def start_session(self) -> bool:
        """
            启动当前设备 Session，运行状态等待 status 事件确认
        :return:
        """
        config = self.config_store.config
        if not config.device:
            logger.warning('No device selected')
            return False

        self.log_stream.append(f"[SYSTEM] Initializing scrcpy session for {config.device}...")
        try:
            await self.collaborator.start_session(config)
        except CollaboratorError as e:
            err = SessionError(str(e))
            logger.error(f"Start session failed => {err}")
            self.log_stream.append(f"[ERROR] Failed to start scrcpy: {err}")
            return False
        return True

    async def stop_session(self, device_id: str | None = None) -> bool:
        device_id = device_id or self.registry.active_device
        if not device_id:
            return False

        try:
            await self.collaborator.stop_session(device_id)
        except CollaboratorError as e:
            logger.error(f"Stop session {device_id} failed => {SessionError(str(e))}")
            return False
        return True

    async def list_options(self, device_id: str, arg: str, path: str | None = None) -> OptionsOutput:
        """
            scrcpy --list-xxx，--list-cameras 时解析摄像头
        :param device_id:
        :param arg:
        :param path:
        :return:
        """
        self.log_stream.append(f"Running scrcpy {arg}...")
        try:
            res = await self.collaborator.list_options(device_id, arg, path or self.scrcpy_path())
        except CollaboratorError as e:
            self.log_stream.append(f"Error: {e}")
            return OptionsOutput(False, str(e))

        if res.output:
            self.log_stream.extend_lines(res.output)

            if arg == self.LIST_CAMERAS:
                cameras = CapabilityParser.parse(res.output)
                if cameras:
                    self.cameras = cameras
                else:
                    # keep the last good scan
                    self.log_stream.append('[SYSTEM] No cameras parsed from output. Please check the console above.')

        return res

    async def push_file(self, device_id: str, file_path: str, path: str | None = None) -> FileResult:
        self.log_stream.append(f"[SYSTEM] Pushing file to {device_id}: {file_path}...")
        try:
            res = await self.collaborator.push_file(device_id, file_path, path or self.scrcpy_path())
        except CollaboratorError as e:
            self.log_stream.append(f"Error: {e}")
            return FileResult(False, str(e))
        self.log_stream.append(f"[ADB] {res.message}")
        return res

    async def install_package(self, device_id: str, file_path: str, path: str | None = None) -> FileResult:
        self.log_stream.append(f"[SYSTEM] Installing APK on {device_id}: {file_path}...")
        try:
            res = await self.collaborator.install_package(device_id, file_path, path or self.scrcpy_path())
        except CollaboratorError as e:
            self.log_stream.append(f"Error: {e}")
            return FileResult(False, str(e))
        self.log_stream.append(f"[ADB] {res.message}")
        return res

    async def handle_file(self, file_path: str) -> FileResult | None:
        """
            .apk 安装，其余推送至 Download
        :param file_path:
        :return:
        """
        if not self.registry.active_device:
            self.log_stream.append('[WARN] No device selected for file operation.')
            return None

        if pathlib.Path(file_path).suffix.lower() == '.apk':
            return await self.install_package(self.registry.active_device, file_path)
        return await self.push_file(self.registry.active_device, file_path)

    async def run_command(self, command: str, path: str | None = None) -> CommandOutput:
        lower = command.strip().lower()
        prefix = '' if lower.startswith('scrcpy') or lower.startswith('adb') else 'adb '
        self.log_stream.append(f"> {prefix}{command}")

        try:
            res = await self.collaborator.run_command(
                self.registry.active_device or None, command, path or self.scrcpy_path()
            )
        except CollaboratorError as e:
            self.log_stream.append(f"[ERROR] Command failed: {e}")
            return CommandOutput(False, '', stderr=str(e))

        if res.stdout:
            self.log_stream.extend_lines(res.stdout.strip())
        if res.stderr:
            tag = (res.binary or 'err').upper()
            self.log_stream.append(*[f"[{tag}] {_}" for _ in res.stderr.strip().split('\n')])
        return res
