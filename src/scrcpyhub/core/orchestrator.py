# -*- coding: utf-8 -*-
"""
    ConnectionOrchestrator
    ~~~~~~~~~~~~~~~~~~
    无线配对 / 连接 / 重连

    connect 状态:
        IDLE -> CONNECTING -> SUCCESS
                           -> RETRY_PENDING -> CONNECTING -> SUCCESS | FAILED
                           -> FAILED

    Log:
        2026-10-04 0.3.0 Me2sY  新增 auto_connect，按历史记录重连

        2026-09-27 0.2.0 Me2sY  新增 reset_transport (Kill ADB)

        2026-09-19 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.3.0'

__all__ = [
    'ConnectState', 'ConnectionOrchestrator'
]

import asyncio
from enum import Enum, unique
from typing import Awaitable, Callable, List

from loguru import logger

from scrcpyhub.core.collaborator import ConnectionAttempt, DeviceCollaborator
from scrcpyhub.core.errors import CollaboratorError, DeviceConnectionError, PairingError
from scrcpyhub.core.history import HistoryStore
from scrcpyhub.core.log_stream import LogStream
from scrcpyhub.core.registry import DeviceRegistry


RETRY_SETTLE_DELAY = 0.5
CONNECT_SETTLE_DELAY = 1.0


@unique
class ConnectState(Enum):
    IDLE = 'idle'
    CONNECTING = 'connecting'
    RETRY_PENDING = 'retry_pending'
    SUCCESS = 'success'
    FAILED = 'failed'


class ConnectionOrchestrator:
    """
        Drives adb pair/connect against the collaborator
    """

    TRANSIENT_FAILURES = ('failed to connect', 'cannot connect')
    PROTOCOL_FAULT = 'protocol fault'

    TIP_PROTOCOL_FAULT = '[TIP] Protocol fault usually means the ADB server is stuck. Try resetting the ADB server.'
    TIP_STALE_PORT = '[TIP] Port might be stale. Try resetting the ADB server to refresh discovery.'

    def __init__(
            self,
            collaborator: DeviceCollaborator,
            registry: DeviceRegistry,
            log_stream: LogStream,
            history: HistoryStore,
            path_provider: Callable[[], str | None] = None,
            retry_delay: float = RETRY_SETTLE_DELAY,
            settle_delay: float = CONNECT_SETTLE_DELAY,
            sleep: Callable[[float], Awaitable] = asyncio.sleep,
    ):
        self.collaborator = collaborator
        self.registry = registry
        self.log_stream = log_stream
        self.history = history
        self.path_provider = path_provider or (lambda: None)

        self.retry_delay = retry_delay
        self.settle_delay = settle_delay
        self.sleep = sleep

        self.state = ConnectState.IDLE
        self.last_error: PairingError | DeviceConnectionError | None = None

    def __repr__(self):
        return f"ConnectionOrchestrator > {self.state.value}"

    @classmethod
    def is_transient(cls, message: str) -> bool:
        return isinstance(message, str) and any(_ in message for _ in cls.TRANSIENT_FAILURES)

    async def pair(self, ip: str, code: str, path: str | None = None) -> ConnectionAttempt:
        """
            adb pair，失败不重试
        :param ip:
        :param code:
        :param path:
        :return:
        """
        path = path or self.path_provider()

        try:
            res = await self.collaborator.pair(ip, code, path)
        except CollaboratorError as e:
            logger.error(f"Pairing {ip} error => {e}")
            self.last_error = PairingError(str(e))
            self.log_stream.append(f"[ERROR] Pairing error: {e}")
            return ConnectionAttempt(False, str(e))

        if res.success:
            logger.success(f"Paired with {ip}")
            self.last_error = None
            self.log_stream.append(f"[SYSTEM] Successfully paired with {ip}")
            await self.registry.refresh(path, silent=True)
        else:
            logger.warning(f"Pairing {ip} failed => {res.message}")
            self.last_error = PairingError(res.message)
            msgs = [f"[SYSTEM] Pairing failed: {res.message}"]
            if isinstance(res.message, str) and self.PROTOCOL_FAULT in res.message:
                msgs.append(self.TIP_PROTOCOL_FAULT)
            self.log_stream.append(*msgs)

        return res

    async def _attempt(self, ip: str, path: str | None) -> ConnectionAttempt:
        """
            最多两次 connect，首次瞬时失败时先 disconnect 清理
        """
        self.state = ConnectState.CONNECTING
        res = await self.collaborator.connect(ip, path)

        if not res.success and self.is_transient(res.message):
            self.state = ConnectState.RETRY_PENDING
            self.log_stream.append('[SYSTEM] Connection failed, retrying with cleanup...')
            await self.collaborator.disconnect(ip, path)
            await self.sleep(self.retry_delay)

            self.state = ConnectState.CONNECTING
            res = await self.collaborator.connect(ip, path)

        return res

    async def connect(self, ip: str, path: str | None = None) -> ConnectionAttempt:
        """
            adb connect，瞬时失败自动重试一次
        :param ip:
        :param path:
        :return:
        """
        path = path or self.path_provider()

        try:
            async with self.registry.hold():
                res = await self._attempt(ip, path)
        except CollaboratorError as e:
            logger.error(f"Connecting {ip} error => {e}")
            self.state = ConnectState.FAILED
            self.last_error = DeviceConnectionError(str(e))
            self.log_stream.append(f"[ERROR] Connection error: {e}")
            return ConnectionAttempt(False, str(e))

        if res.success:
            self.state = ConnectState.SUCCESS
            self.last_error = None
            logger.success(f"Connected to {ip}")
            self.log_stream.append(f"[SYSTEM] CONNECTED TO {ip} SUCCESSFULLY.")
            self.history.add(ip)

            # Let adb settle before listing
            await self.sleep(self.settle_delay)
            await self.registry.refresh(path, silent=True)
        else:
            self.state = ConnectState.FAILED
            self.last_error = DeviceConnectionError(res.message)
            logger.warning(f"Connecting {ip} failed => {res.message}")
            msgs = [f"[SYSTEM] Connection failed: {res.message}"]
            if self.is_transient(res.message):
                msgs.append(self.TIP_STALE_PORT)
            self.log_stream.append(*msgs)

        return res

    async def reset_transport(self, path: str | None = None) -> bool:
        """
            Kill ADB, then refresh
        :param path:
        :return:
        """
        path = path or self.path_provider()
        try:
            await self.collaborator.kill_server(path)
        except CollaboratorError as e:
            logger.error(f"Kill ADB failed => {e}")
            self.log_stream.append(f"[ERROR] Kill ADB failed: {e}")
            return False

        await self.registry.refresh(path)
        return True

    async def auto_connect(self, enabled: bool = True, path: str | None = None) -> List[ConnectionAttempt]:
        """
            按历史记录重连未出现在设备列表中的无线设备
        :param enabled: auto-connect preference
        :param path:
        :return:
        """
        if not enabled:
            return []

        results = []
        for endpoint in self.history.records:
            if endpoint in self.registry:
                continue
            logger.info(f"Auto-connect {endpoint}")
            results.append(await self.connect(endpoint, path))

        return results
