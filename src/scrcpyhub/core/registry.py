# -*- coding: utf-8 -*-
"""
    DeviceRegistry
    ~~~~~~~~~~~~~~~~~~
    设备列表管理

    Log:
        2026-09-24 0.2.0 Me2sY  refresh 改用 Lock 占位，忙时直接丢弃

        2026-09-16 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.2.0'

__all__ = [
    'DeviceRegistry'
]

import asyncio
from contextlib import asynccontextmanager
from typing import Callable, List

from loguru import logger

from scrcpyhub.core.collaborator import DeviceCollaborator
from scrcpyhub.core.errors import CollaboratorError, DiscoveryError
from scrcpyhub.core.log_stream import LogStream


class DeviceRegistry:
    """
        Owns the device snapshot and the active device
    """

    def __init__(
            self,
            collaborator: DeviceCollaborator,
            log_stream: LogStream,
            path_provider: Callable[[], str | None] = None,
            on_active_changed: Callable[[str], None] = None,
    ):
        """
        :param collaborator:
        :param log_stream:
        :param path_provider: returns the configured adb/scrcpy folder
        :param on_active_changed:
        """
        self.collaborator = collaborator
        self.log_stream = log_stream
        self.path_provider = path_provider or (lambda: None)
        self.on_active_changed = on_active_changed

        self.devices: List[str] = []
        self.active_device: str = ''
        self.last_error: DiscoveryError | None = None

        self._refresh_slot = asyncio.Lock()

    def __repr__(self):
        return f"DeviceRegistry > {len(self.devices)} devices, active: {self.active_device or None}"

    def __contains__(self, device_id: str):
        return device_id in self.devices

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_slot.locked()

    @asynccontextmanager
    async def hold(self):
        """
            Occupy the refresh slot, refresh() calls made meanwhile are dropped
        """
        async with self._refresh_slot:
            yield

    async def refresh(self, path: str | None = None, silent: bool = False) -> bool:
        """
            刷新设备列表
        :param path: adb 目录，默认使用配置
        :param silent: 无变化时不输出日志
        :return: False if dropped or failed
        """
        if self._refresh_slot.locked():
            logger.debug('Refresh already in flight, dropped')
            return False

        async with self._refresh_slot:
            try:
                result = await self.collaborator.list_devices(path or self.path_provider())
            except CollaboratorError as e:
                logger.error(f"Refresh devices failed => {e}")
                self.last_error = DiscoveryError(str(e))
                self.log_stream.append(f"[SYSTEM] Error refreshing devices: {e}")
                return False

            if result.error:
                logger.warning(f"Discovery error => {result.error}")
                self.last_error = DiscoveryError(result.error)
                self.log_stream.append(f"[SYSTEM] Discovery error: {result.error}")
                return False

            self.last_error = None
            self._apply_snapshot(list(dict.fromkeys(result.devices)), silent)
            return True

    def _apply_snapshot(self, new_devices: List[str], silent: bool):
        prev = set(self.devices)
        new = set(new_devices)

        added = [_ for _ in new_devices if _ not in prev]
        removed = [_ for _ in self.devices if _ not in new]

        for device in added:
            self.log_stream.append(f"[SYSTEM] New device discovered: {device}")

        for device in removed:
            self.log_stream.append(f"[SYSTEM] Device disconnected: {device}")

        self.devices = new_devices

        if not silent and not added and not removed:
            self.log_stream.append(f"[SYSTEM] Discovery active: {len(new_devices)} device(s) found.")

        if new_devices and not self.active_device:
            self.select_active(new_devices[0])

    def select_active(self, device_id: str):
        """
            设置当前设备
        :param device_id:
        :return:
        """
        if device_id == self.active_device:
            return
        self.active_device = device_id
        logger.info(f"Active device => {device_id}")
        if self.on_active_changed:
            self.on_active_changed(device_id)
