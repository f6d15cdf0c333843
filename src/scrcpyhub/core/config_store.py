# -*- coding: utf-8 -*-
"""
    ConfigStore
    ~~~~~~~~~~~~~~~~~~
    SessionConfig / 主题 / 自动连接 持久化

    Log:
        2026-10-20 0.2.1 Me2sY  非法字段只回退该字段，不再丢弃整条配置

        2026-09-21 0.2.0 Me2sY  hydrate 前禁止写入，避免默认值覆盖已存配置

        2026-09-15 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.2.1'

__all__ = [
    'ConfigStore'
]

from dataclasses import replace

from loguru import logger

from scrcpyhub.core.args_cls import SessionConfig
from scrcpyhub.utils import KVManager, videos_path


class ConfigStore:
    """
        Persisted session configuration
    """

    KEY_CONFIG = 'config'
    KEY_THEME = 'theme'
    KEY_AUTO_CONNECT = 'auto_connect'

    DEFAULT_THEME = 'ultraviolet'

    def __init__(self, kvm: KVManager, default_record_path: str | None = None):
        self.kvm = kvm
        self.default_record_path = default_record_path

        self.config = SessionConfig()
        self.theme = self.DEFAULT_THEME
        self.auto_connect = True

        self.is_ready = False

    def __repr__(self):
        return f"ConfigStore > ready={self.is_ready} {self.config}"

    def hydrate(self) -> SessionConfig:
        """
            加载持久化配置，逐字段合并至默认值
        :return:
        """
        saved = self.kvm.get(self.KEY_CONFIG)
        if isinstance(saved, dict):
            self.config = SessionConfig.load(**saved)
        elif saved is not None:
            logger.warning(f"Saved config is not a record, using defaults. Got => {saved!r}")

        if not self.config.record_path:
            record_path = self.default_record_path
            if record_path is None:
                record_path = str(videos_path())
            self.config = replace(self.config, record_path=record_path)

        self.theme = self.kvm.get(self.KEY_THEME, self.DEFAULT_THEME)

        auto_connect = self.kvm.get(self.KEY_AUTO_CONNECT)
        if auto_connect is not None:
            self.auto_connect = bool(auto_connect)

        self.is_ready = True
        self._save_config()

        logger.info(f"Config loaded. Mode: {self.config.session_mode} Theme: {self.theme}")
        return self.config

    def _save_config(self):
        if self.is_ready:
            self.kvm.set(self.KEY_CONFIG, self.config.dump())

    def update(self, **partial) -> SessionConfig:
        """
            合并部分字段
        :param partial:
        :return:
        """
        unknown = set(partial) - SessionConfig.field_names()
        if unknown:
            raise ValueError(f"Unknown config fields: {sorted(unknown)}")

        self.config = replace(self.config, **partial)
        self._save_config()
        return self.config

    def sync_device(self, device_id: str):
        """
            Active device changed
        :param device_id:
        :return:
        """
        if device_id and device_id != self.config.device:
            self.update(device=device_id)

    def set_theme(self, theme: str):
        self.theme = theme
        if self.is_ready:
            self.kvm.set(self.KEY_THEME, theme)

    def set_auto_connect(self, value: bool):
        self.auto_connect = bool(value)
        if self.is_ready:
            self.kvm.set(self.KEY_AUTO_CONNECT, self.auto_connect)
