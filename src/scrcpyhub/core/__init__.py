# -*- coding: utf-8 -*-
"""
    scrcpyhub.core
    ~~~~~~~~~~~~~~~~~~
    核心库
    设备发现 / 连接编排 / Session 状态 / 日志与历史持久化

    Log:
        2026-09-20 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.0'

__all__ = [
    # Errors
    'HubError', 'CollaboratorError',
    'DiscoveryError', 'PairingError', 'DeviceConnectionError',
    'SessionError', 'DownloadError',

    # Events
    'SessionStatus',
    'DownloadingEvent', 'DownloadProgressEvent', 'DownloadCompleteEvent', 'DownloadFailedEvent',
    'EventSource',

    # State
    'LogStream', 'SessionConfig', 'ConfigStore', 'HistoryStore',

    # Parser
    'CapabilityDescriptor', 'CapabilityParser',

    # Collaborator
    'ConnectionAttempt', 'BinaryStatus',
    'DeviceCollaborator', 'AdbScrcpyCollaborator',
    'ScrcpyDownloader',

    # Components
    'DeviceRegistry', 'ConnectState', 'ConnectionOrchestrator', 'SessionRegistry',
    'ScrcpyHub',
]

from scrcpyhub.core.errors import *
from scrcpyhub.core.events import *
from scrcpyhub.core.log_stream import *
from scrcpyhub.core.args_cls import *
from scrcpyhub.core.config_store import *
from scrcpyhub.core.history import *
from scrcpyhub.core.capability import *
from scrcpyhub.core.downloader import *
from scrcpyhub.core.collaborator import *
from scrcpyhub.core.registry import *
from scrcpyhub.core.orchestrator import *
from scrcpyhub.core.session import *
from scrcpyhub.core.hub import *
