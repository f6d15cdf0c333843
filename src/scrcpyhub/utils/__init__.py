# -*- coding: utf-8 -*-
"""
    utils
    ~~~~~~~~~~~~~~~~~~
    工具类

    Log:
        2026-09-14 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.0'

__all__ = [
    # Params
    'videos_path', 'Param',

    # Config manager
    'KeyValue', 'KVManager', 'kv_global'
]

from scrcpyhub.utils.params import *
from scrcpyhub.utils.config_manager import *
