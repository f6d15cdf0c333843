# -*- coding: utf-8 -*-
"""
    scrcpyhub
    ~~~~~~~~~~~~~~~~~~
    scrcpy / adb 设备连接与 Session 管理

    Log:
        2026-09-14 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.3.0'
