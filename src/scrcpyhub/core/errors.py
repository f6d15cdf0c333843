# -*- coding: utf-8 -*-
"""
    Errors
    ~~~~~~~~~~~~~~~~~~
    None of these are fatal. Components catch them at their boundary,
    write a diagnostic line to the LogStream and return a failure result.

    Log:
        2026-09-16 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.0'

__all__ = [
    'HubError',
    'CollaboratorError',
    'DiscoveryError', 'PairingError', 'DeviceConnectionError',
    'SessionError', 'DownloadError'
]


class HubError(Exception):
    """
        Base error
    """


class CollaboratorError(HubError):
    """
        adb / scrcpy could not be launched or did not answer
    """


class DiscoveryError(HubError):
    """
        Device listing failed, snapshot kept
    """


class PairingError(HubError):
    """
        adb pair failed, never retried
    """


class DeviceConnectionError(HubError):
    """
        adb connect failed after the automatic retry
    """


class SessionError(HubError):
    """
        scrcpy session could not be started or stopped
    """


class DownloadError(HubError):
    """
        scrcpy release could not be fetched or unpacked
    """
