# -*- coding: utf-8 -*-
"""
    Params
    ~~~~~~~~~~~~~~~~~~

    Log:
        2026-09-28 0.3.0 Me2sY  新增 scrcpy release 下载地址

        2026-09-14 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.3.0'

__all__ = [
    'videos_path',
    'Param'
]

import pathlib


PROJECT_NAME = 'scrcpyhub'


def videos_path() -> pathlib.Path:
    """
        Default recording folder, ~/Videos
    :return:
    """
    return pathlib.Path.home().joinpath('Videos')


class Param:
    """
        参数
    """

    PROJECT_NAME = PROJECT_NAME
    AUTHOR = __author__
    VERSION = __version__

    PATH_HOME = pathlib.Path.home().joinpath(f".{PROJECT_NAME}")

    PATH_CONFIGS = PATH_HOME.joinpath('configs')

    # Downloaded binaries are unpacked here, next to the working dir
    BIN_FOLDER_NAME = 'scrcpy-bin'

    # Device side
    PATH_DEV_PUSH = '/sdcard/Download/'

    # Executables
    ADB = 'adb'
    SCRCPY = 'scrcpy'

    # Scrcpy releases
    RELEASE_API_URL = 'https://api.github.com/repos/Genymobile/scrcpy/releases/latest'
    RELEASE_PAGE_URL = 'https://github.com/Genymobile/scrcpy/releases/latest'
    RELEASE_DOWNLOAD_URL = 'https://github.com/Genymobile/scrcpy/releases/download'
    USER_AGENT = f"{PROJECT_NAME}-downloader/{VERSION}"
