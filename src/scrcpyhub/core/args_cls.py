# -*- coding: utf-8 -*-
"""
    Session 配置
    ~~~~~~~~~~~~~~~~~~
    SessionConfig 及 scrcpy 命令行参数生成

    Log:
        2026-10-20 0.2.1 Me2sY  load 逐字段合并，非法 session_mode 回退为 mirror，保留其余字段

        2026-09-22 0.2.0 Me2sY
            1. 新增 desktop 模式 (--new-display)
            2. OTG pure 模式区分 USB / 网络设备

        2026-09-15 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.2.1'

__all__ = [
    'SessionConfig'
]

from dataclasses import dataclass, asdict, fields
import datetime
import pathlib
from typing import ClassVar

from loguru import logger


@dataclass
class SessionConfig:
    """
        scrcpy session parameters
        defaults are defined here only, persisted blobs are merged over them
    """

    MODE_MIRROR: ClassVar[str] = 'mirror'
    MODE_CAMERA: ClassVar[str] = 'camera'
    MODE_DESKTOP: ClassVar[str] = 'desktop'

    MODES: ClassVar[tuple] = (MODE_MIRROR, MODE_CAMERA, MODE_DESKTOP)

    device: str = ''
    session_mode: str = MODE_MIRROR

    bitrate: int | None = 8
    fps: int | None = 60
    res: str | None = '0'
    rotation: str | None = None
    codec: str | None = None

    stay_awake: bool | None = False
    turn_off: bool | None = False
    audio_enabled: bool | None = True
    always_on_top: bool | None = False
    fullscreen: bool | None = None
    borderless: bool | None = None

    record: bool | None = None
    record_path: str = ''

    scrcpy_path: str | None = None

    otg_enabled: bool | None = None
    otg_pure: bool | None = None

    camera_facing: str | None = None
    camera_id: str | None = None
    camera_ar: str | None = None
    camera_high_speed: bool | None = None

    vd_width: int | None = 1920
    vd_height: int | None = 1080
    vd_dpi: int | None = 420

    aspect_ratio_lock: bool = True

    def __post_init__(self):
        if self.session_mode not in self.MODES:
            raise ValueError(f"Session mode {self.session_mode} not supported")

    @classmethod
    def field_names(cls) -> set:
        return {_.name for _ in fields(cls)}

    @classmethod
    def load(cls, **kwargs) -> 'SessionConfig':
        """
            从持久化数据加载，缺失字段使用默认值，未知字段忽略
        :param kwargs:
        :return:
        """
        names = cls.field_names()
        values = {k: v for k, v in kwargs.items() if k in names}

        mode = values.get('session_mode', cls.MODE_MIRROR)
        if mode not in cls.MODES:
            logger.warning(f"Saved session mode {mode!r} not supported, reset to {cls.MODE_MIRROR}")
            values['session_mode'] = cls.MODE_MIRROR

        return cls(**values)

    def dump(self) -> dict:
        return asdict(self)

    @property
    def is_network_device(self) -> bool:
        return '.' in self.device or ':' in self.device

    def record_file(self, video_dir_fallback: str | None = None) -> pathlib.Path:
        """
            录像文件路径
        :param video_dir_fallback:
        :return:
        """
        path = self.record_path or ''
        if path.strip() == '':
            path = video_dir_fallback or '.'

        filename = f"scrcpy_{self.device.replace(':', '-')}_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.mkv"
        return pathlib.Path(path) / filename

    def to_args(self, video_dir_fallback: str | None = None) -> list:
        """
            生成 scrcpy 连接参数
        :param video_dir_fallback: record_path 为空时的录像目录
        :return:
        """
        args = []

        if self.device:
            args += ['-s', self.device]

        args.append(f"--video-codec={self.codec or 'h264'}")

        if self.session_mode == self.MODE_MIRROR and self.otg_enabled and self.otg_pure:
            # --otg needs a USB link, network devices fall back to uhid input only
            if self.is_network_device:
                args += ['--no-video', '--no-audio', '--keyboard=uhid', '--mouse=uhid']
            else:
                args.append('--otg')
            return args

        if self.bitrate is not None:
            args += ['--video-bit-rate', f"{self.bitrate}M"]

        if self.audio_enabled is False:
            args.append('--no-audio')
        if self.always_on_top:
            args.append('--always-on-top')
        if self.fullscreen:
            args.append('--fullscreen')
        if self.borderless:
            args.append('--window-borderless')

        if self.rotation is not None and self.rotation != '0':
            args += ['--orientation', self.rotation]

        if self.session_mode != self.MODE_CAMERA:
            if self.stay_awake:
                args.append('--stay-awake')
            if self.turn_off:
                args += ['--turn-screen-off', '--no-power-on']

        if self.session_mode == self.MODE_CAMERA:
            args.append('--video-source=camera')
            if self.camera_id:
                args.append(f"--camera-id={self.camera_id}")
            elif self.camera_facing:
                args.append(f"--camera-facing={self.camera_facing}")

            if self.camera_ar and self.camera_ar != '0':
                args.append(f"--camera-ar={self.camera_ar}")
            if self.camera_high_speed:
                args.append('--camera-high-speed')

        elif self.session_mode == self.MODE_DESKTOP:
            w = self.vd_width or 1920
            h = self.vd_height or 1080
            dpi = self.vd_dpi or 420
            args += [f"--new-display={w}x{h}/{dpi}", '--video-buffer=100']

        elif self.otg_enabled:
            args += ['--keyboard=uhid', '--mouse=uhid']

        if self.fps is not None:
            args += ['--camera-fps' if self.session_mode == self.MODE_CAMERA else '--max-fps', str(self.fps)]
        elif self.session_mode == self.MODE_CAMERA and self.camera_high_speed:
            args += ['--camera-fps', '60']

        if self.res is not None and self.res != '0':
            args += ['--max-size', self.res]

        if self.record:
            args.append(f"--record={self.record_file(video_dir_fallback)}")

        return args

    def describe(self) -> list:
        """
            Session 启动日志
        :return:
        """
        mode_label = {
            self.MODE_CAMERA: 'Camera Mode',
            self.MODE_DESKTOP: 'Desktop Mode',
        }.get(self.session_mode, 'Screen Mirroring')

        res_label = 'Original' if self.res in (None, '0') else self.res

        lines = [
            f"[SYSTEM] Starting {mode_label} session...",
            f"[SYSTEM] Target: {self.device} | Config: {res_label} @ {self.bitrate or 8}Mbps, {self.fps or 60}fps",
        ]
        if self.record:
            lines.append(f"[SYSTEM] Recording enabled -> output to {self.record_path or 'Videos'}")
        return lines
