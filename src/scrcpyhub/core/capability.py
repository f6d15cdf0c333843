# -*- coding: utf-8 -*-
"""
    CapabilityParser
    ~~~~~~~~~~~~~~~~~~
    解析 scrcpy --list-cameras 输出

    scrcpy 3.x:
        --camera-id=0    (back, 4080x3060, fps=[15, 20, 24, 30])
    scrcpy 2.x:
        - [0] (3264x2448) back, macro

    Log:
        2026-09-18 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.0'

__all__ = [
    'CapabilityDescriptor',
    'GrammarMatcher', 'ModernCameraGrammar', 'LegacyCameraGrammar',
    'CapabilityParser'
]

from abc import ABCMeta, abstractmethod
import re
from typing import ClassVar, List, NamedTuple, Tuple


class CapabilityDescriptor(NamedTuple):
    """
        Camera lens
    """
    id: str
    name: str


class GrammarMatcher(metaclass=ABCMeta):

    PATTERN: ClassVar[re.Pattern]

    @abstractmethod
    def match(self, line: str) -> CapabilityDescriptor | None:
        """
            line is already stripped
        :param line:
        :return:
        """
        raise NotImplementedError


class ModernCameraGrammar(GrammarMatcher):

    PATTERN = re.compile(r'--camera-id=(\w+)\s*\((.*?)\)')

    def match(self, line: str) -> CapabilityDescriptor | None:
        m = self.PATTERN.search(line)
        if m is None:
            return None
        cid, details = m.groups()
        return CapabilityDescriptor(cid, f"{cid}: {details}")


class LegacyCameraGrammar(GrammarMatcher):

    PATTERN = re.compile(r'^(?:-\s*)?\[(\w+)\]\s*\((.*?)\)\s*(.*)')

    def match(self, line: str) -> CapabilityDescriptor | None:
        m = self.PATTERN.match(line)
        if m is None:
            return None
        cid, resolution, metadata = m.groups()
        metadata = metadata.rstrip('\r').strip()
        return CapabilityDescriptor(cid, f"{cid}: {metadata or 'Camera'} ({resolution})")


class CapabilityParser:
    """
        Grammars are tried in order, first match wins
    """

    GRAMMARS: ClassVar[Tuple[GrammarMatcher, ...]] = (ModernCameraGrammar(), LegacyCameraGrammar())

    @classmethod
    def parse_line(cls, line: str) -> CapabilityDescriptor | None:
        line = line.strip()
        for grammar in cls.GRAMMARS:
            descriptor = grammar.match(line)
            if descriptor is not None:
                return descriptor
        return None

    @classmethod
    def parse(cls, raw_output: str) -> List[CapabilityDescriptor]:
        descriptors = []
        for line in raw_output.split('\n'):
            descriptor = cls.parse_line(line)
            if descriptor is not None:
                descriptors.append(descriptor)
        return descriptors
