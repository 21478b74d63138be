"""
Decoded content: raw bytes tagged with the ECI segments they were read in.

The same bytes can be rendered as plain text, as ECI protocol text with
\\nnnnnn designators, as hex, or as ECI protocol bytes.
"""

import codecs
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from aztec_errors import FormatError

GS = 0x1D

ECI_ISO8859_1 = 3
ECI_UTF8 = 26

# ECI assignment number -> Python codec. Binary and unassigned values render byte per char.
ECI_CODECS = {
    0: 'cp437',
    1: 'iso8859_1',
    2: 'cp437',
    3: 'iso8859_1',
    4: 'iso8859_2',
    5: 'iso8859_3',
    6: 'iso8859_4',
    7: 'iso8859_5',
    8: 'iso8859_6',
    9: 'iso8859_7',
    10: 'iso8859_8',
    11: 'iso8859_9',
    12: 'iso8859_10',
    13: 'iso8859_11',
    15: 'iso8859_13',
    16: 'iso8859_14',
    17: 'iso8859_15',
    18: 'iso8859_16',
    20: 'shift_jis',
    21: 'cp1250',
    22: 'cp1251',
    23: 'cp1252',
    24: 'cp1256',
    25: 'utf_16_be',
    26: 'utf_8',
    27: 'ascii',
    28: 'big5',
    29: 'gb2312',
    30: 'euc_kr',
    31: 'gbk',
    32: 'gb18030',
    33: 'utf_16_le',
    34: 'utf_32_be',
    35: 'utf_32_le',
    170: 'ascii',
}


class TextMode(Enum):
    PLAIN = "plain"
    ECI = "eci"
    HEX = "hex"


class AIFlag(Enum):
    NONE = "none"
    GS1 = "gs1"
    AIM = "aim"


def to_string(value, length):
    """Zero padded decimal of exactly length digits."""
    if value < 0 or value >= 10 ** length:
        raise FormatError(f"Invalid value {value} for {length} digits")
    return str(value).zfill(length)


def eci_designator(eci):
    return '\\' + to_string(eci, 6)


def charset_for_eci(eci):
    return ECI_CODECS.get(eci)


@dataclass
class SymbologyIdentifier:
    code: str = 'z'
    modifier: int = 0
    eci_modifier_offset: int = 3

    def to_string(self, has_eci=False):
        modifier = self.modifier + (self.eci_modifier_offset if has_eci else 0)
        if modifier >= 10:
            return f"]{self.code}{chr(ord('A') + modifier - 10)}"
        return f"]{self.code}{modifier}"


@dataclass
class Encoding:
    eci: int
    pos: int


class Content:
    """Byte buffer with ECI segment starts and FNC1 positions."""

    def __init__(self, default_charset='iso8859_1'):
        self.bytes = bytearray()
        self.encodings: List[Encoding] = []
        self.fnc1_positions: List[int] = []
        self.has_eci = False
        self.symbology = SymbologyIdentifier()
        self.ai_flag = AIFlag.NONE
        self.default_charset = codecs.lookup(default_charset).name

    def __len__(self):
        return len(self.bytes)

    def push_byte(self, value):
        self.bytes.append(value & 0xFF)

    def append(self, text):
        self.bytes.extend(text.encode('latin-1'))

    def append_fnc1(self):
        self.fnc1_positions.append(len(self.bytes))
        self.bytes.append(GS)

    def is_fnc1(self, pos):
        return pos in self.fnc1_positions

    def switch_encoding(self, eci):
        self.encodings.append(Encoding(eci, len(self.bytes)))
        self.has_eci = True

    def erase(self, pos, n):
        """Remove n bytes at pos, keeping segment starts and FNC1 markers aligned."""
        del self.bytes[pos:pos + n]
        for encoding in self.encodings:
            if encoding.pos > pos:
                encoding.pos = max(pos, encoding.pos - n)
        self.fnc1_positions = [
            p - n if p >= pos + n else p
            for p in self.fnc1_positions
            if not pos <= p < pos + n
        ]

    def eci_blocks(self):
        """Yield (eci, begin, end) for each non-empty segment. eci is None without any ECI."""
        default_eci = ECI_ISO8859_1 if self.has_eci else None
        size = len(self.bytes)
        if not self.encodings:
            yield default_eci, 0, size
            return
        if self.encodings[0].pos != 0:
            yield default_eci, 0, self.encodings[0].pos
        for i, encoding in enumerate(self.encodings):
            end = size if i + 1 == len(self.encodings) else self.encodings[i + 1].pos
            if encoding.pos != end:
                yield encoding.eci, encoding.pos, end

    def _charset(self, eci: Optional[int]):
        if eci is None:
            return self.default_charset
        return charset_for_eci(eci)

    def _decode(self, begin, end, charset):
        data = bytes(self.bytes[begin:end])
        if charset is None:
            return data.decode('latin-1')
        return data.decode(charset, errors='replace')

    def text(self, mode=TextMode.PLAIN):
        if mode == TextMode.HEX:
            return ' '.join(f"{b:02X}" for b in self.bytes)
        if mode == TextMode.ECI:
            return self._render_eci()
        return ''.join(self._decode(begin, end, self._charset(eci)) for eci, begin, end in self.eci_blocks())

    def _render_eci(self):
        # every segment decoded as text is reported as UTF-8
        result = [self.symbology.to_string(True)]
        last_eci = None
        for eci, begin, end in self.eci_blocks():
            charset = self._charset(eci)
            reported = ECI_UTF8 if charset is not None else eci
            if reported != last_eci:
                result.append(eci_designator(reported))
            last_eci = reported
            result.append(self._decode(begin, end, charset).replace('\\', '\\\\'))
        return ''.join(result)

    def bytes_eci(self):
        """Raw bytes in the ECI protocol, with the original ECI designators."""
        result = bytearray(self.symbology.to_string(self.has_eci).encode('ascii'))
        for eci, begin, end in self.eci_blocks():
            if self.has_eci:
                result.extend(eci_designator(eci).encode('ascii'))
            result.extend(bytes(self.bytes[begin:end]).replace(b'\\', b'\\\\'))
        return bytes(result)
