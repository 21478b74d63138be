"""
Aztec decoder: from a sampled symbol to decoded content.

decode() runs the whole pipeline (bit extraction, Reed-Solomon correction,
high-level decoding). decode_bits() runs only the high-level stage on an
already corrected bit stream.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from aztec_bit_array import BitReader
from aztec_config import DecoderConfig
from aztec_content import AIFlag, Content, SymbologyIdentifier, to_string
from aztec_error_correction import correct_bits
from aztec_errors import AztecDecodeError, FormatError
from aztec_extraction import extract_bits
from aztec_result import DecoderResult, StructuredAppendInfo
from aztec_structured_append import has_structured_append_header, parse_structured_append

logger = logging.getLogger(__name__)


class Mode(Enum):
    UPPER = "U"
    LOWER = "L"
    MIXED = "M"
    DIGIT = "D"
    PUNCT = "P"
    BINARY = "B"


@dataclass(frozen=True)
class ModeChange:
    target: Mode
    latch: bool


class FlagN:
    """Punct code 0: FLG(n), followed by a 3-bit n."""

    def __repr__(self):
        return "FLG(n)"


FLG_N = FlagN()

PS = ModeChange(Mode.PUNCT, latch=False)
US = ModeChange(Mode.UPPER, latch=False)
BS = ModeChange(Mode.BINARY, latch=False)
UL = ModeChange(Mode.UPPER, latch=True)
LL = ModeChange(Mode.LOWER, latch=True)
ML = ModeChange(Mode.MIXED, latch=True)
DL = ModeChange(Mode.DIGIT, latch=True)
PL = ModeChange(Mode.PUNCT, latch=True)

UPPER_TABLE = [PS, ' '] + [chr(c) for c in range(ord('A'), ord('Z') + 1)] + [LL, ML, DL, BS]
LOWER_TABLE = [PS, ' '] + [chr(c) for c in range(ord('a'), ord('z') + 1)] + [US, ML, DL, BS]
MIXED_TABLE = (
    [PS, ' ']
    + [chr(c) for c in range(1, 14)]
    + [chr(c) for c in range(27, 32)]
    + ['@', '\\', '^', '_', '`', '|', '~', '\x7f']
    + [LL, UL, PL, BS]
)
PUNCT_TABLE = [
    FLG_N, '\r', '\r\n', '. ', ', ', ': ', '!', '"', '#', '$', '%', '&', "'", '(', ')', '*',
    '+', ',', '-', '.', '/', ':', ';', '<', '=', '>', '?', '[', ']', '{', '}', UL,
]
DIGIT_TABLE = [PS, ' '] + [str(d) for d in range(10)] + [',', '.', UL, US]

TABLES = {
    Mode.UPPER: UPPER_TABLE,
    Mode.LOWER: LOWER_TABLE,
    Mode.MIXED: MIXED_TABLE,
    Mode.PUNCT: PUNCT_TABLE,
    Mode.DIGIT: DIGIT_TABLE,
}


@dataclass(frozen=True)
class ModeState:
    """latch is the mode to return to, shift the mode of the next code."""

    latch: Mode = Mode.UPPER
    shift: Mode = Mode.UPPER

    def code_size(self):
        return 4 if self.shift == Mode.DIGIT else 5

    def change(self, change):
        # A shift returns to the mode it was invoked from, even when that mode is itself a shift
        latch = change.target if change.latch else self.shift
        return ModeState(latch=latch, shift=change.target)

    def back(self):
        return ModeState(latch=self.latch, shift=self.latch)


def transition(state, code):
    """
    Look up code in the current table.

    Returns (next state, entry), where entry is a character string, FLG_N or
    a ModeChange already applied to the returned state.
    """
    entry = TABLES[state.shift][code]
    if isinstance(entry, ModeChange):
        return state.change(entry), entry
    if entry is FLG_N:
        return state, entry
    return state.back(), entry


def _read_binary(reader, content):
    """Binary shift: 5-bit length, 0 escapes to an 11-bit length plus 31."""
    if reader.available() < 5:
        return False
    length = reader.read(5)
    if length == 0:
        if reader.available() < 11:
            return False
        length = reader.read(11) + 31
    for _ in range(length):
        if reader.available() < 8:
            reader.skip_to_end()
            return False
        content.push_byte(reader.read(8))
    return True


def _read_flag(reader, content):
    """FLG(0) is FNC1, FLG(1..6) introduces an ECI of that many digits."""
    if reader.available() < 3:
        return False
    n = reader.read(3)
    if n == 0:
        # may be dropped later as a GS1 or AIM application indicator
        content.append_fnc1()
    elif n <= 6:
        if reader.available() < 4 * n:
            return False
        eci = 0
        for _ in range(n):
            digit = reader.read(4)
            if digit < 2 or digit > 11:
                raise FormatError(f"Invalid ECI digit code {digit}")
            eci = eci * 10 + digit - 2
        logger.debug(f"ECI {eci} at byte {len(content)}")
        content.switch_encoding(eci)
    else:
        raise FormatError("FLG(7) is reserved and illegal")
    return True


def decode_content(bits, content):
    """Run the character mode state machine over the corrected bit stream."""
    reader = BitReader(bits)
    state = ModeState()

    while True:
        if state.shift == Mode.BINARY:
            if not _read_binary(reader, content):
                break
            state = state.back()
            continue

        # trailing bits shorter than one code are padding
        if reader.available() < state.code_size():
            break
        state, entry = transition(state, reader.read(state.code_size()))
        if entry is FLG_N:
            if not _read_flag(reader, content):
                break
            state = state.back()
        elif isinstance(entry, str):
            content.append(entry)


def _is_ascii_digit(value):
    return ord('0') <= value <= ord('9')


def apply_application_indicator(content):
    """
    Resolve a leading FNC1 (GS1) or an FNC1 after one letter or two digits
    (AIM application indicator) into the symbology modifier.
    """
    data = content.bytes
    if len(data) > 1 and content.is_fnc1(0):
        content.symbology.modifier = 1
        content.ai_flag = AIFlag.GS1
        content.erase(0, 1)
    elif len(data) > 2 and ord('A') <= data[0] <= ord('Z') and content.is_fnc1(1):
        content.symbology.modifier = 2
        content.ai_flag = AIFlag.AIM
        # the indicator letter stays in the data
        content.erase(1, 1)
    elif len(data) > 3 and _is_ascii_digit(data[0]) and _is_ascii_digit(data[1]) and content.is_fnc1(2):
        content.symbology.modifier = 2
        content.ai_flag = AIFlag.AIM
        content.erase(2, 1)


def decode_bits(bits, config=None):
    """Decode a corrected and unstuffed Aztec bit stream."""
    config = config or DecoderConfig()
    content = Content(config.default_charset)
    content.symbology = SymbologyIdentifier('z', 0, eci_modifier_offset=3)

    try:
        decode_content(bits, content)
        if not len(content):
            raise FormatError("Empty symbol content")
    except AztecDecodeError as e:
        logger.info(f"High-level decoding failed: {e}")
        return DecoderResult.from_error(e)

    sai = StructuredAppendInfo()
    if has_structured_append_header(bits):
        sai = parse_structured_append(content)

    apply_application_indicator(content)

    if sai.index != -1:
        content.symbology.modifier += 6

    return DecoderResult(content=content, structured_append=sai)


def decode_rune(detector_result, config=None):
    """A rune's content is its value as three digits."""
    config = config or DecoderConfig()
    content = Content(config.default_charset)
    # runes cannot carry an ECI
    content.symbology = SymbologyIdentifier('z', 12, eci_modifier_offset=0)
    content.append(to_string(detector_result.rune_value, 3))
    return DecoderResult(content=content)


def decode(detector_result, config=None):
    """
    Decode a sampled Aztec symbol.

    Errors are not raised: a ChecksumError or FormatError is returned in the
    result's error field and is_valid is False.
    """
    try:
        if detector_result.is_rune:
            result = decode_rune(detector_result, config)
        else:
            rawbits = extract_bits(
                detector_result.bits,
                detector_result.compact,
                detector_result.nb_layers,
                detector_result.is_mirrored,
            )
            bits = correct_bits(rawbits, detector_result.nb_layers, detector_result.nb_datablocks)
            result = decode_bits(bits, config)
    except AztecDecodeError as e:
        logger.info(f"Aztec decoding failed: {e}")
        result = DecoderResult.from_error(e)

    result.reader_init = detector_result.reader_init
    result.is_mirrored = detector_result.is_mirrored
    return result
