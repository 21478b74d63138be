"""
Input and output records of an Aztec decode.
"""

from dataclasses import dataclass, field
from typing import Optional

from aztec_bit_array import BitMatrix
from aztec_content import Content, TextMode
from aztec_errors import AztecDecodeError
from aztec_extraction import matrix_size


@dataclass
class DetectorResult:
    """Sampled symbol and the parameters read from its mode message."""

    bits: BitMatrix
    compact: bool
    nb_datablocks: int
    nb_layers: int
    reader_init: bool = False
    is_mirrored: bool = False
    rune_value: int = 0

    def __post_init__(self):
        if self.nb_layers < 0 or self.nb_layers > (4 if self.compact else 32):
            raise ValueError(f"Invalid number of layers: {self.nb_layers}")
        if self.nb_layers == 0:
            # runes are compact symbols without data layers
            if not self.compact:
                raise ValueError("Runes must be compact symbols")
            if not 0 <= self.rune_value <= 255:
                raise ValueError(f"Invalid rune value: {self.rune_value}")
        elif self.nb_datablocks < 1:
            raise ValueError(f"Invalid number of data blocks: {self.nb_datablocks}")

        size = matrix_size(self.compact, self.nb_layers)
        if self.bits.width != size or self.bits.height != size:
            raise ValueError(
                f"Invalid matrix dimensions {self.bits.width}x{self.bits.height} "
                f"for {self.nb_layers} layer {'compact' if self.compact else 'full'} symbol, expected {size}x{size}"
            )

    @property
    def is_rune(self):
        return self.nb_layers == 0


@dataclass
class StructuredAppendInfo:
    index: int = -1
    count: int = -1
    id: str = ""


@dataclass
class DecoderResult:
    content: Content = field(default_factory=Content)
    error: Optional[AztecDecodeError] = None
    structured_append: StructuredAppendInfo = field(default_factory=StructuredAppendInfo)
    reader_init: bool = False
    is_mirrored: bool = False

    @classmethod
    def from_error(cls, error):
        return cls(error=error)

    @property
    def is_valid(self):
        return self.error is None

    @property
    def symbology_identifier(self):
        return self.content.symbology.to_string()

    def text(self, mode=TextMode.PLAIN):
        return self.content.text(mode)

    @property
    def bytes(self):
        return bytes(self.content.bytes)

    def to_dict(self):
        if not self.is_valid:
            return {
                "success": False,
                "error": str(self.error),
                "error_type": self.error.error_type.value,
            }
        return {
            "success": True,
            "text": self.text(),
            "bytes": list(self.content.bytes),
            "symbology_identifier": self.symbology_identifier,
            "ai_flag": self.content.ai_flag.value,
            "has_eci": self.content.has_eci,
            "eci_text": self.text(TextMode.ECI),
            "structured_append": {
                "index": self.structured_append.index,
                "count": self.structured_append.count,
                "id": self.structured_append.id,
            },
            "reader_init": self.reader_init,
            "is_mirrored": self.is_mirrored,
            "error": None,
        }
