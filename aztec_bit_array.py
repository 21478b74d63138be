"""
Bit containers used by the Aztec decoder.

BitArray carries the raw and corrected bit streams, BitMatrix holds the
rectified symbol grid handed over by the detector.
"""

import numpy as np


class BitArray:
    """Growable sequence of bits, most significant bit first on append."""

    def __init__(self, size=0):
        self._bits = [0] * size

    @classmethod
    def from_bitstring(cls, bitstring):
        """Build from text such as '0001000011'. Whitespace is ignored."""
        array = cls()
        for c in bitstring:
            if c in ' \t\r\n':
                continue
            if c not in '01':
                raise ValueError(f"Invalid bit character: {c!r}")
            array.append_bit(c == '1')
        return array

    def __len__(self):
        return len(self._bits)

    def __getitem__(self, index):
        if not 0 <= index < len(self._bits):
            raise IndexError(f"Bit index {index} out of range [0, {len(self._bits)})")
        return self._bits[index] == 1

    def __iter__(self):
        return (bit == 1 for bit in self._bits)

    def __eq__(self, other):
        if not isinstance(other, BitArray):
            return NotImplemented
        return self._bits == other._bits

    def __repr__(self):
        return f"BitArray('{self.to_bitstring()}')"

    def set(self, index, value):
        if not 0 <= index < len(self._bits):
            raise IndexError(f"Bit index {index} out of range [0, {len(self._bits)})")
        self._bits[index] = 1 if value else 0

    def append_bit(self, bit):
        self._bits.append(1 if bit else 0)

    def append_bits(self, value, num_bits):
        """Append the lowest num_bits of value, most significant first."""
        if num_bits < 0 or num_bits > 32:
            raise ValueError("num_bits must be between 0 and 32")
        for shift in range(num_bits - 1, -1, -1):
            self._bits.append((value >> shift) & 1)

    def read_bits(self, offset, num_bits):
        if offset < 0 or offset + num_bits > len(self._bits):
            raise IndexError(f"Cannot read {num_bits} bits at offset {offset} from {len(self._bits)} bits")
        if num_bits == 0:
            return 0
        return int(''.join(str(b) for b in self._bits[offset:offset + num_bits]), 2)

    def to_bitstring(self):
        return ''.join(str(b) for b in self._bits)


class BitReader:
    """Sequential cursor over a BitArray."""

    def __init__(self, bits, start=0):
        self.bits = bits
        self.position = start

    def available(self):
        return len(self.bits) - self.position

    def read(self, num_bits):
        value = self.bits.read_bits(self.position, num_bits)
        self.position += num_bits
        return value

    def skip_to_end(self):
        self.position = len(self.bits)


class BitMatrix:
    """Rectified symbol grid. get(x, y) addresses column x of row y."""

    def __init__(self, width, height=None):
        if height is None:
            height = width
        if width < 1 or height < 1:
            raise ValueError("Both dimensions must be greater than 0")
        self.bits = np.zeros((height, width), dtype=bool)

    @classmethod
    def from_rows(cls, rows):
        array = np.asarray(rows, dtype=bool)
        if array.ndim != 2:
            raise ValueError("Bit matrix rows must form a 2D array")
        matrix = cls(array.shape[1], array.shape[0])
        matrix.bits = array.copy()
        return matrix

    @property
    def width(self):
        return self.bits.shape[1]

    @property
    def height(self):
        return self.bits.shape[0]

    def get(self, x, y):
        return bool(self.bits[y, x])

    def set(self, x, y, value=True):
        self.bits[y, x] = bool(value)

    def transposed(self):
        return BitMatrix.from_rows(self.bits.T)

    def __eq__(self, other):
        if not isinstance(other, BitMatrix):
            return NotImplemented
        return self.bits.shape == other.bits.shape and bool(np.array_equal(self.bits, other.bits))

    def __repr__(self):
        return to_text(self)


def parse_bit_matrix(text, set_char='X', expect_space=True):
    """
    Parse a text grid such as "X X . X \\n..." into a BitMatrix.

    With expect_space every cell is followed by a separator character, so only
    every other character is read. Any character other than set_char is an
    unset module.
    """
    rows = []
    for line in text.split('\n'):
        line = line.rstrip('\r')
        if not line.strip():
            continue
        cells = line[::2] if expect_space else line
        rows.append([c == set_char for c in cells])

    if not rows:
        raise ValueError("Empty bit matrix")
    width = max(len(row) for row in rows)
    for row in rows:
        # a stripped trailing blank cell shortens the line by one
        if len(row) < width:
            if width - len(row) > 1:
                raise ValueError("Bit matrix rows have different widths")
            row.append(False)
    return BitMatrix.from_rows(rows)


def to_text(matrix, set_char='X', unset_char='.'):
    return '\n'.join(
        ' '.join(set_char if v else unset_char for v in row) for row in matrix.bits
    ) + '\n'
