"""
Aztec symbol geometry and raw bit extraction.

Data layers spiral around the bulls-eye. Each layer is read as four 2-module
wide bands: left column top to bottom, bottom row left to right, right column
bottom to top, top row right to left. Full size symbols interleave reference
grid lines every 16 modules, which the alignment map skips.
"""

import logging

from aztec_bit_array import BitArray

logger = logging.getLogger(__name__)


def base_matrix_size(compact, nb_layers):
    """Symbol side length without reference grid lines."""
    return (11 if compact else 14) + nb_layers * 4


def matrix_size(compact, nb_layers):
    base = base_matrix_size(compact, nb_layers)
    if compact:
        return base
    return base + 1 + 2 * ((base // 2 - 1) // 15)


def total_bits_in_layers(compact, nb_layers):
    return ((88 if compact else 112) + 16 * nb_layers) * nb_layers


def codeword_size(nb_layers):
    if nb_layers <= 2:
        return 6
    if nb_layers <= 8:
        return 8
    if nb_layers <= 22:
        return 10
    return 12


def alignment_map(compact, nb_layers):
    """Map base coordinates to matrix coordinates, skipping reference grid lines."""
    base = base_matrix_size(compact, nb_layers)
    if compact:
        return list(range(base))

    mapping = [0] * base
    orig_center = base // 2
    center = matrix_size(compact, nb_layers) // 2
    for i in range(orig_center):
        new_offset = i + i // 15
        mapping[orig_center - i - 1] = center - new_offset - 1
        mapping[orig_center + i] = center + new_offset + 1
    return mapping


def bit_positions(compact, nb_layers):
    """
    List the (x, y) matrix coordinates of every raw data bit, in stream order.
    """
    base = base_matrix_size(compact, nb_layers)
    amap = alignment_map(compact, nb_layers)
    coords = [None] * total_bits_in_layers(compact, nb_layers)

    row_offset = 0
    for layer in range(nb_layers):
        row_size = (nb_layers - layer) * 4 + (9 if compact else 12)
        # <low, low> is the top-left and <high, high> the bottom-right corner of this layer
        low = layer * 2
        high = base - 1 - low
        for j in range(row_size):
            column_offset = j * 2
            for k in range(2):
                # left column
                coords[row_offset + column_offset + k] = (amap[low + k], amap[low + j])
                # bottom row
                coords[row_offset + 2 * row_size + column_offset + k] = (amap[low + j], amap[high - k])
                # right column
                coords[row_offset + 4 * row_size + column_offset + k] = (amap[high - k], amap[high - j])
                # top row
                coords[row_offset + 6 * row_size + column_offset + k] = (amap[high - j], amap[low + k])
        row_offset += row_size * 8
    return coords


def extract_bits(matrix, compact, nb_layers, is_mirrored=False):
    """
    Read the raw data bits of all layers out of the symbol grid.

    A mirrored symbol is reflected across its main diagonal first, which
    restores the standard reading direction and keeps the start corner.
    """
    size = matrix_size(compact, nb_layers)
    if matrix.width != size or matrix.height != size:
        raise ValueError(f"Invalid matrix dimensions {matrix.width}x{matrix.height}, expected {size}x{size}")

    if is_mirrored:
        matrix = matrix.transposed()

    coords = bit_positions(compact, nb_layers)
    rawbits = BitArray(len(coords))
    for index, (x, y) in enumerate(coords):
        if matrix.get(x, y):
            rawbits.set(index, True)

    logger.debug(f"Extracted {len(rawbits)} raw bits from {nb_layers} layer(s), compact={compact}, mirrored={is_mirrored}")
    return rawbits


def read_codewords(rawbits, word_size):
    """
    Split raw bits into word_size codewords. Leftover bits sit at the start
    of the stream and are skipped.
    """
    num_codewords = len(rawbits) // word_size
    offset = len(rawbits) % word_size
    return [rawbits.read_bits(offset + i * word_size, word_size) for i in range(num_codewords)]
