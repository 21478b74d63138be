"""
Shared test helpers: bit stream builders and a symbol generator that uses
reedsolo as an independent Reed-Solomon encoder.
"""

from reedsolo import RSCodec

from aztec_bit_array import BitArray, BitMatrix
from aztec_decoder import decode_bits
from aztec_extraction import bit_positions, codeword_size, matrix_size, total_bits_in_layers
from aztec_result import DetectorResult

PRIMITIVE_POLYS = {6: 0x43, 8: 0x12D, 10: 0x409, 12: 0x1069}


def bits(bitstring):
    return BitArray.from_bitstring(bitstring)


def words5(values):
    """BitArray of 5-bit codes, for streams without digits or binary data."""
    array = BitArray()
    for v in values:
        array.append_bits(v, 5)
    return array


def get_data(bitstring_or_words):
    if isinstance(bitstring_or_words, str):
        return decode_bits(bits(bitstring_or_words))
    return decode_bits(words5(bitstring_or_words))


def rs_encode(data_words, num_ecc, word_size):
    """Append num_ecc check words computed by reedsolo over the Aztec field."""
    codec = RSCodec(
        num_ecc,
        nsize=(1 << word_size) - 1,
        fcr=1,
        prim=PRIMITIVE_POLYS[word_size],
        generator=2,
        c_exp=word_size,
    )
    return [int(w) for w in codec.encode(bytearray(data_words))]


def stuff_bits(bitstring, word_size):
    """Split message bits into codewords, never all zeros or all ones."""
    mask = (1 << word_size) - 2
    words = []
    i = 0
    n = len(bitstring)
    while i < n:
        word = 0
        for j in range(word_size):
            if i + j >= n or bitstring[i + j] == '1':
                word |= 1 << (word_size - 1 - j)
        if word & mask == mask:
            words.append(word & mask)
            i += word_size - 1
        elif word & mask == 0:
            words.append(word | 1)
            i += word_size - 1
        else:
            words.append(word)
            i += word_size
    return words


def layer_codewords(message_bits, compact, nb_layers):
    """Data words plus check words filling all layers."""
    word_size = codeword_size(nb_layers)
    data_words = stuff_bits(message_bits, word_size)
    total_words = total_bits_in_layers(compact, nb_layers) // word_size
    return data_words, rs_encode(data_words, total_words - len(data_words), word_size)


def codewords_to_rawbits(codewords, compact, nb_layers):
    word_size = codeword_size(nb_layers)
    offset = total_bits_in_layers(compact, nb_layers) % word_size
    return '0' * offset + ''.join(format(w, f'0{word_size}b') for w in codewords)


def place_bits(rawbits, compact, nb_layers):
    matrix = BitMatrix(matrix_size(compact, nb_layers))
    for bit, (x, y) in zip(rawbits, bit_positions(compact, nb_layers)):
        if bit == '1':
            matrix.set(x, y)
    return matrix


def build_symbol(message_bits, compact, nb_layers, corrupt=(), mirrored=False):
    """
    Encode message_bits into a sampled symbol. corrupt lists codeword indexes
    to damage.
    """
    word_size = codeword_size(nb_layers)
    data_words, codewords = layer_codewords(message_bits, compact, nb_layers)
    for index in corrupt:
        codewords[index] ^= (index % ((1 << word_size) - 1)) + 1
    matrix = place_bits(codewords_to_rawbits(codewords, compact, nb_layers), compact, nb_layers)
    if mirrored:
        matrix = matrix.transposed()
    return DetectorResult(matrix, compact, len(data_words), nb_layers, is_mirrored=mirrored)
