"""
Reed-Solomon error correction for Aztec codewords.

Aztec uses one Galois field per codeword size, all with generator base 1:
the first codeword is the highest degree coefficient of the received
polynomial and the check symbols vanish at alpha^1 .. alpha^nEC.
"""

import logging

from aztec_bit_array import BitArray
from aztec_errors import ChecksumError, FormatError
from aztec_extraction import codeword_size, read_codewords

logger = logging.getLogger(__name__)


# Galois Field GF(2^m) utilities
class GaloisField:
    def __init__(self, prim_poly, size, generator_base=1):
        self.prim_poly = prim_poly
        self.size = size
        self.generator_base = generator_base
        self.exp = [0] * size
        self.log = [0] * size
        self._build_tables()

    def _build_tables(self):
        x = 1
        for i in range(self.size):
            self.exp[i] = x
            x <<= 1
            if x >= self.size:
                x ^= self.prim_poly
                x &= self.size - 1
        for i in range(self.size - 1):
            self.log[self.exp[i]] = i

    def __repr__(self):
        return f"GF(0x{self.prim_poly:x}, {self.size})"

    def add(self, a, b):
        return a ^ b

    def multiply(self, a, b):
        if a == 0 or b == 0:
            return 0
        return self.exp[(self.log[a] + self.log[b]) % (self.size - 1)]

    def divide(self, a, b):
        if b == 0:
            raise ZeroDivisionError("Division by zero")
        if a == 0:
            return 0
        return self.exp[(self.log[a] - self.log[b]) % (self.size - 1)]

    def inverse(self, a):
        if a == 0:
            raise ZeroDivisionError("No inverse for 0")
        return self.exp[self.size - 1 - self.log[a]]

    def power(self, exponent):
        """alpha ** exponent, exponent may be negative."""
        return self.exp[exponent % (self.size - 1)]


AZTEC_PARAM = GaloisField(0x13, 16)
AZTEC_DATA_6 = GaloisField(0x43, 64)
AZTEC_DATA_8 = GaloisField(0x12D, 256)
AZTEC_DATA_10 = GaloisField(0x409, 1024)
AZTEC_DATA_12 = GaloisField(0x1069, 4096)

FIELDS_BY_WORD_SIZE = {
    4: AZTEC_PARAM,
    6: AZTEC_DATA_6,
    8: AZTEC_DATA_8,
    10: AZTEC_DATA_10,
    12: AZTEC_DATA_12,
}


def evaluate_poly(gf, coefficients, x):
    """Evaluate a polynomial given lowest degree first."""
    result = 0
    for coeff in reversed(coefficients):
        result = gf.add(gf.multiply(result, x), coeff)
    return result


def compute_syndrome(gf, codewords, num_ecc):
    """
    S_i = R(alpha^(i + base)) with R's highest degree coefficient first.
    """
    syndrome = [0] * num_ecc
    for i in range(num_ecc):
        x = gf.power(i + gf.generator_base)
        value = 0
        for word in codewords:
            value = gf.add(gf.multiply(value, x), word)
        syndrome[i] = value
    return syndrome


def berlekamp_massey(gf, syndrome):
    """
    Error locator polynomial (lowest degree first) and its linear complexity.
    """
    locator = [1]
    previous = [1]
    length = 0
    shift = 1
    last_discrepancy = 1

    for n in range(len(syndrome)):
        discrepancy = syndrome[n]
        for i in range(1, length + 1):
            if i < len(locator):
                discrepancy = gf.add(discrepancy, gf.multiply(locator[i], syndrome[n - i]))

        if discrepancy == 0:
            shift += 1
            continue

        scale = gf.divide(discrepancy, last_discrepancy)
        update = [0] * shift + [gf.multiply(scale, c) for c in previous]
        candidate = locator + [0] * (len(update) - len(locator))
        for i, c in enumerate(update):
            candidate[i] = gf.add(candidate[i], c)

        if 2 * length <= n:
            previous = locator
            length = n + 1 - length
            last_discrepancy = discrepancy
            shift = 1
        else:
            shift += 1
        locator = candidate

    while len(locator) > 1 and locator[-1] == 0:
        locator.pop()
    return locator, length


def chien_search(gf, error_locator, num_codewords):
    """
    Indexes of codewords whose locator X = alpha^(n-1-index) is a root of
    the locator's reciprocal. Only positions inside the block are searched.
    """
    error_positions = []
    for index in range(num_codewords):
        degree = num_codewords - 1 - index
        if evaluate_poly(gf, error_locator, gf.power(-degree)) == 0:
            error_positions.append(index)
    return error_positions


def forney_algorithm(gf, syndrome, error_locator, error_positions, num_codewords):
    """
    Compute error magnitudes e = X^(1-base) * Omega(X^-1) / Lambda'(X^-1).
    """
    num_ecc = len(syndrome)
    omega = [0] * num_ecc
    for i in range(num_ecc):
        for j, coeff in enumerate(error_locator):
            if i + j < num_ecc:
                omega[i + j] = gf.add(omega[i + j], gf.multiply(coeff, syndrome[i]))

    # formal derivative in characteristic 2 keeps the odd terms
    derivative = [error_locator[i] if i % 2 == 1 else 0 for i in range(1, len(error_locator))]

    error_magnitudes = []
    for index in error_positions:
        degree = num_codewords - 1 - index
        x_inverse = gf.power(-degree)
        denominator = evaluate_poly(gf, derivative, x_inverse)
        if denominator == 0:
            raise ChecksumError(f"Locator derivative vanishes at position {index}")
        magnitude = gf.divide(evaluate_poly(gf, omega, x_inverse), denominator)
        magnitude = gf.multiply(magnitude, gf.power(degree * (1 - gf.generator_base)))
        error_magnitudes.append(magnitude)
    return error_magnitudes


def reed_solomon_correction(codewords, num_ecc, gf):
    """
    Correct codewords in GF(gf) carrying num_ecc check symbols.

    Returns the corrected codeword list (data and check words). Raises
    ChecksumError when more than num_ecc // 2 symbols are wrong or the
    located errors do not fall inside the block.
    """
    codewords = list(codewords)

    # Stage 1: Syndromes
    syndrome = compute_syndrome(gf, codewords, num_ecc)
    syndrome_weight = sum(1 for s in syndrome if s != 0)
    logger.debug(f"Syndrome weight {syndrome_weight}/{num_ecc} over {gf}")
    if syndrome_weight == 0:
        return codewords

    # Stage 2: Error Locator Polynomial
    error_locator, error_count = berlekamp_massey(gf, syndrome)
    logger.debug(f"Error Locator Polynomial: {error_locator}")
    if 2 * error_count > num_ecc or len(error_locator) - 1 != error_count:
        raise ChecksumError(f"Too many errors: locator degree {error_count} exceeds {num_ecc // 2}")

    # Stage 3: Find Error Positions
    error_positions = chien_search(gf, error_locator, len(codewords))
    logger.debug(f"Error Positions: {error_positions}")
    if len(error_positions) != error_count:
        raise ChecksumError(f"Located {len(error_positions)} error positions, expected {error_count}")

    # Stage 4: Compute Error Magnitudes
    error_magnitudes = forney_algorithm(gf, syndrome, error_locator, error_positions, len(codewords))
    logger.debug(f"Error Magnitudes: {error_magnitudes}")

    # Stage 5: Apply Corrections
    corrected = codewords.copy()
    for pos, mag in zip(error_positions, error_magnitudes):
        corrected[pos] = gf.add(corrected[pos], mag)

    # Stage 6: Validate by recomputing syndrome
    if any(compute_syndrome(gf, corrected, num_ecc)):
        raise ChecksumError("Residual syndrome after correction")

    for pos in error_positions:
        logger.debug(f"Codeword {pos}: Original {codewords[pos]} -> Corrected {corrected[pos]}")
    logger.info(f"Corrected {len(error_positions)} codeword error(s) using {num_ecc} check words")
    return corrected


def correct_bits(rawbits, nb_layers, nb_datablocks):
    """
    Run error correction on the raw layer bits and return the data bits with
    the bit stuffing removed.
    """
    word_size = codeword_size(nb_layers)
    gf = FIELDS_BY_WORD_SIZE[word_size]

    codewords = read_codewords(rawbits, word_size)
    num_ecc = len(codewords) - nb_datablocks
    if num_ecc < 0:
        raise FormatError(f"Invalid number of code words: {nb_datablocks} data words in {len(codewords)}")

    corrected = reed_solomon_correction(codewords, num_ecc, gf)
    data_words = corrected[:nb_datablocks]

    # Unstuff: a word whose first word_size-1 bits are equal carries only those bits
    mask = (1 << word_size) - 1
    bits = BitArray()
    for word in data_words:
        if word == 0 or word == mask:
            raise FormatError(f"Invalid data word {word:0{word_size}b}")
        elif word == 1 or word == mask - 1:
            bits.append_bits(mask >> 1 if word > 1 else 0, word_size - 1)
        else:
            bits.append_bits(word, word_size)
    return bits
