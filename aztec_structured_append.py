"""
Structured Append field parsing (ISO/IEC 24778:2008 section 8).

A symbol that starts with ML UL carries, at the front of its data:

    [" " <id> " "] <index letter> <count letter>

Anything that does not match is left in the decoded text untouched.
"""

from aztec_result import StructuredAppendInfo

ML_CODE = 29
UL_CODE = 29


def has_structured_append_header(bits):
    """ML followed by UL as the first two 5-bit codes, with data after them."""
    return len(bits) > 20 and bits.read_bits(0, 5) == ML_CODE and bits.read_bits(5, 5) == UL_CODE


def _is_letter(value):
    return ord('A') <= value <= ord('Z')


def _read_id(data):
    """
    Returns (id, sequence start) for a space delimited id, ('', 0) when there
    is none, or None when the id has no terminating space.
    """
    if data[0] != ord(' '):
        return '', 0
    end = data.find(b' ', 1)
    if end == -1:
        return None
    return data[1:end].decode('latin-1'), end + 1


def _read_sequence(data, start):
    """Returns (index, count) from two letters at start, or None."""
    if start + 1 >= len(data) or not _is_letter(data[start]) or not _is_letter(data[start + 1]):
        return None
    index = data[start] - ord('A')
    count = data[start + 1] - ord('A') + 1
    if count == 1 or count <= index:
        # count makes no sense, report it as unknown
        count = 0
    return index, count


def parse_structured_append(content):
    """
    Parse and strip the structured append prefix from content.

    Returns the default StructuredAppendInfo (index and count -1) when the
    prefix is malformed, in which case content is not modified.
    """
    data = bytes(content.bytes)
    if not data:
        return StructuredAppendInfo()

    id_field = _read_id(data)
    if id_field is None:
        return StructuredAppendInfo()
    sa_id, start = id_field

    sequence = _read_sequence(data, start)
    if sequence is None:
        return StructuredAppendInfo()
    index, count = sequence

    content.erase(0, start + 2)
    return StructuredAppendInfo(index=index, count=count, id=sa_id)
