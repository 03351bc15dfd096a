"""
Character to UTF-8 byte offset mapping.

Dependencies: None
System role: Byte provenance for document chunks
"""


def compute_char_to_byte_offsets(text: str) -> list[int]:
    """
    Map every character position of text to its UTF-8 byte position.

    Python strings are indexed by code point, so a character outside the
    basic plane occupies one index and contributes four bytes. Lone
    surrogates are counted with surrogatepass (three bytes) instead of
    raising.

    Args:
        text: Decoded document text

    Returns:
        list[int]: offsets of length len(text) + 1 where offsets[i] is the
            byte length of text[:i]
    """
    offsets = [0] * (len(text) + 1)
    byte_count = 0
    for i, char in enumerate(text):
        offsets[i] = byte_count
        byte_count += len(char.encode("utf-8", "surrogatepass"))
    offsets[len(text)] = byte_count
    return offsets
