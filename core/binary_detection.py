"""
Binary Detection - Phat hien binary content dua tren prefix bytes cua file.

Module chua cac ham phat hien binary tren mot chunk bytes (da doc san):
- looks_binary(): Kiem tra day du, dung boi classifier
- _has_null_bytes(): NUL byte -> binary
- _check_magic_numbers(): Kiem tra magic number header qua filetype
- _is_valid_utf8_prefix(): Prefix co decode duoc UTF-8 khong (cho phep cat giua ky tu)
- _analyze_byte_content(): Phan tich ty le non-printable chars

Ham o day KHONG tu mo file: classifier doc prefix mot lan
va truyen bytes vao, de khong phai doc lai tu dau.
"""

import codecs

import filetype

# Ty le non-printable toi da truoc khi coi la binary
NON_PRINTABLE_THRESHOLD = 0.3


def _has_null_bytes(chunk: bytes) -> bool:
    """File text hop le khong chua NUL byte."""
    return b"\x00" in chunk


def _check_magic_numbers(chunk: bytes) -> bool:
    """
    Kiem tra chunk bat dau bang known binary magic numbers.

    Dung filetype (images, archives, executables, fonts, media...).

    Args:
        chunk: Du lieu bytes can kiem tra

    Returns:
        True neu chunk khop voi mot signature binary
    """
    return filetype.guess(chunk) is not None


def _is_valid_utf8_prefix(chunk: bytes) -> bool:
    """
    Kiem tra chunk co phai UTF-8 hop le khong.

    Chunk la prefix cua file nen co the bi cat giua mot ky tu multi-byte:
    dung incremental decoder voi final=False de khong coi do la loi.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        decoder.decode(chunk, final=False)
        return True
    except UnicodeDecodeError:
        return False


def _analyze_byte_content(chunk: bytes) -> bool:
    """
    Phan tich noi dung bytes de phat hien binary.

    Tieu chi: > 30% non-printable characters -> binary.
    Tab, LF, CR, FF va cac byte >= 0x80 (text legacy encoding) khong tinh.

    Args:
        chunk: Du lieu bytes can phan tich

    Returns:
        True neu noi dung co dac diem binary
    """
    if len(chunk) == 0:
        return False

    non_printable_count = sum(
        1 for byte in chunk if (byte < 32 and byte not in (9, 10, 12, 13)) or byte == 127
    )
    return non_printable_count > len(chunk) * NON_PRINTABLE_THRESHOLD


def looks_binary(chunk: bytes) -> bool:
    """
    Kiem tra xem prefix cua file co phai la binary khong.

    Logic:
    1. Chunk rong -> text (file rong)
    2. Co NUL byte -> binary
    3. UTF-8 hop le -> text
    4. Khop magic number (PNG, ZIP, ELF, PDF...) -> binary
    5. Con lai: phan tich ty le non-printable

    Args:
        chunk: Prefix bytes cua file (thuong 1024 bytes dau)

    Returns:
        True neu data la binary
    """
    if len(chunk) == 0:
        return False

    if _has_null_bytes(chunk):
        return True

    # Text hop le co the trung signature ngan (vd: "BM", "MZ")
    if _is_valid_utf8_prefix(chunk):
        return False

    if _check_magic_numbers(chunk):
        return True

    return _analyze_byte_content(chunk)
