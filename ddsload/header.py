"""Parsing of the DDS container: magic number, header and DX10 extension."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from os import PathLike
from pathlib import Path

from .errors import DdsError
from .formats import DxgiFormat

__all__ = [
    "AlphaMode",
    "ResourceDimension",
    "PixelFormat",
    "DdsHeader",
    "Dxt10Header",
    "DdsFile",
    "make_fourcc",
    "parse_dds",
    "read_dds",
    "dxgi_format_from_pixel_format",
    "alpha_mode",
    "DDS_MAGIC",
    "DDS_FOURCC",
    "DDS_RGB",
    "DDS_LUMINANCE",
    "DDS_ALPHA",
    "DDS_BUMPDUDV",
    "DDS_HEADER_FLAGS_VOLUME",
    "DDS_HEIGHT",
    "DDS_CUBEMAP",
    "DDS_CUBEMAP_ALLFACES",
    "RESOURCE_MISC_TEXTURECUBE",
]

DDS_MAGIC = 0x20534444  # "DDS "

# Pixel format flags.
DDS_FOURCC = 0x00000004
DDS_RGB = 0x00000040
DDS_LUMINANCE = 0x00020000
DDS_ALPHA = 0x00000002
DDS_BUMPDUDV = 0x00080000

# Header flags.
DDS_HEADER_FLAGS_VOLUME = 0x00800000
DDS_HEIGHT = 0x00000002

# caps2 flags.
DDS_CUBEMAP = 0x00000200
DDS_CUBEMAP_ALLFACES = (
    0x00000600 | 0x00000A00 | 0x00001200 | 0x00002200 | 0x00004200 | 0x00008200
)

# DX10 extension misc flag marking a cube map.
RESOURCE_MISC_TEXTURECUBE = 0x4

_ALPHA_MODE_MASK = 0x7

_MAGIC = struct.Struct("<I")
_HEADER = struct.Struct("<7I11I8I5I")
_DXT10 = struct.Struct("<5I")

HEADER_SIZE = _HEADER.size
PIXEL_FORMAT_SIZE = 32
DXT10_SIZE = _DXT10.size
_UINT32_MAX = 0xFFFFFFFF


class AlphaMode(IntEnum):
    """How the alpha channel of a texture is to be interpreted."""

    UNKNOWN = 0
    STRAIGHT = 1
    PREMULTIPLIED = 2
    OPAQUE = 3
    CUSTOM = 4


class ResourceDimension(IntEnum):
    """Resource dimension as stored in the DX10 extension header."""

    UNKNOWN = 0
    BUFFER = 1
    TEXTURE1D = 2
    TEXTURE2D = 3
    TEXTURE3D = 4


def make_fourcc(code: str | bytes) -> int:
    """Pack a four-character code into its little-endian integer form."""
    raw = code.encode("latin-1") if isinstance(code, str) else bytes(code)
    if len(raw) != 4:
        raise ValueError(f"a FourCC has exactly four characters, got {code!r}")
    return int.from_bytes(raw, "little")


_FOURCC_DX10 = make_fourcc("DX10")


@dataclass(frozen=True)
class PixelFormat:
    """The DDS_PIXELFORMAT block of a DDS header."""

    size: int
    flags: int
    fourcc: int
    rgb_bit_count: int
    r_mask: int
    g_mask: int
    b_mask: int
    a_mask: int

    @property
    def masks(self) -> tuple[int, int, int, int]:
        """The red, green, blue and alpha bit masks."""
        return (self.r_mask, self.g_mask, self.b_mask, self.a_mask)

    @property
    def is_dx10(self) -> bool:
        """True if the format is given by a DX10 extension header."""
        return bool(self.flags & DDS_FOURCC) and self.fourcc == _FOURCC_DX10


@dataclass(frozen=True)
class DdsHeader:
    """The fixed 124-byte DDS header."""

    size: int
    flags: int
    height: int
    width: int
    pitch_or_linear_size: int
    depth: int
    mip_map_count: int
    pixel_format: PixelFormat
    caps: int
    caps2: int
    caps3: int
    caps4: int


@dataclass(frozen=True)
class Dxt10Header:
    """The DX10 extension header that follows the DDS header."""

    dxgi_format: int
    resource_dimension: int
    misc_flag: int
    array_size: int
    misc_flags2: int


@dataclass(frozen=True)
class DdsFile:
    """A validated DDS container: its headers and the pixel data after them."""

    header: DdsHeader
    dxt10: Dxt10Header | None
    bits: bytes


def parse_dds(data: bytes | bytearray | memoryview) -> DdsFile:
    """Validate DDS data in memory and split it into headers and pixel data."""
    data = bytes(data)
    if len(data) > _UINT32_MAX:
        raise DdsError("DDS data is larger than 4 GiB")
    if len(data) < _MAGIC.size + HEADER_SIZE:
        raise DdsError("DDS data is too short for the header")

    (magic,) = _MAGIC.unpack_from(data, 0)
    if magic != DDS_MAGIC:
        raise DdsError("missing DDS magic number")

    fields = _HEADER.unpack_from(data, _MAGIC.size)
    size, flags, height, width, pitch, depth, mips = fields[:7]
    pf_fields = fields[18:26]
    caps, caps2, caps3, caps4 = fields[26:30]
    pixel_format = PixelFormat(*pf_fields)

    if size != HEADER_SIZE or pixel_format.size != PIXEL_FORMAT_SIZE:
        raise DdsError("DDS header has the wrong size")

    header = DdsHeader(
        size=size,
        flags=flags,
        height=height,
        width=width,
        pitch_or_linear_size=pitch,
        depth=depth,
        mip_map_count=mips,
        pixel_format=pixel_format,
        caps=caps,
        caps2=caps2,
        caps3=caps3,
        caps4=caps4,
    )

    offset = _MAGIC.size + HEADER_SIZE
    dxt10 = None
    if pixel_format.is_dx10:
        if len(data) < offset + DXT10_SIZE:
            raise DdsError("DDS data is too short for the DX10 header")
        dxt10 = Dxt10Header(*_DXT10.unpack_from(data, offset))
        offset += DXT10_SIZE

    return DdsFile(header=header, dxt10=dxt10, bits=data[offset:])


def read_dds(path: str | PathLike[str]) -> DdsFile:
    """Read and validate a DDS file from disk."""
    with Path(path).open("rb") as stream:
        data = stream.read()
    return parse_dds(data)


F = DxgiFormat

_RGB_FORMATS: dict[tuple[int, tuple[int, int, int, int]], DxgiFormat] = {
    (32, (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000)): F.R8G8B8A8_UNORM,
    (32, (0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000)): F.B8G8R8A8_UNORM,
    (32, (0x00FF0000, 0x0000FF00, 0x000000FF, 0)): F.B8G8R8X8_UNORM,
    # Most writers swap red and blue masks for 10:10:10:2 data.
    (32, (0x3FF00000, 0x000FFC00, 0x000003FF, 0xC0000000)): F.R10G10B10A2_UNORM,
    (32, (0x0000FFFF, 0xFFFF0000, 0, 0)): F.R16G16_UNORM,
    (32, (0xFFFFFFFF, 0, 0, 0)): F.R32_FLOAT,
    (16, (0x7C00, 0x03E0, 0x001F, 0x8000)): F.B5G5R5A1_UNORM,
    (16, (0xF800, 0x07E0, 0x001F, 0)): F.B5G6R5_UNORM,
    (16, (0x0F00, 0x00F0, 0x000F, 0xF000)): F.B4G4R4A4_UNORM,
}

_LUMINANCE_FORMATS: dict[tuple[int, tuple[int, int, int, int]], DxgiFormat] = {
    (8, (0xFF, 0, 0, 0)): F.R8_UNORM,
    (8, (0x00FF, 0, 0, 0xFF00)): F.R8G8_UNORM,
    (16, (0xFFFF, 0, 0, 0)): F.R16_UNORM,
    (16, (0x00FF, 0, 0, 0xFF00)): F.R8G8_UNORM,
}

_BUMP_FORMATS: dict[tuple[int, tuple[int, int, int, int]], DxgiFormat] = {
    (16, (0x00FF, 0xFF00, 0, 0)): F.R8G8_SNORM,
    (32, (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000)): F.R8G8B8A8_SNORM,
    (32, (0x0000FFFF, 0xFFFF0000, 0, 0)): F.R16G16_SNORM,
}

_FOURCC_FORMATS: dict[int, DxgiFormat] = {
    make_fourcc("DXT1"): F.BC1_UNORM,
    make_fourcc("DXT3"): F.BC2_UNORM,
    make_fourcc("DXT5"): F.BC3_UNORM,
    # Premultiplied-alpha variants map onto the same block formats.
    make_fourcc("DXT2"): F.BC2_UNORM,
    make_fourcc("DXT4"): F.BC3_UNORM,
    make_fourcc("ATI1"): F.BC4_UNORM,
    make_fourcc("BC4U"): F.BC4_UNORM,
    make_fourcc("BC4S"): F.BC4_SNORM,
    make_fourcc("ATI2"): F.BC5_UNORM,
    make_fourcc("BC5U"): F.BC5_UNORM,
    make_fourcc("BC5S"): F.BC5_SNORM,
    make_fourcc("RGBG"): F.R8G8_B8G8_UNORM,
    make_fourcc("GRGB"): F.G8R8_G8B8_UNORM,
    make_fourcc("YUY2"): F.YUY2,
    # Legacy D3DFORMAT values stored directly in the FourCC field.
    36: F.R16G16B16A16_UNORM,
    110: F.R16G16B16A16_SNORM,
    111: F.R16_FLOAT,
    112: F.R16G16_FLOAT,
    113: F.R16G16B16A16_FLOAT,
    114: F.R32_FLOAT,
    115: F.R32G32_FLOAT,
    116: F.R32G32B32A32_FLOAT,
}

del F


def dxgi_format_from_pixel_format(pf: PixelFormat) -> DxgiFormat:
    """Map a legacy pixel format description to a DXGI format, or UNKNOWN."""
    key = (pf.rgb_bit_count, pf.masks)
    if pf.flags & DDS_RGB:
        return _RGB_FORMATS.get(key, DxgiFormat.UNKNOWN)
    if pf.flags & DDS_LUMINANCE:
        return _LUMINANCE_FORMATS.get(key, DxgiFormat.UNKNOWN)
    if pf.flags & DDS_ALPHA:
        return DxgiFormat.A8_UNORM if pf.rgb_bit_count == 8 else DxgiFormat.UNKNOWN
    if pf.flags & DDS_BUMPDUDV:
        return _BUMP_FORMATS.get(key, DxgiFormat.UNKNOWN)
    if pf.flags & DDS_FOURCC:
        return _FOURCC_FORMATS.get(pf.fourcc, DxgiFormat.UNKNOWN)
    return DxgiFormat.UNKNOWN


_PREMULTIPLIED_FOURCCS = frozenset({make_fourcc("DXT2"), make_fourcc("DXT4")})


def alpha_mode(dds: DdsFile) -> AlphaMode:
    """Return the alpha mode a DDS file declares."""
    pf = dds.header.pixel_format
    if not pf.flags & DDS_FOURCC:
        return AlphaMode.UNKNOWN
    if pf.fourcc == _FOURCC_DX10:
        if dds.dxt10 is None:
            return AlphaMode.UNKNOWN
        try:
            return AlphaMode(dds.dxt10.misc_flags2 & _ALPHA_MODE_MASK)
        except ValueError:
            return AlphaMode.UNKNOWN
    if pf.fourcc in _PREMULTIPLIED_FOURCCS:
        return AlphaMode.PREMULTIPLIED
    return AlphaMode.UNKNOWN