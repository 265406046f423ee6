"""Turning a validated DDS container into texture descriptions and subresources."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from os import PathLike

from .errors import DdsError, EndOfDataError, InvalidDataError, NotSupportedError
from .formats import DxgiFormat, bits_per_pixel, make_srgb, surface_info
from .header import (
    DDS_CUBEMAP,
    DDS_CUBEMAP_ALLFACES,
    DDS_HEADER_FLAGS_VOLUME,
    DDS_HEIGHT,
    RESOURCE_MISC_TEXTURECUBE,
    AlphaMode,
    DdsFile,
    ResourceDimension,
    alpha_mode,
    dxgi_format_from_pixel_format,
    parse_dds,
    read_dds,
)

__all__ = [
    "FeatureLevel",
    "Subresource",
    "MipChain",
    "TextureDescription",
    "Texture",
    "fill_subresources",
    "describe_texture",
    "max_size_for_feature_level",
    "load_texture",
    "create_texture_from_memory",
    "create_texture_from_file",
]

_UINT32_MAX = 0xFFFFFFFF

# Hardware limits that DDS metadata is not trusted beyond.
REQ_MIP_LEVELS = 15
REQ_TEXTURE1D_ARRAY_AXIS_DIMENSION = 2048
REQ_TEXTURE1D_U_DIMENSION = 16384
REQ_TEXTURE2D_ARRAY_AXIS_DIMENSION = 2048
REQ_TEXTURE2D_U_OR_V_DIMENSION = 16384
REQ_TEXTURECUBE_DIMENSION = 16384
REQ_TEXTURE3D_U_V_OR_W_DIMENSION = 2048

_PALETTED = frozenset(
    {DxgiFormat.AI44, DxgiFormat.IA44, DxgiFormat.P8, DxgiFormat.A8P8}
)


class FeatureLevel(IntEnum):
    """Graphics hardware feature levels."""

    LEVEL_9_1 = 0x9100
    LEVEL_9_2 = 0x9200
    LEVEL_9_3 = 0x9300
    LEVEL_10_0 = 0xA000
    LEVEL_10_1 = 0xA100
    LEVEL_11_0 = 0xB000
    LEVEL_11_1 = 0xB100
    LEVEL_12_0 = 0xC000
    LEVEL_12_1 = 0xC100


@dataclass(frozen=True)
class Subresource:
    """Pixel data of one mip level of one array item, with its pitches."""

    data: bytes
    row_pitch: int
    slice_pitch: int


@dataclass(frozen=True)
class MipChain:
    """The subresources kept after size limiting, and the top level's size."""

    width: int
    height: int
    depth: int
    skip_mip: int
    subresources: tuple[Subresource, ...]


@dataclass(frozen=True)
class TextureDescription:
    """Shape and format of a texture as declared by a DDS file."""

    dimension: ResourceDimension
    width: int
    height: int
    depth: int
    mip_count: int
    array_size: int
    format: DxgiFormat
    is_cube_map: bool


@dataclass(frozen=True)
class Texture:
    """A texture ready for upload: its description, data and alpha mode."""

    description: TextureDescription
    subresources: tuple[Subresource, ...]
    alpha_mode: AlphaMode


def fill_subresources(
    width: int,
    height: int,
    depth: int,
    mip_count: int,
    array_size: int,
    fmt: int,
    max_size: int,
    bits: bytes,
) -> MipChain:
    """Split pixel data into subresources, skipping mips larger than ``max_size``.

    A ``max_size`` of 0 keeps every mip level.
    """
    bits = bytes(bits)
    end = len(bits)
    offset = 0
    top: tuple[int, int, int] | None = None
    skip_mip = 0
    subresources: list[Subresource] = []

    for item in range(array_size):
        w, h, d = width, height, depth
        for _ in range(mip_count):
            info = surface_info(w, h, fmt)
            if info.num_bytes > _UINT32_MAX or info.row_bytes > _UINT32_MAX:
                raise DdsError("surface size overflows 32 bits")

            size = info.num_bytes * d
            fits = mip_count <= 1 or not max_size or (
                w <= max_size and h <= max_size and d <= max_size
            )
            if fits:
                if top is None:
                    top = (w, h, d)
                subresources.append(
                    Subresource(
                        data=bits[offset:offset + size],
                        row_pitch=info.row_bytes,
                        slice_pitch=info.num_bytes,
                    )
                )
            elif item == 0:
                skip_mip += 1

            if offset + size > end:
                raise EndOfDataError("pixel data ends before the mip chain does")
            offset += size

            w = max(w >> 1, 1)
            h = max(h >> 1, 1)
            d = max(d >> 1, 1)

    if not subresources or top is None:
        raise DdsError("no mip level fits within the size limit")
    return MipChain(
        width=top[0],
        height=top[1],
        depth=top[2],
        skip_mip=skip_mip,
        subresources=tuple(subresources),
    )


def _describe_dx10(dds: DdsFile, width: int, height: int, depth: int,
                   mip_count: int) -> TextureDescription:
    ext = dds.dxt10
    if ext is None:
        raise InvalidDataError("DX10 FourCC without a DX10 header")

    array_size = ext.array_size
    if array_size == 0:
        raise InvalidDataError("DX10 header declares an array size of zero")

    if ext.dxgi_format in _PALETTED or bits_per_pixel(ext.dxgi_format) == 0:
        raise NotSupportedError(f"DXGI format {ext.dxgi_format} is not supported")
    fmt = DxgiFormat(ext.dxgi_format)

    is_cube_map = False
    header = dds.header
    if ext.resource_dimension == ResourceDimension.TEXTURE1D:
        if header.flags & DDS_HEIGHT and height != 1:
            raise InvalidDataError("1D texture with a height other than 1")
        height = depth = 1
    elif ext.resource_dimension == ResourceDimension.TEXTURE2D:
        if ext.misc_flag & RESOURCE_MISC_TEXTURECUBE:
            array_size *= 6
            is_cube_map = True
        depth = 1
    elif ext.resource_dimension == ResourceDimension.TEXTURE3D:
        if not header.flags & DDS_HEADER_FLAGS_VOLUME:
            raise InvalidDataError("3D texture without the volume flag")
        if array_size > 1:
            raise NotSupportedError("3D texture arrays are not supported")
    else:
        raise NotSupportedError(
            f"resource dimension {ext.resource_dimension} is not supported"
        )

    return TextureDescription(
        dimension=ResourceDimension(ext.resource_dimension),
        width=width,
        height=height,
        depth=depth,
        mip_count=mip_count,
        array_size=array_size,
        format=fmt,
        is_cube_map=is_cube_map,
    )


def _describe_legacy(dds: DdsFile, width: int, height: int, depth: int,
                     mip_count: int) -> TextureDescription:
    header = dds.header
    fmt = dxgi_format_from_pixel_format(header.pixel_format)
    if fmt is DxgiFormat.UNKNOWN:
        raise NotSupportedError("pixel format has no DXGI equivalent")

    array_size = 1
    is_cube_map = False
    if header.flags & DDS_HEADER_FLAGS_VOLUME:
        dimension = ResourceDimension.TEXTURE3D
    else:
        if header.caps2 & DDS_CUBEMAP:
            if header.caps2 & DDS_CUBEMAP_ALLFACES != DDS_CUBEMAP_ALLFACES:
                raise NotSupportedError("cube map does not define all six faces")
            array_size = 6
            is_cube_map = True
        depth = 1
        dimension = ResourceDimension.TEXTURE2D

    return TextureDescription(
        dimension=dimension,
        width=width,
        height=height,
        depth=depth,
        mip_count=mip_count,
        array_size=array_size,
        format=fmt,
        is_cube_map=is_cube_map,
    )


def _check_bounds(desc: TextureDescription) -> None:
    if desc.mip_count > REQ_MIP_LEVELS:
        raise NotSupportedError("too many mip levels")

    if desc.dimension == ResourceDimension.TEXTURE1D:
        too_big = (desc.array_size > REQ_TEXTURE1D_ARRAY_AXIS_DIMENSION
                   or desc.width > REQ_TEXTURE1D_U_DIMENSION)
    elif desc.dimension == ResourceDimension.TEXTURE2D:
        limit = (REQ_TEXTURECUBE_DIMENSION if desc.is_cube_map
                 else REQ_TEXTURE2D_U_OR_V_DIMENSION)
        too_big = (desc.array_size > REQ_TEXTURE2D_ARRAY_AXIS_DIMENSION
                   or desc.width > limit or desc.height > limit)
    elif desc.dimension == ResourceDimension.TEXTURE3D:
        limit = REQ_TEXTURE3D_U_V_OR_W_DIMENSION
        too_big = (desc.array_size > 1 or desc.width > limit
                   or desc.height > limit or desc.depth > limit)
    else:
        raise NotSupportedError("unsupported resource dimension")

    if too_big:
        raise NotSupportedError("texture exceeds hardware size limits")


def describe_texture(dds: DdsFile) -> TextureDescription:
    """Work out and validate the texture shape a DDS file declares."""
    header = dds.header
    mip_count = header.mip_map_count or 1
    args = (dds, header.width, header.height, header.depth, mip_count)
    if header.pixel_format.is_dx10:
        desc = _describe_dx10(*args)
    else:
        desc = _describe_legacy(*args)
    _check_bounds(desc)
    return desc


def max_size_for_feature_level(
    feature_level: FeatureLevel | int,
    dimension: ResourceDimension | int,
    is_cube_map: bool,
) -> int:
    """Return the largest texture edge a feature level guarantees to support."""
    is_3d = dimension == ResourceDimension.TEXTURE3D
    if feature_level in (FeatureLevel.LEVEL_9_1, FeatureLevel.LEVEL_9_2):
        if is_cube_map:
            return 512
        return 256 if is_3d else 2048
    if feature_level == FeatureLevel.LEVEL_9_3:
        return 256 if is_3d else 4096
    return 2048 if is_3d else 8192


def load_texture(dds: DdsFile, max_size: int = 0, force_srgb: bool = False) -> Texture:
    """Build a texture from a parsed DDS file.

    Mip levels larger than ``max_size`` in any dimension are dropped; 0 keeps all.
    With ``force_srgb`` the format is replaced by its sRGB variant where one exists.
    """
    desc = describe_texture(dds)
    chain = fill_subresources(
        desc.width,
        desc.height,
        desc.depth,
        desc.mip_count,
        desc.array_size,
        desc.format,
        max_size,
        dds.bits,
    )
    fmt = DxgiFormat(make_srgb(desc.format)) if force_srgb else desc.format
    final = replace(
        desc,
        width=chain.width,
        height=chain.height,
        depth=chain.depth,
        mip_count=desc.mip_count - chain.skip_mip,
        format=fmt,
    )
    return Texture(
        description=final,
        subresources=chain.subresources,
        alpha_mode=alpha_mode(dds),
    )


def create_texture_from_memory(
    data: bytes | bytearray | memoryview,
    max_size: int = 0,
    force_srgb: bool = False,
) -> Texture:
    """Parse DDS data held in memory and build a texture from it."""
    return load_texture(parse_dds(data), max_size, force_srgb)


def create_texture_from_file(
    path: str | PathLike[str],
    max_size: int = 0,
    force_srgb: bool = False,
) -> Texture:
    """Read a DDS file from disk and build a texture from it."""
    return load_texture(read_dds(path), max_size, force_srgb)