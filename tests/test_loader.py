import struct

import pytest

from ddsload.errors import DdsError, EndOfDataError, InvalidDataError, NotSupportedError
from ddsload.formats import DxgiFormat, surface_info
from ddsload.header import (
    DDS_CUBEMAP,
    DDS_CUBEMAP_ALLFACES,
    DDS_FOURCC,
    DDS_HEADER_FLAGS_VOLUME,
    DDS_HEIGHT,
    DDS_RGB,
    AlphaMode,
    ResourceDimension,
    make_fourcc,
    parse_dds,
)
from ddsload.loader import (
    FeatureLevel,
    create_texture_from_file,
    create_texture_from_memory,
    describe_texture,
    fill_subresources,
    load_texture,
    max_size_for_feature_level,
)

RGBA_MASKS = (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000)


def make_dds(width, height, *, mips=1, flags=0, pf_flags=DDS_RGB, fourcc=0,
             bit_count=32, masks=RGBA_MASKS, caps2=0, depth=0, dxt10=None,
             bits=b""):
    header = struct.pack(
        "<7I11I8I5I",
        124, flags, height, width, 0, depth, mips,
        *([0] * 11),
        32, pf_flags, fourcc, bit_count, *masks,
        0, caps2, 0, 0, 0,
    )
    ext = struct.pack("<5I", *dxt10) if dxt10 is not None else b""
    return struct.pack("<I", 0x20534444) + header + ext + bits


def dx10(width, height, dxt10, **kw):
    return make_dds(width, height, pf_flags=DDS_FOURCC,
                    fourcc=make_fourcc("DX10"), dxt10=dxt10, **kw)


def rgba_chain_bits(width, height, mips):
    total = 0
    w, h = width, height
    for _ in range(mips):
        total += surface_info(w, h, DxgiFormat.R8G8B8A8_UNORM).num_bytes
        w, h = max(w >> 1, 1), max(h >> 1, 1)
    return bytes(i % 251 for i in range(total))


def test_dxt1_single_block():
    data = make_dds(4, 4, pf_flags=DDS_FOURCC, fourcc=make_fourcc("DXT1"),
                    bits=bytes(range(8)))
    tex = create_texture_from_memory(data)
    assert tex.description.format is DxgiFormat.BC1_UNORM
    assert tex.description.dimension is ResourceDimension.TEXTURE2D
    assert len(tex.subresources) == 1
    assert tex.subresources[0].row_pitch == 8
    assert tex.subresources[0].data == bytes(range(8))


def test_force_srgb():
    data = make_dds(4, 4, pf_flags=DDS_FOURCC, fourcc=make_fourcc("DXT1"),
                    bits=bytes(8))
    tex = create_texture_from_memory(data, 0, True)
    assert tex.description.format is DxgiFormat.BC1_UNORM_SRGB


def test_full_mip_chain_covers_data():
    bits = rgba_chain_bits(8, 8, 4)
    tex = create_texture_from_memory(make_dds(8, 8, mips=4, bits=bits))
    assert tex.description.mip_count == 4
    assert len(tex.subresources) == 4
    assert b"".join(s.data for s in tex.subresources) == bits
    assert tex.description.width == 8


def test_max_size_skips_large_mips():
    bits = rgba_chain_bits(8, 8, 4)
    tex = create_texture_from_memory(make_dds(8, 8, mips=4, bits=bits), 4)
    full = create_texture_from_memory(make_dds(8, 8, mips=4, bits=bits))
    assert tex.description.width == 4
    assert tex.description.height == 4
    assert tex.description.mip_count == 3
    assert tex.subresources == full.subresources[1:]


def test_truncated_data():
    bits = rgba_chain_bits(8, 8, 4)[:-1]
    with pytest.raises(EndOfDataError):
        create_texture_from_memory(make_dds(8, 8, mips=4, bits=bits))


def test_all_mips_skipped():
    bits = rgba_chain_bits(8, 8, 2)
    with pytest.raises(DdsError):
        fill_subresources(8, 8, 1, 2, 1, DxgiFormat.R8G8B8A8_UNORM, 1, bits)


def test_fill_unknown_format():
    with pytest.raises(NotSupportedError):
        fill_subresources(4, 4, 1, 1, 1, DxgiFormat.UNKNOWN, 0, bytes(64))


def test_cube_map_requires_all_faces():
    data = make_dds(4, 4, caps2=DDS_CUBEMAP | 0x400, bits=bytes(64 * 6))
    with pytest.raises(NotSupportedError):
        create_texture_from_memory(data)


def test_cube_map_six_faces():
    face = surface_info(4, 4, DxgiFormat.R8G8B8A8_UNORM).num_bytes
    data = make_dds(4, 4, caps2=DDS_CUBEMAP_ALLFACES, bits=bytes(face * 6))
    tex = create_texture_from_memory(data)
    assert tex.description.is_cube_map
    assert tex.description.array_size == 6
    assert len(tex.subresources) == 6


def test_dx10_zero_array_size():
    data = dx10(4, 4, (DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE2D, 0, 0, 0))
    with pytest.raises(InvalidDataError):
        describe_texture(parse_dds(data))


def test_dx10_paletted_not_supported():
    data = dx10(4, 4, (DxgiFormat.P8, ResourceDimension.TEXTURE2D, 0, 1, 0))
    with pytest.raises(NotSupportedError):
        describe_texture(parse_dds(data))


def test_dx10_1d_with_height():
    data = dx10(4, 2, (DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE1D, 0, 1, 0),
                flags=DDS_HEIGHT)
    with pytest.raises(InvalidDataError):
        describe_texture(parse_dds(data))


def test_dx10_3d_without_volume_flag():
    data = dx10(4, 4, (DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE3D, 0, 1, 0),
                depth=2)
    with pytest.raises(InvalidDataError):
        describe_texture(parse_dds(data))


def test_dx10_volume_texture():
    data = dx10(4, 4, (DxgiFormat.R8G8B8A8_UNORM, ResourceDimension.TEXTURE3D, 0, 1, 0),
                depth=2, flags=DDS_HEADER_FLAGS_VOLUME)
    desc = describe_texture(parse_dds(data))
    assert desc.dimension is ResourceDimension.TEXTURE3D
    assert desc.depth == 2


def test_dx10_cube_flag_multiplies_array():
    data = dx10(4, 4, (DxgiFormat.BC7_UNORM, ResourceDimension.TEXTURE2D, 0x4, 2, 2))
    dds = parse_dds(data)
    desc = describe_texture(dds)
    assert desc.is_cube_map
    assert desc.array_size == 12


def test_too_many_mips():
    data = make_dds(4, 4, mips=16)
    with pytest.raises(NotSupportedError):
        describe_texture(parse_dds(data))


def test_too_wide():
    data = make_dds(16385, 1)
    with pytest.raises(NotSupportedError):
        describe_texture(parse_dds(data))


def test_unknown_legacy_format():
    data = make_dds(4, 4, bit_count=24, masks=(0xFF0000, 0xFF00, 0xFF, 0))
    with pytest.raises(NotSupportedError):
        create_texture_from_memory(data)


@pytest.mark.parametrize(
    "level, dimension, cube, expected",
    [
        (FeatureLevel.LEVEL_9_1, ResourceDimension.TEXTURE2D, True, 512),
        (FeatureLevel.LEVEL_9_2, ResourceDimension.TEXTURE3D, False, 256),
        (FeatureLevel.LEVEL_9_1, ResourceDimension.TEXTURE2D, False, 2048),
        (FeatureLevel.LEVEL_9_3, ResourceDimension.TEXTURE2D, False, 4096),
        (FeatureLevel.LEVEL_9_3, ResourceDimension.TEXTURE3D, False, 256),
        (FeatureLevel.LEVEL_10_0, ResourceDimension.TEXTURE2D, False, 8192),
        (FeatureLevel.LEVEL_11_0, ResourceDimension.TEXTURE3D, False, 2048),
    ],
)
def test_max_size_for_feature_level(level, dimension, cube, expected):
    assert max_size_for_feature_level(level, dimension, cube) == expected


def test_premultiplied_alpha_mode():
    data = make_dds(4, 4, pf_flags=DDS_FOURCC, fourcc=make_fourcc("DXT2"),
                    bits=bytes(16))
    tex = load_texture(parse_dds(data))
    assert tex.alpha_mode is AlphaMode.PREMULTIPLIED
    assert tex.description.format is DxgiFormat.BC2_UNORM


def test_file_matches_memory(tmp_path):
    bits = rgba_chain_bits(8, 4, 3)
    data = make_dds(8, 4, mips=3, bits=bits)
    path = tmp_path / "tex.dds"
    path.write_bytes(data)
    assert create_texture_from_file(path) == create_texture_from_memory(data)