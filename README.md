# ddsload

A small, dependency-free reader for DDS (DirectDraw Surface) texture files.
It validates the file header, works out the DXGI pixel format (from either
the legacy pixel-format block or the DX10 extension header), checks the
declared shape against hardware size limits, and splits the pixel data into
per-array-item, per-mip subresources with their row and slice pitches.
The result is plain Python data that you can hand to whatever renderer you use.

## Installation

```
pip install ddsload
```

## Usage

Load a texture from a file or from bytes:

```python
from ddsload.loader import create_texture_from_file, create_texture_from_memory

texture = create_texture_from_file("stone.dds")
desc = texture.description
print(desc.dimension, desc.format, desc.width, desc.height, desc.depth)
print(desc.mip_count, desc.array_size, desc.is_cube_map)
for sub in texture.subresources:
    print(sub.row_pitch, sub.slice_pitch, len(sub.data))
print(texture.alpha_mode)
```

Subresources are ordered array item by array item, and within each item from
the largest mip level down. A cube map has six array items per cube.

Pass `max_size` to drop the top mip levels that exceed a size limit in any
dimension (0, the default, keeps every level; a texture with a single mip
level is never trimmed), and `force_srgb=True` to switch the format to its
sRGB variant where one exists:

```python
texture = create_texture_from_memory(data, max_size=1024, force_srgb=True)
```

A suitable `max_size` for a given class of hardware comes from
`max_size_for_feature_level`:

```python
from ddsload.header import ResourceDimension
from ddsload.loader import FeatureLevel, max_size_for_feature_level

max_size_for_feature_level(FeatureLevel.LEVEL_9_3, ResourceDimension.TEXTURE2D, False)  # 4096
```

The steps are also available one by one: `parse_dds` / `read_dds` to
validate the container, `describe_texture` to work out its shape, and
`fill_subresources` to cut the pixel data into a `MipChain`; `load_texture`
runs the last two on a parsed `DdsFile`.

### Headers

```python
from ddsload.header import parse_dds, alpha_mode, dxgi_format_from_pixel_format

dds = parse_dds(data)
print(dds.header.width, dds.header.height, dds.header.mip_map_count)
print(dds.dxt10)            # None unless the file carries a DX10 header
print(dxgi_format_from_pixel_format(dds.header.pixel_format))
print(alpha_mode(dds))
print(len(dds.bits))        # pixel data following the headers
```

`make_fourcc("DXT5")` packs a four-character code into its integer form.

### Formats

```python
from ddsload.formats import DxgiFormat, bits_per_pixel, surface_info, make_srgb

bits_per_pixel(DxgiFormat.BC1_UNORM)                 # 4
info = surface_info(256, 256, DxgiFormat.BC3_UNORM)
info.num_bytes, info.row_bytes, info.num_rows
make_srgb(DxgiFormat.R8G8B8A8_UNORM)                 # DxgiFormat.R8G8B8A8_UNORM_SRGB
```

## Errors

Failures while reading DDS data raise `ddsload.errors.DdsError` or one of its
subclasses:

- `DdsError` itself for a missing magic number, data too short for the
  headers, surfaces too large for 32-bit sizes, or no mip level within
  `max_size`;
- `InvalidDataError` for inconsistent headers (an array size of zero, a 1D
  texture with a height other than 1, a 3D texture without the volume flag);
- `NotSupportedError` for formats, dimensions or sizes outside the supported
  range, including paletted formats and cube maps missing faces;
- `EndOfDataError` when the pixel data is shorter than the header promises.

`read_dds` and `create_texture_from_file` let `OSError` through when the file
cannot be opened, and `make_fourcc` raises `ValueError` for a code that is not
four characters long.

## What it does not do

- It does not create textures on a graphics device or upload data to one.
- It does not generate missing mip levels.
- It does not decode block-compressed or other pixel data into colours; the
  subresources hold the bytes exactly as stored in the file.
- It does not write DDS files.
- It has no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```