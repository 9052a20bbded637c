# write Quake (version 1) and Half-Life (version 2) sprite files

import struct

from sprite import VERSION_QUAKE, VERSION_HALFLIFE, FRAME_SINGLE, FRAME_GROUP

MAGIC = b"IDSP"

def generate_header(sprite):
    # Header as bytestrings; Half-Life sprites also get their palette

    yield MAGIC
    yield struct.pack("<2i", sprite.version, sprite.alignment)
    if sprite.version == VERSION_HALFLIFE:
        yield struct.pack("<i", sprite.blendMode)
    yield struct.pack(
        "<f3ifi",
        sprite.radius,
        sprite.maxWidth, sprite.maxHeight,
        len(sprite.frames),
        0.0,  # beam length (unused)
        sprite.sync,
    )
    if sprite.version == VERSION_HALFLIFE:
        yield struct.pack("<H", len(sprite.palette))
        yield b"".join(sprite.palette)

def generate_image(sprite, image):
    yield struct.pack(
        "<4i",
        image.offsetX + sprite.offsetX, image.offsetY + sprite.offsetY,
        image.width, image.height,
    )
    yield image.raster

def generate_sprite(sprite):
    # generate a sprite file as bytestrings

    assert sprite.version in (VERSION_QUAKE, VERSION_HALFLIFE)
    yield from generate_header(sprite)

    for frame in sprite.frames:
        yield struct.pack("<i", frame.type)
        if frame.type == FRAME_SINGLE:
            yield from generate_image(sprite, frame.image)
        elif frame.type == FRAME_GROUP:
            yield struct.pack("<i", len(frame.images))
            yield struct.pack(f"<{len(frame.keys)}f", *frame.keys)
            for image in frame.images:
                yield from generate_image(sprite, image)
        else:
            raise ValueError(f"unknown frame type {frame.type}")

def write_sprite(sprite, handle):
    # write a sprite to a file opened in binary mode; return number of bytes
    # written; a short write raises OSError

    size = 0
    for chunk in generate_sprite(sprite):
        written = handle.write(chunk)
        if written is not None and written < len(chunk):
            raise OSError("short write")
        size += len(chunk)
    return size
