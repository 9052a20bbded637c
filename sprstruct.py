# print the high-level structure of a Quake/Half-Life sprite file

import os, struct, sys

from sprite import (
    ALIGNMENTS, BLEND_MODES, FRAME_SINGLE, FRAME_GROUP, SYNC_YES,
    VERSION_QUAKE, VERSION_HALFLIFE, SpriteError,
)
from sprenc import MAGIC

def getbytes(handle, length):
    # read bytes from file
    data = handle.read(length)
    if len(data) < length:
        raise SpriteError("unexpected end of file")
    return data

def unpack(handle, format_):
    return struct.unpack(format_, getbytes(handle, struct.calcsize(format_)))

def read_header(handle):
    # read Header (and palette of Half-Life sprites) from start of file;
    # return a dict

    handle.seek(0)
    (magic, version, alignment) = unpack(handle, "<4s2i")
    if magic != MAGIC:
        raise SpriteError("not a sprite file")
    if version == VERSION_HALFLIFE:
        blendMode = unpack(handle, "<i")[0]
    elif version == VERSION_QUAKE:
        blendMode = None
    else:
        raise SpriteError(f"unknown sprite version {version}")

    (radius, maxWidth, maxHeight, frameCount, beamLength, sync) \
    = unpack(handle, "<f3ifi")
    if frameCount < 0:
        raise SpriteError("negative frame count")

    if version == VERSION_HALFLIFE:
        colorCount = unpack(handle, "<H")[0]
        data = getbytes(handle, colorCount * 3)
        palette = tuple(data[i:i+3] for i in range(0, len(data), 3))
    else:
        palette = None

    return {
        "magic":      magic,
        "version":    version,
        "alignment":  alignment,
        "blendMode":  blendMode,
        "radius":     radius,
        "maxWidth":   maxWidth,
        "maxHeight":  maxHeight,
        "frameCount": frameCount,
        "beamLength": beamLength,
        "sync":       sync,
        "palette":    palette,
    }

def read_image(handle):
    (offsetX, offsetY, width, height) = unpack(handle, "<4i")
    if min(width, height) < 0:
        raise SpriteError("negative image size")
    return {
        "offsetX": offsetX,
        "offsetY": offsetY,
        "width":   width,
        "height":  height,
        "raster":  getbytes(handle, width * height),
    }

def read_frame(handle):
    # read one frame; return a dict

    frameType = unpack(handle, "<i")[0]
    if frameType == FRAME_SINGLE:
        return {"type": frameType, "keys": None, "images": [read_image(handle)]}
    if frameType == FRAME_GROUP:
        imageCount = unpack(handle, "<i")[0]
        if imageCount < 0:
            raise SpriteError("negative image count")
        keys = list(unpack(handle, f"<{imageCount}f"))
        images = [read_image(handle) for i in range(imageCount)]
        return {"type": frameType, "keys": keys, "images": images}
    raise SpriteError("unknown frame type")

def read_sprite(handle):
    # read a whole sprite file; return read_header() with a "frames" key added
    info = read_header(handle)
    info["frames"] = [read_frame(handle) for i in range(info["frameCount"])]
    if handle.read(1):
        raise SpriteError("data after last frame")
    return info

def printval(descr, value):
    print(4 * " " + f"{descr}: {value}")

def print_sprite(info):
    alignments = dict((v, k) for (k, v) in ALIGNMENTS.items())
    blendModes = dict((v, k) for (k, v) in BLEND_MODES.items())

    print("Header:")
    printval("version", info["version"])
    printval("alignment", alignments.get(info["alignment"], "?"))
    if info["blendMode"] is not None:
        printval("blend mode", blendModes.get(info["blendMode"], "?"))
    printval("bounding radius", f"{info['radius']:.2f}")
    printval("max. size", f"{info['maxWidth']}*{info['maxHeight']}")
    printval("frames", info["frameCount"])
    printval("sync", "synchronized" if info["sync"] == SYNC_YES else "random")
    if info["palette"] is not None:
        printval("palette colors", len(info["palette"]))

    for (i, frame) in enumerate(info["frames"]):
        if frame["type"] == FRAME_SINGLE:
            print(f"Frame {i} (single):")
        else:
            print(f"Frame {i} (group of {len(frame['images'])}):")
        for (j, image) in enumerate(frame["images"]):
            descr = f"image {j}" if frame["keys"] is None \
            else f"image {j} until {frame['keys'][j]:.3f} s"
            printval(
                descr,
                f"{image['width']}*{image['height']} at "
                f"({image['offsetX']},{image['offsetY']})"
            )

def main():
    if len(sys.argv) != 2:
        sys.exit(
            "Print the high-level structure of a Quake/Half-Life sprite file. Argument: "
            "file to read."
        )
    filename = sys.argv[1]
    if not os.path.isfile(filename):
        sys.exit("Input file not found.")

    try:
        with open(filename, "rb") as handle:
            info = read_sprite(handle)
    except OSError:
        sys.exit("Error reading input file.")
    except SpriteError as error:
        sys.exit(f"Error in sprite file: {error}")

    print_sprite(info)

if __name__ == "__main__":
    main()
