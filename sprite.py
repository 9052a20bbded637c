# in-memory model of Quake (version 1) and Half-Life (version 2) sprites

import collections, math, struct

from sprpal import PALETTE_SIZE, TRANSPARENT_INDEX

VERSION_QUAKE    = 1
VERSION_HALFLIFE = 2

# sprite alignment in 3D space
ALIGNMENTS = {
    "vp-parallel-upright":  0,
    "upright":              1,  # facing upright
    "vp-parallel":          2,
    "oriented":             3,
    "vp-parallel-oriented": 4,
}

# texture formats (Half-Life only)
BLEND_MODES = {
    "normal":      0,
    "additive":    1,
    "index-alpha": 2,
    "alpha-test":  3,
}

SYNC_YES    = 0  # all instances show the same image
SYNC_RANDOM = 1

FRAME_SINGLE = 0
FRAME_GROUP  = 1

class SpriteError(Exception):
    # exception for invalid sprite contents
    pass

# offsetX/offsetY: upper left corner relative to the sprite origin, y axis
# pointing up; raster: palette indices (bytes, 1 byte/pixel)
Image = collections.namedtuple("Image", "offsetX offsetY width height raster")

def copy_image(image):
    # validate an image and copy its raster into an immutable bytes object
    if min(image.width, image.height) < 0:
        raise SpriteError("negative image size")
    if len(image.raster) != image.width * image.height:
        raise SpriteError(
            f"raster has {len(image.raster)} pixels, expected "
            f"{image.width}*{image.height}"
        )
    return image._replace(raster=bytes(image.raster))

# smallest normal 32-bit float
FLT_MIN = struct.unpack("<f", struct.pack("<I", 0x00800000))[0]

def reserved_index(version, blendMode):
    # palette index that stands for transparent pixels, or None
    if version == VERSION_QUAKE or blendMode == BLEND_MODES["alpha-test"]:
        return TRANSPARENT_INDEX
    return None

def to_float32(value):
    return struct.unpack("<f", struct.pack("<f", value))[0]

def next_float32(value):
    # smallest 32-bit float greater than non-negative value
    bits = struct.unpack("<I", struct.pack("<f", value))[0]
    return struct.unpack("<f", struct.pack("<I", bits + 1))[0]

def time_keys(delays):
    # cumulative display times (seconds) of group images;
    # nonpositive or negligible delays still advance time by one float32 step;
    # keys are never below FLT_MIN
    keys = []
    keyTime = 0.0
    for delay in delays:
        newTime = to_float32(keyTime + delay) if delay > 0 else keyTime
        if newTime <= keyTime:
            newTime = next_float32(keyTime)
        keyTime = max(newTime, FLT_MIN)
        keys.append(keyTime)
    return keys

class SingleFrame:
    type = FRAME_SINGLE

    def __init__(self, image):
        self.image = image

class GroupFrame:
    # images played in sequence; keys: time (seconds) at which each image ends
    type = FRAME_GROUP

    def __init__(self, images, keys):
        if len(images) != len(keys):
            raise SpriteError("need one key per image")
        self.images = images
        self.keys = keys

class Sprite:
    def __init__(
        self, version, alignment, blendMode, maxWidth, maxHeight, sync, palette,
        offsetX, offsetY
    ):
        # version:             VERSION_QUAKE or VERSION_HALFLIFE
        # alignment:           value of ALIGNMENTS
        # blendMode:           value of BLEND_MODES (Half-Life) or None (Quake)
        # maxWidth, maxHeight: size that fits all images
        # sync:                SYNC_YES or SYNC_RANDOM
        # palette:             sequence of 3-byte colors
        # offsetX, offsetY:    added to the offsets of each image; (0, 0) puts
        #                      the upper left corner of the canvas on the origin

        if alignment not in ALIGNMENTS.values():
            raise SpriteError("invalid alignment")
        if sync not in (SYNC_YES, SYNC_RANDOM):
            raise SpriteError("invalid sync type")
        if version == VERSION_QUAKE:
            if blendMode is not None:
                raise SpriteError("Quake sprites have no blend mode")
            if len(palette) != PALETTE_SIZE:
                raise SpriteError(f"Quake sprites need {PALETTE_SIZE} colors")
        elif version == VERSION_HALFLIFE:
            if blendMode not in BLEND_MODES.values():
                raise SpriteError("Half-Life sprites need a blend mode")
            if not 1 <= len(palette) <= PALETTE_SIZE:
                raise SpriteError(f"palette must have 1-{PALETTE_SIZE} colors")
        else:
            raise SpriteError(f"unknown sprite version {version}")
        if any(len(color) != 3 for color in palette):
            raise SpriteError("palette colors must have 3 components")

        self.version = version
        self.alignment = alignment
        self.blendMode = blendMode
        self.maxWidth = maxWidth
        self.maxHeight = maxHeight
        self.sync = sync
        self.palette = tuple(bytes(color) for color in palette)
        self.offsetX = offsetX
        self.offsetY = offsetY
        self.frames = []

        # distance from the origin to the furthest corner of the canvas, chosen
        # per axis like the Quake tools do; fixed at creation
        (dx, dy) = (offsetX, offsetY)
        if -2 * offsetX < maxWidth:
            dx += maxWidth
        if 2 * offsetY < maxHeight:
            dy += maxHeight
        self.radius = math.hypot(dx, dy)

    @property
    def transparentIndex(self):
        # palette index reserved for transparency, or None
        return reserved_index(self.version, self.blendMode)

    def check_raster(self, raster):
        if raster and max(raster) >= len(self.palette):
            raise SpriteError("palette index out of range")

    def append_single_frame(self, image):
        image = copy_image(image)
        self.check_raster(image.raster)
        self.frames.append(SingleFrame(image))

    def append_group_frame(self, images, delays):
        # delays: display time of each image in seconds
        if not images:
            raise SpriteError("empty frame group")
        if len(images) != len(delays):
            raise SpriteError("need one delay per image")
        images = [copy_image(image) for image in images]
        for image in images:
            self.check_raster(image.raster)
        self.frames.append(GroupFrame(images, time_keys(delays)))

    def free(self):
        # release all frames and the palette; call once, after writing
        self.frames = []
        self.palette = ()
