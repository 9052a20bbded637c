# convert an animated GIF file into a Quake or Half-Life sprite

import argparse, collections, math, os, sys, time

import sprpal
from gifdec import DISPOSAL_METHODS, GifError, read_gif
from sprcomp import EMPTY, Canvas, extract_image, minimal_rect
from sprenc import write_sprite
from sprite import (
    ALIGNMENTS, BLEND_MODES, SYNC_RANDOM, SYNC_YES, VERSION_HALFLIFE,
    VERSION_QUAKE, Sprite, SpriteError, reserved_index,
)

DEFAULT_DELAY = 0.1  # seconds, for images without a Graphic Control Extension

# validated settings for convert()
Config = collections.namedtuple(
    "Config",
    "version alignment blendMode tint originX originY sync paletteFile verbose",
)

def parse_origin(value):
    # parse "X,Y" (two finite decimal numbers)
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("origin must be X,Y")
    try:
        origin = tuple(float(part) for part in parts)
    except ValueError:
        raise argparse.ArgumentTypeError("origin components must be numbers")
    if not all(math.isfinite(c) for c in origin):
        raise argparse.ArgumentTypeError("origin components must be finite")
    return origin

def parse_color(value):
    # parse "R,G,B" (three integers 0-255) into a 3-byte color
    parts = value.split(",")
    try:
        color = tuple(int(part) for part in parts)
    except ValueError:
        raise argparse.ArgumentTypeError("color components must be integers")
    if len(color) != 3 or not all(0 <= c <= 255 for c in color):
        raise argparse.ArgumentTypeError("color must be R,G,B with each 0-255")
    return bytes(color)

def parse_arguments(argv=None):
    # parse command line arguments using argparse; return a Config and the file names

    parser = argparse.ArgumentParser(
        description="Convert an animated GIF file into a Quake (version 1) or Half-Life "
        "(version 2) sprite file. Each GIF image becomes one image in a frame group."
    )

    parser.add_argument(
        "-s", "--sprite-version", type=int, choices=(VERSION_QUAKE, VERSION_HALFLIFE),
        default=VERSION_QUAKE,
        help="Sprite format (1=Quake, 2=Half-Life; default=1)."
    )
    parser.add_argument(
        "-a", "--alignment", choices=tuple(ALIGNMENTS), default="vp-parallel",
        help="Sprite alignment in 3D space (default=vp-parallel)."
    )
    parser.add_argument(
        "-b", "--blend", choices=tuple(BLEND_MODES),
        help="Texture format of a Half-Life sprite (default=alpha-test)."
    )
    parser.add_argument(
        "-c", "--color", type=parse_color,
        help="Color of an index-alpha sprite as R,G,B (default=255,255,255)."
    )
    parser.add_argument(
        "-p", "--palette",
        help="Raw 256-color palette file (768 bytes: RGBRGB...) for a Quake sprite "
        "(default=built-in Quake palette)."
    )
    parser.add_argument(
        "-o", "--origin", type=parse_origin, default=(0.5, 0.5),
        help="Sprite origin as X,Y in units of GIF width/height from the upper left "
        "corner (default=0.5,0.5)."
    )
    parser.add_argument(
        "-r", "--random-sync", action="store_true",
        help="Start the animation at a random image in each instance of the sprite."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print more info."
    )
    parser.add_argument(
        "input_file", help="GIF file to read."
    )
    parser.add_argument(
        "output_file", help="Sprite file to write."
    )

    args = parser.parse_args(argv)

    if args.sprite_version == VERSION_QUAKE:
        if args.blend is not None:
            parser.error("-b/--blend requires -s 2.")
        blendMode = None
    else:
        if args.palette is not None:
            parser.error("-p/--palette requires -s 1.")
        blendMode = BLEND_MODES[args.blend or "alpha-test"]
    if args.color is not None and blendMode != BLEND_MODES["index-alpha"]:
        parser.error("-c/--color requires -b index-alpha.")

    if not os.path.isfile(args.input_file):
        sys.exit("Input file not found.")
    if args.palette is not None and not os.path.isfile(args.palette):
        sys.exit("Palette file not found.")
    if os.path.exists(args.output_file):
        sys.exit("Output file already exists.")

    config = Config(
        version=args.sprite_version,
        alignment=ALIGNMENTS[args.alignment],
        blendMode=blendMode,
        tint=args.color or b"\xff\xff\xff",
        originX=args.origin[0],
        originY=args.origin[1],
        sync=SYNC_RANDOM if args.random_sync else SYNC_YES,
        paletteFile=args.palette,
        verbose=args.verbose,
    )
    return (config, args.input_file, args.output_file)

# --- Palette mapping ------------------------------------------------------------------------------

def sprite_palette(gifInfo, config, basePalette):
    # return (sprite palette, native GIF color table or None, reserved index or None,
    # sprite palette index for empty pixels)

    reserved = reserved_index(config.version, config.blendMode)

    if config.version == VERSION_QUAKE:
        return (basePalette, None, reserved, reserved)

    if config.blendMode == BLEND_MODES["index-alpha"]:
        return (sprpal.tint_palette(config.tint), None, reserved, 0)

    native = gifInfo["gct"]
    if native is None:
        native = gifInfo["frames"][0]["palette"]
    palette = sprpal.split_colors(native)

    if config.blendMode == BLEND_MODES["alpha-test"]:
        palette = sprpal.pad_palette(palette[:sprpal.PALETTE_SIZE])
        return (palette, native, reserved, reserved)

    # normal/additive: no transparency; use the darkest color
    return (palette, native, reserved, sprpal.nearest_index(palette, b"\x00\x00\x00"))

def color_lookup(colorTable, palette, native, reserved, config):
    # sprite palette index for each color in a GIF color table (bytes)

    colors = sprpal.split_colors(colorTable)
    if config.blendMode == BLEND_MODES["index-alpha"]:
        return [sprpal.brightness(color) for color in colors]
    if colorTable == native:
        return [
            i if i != reserved else sprpal.nearest_index(palette, color, reserved)
            for (i, color) in enumerate(colors)
        ]
    return [sprpal.nearest_index(palette, color, reserved) for color in colors]

# --- Conversion -----------------------------------------------------------------------------------

def convert(gifInfo, config, basePalette=None):
    # convert read_gif() output into a Sprite
    # basePalette: palette of a Quake sprite (256 3-byte colors)

    (width, height) = (gifInfo["width"], gifInfo["height"])
    if basePalette is None:
        basePalette = sprpal.default_palette()

    (palette, native, reserved, fill) = sprite_palette(gifInfo, config, basePalette)

    sprite = Sprite(
        config.version, config.alignment, config.blendMode, width, height, config.sync,
        palette,
        math.floor(-config.originX * width),
        math.floor((1 - config.originY) * height),
    )

    lookups = {}  # GIF color table -> lookup

    def get_lookup(colorTable):
        if colorTable not in lookups:
            lookups[colorTable] = color_lookup(
                colorTable, palette, native, reserved, config
            )
        return lookups[colorTable]

    (bgIndex, bgColor) = (None, EMPTY)
    if gifInfo["gct"] is not None and gifInfo["bgIndex"] < len(gifInfo["gct"]) // 3:
        bgIndex = gifInfo["bgIndex"]
        bgColor = get_lookup(gifInfo["gct"])[bgIndex]
    canvas = Canvas(width, height, bgIndex, bgColor)
    images = []
    delays = []

    for (i, frame) in enumerate(gifInfo["frames"]):
        canvas.compose(frame, get_lookup(frame["palette"]), i == 0)
        rect = minimal_rect(canvas)
        images.append(extract_image(canvas, rect, fill))
        canvas.restore()

        delay = DEFAULT_DELAY if frame["delay"] is None else frame["delay"] / 100
        delays.append(delay)

        if config.verbose:
            print(
                f"frame {i}: {frame['width']}*{frame['height']} at "
                f"({frame['x']},{frame['y']}), "
                f"disposal={DISPOSAL_METHODS.get(frame['disposal'], 'none')}, "
                f"delay={delay:.2f} -> crop {rect.width}*{rect.height} at "
                f"({rect.left},{rect.top})"
            )

    if len(images) == 1:
        sprite.append_single_frame(images[0])
    else:
        sprite.append_group_frame(images, delays)

    return sprite

def main():
    startTime = time.time()
    (config, inputFile, outputFile) = parse_arguments()

    basePalette = None
    if config.paletteFile is not None:
        try:
            with open(config.paletteFile, "rb") as handle:
                basePalette = sprpal.read_palette(handle)
        except OSError:
            sys.exit(f"{config.paletteFile}: Read failure.")
        except sprpal.PaletteError as error:
            sys.exit(f"{config.paletteFile}: Read failure ({error}).")

    try:
        with open(inputFile, "rb") as handle:
            gifInfo = read_gif(handle)
    except OSError:
        sys.exit(f"{inputFile}: Read failure.")
    except GifError as error:
        sys.exit(f"{inputFile}: Error in GIF file: {error}")

    if config.verbose:
        print(
            f"read {os.path.basename(inputFile)}: {gifInfo['width']}*{gifInfo['height']} "
            f"pixels, {len(gifInfo['frames'])} image(s)"
        )

    try:
        sprite = convert(gifInfo, config, basePalette)
    except SpriteError as error:
        sys.exit(f"{inputFile}: Cannot convert: {error}")

    try:
        with open(outputFile, "wb") as handle:
            size = write_sprite(sprite, handle)
    except OSError:
        if os.path.exists(outputFile):
            os.remove(outputFile)
        sys.exit(f"{outputFile}: Write failure.")
    finally:
        sprite.free()

    if config.verbose:
        print(
            f"wrote {os.path.basename(outputFile)}: {size} bytes; "
            f"time {time.time() - startTime:.1f} s"
        )

if __name__ == "__main__":
    main()
