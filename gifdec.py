# a GIF decoder in pure Python: reads every image of an animated GIF along
# with its Graphic Control Extension
#
# acronyms:
#     GCE = Graphic Control Extension
#     GCT = Global Color Table
#     LCT = Local Color Table
#     LSD = Logical Screen Descriptor
#     LZW = Lempel-Ziv-Welch

import argparse, os, struct, sys

# disposal methods in GCE
DISPOSAL_UNSPECIFIED = 0
DISPOSAL_NONE        = 1  # leave in place
DISPOSAL_BACKGROUND  = 2  # restore to background color
DISPOSAL_PREVIOUS    = 3  # restore to previous

DISPOSAL_METHODS = {
    DISPOSAL_UNSPECIFIED: "unspecified",
    DISPOSAL_NONE:        "leave in place",
    DISPOSAL_BACKGROUND:  "restore to background color",
    DISPOSAL_PREVIOUS:    "restore to previous",
}

# (first row, row step) of the passes of an interlaced image
INTERLACE_PASSES = ((0, 8), (4, 8), (2, 4), (1, 2))

class GifError(Exception):
    # exception for GIF-related errors
    pass

def read_bytes(handle, length):
    # read bytes from file
    data = handle.read(length)
    if len(data) < length:
        raise GifError("unexpected end of file")
    return data

def read_subblocks(handle):
    # generate data from GIF subblocks
    sbSize = read_bytes(handle, 1)[0]  # size of first subblock
    while sbSize:
        chunk = read_bytes(handle, sbSize + 1)  # subblock, size of next subblock
        yield chunk[:-1]
        sbSize = chunk[-1]

def skip_subblocks(handle):
    for chunk in read_subblocks(handle):
        pass

def read_color_table(handle, bits):
    # read a GCT/LCT with 2 ** bits colors; return bytes (RGBRGB...)
    return read_bytes(handle, 2 ** bits * 3)

def read_lsd(handle):
    # read Header and LSD from start of file; return a dict

    (id_, version, width, height, packedFields, bgIndex) \
    = struct.unpack("<3s3s2H2Bx", read_bytes(handle, 13))

    if id_ != b"GIF":
        raise GifError("not a GIF file")
    if version not in (b"87a", b"89a"):
        print("Warning: unknown GIF version.", file=sys.stderr)

    return {
        "width":   width,
        "height":  height,
        "gctBits": (packedFields & 7) + 1 if packedFields & 0x80 else None,
        "bgIndex": bgIndex,
    }

def read_gce(handle):
    # read the fields of a GCE; handle position must be at first byte after
    # the label; return a dict

    blockSize = read_bytes(handle, 1)[0]
    if blockSize < 4:
        raise GifError("Graphic Control Extension too short")
    (packedFields, delay, transIndex) \
    = struct.unpack("<BHB", read_bytes(handle, 4))
    read_bytes(handle, blockSize - 4)
    skip_subblocks(handle)

    disposal = (packedFields >> 2) & 7
    if disposal not in DISPOSAL_METHODS:
        disposal = DISPOSAL_UNSPECIFIED  # reserved values

    return {
        "disposal":   disposal,
        "delay":      delay,
        "transIndex": transIndex if packedFields & 1 else None,
    }

def read_extension(handle):
    # read Extension block; handle position must be at first byte after
    # Extension Introducer ('!'); return read_gce() for a GCE, otherwise None

    label = read_bytes(handle, 1)[0]
    if label == 0xf9:
        return read_gce(handle)
    if label in (0x01, 0xff):
        # Plain Text Extension, Application Extension
        read_bytes(handle, read_bytes(handle, 1)[0])
        skip_subblocks(handle)
    elif label == 0xfe:
        # Comment Extension
        skip_subblocks(handle)
    else:
        raise GifError("invalid Extension label")
    return None

def lzw_decode(data, palBits):
    # decode LZW data (bytes)
    # palBits: palette bit depth in LZW encoding (2-8)
    # return: indexed image data (bytearray)

    pos       = 0                 # byte position in LZW data
    bitPos    = 0                 # bit position within LZW data byte (0-7)
    codeLen   = palBits + 1       # current length of LZW codes, in bits (3-12)
    prevCode  = None              # previous code for dictionary entry or None
    clearCode = 2 ** palBits      # LZW clear code
    endCode   = 2 ** palBits + 1  # LZW end code
    entry     = bytearray()       # reconstructed dictionary entry
    imageData = bytearray()       # decoded image data

    # LZW dictionary: index = code, value = entry (reference to another code,
    # final byte)
    lzwDict = [(None, i) for i in range(2 ** palBits + 2)]

    while True:
        # get the 1-3 bytes that contain the code (first byte = least
        # significant), drop the bits already read and the bits of the next code
        codeByteCnt = (bitPos + codeLen + 7) // 8
        if pos + codeByteCnt > len(data):
            raise GifError("unexpected end of LZW data")
        code = int.from_bytes(data[pos:pos+codeByteCnt], "little")
        code = (code >> bitPos) & ((1 << codeLen) - 1)

        bitPos += codeLen
        pos += bitPos >> 3
        bitPos &= 0b111

        if code == clearCode:
            # reset dictionary & code length; don't add entry with next code
            lzwDict = lzwDict[:2**palBits+2]
            codeLen = palBits + 1
            prevCode = None
        elif code == endCode:
            break
        elif code > len(lzwDict):
            raise GifError("invalid LZW code")
        else:
            if prevCode is not None:
                # add entry (previous code, first byte of current/previous entry)
                suffixCode = code if code < len(lzwDict) else prevCode
                while suffixCode is not None:
                    (suffixCode, suffixByte) = lzwDict[suffixCode]
                lzwDict.append((prevCode, suffixByte))
                prevCode = None
            elif code == len(lzwDict):
                raise GifError("invalid LZW code")
            entry.clear()
            referredCode = code
            while referredCode is not None:
                (referredCode, byte) = lzwDict[referredCode]
                entry.append(byte)
            entry.reverse()
            imageData.extend(entry)
            if len(lzwDict) < 2 ** 12:
                prevCode = code
            if len(lzwDict) == 2 ** codeLen and codeLen < 12:
                codeLen += 1

    return imageData

def deinterlace(imageData, width):
    # reorder the pixel rows of interlaced image data (1 byte/pixel) from
    # storage order to top-down order; return bytes

    height = len(imageData) // width
    rows = [None] * height
    storedRows = (
        imageData[i*width:(i+1)*width] for i in range(height)
    )
    for (start, step) in INTERLACE_PASSES:
        for y in range(start, height, step):
            rows[y] = next(storedRows)
    return b"".join(rows)

def read_image(handle, gct, gce):
    # read one image; handle position must be at first byte after ',' of Image
    # Descriptor; gct: GCT (bytes) or None; gce: read_gce() or None
    # return a dict with these keys:
    #     x, y:          position on logical screen
    #     width, height: image size
    #     palette:       LCT if any, else GCT (bytes, RGBRGB...)
    #     transIndex:    transparent color index or None
    #     disposal:      disposal method or None (no GCE)
    #     delay:         delay time in 1/100ths of a second or None (no GCE)
    #     pixels:        indexed image data (bytes, 1 byte/pixel, deinterlaced)

    (x, y, width, height, packedFields) \
    = struct.unpack("<4HB", read_bytes(handle, 9))
    if min(width, height) == 0:
        raise GifError("image area zero")

    if packedFields & 0x80:
        palette = read_color_table(handle, (packedFields & 7) + 1)
    elif gct is not None:
        palette = gct
    else:
        raise GifError("no palette for image")

    lzwPalBits = read_bytes(handle, 1)[0]
    if not 2 <= lzwPalBits <= 11:
        raise GifError("invalid LZW palette bit depth")

    pixels = lzw_decode(b"".join(read_subblocks(handle)), lzwPalBits)
    if len(pixels) < width * height:
        raise GifError("too little image data")
    del pixels[width*height:]
    if max(pixels) >= len(palette) // 3:
        raise GifError("invalid index in image data")
    if packedFields & 0x40:
        pixels = deinterlace(pixels, width)

    return {
        "x":          x,
        "y":          y,
        "width":      width,
        "height":     height,
        "palette":    palette,
        "transIndex": None if gce is None else gce["transIndex"],
        "disposal":   None if gce is None else gce["disposal"],
        "delay":      None if gce is None else gce["delay"],
        "pixels":     bytes(pixels),
    }

def read_gif(handle):
    # read a GIF file; return a dict with these keys:
    #     width, height: logical screen size
    #     bgIndex:       background color index
    #     gct:           GCT (bytes, RGBRGB...) or None
    #     frames:        list of read_image() dicts

    handle.seek(0)
    lsdInfo = read_lsd(handle)
    if lsdInfo["gctBits"] is not None:
        gct = read_color_table(handle, lsdInfo["gctBits"])
    else:
        gct = None

    frames = []
    gce = None  # applies to the next image only

    while True:
        blockType = read_bytes(handle, 1)
        if blockType == b",":  # Image Descriptor
            frames.append(read_image(handle, gct, gce))
            gce = None
        elif blockType == b"!":  # Extension
            extension = read_extension(handle)
            if extension is not None:
                gce = extension
        elif blockType == b";":  # Trailer
            break
        else:
            raise GifError("invalid block type")

    if not frames:
        raise GifError("no images")

    return {
        "width":   lsdInfo["width"],
        "height":  lsdInfo["height"],
        "bgIndex": lsdInfo["bgIndex"],
        "gct":     gct,
        "frames":  frames,
    }

def main():
    # print the images of a GIF file as the sprite converter sees them
    parser = argparse.ArgumentParser(
        description="List the images of an animated GIF file with their placement and "
        "Graphic Control Extension fields."
    )
    parser.add_argument("input_file", help="GIF file to read.")
    args = parser.parse_args()

    if not os.path.isfile(args.input_file):
        sys.exit("Input file not found.")

    try:
        with open(args.input_file, "rb") as handle:
            gifInfo = read_gif(handle)
    except OSError:
        sys.exit("Error reading input file.")
    except GifError as error:
        sys.exit(f"Error in GIF file: {error}")

    print(
        f"screen: {gifInfo['width']}*{gifInfo['height']}, "
        f"background index {gifInfo['bgIndex']}, "
        f"{'no GCT' if gifInfo['gct'] is None else 'GCT'}, "
        f"{len(gifInfo['frames'])} image(s)"
    )
    for (i, frame) in enumerate(gifInfo["frames"]):
        print(
            f"image {i}: {frame['width']}*{frame['height']} at "
            f"({frame['x']},{frame['y']}), "
            f"disposal={DISPOSAL_METHODS.get(frame['disposal'], 'none')}, "
            f"delay={frame['delay']}, transparent={frame['transIndex']}"
        )

if __name__ == "__main__":
    main()
