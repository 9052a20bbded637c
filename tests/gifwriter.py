# build small animated GIF files for tests

import math, struct

# LZW encoder from pygif (gifenc.py)
def lzw_encode(palBits, imageData):
    # LZW encode image data (1 byte/pixel)
    # palBits: palette bit depth in encoding (2-8)
    # generate: (LZW_code, LZW_code_length_in_bits)

    # key = LZW entry, value = LZW code; clear and end codes not included
    lzwDict = dict((bytes((i,)), i) for i in range(2 ** palBits))

    pos     = 0            # position in input data
    codeLen = palBits + 1  # length of LZW codes (3-12)
    entry   = bytearray()  # dictionary entry

    yield (2 ** palBits, codeLen)  # clear code

    while pos < len(imageData):
        # find longest entry that's a prefix of remaining input data
        entry.clear()
        for byte in imageData[pos:]:
            entry.append(byte)
            try:
                code = lzwDict[bytes(entry)]
            except KeyError:
                entry = entry[:-1]
                break

        yield (code, codeLen)

        pos += len(entry)
        if pos < len(imageData):
            if len(lzwDict) < 2 ** 12 - 2:
                entry.append(imageData[pos])
                lzwDict[bytes(entry)] = len(lzwDict) + 2
                if len(lzwDict) > 2 ** codeLen - 2:
                    codeLen += 1
            else:
                yield (2 ** palBits, codeLen)
                codeLen = palBits + 1
                lzwDict = dict((bytes((i,)), i) for i in range(2 ** palBits))

    yield (2 ** palBits + 1, codeLen)  # end code

def lzw_bytes(palBits, imageData):
    data      = 0  # LZW codes not yet output
    dataLen   = 0  # bits in data
    dataBytes = bytearray()

    for (code, codeLen) in lzw_encode(palBits, imageData):
        data |= code << dataLen
        dataLen += codeLen
        while dataLen >= 8:
            dataBytes.append(data & 0xff)
            data >>= 8
            dataLen -= 8
    if dataLen:
        dataBytes.append(data)
    return bytes(dataBytes)

def palette_bits(palette):
    return max(math.ceil(math.log2(len(palette) // 3)), 1)

def padded(palette):
    return palette + (2 ** palette_bits(palette) * 3 - len(palette)) * b"\x00"

def image_blocks(image):
    # GCE (if any), Image Descriptor, LCT (if any) and LZW data of one image
    # image: dict with x, y, width, height, pixels and optional keys
    #     palette (LCT), disposal, delay, transIndex, interlace, gce (False = none)

    if image.get("gce", True):
        transIndex = image.get("transIndex")
        packedFields = image.get("disposal", 0) << 2 | (transIndex is not None)
        yield struct.pack(
            "<4BHBx", 0x21, 0xf9, 4, packedFields, image.get("delay", 0),
            transIndex or 0
        )

    packedFields = 0
    lct = image.get("palette")
    if lct is not None:
        packedFields |= 0x80 | palette_bits(lct) - 1
    pixels = image["pixels"]
    if image.get("interlace"):
        packedFields |= 0x40
        width = image["width"]
        rows = [pixels[y*width:(y+1)*width] for y in range(image["height"])]
        pixels = b"".join(
            b"".join(rows[start::step])
            for (start, step) in ((0, 8), (4, 8), (2, 4), (1, 2))
        )
    yield struct.pack(
        "<s4HB", b",", image["x"], image["y"], image["width"], image["height"],
        packedFields
    )
    if lct is not None:
        yield padded(lct)

    lzwPalBits = 8
    yield bytes((lzwPalBits,))
    lzwData = lzw_bytes(lzwPalBits, pixels)
    for pos in range(0, len(lzwData), 0xff):
        chunk = lzwData[pos:pos+0xff]
        yield bytes((len(chunk),)) + chunk
    yield b"\x00"

def make_gif(width, height, images, gct=None, bgIndex=0):
    # return a GIF89a file as bytes
    # gct: bytes (RGBRGB...) or None

    blocks = [b"GIF89a"]
    packedFields = 0
    if gct is not None:
        packedFields = 0x80 | palette_bits(gct) - 1
    blocks.append(struct.pack("<2H3B", width, height, packedFields, bgIndex, 0))
    if gct is not None:
        blocks.append(padded(gct))
    for image in images:
        blocks.extend(image_blocks(image))
    blocks.append(b";")
    return b"".join(blocks)
