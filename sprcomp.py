# rebuild full animation frames from GIF images and crop them into sprite
# images

import array, collections

from gifdec import (
    DISPOSAL_UNSPECIFIED, DISPOSAL_BACKGROUND, DISPOSAL_PREVIOUS,
)
from sprite import Image

# canvas value for "no pixel"; outside the range of sprite palette indices
EMPTY = 0x100

Rect = collections.namedtuple("Rect", "left top width height")

class Canvas:
    # the logical screen of a GIF, in sprite palette indices;
    # keeps one earlier state for the "restore to previous" disposal method

    def __init__(self, width, height, bgIndex=None, bgColor=EMPTY):
        # bgIndex: GIF background color index or None (no GCT)
        # bgColor: sprite palette index of the background color
        self.width = width
        self.height = height
        self.bgIndex = bgIndex
        self.bgColor = bgColor
        self.pixels = array.array("H", width * height * [EMPTY])
        self.snapshot = array.array("H", self.pixels)
        self.disposal = DISPOSAL_UNSPECIFIED  # of the latest frame

    def background(self, frame):
        # background color of the canvas while frame is drawn
        if self.bgIndex is None or self.bgIndex == frame["transIndex"]:
            return EMPTY
        return self.bgColor

    def clear(self, value):
        self.pixels[:] = array.array("H", len(self.pixels) * [value])

    def compose(self, frame, lookup, isFirst):
        # draw a decoded GIF image (see gifdec.read_image()) on the canvas;
        # lookup: sprite palette index for each GIF color index
        # return the canvas

        disposal = frame["disposal"]
        if disposal is None:
            disposal = DISPOSAL_UNSPECIFIED  # no GCE
        transIndex = frame["transIndex"]
        background = self.background(frame)

        if disposal == DISPOSAL_BACKGROUND:
            self.clear(background)
        elif isFirst or disposal == DISPOSAL_UNSPECIFIED:
            self.clear(EMPTY)
        if disposal == DISPOSAL_PREVIOUS:
            self.snapshot[:] = self.pixels

        # the visible part of the image
        left = max(frame["x"], 0)
        right = min(frame["x"] + frame["width"], self.width)
        top = max(frame["y"], 0)
        bottom = min(frame["y"] + frame["height"], self.height)

        pixels = frame["pixels"]
        for y in range(top, bottom):
            srcPos = (y - frame["y"]) * frame["width"] - frame["x"]
            dstPos = y * self.width
            for x in range(left, right):
                index = pixels[srcPos+x]
                if index != transIndex:
                    self.pixels[dstPos+x] = lookup[index]
                elif disposal == DISPOSAL_BACKGROUND:
                    self.pixels[dstPos+x] = background

        self.disposal = disposal
        return self

    def restore(self):
        # undo the latest frame if its disposal method is "restore to previous";
        # call after the frame has been extracted
        if self.disposal == DISPOSAL_PREVIOUS:
            self.pixels[:] = self.snapshot

    def column_is(self, x, value):
        return all(v == value for v in self.pixels[x::self.width])

    def row_is(self, y, left, right, value):
        rowStart = y * self.width
        return all(
            v == value for v in self.pixels[rowStart+left:rowStart+right]
        )

def minimal_rect(canvas, transparent=EMPTY):
    # smallest rectangle that contains all pixels of the canvas other than
    # transparent;
    # return Rect(0, 0, 0, 0) if there are none

    left = 0
    while left < canvas.width and canvas.column_is(left, transparent):
        left += 1
    if left == canvas.width:
        return Rect(0, 0, 0, 0)

    right = canvas.width
    while canvas.column_is(right - 1, transparent):
        right -= 1

    top = 0
    while canvas.row_is(top, left, right, transparent):
        top += 1

    bottom = canvas.height
    while canvas.row_is(bottom - 1, left, right, transparent):
        bottom -= 1

    return Rect(left, top, right - left, bottom - top)

def extract_image(canvas, rect, fill):
    # copy a rectangle of the canvas into a sprite image;
    # fill: sprite palette index for empty pixels

    raster = bytearray()
    for y in range(rect.top, rect.top + rect.height):
        rowStart = y * canvas.width + rect.left
        raster.extend(
            fill if v == EMPTY else v
            for v in canvas.pixels[rowStart:rowStart+rect.width]
        )

    # sprite images have the y axis pointing up
    return Image(rect.left, -rect.top, rect.width, rect.height, bytes(raster))
