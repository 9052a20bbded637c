import math

import pytest

import sprpal
from sprite import (
    ALIGNMENTS, BLEND_MODES, FLT_MIN, FRAME_GROUP, FRAME_SINGLE, SYNC_YES,
    VERSION_HALFLIFE, VERSION_QUAKE, GroupFrame, Image, Sprite, SpriteError,
    reserved_index, time_keys, to_float32,
)

def quake_sprite(width=64, height=64, offsetX=0, offsetY=0):
    return Sprite(
        VERSION_QUAKE, ALIGNMENTS["vp-parallel"], None, width, height, SYNC_YES,
        sprpal.default_palette(), offsetX, offsetY
    )

def test_radius_from_corner():
    assert quake_sprite().radius == pytest.approx(math.sqrt(64 ** 2 + 64 ** 2))

def test_radius_from_center():
    sprite = quake_sprite(offsetX=-32, offsetY=32)
    assert sprite.radius == pytest.approx(math.sqrt(32 ** 2 + 32 ** 2))

def test_radius_not_recomputed():
    sprite = quake_sprite(width=4, height=4)
    radius = sprite.radius
    sprite.append_single_frame(Image(-10, 10, 20, 20, bytes(400)))
    assert sprite.radius == radius

def test_append_single_frame_copies_raster():
    sprite = quake_sprite()
    raster = bytearray(4)
    sprite.append_single_frame(Image(1, -2, 2, 2, raster))
    raster[0] = 7
    frame = sprite.frames[0]
    assert frame.type == FRAME_SINGLE
    assert frame.image.raster == bytes(4)
    assert (frame.image.offsetX, frame.image.offsetY) == (1, -2)

def test_raster_size_must_match():
    with pytest.raises(SpriteError):
        quake_sprite().append_single_frame(Image(0, 0, 2, 2, bytes(3)))

def test_group_frame():
    sprite = quake_sprite()
    images = [Image(0, 0, 1, 1, b"\x01"), Image(0, 0, 2, 1, b"\x02\x03")]
    sprite.append_group_frame(images, [0.5, 0.25])
    frame = sprite.frames[0]
    assert len(sprite.frames) == 1
    assert frame.type == FRAME_GROUP
    assert [image.raster for image in frame.images] == [b"\x01", b"\x02\x03"]
    assert frame.keys == [0.5, 0.75]

def test_group_frame_needs_one_delay_per_image():
    with pytest.raises(SpriteError):
        quake_sprite().append_group_frame([Image(0, 0, 0, 0, b"")], [])

def test_time_keys_strictly_increase_with_zero_delays():
    keys = time_keys([0, 0, 0, -1])
    assert all(a < b for (a, b) in zip(keys, keys[1:]))
    # a normal float, not a denormal that may be flushed to zero
    assert keys[0] == FLT_MIN
    assert FLT_MIN == pytest.approx(1.1754944e-38)

def test_time_keys_tiny_first_delay():
    assert time_keys([1e-45, 0.1])[0] == FLT_MIN

def test_time_keys_tiny_delay_after_long_animation():
    keys = time_keys([1000.0, 1e-9, 0.0])
    assert keys[0] < keys[1] < keys[2]
    assert all(to_float32(key) == key for key in keys)

def test_time_keys_accumulate():
    assert time_keys([0.1, 0.1, 0.2]) == [
        to_float32(0.1), to_float32(to_float32(0.1) + 0.1),
        to_float32(to_float32(to_float32(0.1) + 0.1) + 0.2),
    ]

def test_quake_palette_size():
    with pytest.raises(SpriteError):
        Sprite(VERSION_QUAKE, 2, None, 1, 1, SYNC_YES, 16 * [b"\x00\x00\x00"], 0, 0)

def test_quake_has_no_blend_mode():
    with pytest.raises(SpriteError):
        Sprite(
            VERSION_QUAKE, 2, BLEND_MODES["additive"], 1, 1, SYNC_YES,
            sprpal.default_palette(), 0, 0
        )

def test_halflife_needs_blend_mode():
    with pytest.raises(SpriteError):
        Sprite(VERSION_HALFLIFE, 2, None, 1, 1, SYNC_YES, [b"\x00\x00\x00"], 0, 0)

def test_halflife_index_must_be_in_palette():
    sprite = Sprite(
        VERSION_HALFLIFE, 2, BLEND_MODES["normal"], 1, 1, SYNC_YES,
        [b"\x00\x00\x00", b"\xff\xff\xff"], 0, 0
    )
    sprite.append_single_frame(Image(0, 0, 1, 1, b"\x01"))
    with pytest.raises(SpriteError):
        sprite.append_single_frame(Image(0, 0, 1, 1, b"\x02"))

@pytest.mark.parametrize("blendMode,expected", [
    ("alpha-test", 255),
    ("normal", None),
    ("additive", None),
    ("index-alpha", None),
])
def test_transparent_index(blendMode, expected):
    assert quake_sprite().transparentIndex == 255
    sprite = Sprite(
        VERSION_HALFLIFE, 2, BLEND_MODES[blendMode], 1, 1, SYNC_YES,
        [b"\x00\x00\x00"], 0, 0
    )
    assert sprite.transparentIndex == expected
    assert reserved_index(VERSION_HALFLIFE, BLEND_MODES[blendMode]) == expected

def test_group_frame_keys_must_match_images():
    with pytest.raises(SpriteError):
        GroupFrame([Image(0, 0, 0, 0, b"")], [0.1, 0.2])

def test_unknown_version():
    with pytest.raises(SpriteError):
        Sprite(3, 2, None, 1, 1, SYNC_YES, sprpal.default_palette(), 0, 0)

def test_free():
    sprite = quake_sprite()
    sprite.append_single_frame(Image(0, 0, 1, 1, b"\x00"))
    sprite.free()
    assert sprite.frames == []
    assert sprite.palette == ()
