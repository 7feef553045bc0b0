"""Tests for the per-rung filter chain."""

import pytest

from hlsladder.exceptions import RungValidationError
from hlsladder.models import SourceProbe
from hlsladder.transcoding.filters import FilterBuilder, rotation_filter, validate_dimensions
from hlsladder.transcoding.ladder import parse_rung

RUNG = parse_rung("1280x720:3000k:6000k:4200k:128")


def test_progressive_unrotated_chain():
    chain = FilterBuilder().build(RUNG, SourceProbe(frame_rate=29.97, frame_rate_rounded=30))
    assert chain.names == ["scale", "pad", "setsar", "fps"]
    assert chain.render() == (
        "scale=1280:720:force_original_aspect_ratio=decrease:force_divisible_by=2,"
        "pad=1280:720:(ow-iw)/2:(oh-ih)/2:color=black,"
        "setsar=1,"
        "fps=30"
    )


def test_rotation_and_deinterlace_come_first():
    probe = SourceProbe(frame_rate=25.0, frame_rate_rounded=25, rotation_degrees=90,
                        field_order="tt", interlaced=True)
    chain = FilterBuilder().build(RUNG, probe)
    assert chain.names == ["rotate", "deinterlace", "scale", "pad", "setsar", "fps"]
    assert chain.render().startswith("transpose=1,bwdif=mode=send_frame,scale=")
    assert chain.render().endswith("fps=25")


def test_deinterlace_only():
    probe = SourceProbe(interlaced=True, field_order="bb")
    assert FilterBuilder().build(RUNG, probe).names[0] == "deinterlace"


@pytest.mark.parametrize("degrees, expected", [
    (90, "transpose=1"),
    (-270, "transpose=1"),
    (180, "hflip,vflip"),
    (-180, "hflip,vflip"),
    (270, "transpose=2"),
    (-90, "transpose=2"),
    (0, None),
    (45, None),
    (360, None),
])
def test_rotation_filter(degrees, expected):
    assert rotation_filter(degrees) == expected


def test_unrecognized_rotation_adds_no_stage():
    chain = FilterBuilder().build(RUNG, SourceProbe(rotation_degrees=45))
    assert "rotate" not in chain.names


def test_validate_dimensions_accepts_plain_token():
    assert validate_dimensions("1280x720") == (1280, 720)


@pytest.mark.parametrize("token", ["1280×720", "1280x", "x720", "abcx720", "1280x720x2", "١٢٨٠x720"])
def test_validate_dimensions_rejects(token):
    with pytest.raises(RungValidationError):
        validate_dimensions(token)
