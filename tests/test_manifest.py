"""Tests for master playlist synthesis."""

from hlsladder.transcoding.constants import DEFAULT_LADDER
from hlsladder.transcoding.manifest import ManifestSynthesizer

HEADER = "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-INDEPENDENT-SEGMENTS\n"


def _touch_playlists(ctx, indexes):
    for index in indexes:
        ctx.playlist_path(index).write_text("#EXTM3U\n")


def test_all_rungs_present_in_order(make_context):
    ctx = make_context()
    _touch_playlists(ctx, range(4))

    manifest = ManifestSynthesizer(ctx).synthesize(DEFAULT_LADDER)

    assert [e.uri for e in manifest.entries] == ["v0.m3u8", "v1.m3u8", "v2.m3u8", "v3.m3u8"]
    assert [e.rung.resolution for e in manifest.entries] == [
        "1920x1080", "1280x720", "854x480", "640x360",
    ]


def test_missing_playlists_are_omitted(make_context):
    ctx = make_context()
    _touch_playlists(ctx, [0, 2])

    manifest = ManifestSynthesizer(ctx).synthesize(DEFAULT_LADDER)

    assert [e.uri for e in manifest.entries] == ["v0.m3u8", "v2.m3u8"]


def test_missing_malformed_rung_is_not_parsed(make_context):
    ctx = make_context()
    _touch_playlists(ctx, [0])

    manifest = ManifestSynthesizer(ctx).synthesize([DEFAULT_LADDER[0], "garbage"])

    assert len(manifest.entries) == 1


def test_empty_manifest_is_still_written(make_context):
    ctx = make_context()
    manifest = ManifestSynthesizer(ctx).build(DEFAULT_LADDER)

    assert manifest.entries == []
    assert ctx.master_path.read_text() == HEADER


def test_bandwidth_attributes(make_context):
    ctx = make_context()
    _touch_playlists(ctx, [0])

    manifest = ManifestSynthesizer(ctx).synthesize(["1280x720:3000k:6000k:4200k:128"])
    entry = manifest.entries[0]

    assert entry.bandwidth == 4_328_000
    assert entry.average_bandwidth == 3_908_000
    assert entry.frame_rate == 30


def test_rendered_master(make_context):
    ctx = make_context()
    _touch_playlists(ctx, [0, 1])

    ManifestSynthesizer(ctx).build(DEFAULT_LADDER[2:])

    assert ctx.master_path.read_text() == HEADER + (
        '#EXT-X-STREAM-INF:BANDWIDTH=2228000,AVERAGE-BANDWIDTH=2018000,'
        'RESOLUTION=854x480,CODECS="avc1.640028,mp4a.40.2",FRAME-RATE=30\n'
        'v0.m3u8\n'
        '#EXT-X-STREAM-INF:BANDWIDTH=1196000,AVERAGE-BANDWIDTH=1086000,'
        'RESOLUTION=640x360,CODECS="avc1.640028,mp4a.40.2",FRAME-RATE=30\n'
        'v1.m3u8\n'
    )


def test_codecs_come_from_config(make_context):
    ctx = make_context(transcoding={"codecs": "avc1.4d401f,mp4a.40.2"})
    _touch_playlists(ctx, [0])

    text = ManifestSynthesizer(ctx).synthesize(DEFAULT_LADDER[:1]).render()

    assert 'CODECS="avc1.4d401f,mp4a.40.2"' in text
