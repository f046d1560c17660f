import pytest

from dupscan.core.classifier import MediaType, classify


@pytest.mark.parametrize("name, expected", [
    ("IMG_0001.JPG", MediaType.PHOTO),
    ("scan.heic", MediaType.PHOTO),
    ("song.flac", MediaType.MUSIC),
    ("clip.MKV", MediaType.VIDEO),
    ("notes.txt", MediaType.OTHER),
    ("Makefile", MediaType.OTHER),
    (".jpg", MediaType.OTHER),
])
def test_classify(name, expected):
    assert classify(name) == expected
