import pytest

from hbasekit.compression.snappy import SnappyCodec, SnappyError, compress, decompress


@pytest.mark.parametrize(
    "src,dst,out,size",
    [
        (b"test", b"", b"\x04\ftest", 6),
        (b"", b"", b"\x00", 1),
        (b"test", b"something here already", b"something here already\x04\ftest", 6),
        (b"test", b"\x00\x00\x00\x00", b"\x00\x00\x00\x00\x04\ftest", 6),
    ],
)
def test_encode(src, dst, out, size):
    result, sz = SnappyCodec().encode(src, dst)
    assert sz == size
    assert len(result) == len(dst) + sz
    assert result == out


@pytest.mark.parametrize(
    "src,dst,out,size",
    [
        (b"\x04\ftest", b"", b"test", 4),
        (b"\x00", b"", b"", 0),
        (b"\x04\ftest", b"something here already", b"something here alreadytest", 4),
        (b"\x04\ftest", b"\x00\x00\x00\x00", b"\x00\x00\x00\x00test", 4),
    ],
)
def test_decode(src, dst, out, size):
    result, sz = SnappyCodec().decode(src, dst)
    assert sz == size
    assert len(result) == len(dst) + sz
    assert result == out


@pytest.mark.parametrize("src", [b"test", b"\x04\ftes", b"\x04\ftestasdfasdfasdf"])
def test_decode_corrupt(src):
    with pytest.raises(SnappyError, match="snappy: corrupt input"):
        SnappyCodec().decode(src, b"")


@pytest.mark.parametrize(
    "data",
    [b"a" * 1000, b"abcdefgh" * 300, bytes(range(256)) * 5, b"hello world, hello world!!"],
)
def test_round_trip(data):
    assert decompress(compress(data)) == data


def test_repetitive_data_shrinks():
    data = b"abcdefgh" * 300
    assert len(compress(data)) < len(data) // 4