import pytest

from hbasekit.compression.codec import UnknownCodecError, new_codec
from hbasekit.compression.snappy import SnappyCodec


def test_snappy_is_known():
    codec = new_codec("snappy")
    assert isinstance(codec, SnappyCodec)
    assert codec.cell_block_compressor_class() == "org.apache.hadoop.io.compress.SnappyCodec"
    assert codec.chunk_len() == 256 * 1024 * 5 // 6 - 32


@pytest.mark.parametrize("name", ["", "gzip", "SNAPPY"])
def test_unknown_codec(name):
    with pytest.raises(UnknownCodecError):
        new_codec(name)


def test_codec_round_trip():
    codec = new_codec("snappy")
    encoded, size = codec.encode(b"payload payload payload payload", b"")
    decoded, dsize = codec.decode(encoded, b"")
    assert decoded == b"payload payload payload payload"
    assert dsize == len(decoded)
    assert size == len(encoded)