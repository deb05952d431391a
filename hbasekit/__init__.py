"""Building blocks for HBase clients: region caches, client state, codecs, filters and protobuf wire encoding."""

__version__ = "0.1.0"