"""HBase filters and comparators encoded in the protobuf wire format."""