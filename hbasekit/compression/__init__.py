"""Cell-block compression: the snappy codec and a factory that picks a codec by name."""