from hbasekit.caches import (
    ClientRegionCache,
    KeyRegionCache,
    RegionClient,
    RegionInfo,
    is_region_overlap,
)

SUFFIX = b"1234567890042.56f833d5569a27c7a43fbf547b4924a4."


def three_regions():
    return [
        RegionInfo(1, b"", b"test", b"test,," + SUFFIX, b"", b"foo"),
        RegionInfo(2, b"", b"test", b"test,foo," + SUFFIX, b"foo", b"gohbase"),
        RegionInfo(3, b"", b"test", b"test,gohbase," + SUFFIX, b"gohbase", b""),
    ]


def test_debug_state_caches():
    krc = KeyRegionCache()
    rcc = ClientRegionCache()
    reg_client = RegionClient("regionserver:1")
    created = []

    def factory():
        created.append(reg_client)
        return reg_client

    for region in three_regions():
        overlaps, replaced = krc.put(region)
        assert replaced
        assert overlaps == []
        region.client = reg_client
        assert rcc.put("regionserver:1", region, factory) is reg_client

    assert len(created) == 1
    regions, clients = {}, {}
    client_map = rcc.debug_info(regions, clients)
    key_map = krc.debug_info(regions)
    assert len(clients) == 1
    assert len(regions) == 3
    assert len(key_map) == 3
    assert len(client_map) == 1


def test_region_discovery():
    krc = KeyRegionCache()
    assert krc.get((b"test", b"theKey")) == (None, None)
    region = RegionInfo(0, b"default", b"test", b"test,," + SUFFIX)
    krc.put(region)
    _, found = krc.get((b"test", b"theKey"))
    assert found is region
    assert found.table == b"test"
    assert found.start_key == b"" and found.stop_key == b""


def test_get_picks_preceding_region():
    krc = KeyRegionCache()
    regs = three_regions()
    for r in regs:
        krc.put(r)
    assert krc.get((b"test", b"fz"))[1] is regs[1]
    assert krc.get((b"test", b"foo"))[1] is regs[1]
    assert krc.get((b"test", b"zzz"))[1] is regs[2]


def test_duplicate_name_not_replaced():
    krc = KeyRegionCache()
    first = RegionInfo(1, b"", b"t", b"t,,1", b"", b"")
    krc.put(first)
    overlaps, replaced = krc.put(RegionInfo(1, b"", b"t", b"t,,1", b"", b""))
    assert not replaced
    assert overlaps == [first]


def test_younger_region_replaces_older():
    krc = KeyRegionCache()
    old = RegionInfo(1, b"", b"t", b"t,,1", b"", b"")
    krc.put(old)
    new = RegionInfo(2, b"", b"t", b"t,,2", b"", b"m")
    overlaps, replaced = krc.put(new)
    assert replaced and overlaps == [old]
    assert old.dead
    assert len(krc) == 1


def test_older_region_does_not_replace():
    krc = KeyRegionCache()
    young = RegionInfo(5, b"", b"t", b"t,,5", b"", b"")
    krc.put(young)
    overlaps, replaced = krc.put(RegionInfo(3, b"", b"t", b"t,a,3", b"a", b"b"))
    assert not replaced
    assert overlaps == [young]
    assert krc.get((b"t", b"a"))[1] is young


def test_delete_region():
    krc = KeyRegionCache()
    region = three_regions()[0]
    krc.put(region)
    assert krc.delete(region)
    assert region.dead
    assert not krc.delete(region)


def test_is_region_overlap():
    a, b, c = three_regions()
    assert not is_region_overlap(a, b)
    assert is_region_overlap(a, RegionInfo(9, b"", b"test", b"x", b"e", b"g"))
    assert not is_region_overlap(c, RegionInfo(9, b"", b"other", b"y", b"", b""))


def test_client_cache_delete_and_down():
    rcc = ClientRegionCache()
    client = RegionClient("rs:1")
    region = three_regions()[0]
    region.client = client
    rcc.put("rs:1", region, lambda: client)
    rcc.delete(region)
    assert region.client is None
    assert rcc.client_down(client) == set()
    assert rcc.client_down(client) == set()
    assert client not in rcc.regions


def test_close_all():
    rcc = ClientRegionCache()
    client = RegionClient("rs:1")
    region = three_regions()[0]
    region.client = client
    rcc.put("rs:1", region, lambda: client)
    rcc.close_all()
    assert client.closed
    assert not region.available
    assert region.client is None