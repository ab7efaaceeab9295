import pytest

from geopin_client.interop import Bridge, PlainBridge


def test_partial_bridge_cannot_be_constructed():
    class ProxyOnly(Bridge):
        def proxy(self, fn):
            return fn

    with pytest.raises(TypeError):
        ProxyOnly()


def test_plain_bridge_passes_objects_through():
    bridge = PlainBridge()
    options = {"zoom": 2}

    assert bridge.to_js(options) is options
    assert bridge.proxy(print) is print
    assert bridge.new(dict, options) == options
