import copy

from autobright.bus import BusError, BusProxy, call, ping
from autobright.promise import rejected, resolved
from autobright.signals import Signal

DOMAIN = "GException Test"


class FakeProxy(BusProxy):
    def __init__(self, replies=None, cache=None):
        super().__init__("com.example.Iface")
        self.replies = replies or {}
        self.cache = cache or {}
        self.calls = []

    def get_cached_property(self, name):
        return self.cache.get(name)

    def invoke(self, method, *args):
        self.calls.append((method, args))
        reply = self.replies.get(method, ())
        if isinstance(reply, BaseException):
            return rejected(reply)
        return resolved(reply)


def outcome(promise):
    values, errors = [], []
    promise.then(lambda *a: values.append(a), errors.append)
    return values, errors


def fill_error():
    return BusError("A friendly test error", DOMAIN, 1)


def test_bus_error_fields():
    error = fill_error()
    assert error.domain == DOMAIN
    assert error.code == 1
    assert str(error) == "A friendly test error"


def test_empty_error_has_reason():
    error = BusError()
    assert error.message is None
    assert str(error) == "No reason"


def test_copy():
    a = fill_error()
    b = copy.copy(a)
    assert a is not b
    assert a.message == b.message
    assert b.code == 1


def test_call_with_null_proxy_rejects():
    values, errors = outcome(call(None, "Anything"))
    assert values == []
    assert isinstance(errors[0], ValueError)
    assert str(errors[0]) == "Proxy is null"


def test_call_returns_reply():
    proxy = FakeProxy({"GetIdletime": (1234,)})
    values, errors = outcome(call(proxy, "GetIdletime"))
    assert values == [((1234,),)]
    assert errors == []
    assert proxy.calls == [("GetIdletime", ())]


def test_call_passes_arguments():
    proxy = FakeProxy({"AddIdleWatch": (7,)})
    values, _ = outcome(call(proxy, "AddIdleWatch", 5000))
    assert proxy.calls == [("AddIdleWatch", (5000,))]
    assert values == [((7,),)]


def test_call_propagates_bus_error():
    proxy = FakeProxy({"Broken": fill_error()})
    values, errors = outcome(call(proxy, "Broken"))
    assert values == []
    assert errors[0].code == 1


def test_call_catches_raising_invoke():
    class Raising(FakeProxy):
        def invoke(self, method, *args):
            raise BusError("gone")

    values, errors = outcome(call(Raising(), "X"))
    assert values == []
    assert str(errors[0]) == "gone"


def test_ping_resolves_without_value():
    proxy = FakeProxy()
    values, errors = outcome(ping(proxy))
    assert values == [()]
    assert errors == []
    assert proxy.calls == [("org.freedesktop.DBus.Peer.Ping", ())]


def test_ping_null_proxy():
    _, errors = outcome(ping(None))
    assert str(errors[0]) == "Proxy is null"


def test_get_property():
    proxy = FakeProxy({"org.freedesktop.DBus.Properties.Get": (42,)})
    values, _ = outcome(BusProxy.get_property(proxy, "Brightness"))
    assert values == [(42,)]
    assert proxy.calls == [
        ("org.freedesktop.DBus.Properties.Get",
         ("com.example.Iface", "Brightness")),
    ]


def test_set_property():
    proxy = FakeProxy()
    values, errors = outcome(BusProxy.set_property(proxy, "Brightness", 30))
    assert values == [()]
    assert errors == []
    assert proxy.calls == [
        ("org.freedesktop.DBus.Properties.Set",
         ("com.example.Iface", "Brightness", 30)),
    ]


def test_set_property_error():
    proxy = FakeProxy({"org.freedesktop.DBus.Properties.Set": BusError("no")})
    values, errors = outcome(proxy.set_property("Brightness", 30))
    assert values == []
    assert str(errors[0]) == "no"


def test_properties_changed_signal():
    proxy = FakeProxy()
    seen = []
    proxy.properties_changed.connect(lambda changed, inv: seen.append(changed))
    Signal.emit(proxy.properties_changed, {"LightLevel": 4.0}, [])
    assert seen == [{"LightLevel": 4.0}]