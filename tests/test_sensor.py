from autobright.bus import PEER_PING, BusProxy
from autobright.promise import rejected, resolved
from autobright.sensor import (
    INTERFACE_NAME,
    OBJECT_PATH,
    SERVICE_NAME,
    SensorProxy,
    Unit,
)


class FakeBusProxy(BusProxy):
    def __init__(self, properties=None):
        super().__init__(INTERFACE_NAME)
        self.properties = dict(properties or {})
        self.calls = []

    def get_cached_property(self, name):
        return self.properties.get(name)

    def invoke(self, method, *args):
        self.calls.append((method, args))
        return resolved(())

    def change(self, **props):
        self.properties.update(props)
        self.properties_changed(props, [])


class Factory:
    def __init__(self, proxy):
        self.proxy = proxy
        self.requests = []

    def __call__(self, *args):
        self.requests.append(args)
        return resolved(self.proxy)


def outcome(promise):
    box = {}
    promise.then(lambda *a: box.setdefault("value", a),
                 lambda e: box.setdefault("error", e))
    return box


def test_connect_reads_unit_and_light_level():
    proxy = FakeBusProxy({"LightLevelUnit": "lux", "LightLevel": 12.5})
    sensor = SensorProxy(Factory(proxy))
    seen = []
    sensor.light_level_changed.connect(
        lambda: seen.append(sensor.light_level))

    box = outcome(sensor.connect())

    assert box == {"value": ()}
    assert sensor.has_unit()
    assert sensor.unit is Unit.LUX
    assert sensor.light_level == 12.5
    assert seen == [12.5]


def test_factory_receives_service_location():
    factory = Factory(FakeBusProxy({"LightLevelUnit": "vendor"}))
    SensorProxy(factory).connect()
    assert factory.requests == [
        ("system", SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME)]


def test_vendor_unit():
    proxy = FakeBusProxy({"LightLevelUnit": "vendor", "LightLevel": 3})
    sensor = SensorProxy(Factory(proxy))
    sensor.connect()
    assert sensor.unit is Unit.VENDOR
    assert sensor.light_level == 3.0


def test_unknown_unit_rejects_connect():
    proxy = FakeBusProxy({"LightLevelUnit": "candela"})
    sensor = SensorProxy(Factory(proxy))
    box = outcome(sensor.connect())
    assert isinstance(box["error"], ValueError)
    assert str(box["error"]) == "candela"
    assert not sensor.has_unit()


def test_connect_waits_for_unit():
    proxy = FakeBusProxy()
    sensor = SensorProxy(Factory(proxy))

    box = outcome(sensor.connect())
    assert box == {}
    assert sensor.unit is Unit.UNKNOWN

    proxy.change(LightLevelUnit="lux", LightLevel=7.0)
    assert box == {"value": ()}
    assert sensor.unit is Unit.LUX
    assert sensor.light_level == 7.0


def test_unit_read_only_once():
    proxy = FakeBusProxy({"LightLevelUnit": "lux", "LightLevel": 1.0})
    sensor = SensorProxy(Factory(proxy))
    sensor.connect()
    proxy.change(LightLevelUnit="vendor", LightLevel=2.0)
    assert sensor.unit is Unit.LUX
    assert sensor.light_level == 2.0


def test_same_light_level_does_not_emit():
    proxy = FakeBusProxy({"LightLevelUnit": "lux", "LightLevel": 4.0})
    sensor = SensorProxy(Factory(proxy))
    sensor.connect()
    count = []
    sensor.light_level_changed.connect(lambda: count.append(1))
    proxy.change(LightLevel=4.0)
    assert count == []
    proxy.change(LightLevel=5.0)
    assert count == [1]


def test_connect_rejects_when_factory_fails():
    sensor = SensorProxy(lambda *a: rejected(RuntimeError("no bus")))
    box = outcome(sensor.connect())
    assert str(box["error"]) == "no bus"


def test_ping_service_pings_peer():
    proxy = FakeBusProxy()
    box = outcome(SensorProxy.ping_service(Factory(proxy)))
    assert box == {"value": ()}
    assert proxy.calls == [(PEER_PING, ())]