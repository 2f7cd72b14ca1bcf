from autobright.adapter import Adapter
from autobright.brightness import BrightnessSource
from autobright.promise import rejected, resolved


class FakeSource(BrightnessSource):
    def __init__(self, brightness=-1):
        super().__init__()
        self._brightness = brightness
        self.requests = []
        self.failure = None

    def connect(self):
        return resolved()

    def set_brightness(self, value):
        self.requests.append(value)
        if self.failure is not None:
            return rejected(self.failure)
        return resolved()

    @property
    def brightness(self):
        return self._brightness

    def change(self, value):
        self._brightness = value
        self.brightness_changed()


def test_initial_state():
    adapter = Adapter(FakeSource())
    assert adapter.value == Adapter.NO_VALUE
    assert adapter.offset == 0


def test_setting_value_writes_brightness():
    source = FakeSource()
    adapter = Adapter(source)
    emitted = []
    adapter.value_changed.connect(lambda: emitted.append(adapter.value))

    adapter.value = 40

    assert adapter.value == 40
    assert source.requests == [40]
    assert emitted == [40]


def test_setting_same_value_does_nothing():
    source = FakeSource()
    adapter = Adapter(source)
    adapter.value = 40
    adapter.value = 40
    assert source.requests == [40]


def test_value_is_clamped():
    adapter = Adapter(FakeSource())
    adapter.value = 150
    assert adapter.value == 100
    adapter.value = -5
    assert adapter.value == 0


def test_offset_is_clamped():
    adapter = Adapter(FakeSource())
    adapter.offset = 150
    assert adapter.offset == 100
    adapter.offset = -150
    assert adapter.offset == -100


def test_offset_without_value_does_not_write():
    source = FakeSource()
    adapter = Adapter(source)
    emitted = []
    adapter.offset_changed.connect(lambda: emitted.append(adapter.offset))
    adapter.offset = 20
    assert emitted == [20]
    assert source.requests == []


def test_brightness_includes_offset_and_stays_in_range():
    source = FakeSource()
    adapter = Adapter(source)
    adapter.offset = 20
    adapter.value = 90
    assert adapter.value == 100 - adapter.offset
    assert source.requests == [100]


def test_offset_change_reclamps_value():
    source = FakeSource()
    adapter = Adapter(source)
    adapter.value = 90
    adapter.offset = 30
    assert adapter.value + adapter.offset == 100
    assert source.requests[-1] == 100
    assert len(source.requests) == 2


def test_external_change_without_value_sets_value():
    source = FakeSource()
    adapter = Adapter(source)
    source.change(60)
    assert adapter.value == 60
    assert adapter.offset == 0
    assert source.requests == []


def test_external_change_with_value_sets_offset():
    source = FakeSource()
    adapter = Adapter(source)
    adapter.value = 40
    emitted = []
    adapter.offset_changed.connect(lambda: emitted.append(adapter.offset))
    source.change(70)
    assert adapter.value == 40
    assert adapter.offset == source.brightness - adapter.value
    assert emitted == [adapter.offset]


def test_close_stops_following():
    source = FakeSource()
    adapter = Adapter(source)
    adapter.close()
    source.change(60)
    assert adapter.value == Adapter.NO_VALUE
    assert source.brightness_changed.handlers() == []


def test_failed_write_is_logged(capsys):
    source = FakeSource()
    source.failure = RuntimeError("write failed")
    adapter = Adapter(source)
    adapter.value = 40
    err = capsys.readouterr().err
    assert "write failed" in err
    assert adapter.value == 40