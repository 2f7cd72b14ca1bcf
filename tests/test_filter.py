from autobright.filter import DebugInfo, PressureFilter


def test_large_rise_moves_at_once():
    f = PressureFilter()
    assert f.filter(100) == 100
    assert f.pressure == 0


def test_large_fall_moves_at_once():
    f = PressureFilter()
    f.set_value(100)
    assert f.filter(0) == 0
    assert f.pressure == 0


def test_small_change_builds_pressure_without_moving():
    f = PressureFilter()
    f.set_value(50)
    assert f.filter(51) == 50
    assert 0 < f.pressure < 1


def test_small_fall_builds_negative_pressure():
    f = PressureFilter()
    f.set_value(50)
    assert f.filter(49) == 50
    assert -1 < f.pressure < 0


def test_sustained_rise_moves_after_pressure():
    f = PressureFilter()
    f.set_value(50)
    assert f.filter(60) == 50
    assert f.filter(60) == 60
    assert f.pressure == 0


def test_moves_to_mean_of_readings():
    f = PressureFilter()
    f.set_value(50)
    f.filter(60)
    assert f.filter(70) == 65


def test_direction_change_releases_pressure():
    f = PressureFilter()
    f.set_value(50)
    f.filter(60)
    assert f.pressure > 0
    assert f.filter(40) == 50
    assert f.pressure == 0
    assert f.filter(60) == 50


def test_equal_reading_releases_pressure():
    f = PressureFilter()
    f.set_value(50)
    f.filter(55)
    assert f.filter(50) == 50
    assert f.pressure == 0


def test_update_debug_info():
    f = PressureFilter()
    f.set_value(50)
    f.filter(60)
    info = DebugInfo()
    f.update_debug_info(info)
    assert info.filtered == 50
    assert info.pressure == f.pressure
    assert info.value == 0 and info.brightness == 0