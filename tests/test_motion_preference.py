import pytest

from walkthrough.design.motion import MotionPreference


def test_default_allows_animation():
    pref = MotionPreference()
    assert pref.animations_enabled() is True
    assert pref.adjust_duration(300) == 300
    assert pref.adjust_duration(-5) == 0


def test_reduced_motion_disables_auto_but_not_forced():
    pref = MotionPreference(reduced=True)
    assert pref.animations_enabled("auto") is False
    assert pref.animations_enabled(True) is True
    assert pref.animations_enabled(False) is False
    assert pref.adjust_duration(300) == 0
    assert pref.adjust_duration(300, minimum_ms=40) == 40


def test_invalid_animate_value():
    with pytest.raises(ValueError):
        MotionPreference().animations_enabled("sometimes")


def test_hide_delay_is_half_duration():
    pref = MotionPreference()
    assert pref.hide_delay_ms("auto", 300) == 150
    assert pref.hide_delay_ms(False, 300) == 0
    with pref.override(True):
        assert pref.hide_delay_ms("auto", 300) == 0


def test_from_env(monkeypatch):
    monkeypatch.setenv("WALKTHROUGH_PREFER_REDUCED_MOTION", "yes")
    assert MotionPreference.from_env().reduced is True
    monkeypatch.setenv("WALKTHROUGH_PREFER_REDUCED_MOTION", "0")
    assert MotionPreference.from_env().reduced is False


def test_override_restores_on_error():
    pref = MotionPreference()
    with pytest.raises(RuntimeError):
        with pref.override(True):
            assert pref.reduced
            raise RuntimeError("boom")
    assert pref.reduced is False
