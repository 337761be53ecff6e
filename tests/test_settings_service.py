# tests/test_settings_service.py
# Durations, alarm choices and auto-start policy kept in app_state

import pytest

from core.timer_engine import FOCUS, LONG_BREAK, SHORT_BREAK, Durations
from domain.models import AlarmSettings
from services.settings_service import (
    MAX_SECONDS,
    AutoStartPolicy,
    SettingsService,
    validate_durations,
)


@pytest.fixture
def settings(state_repo):
    return SettingsService(state_repo)


class TestDurations:

    def test_defaults(self, settings):
        assert settings.get_durations() == Durations(focus=1500, short_break=300, long_break=900)

    def test_set_and_reload(self, settings, state_repo):
        settings.set_durations(Durations(focus=600, short_break=120, long_break=1200))
        assert SettingsService(state_repo).get_durations() == Durations(
            focus=600, short_break=120, long_break=1200
        )

    def test_change_listeners_notified(self, settings):
        seen = []
        settings.add_on_change(seen.append)
        d = Durations(focus=600)
        settings.set_durations(d)
        assert seen == [d]

    @pytest.mark.parametrize(
        "durations",
        [
            Durations(focus=0),
            Durations(short_break=-5),
            Durations(long_break=MAX_SECONDS[LONG_BREAK] + 1),
            Durations(focus=12.5),
        ],
    )
    def test_invalid_rejected(self, settings, durations):
        seen = []
        settings.add_on_change(seen.append)
        with pytest.raises(ValueError):
            settings.set_durations(durations)
        assert seen == []
        assert settings.get_durations() == Durations()

    def test_caps_are_inclusive(self):
        validate_durations(
            Durations(
                focus=MAX_SECONDS[FOCUS],
                short_break=MAX_SECONDS[SHORT_BREAK],
                long_break=MAX_SECONDS[LONG_BREAK],
            )
        )

    @pytest.mark.parametrize(
        "raw",
        ["garbage", "[1, 2]", '{"focus": 60}', '{"focus": 0, "shortBreak": 60, "longBreak": 60}'],
    )
    def test_bad_stored_value_falls_back(self, settings, state_repo, raw):
        state_repo.set(SettingsService.DURATIONS_KEY, raw)
        assert settings.get_durations() == Durations()


class TestAlarms:

    def test_defaults(self, settings):
        alarms = settings.get_alarms()
        assert alarms == AlarmSettings(focus="beep", short_break="chime", long_break="bell")
        assert settings.alarm_for(LONG_BREAK) == "bell"

    def test_set_and_read(self, settings):
        settings.set_alarms(
            AlarmSettings(focus="digital", short_break="none", long_break="gentle", enabled=False)
        )
        alarms = settings.get_alarms()
        assert alarms.focus == "digital"
        assert alarms.short_break == "none"
        assert alarms.enabled is False
        assert settings.alarm_for(FOCUS) == "digital"

    def test_unknown_sound_rejected(self, settings):
        with pytest.raises(ValueError):
            settings.set_alarms(AlarmSettings(focus="airhorn"))

    def test_unknown_stored_sound_uses_default(self, settings, state_repo):
        state_repo.set(SettingsService.ALARMS_KEY, '{"focus": "airhorn", "shortBreak": "bell"}')
        alarms = settings.get_alarms()
        assert alarms.focus == "beep"
        assert alarms.short_break == "bell"

    def test_alarm_for_unknown_mode(self, settings):
        with pytest.raises(ValueError):
            settings.alarm_for("nap")


class TestAutoStart:

    def test_default_policy(self, settings):
        assert settings.get_auto_start() == AutoStartPolicy(enabled=True, delay_ms=500)

    def test_set_and_read(self, settings):
        settings.set_auto_start(AutoStartPolicy(enabled=False, delay_ms=2000))
        assert settings.get_auto_start() == AutoStartPolicy(enabled=False, delay_ms=2000)

    def test_delay_out_of_range(self, settings):
        with pytest.raises(ValueError):
            settings.set_auto_start(AutoStartPolicy(delay_ms=60_000))

    def test_bad_stored_delay_uses_default(self, settings, state_repo):
        state_repo.set(SettingsService.AUTO_START_KEY, '{"enabled": false, "delayMs": "soon"}')
        assert settings.get_auto_start() == AutoStartPolicy(enabled=False, delay_ms=500)
