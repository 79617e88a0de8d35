import pytest

from custom_components.medication_scheduler.exceptions import RegistrationFailure


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    yield


class FakeTimer:
    """Timer facility double; tests fire registrations by hand."""

    def __init__(self) -> None:
        self.live = {}
        self.fail = False

    def register_one_shot(self, medication_id, when, action):
        self._check(medication_id)
        self.live[medication_id] = {"when": when, "period": None, "action": action}

    def register_periodic(self, medication_id, first, period, action):
        self._check(medication_id)
        self.live[medication_id] = {"when": first, "period": period, "action": action}

    def cancel(self, medication_id):
        return self.live.pop(medication_id, None) is not None

    def close(self):
        self.live.clear()

    def fire(self, medication_id):
        reg = self.live[medication_id]
        when = reg["when"]
        if reg["period"] is None:
            del self.live[medication_id]
        else:
            reg["when"] = when + reg["period"]
        reg["action"](when)
        return when

    def _check(self, medication_id):
        if self.fail:
            raise RegistrationFailure("alarm quota exceeded")
        if medication_id in self.live:
            raise RegistrationFailure(f"duplicate registration for {medication_id}")


@pytest.fixture
def fake_timer():
    return FakeTimer()
