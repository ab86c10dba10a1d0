import pytest

from eventify.constant_file import required_env


def test_required_env_returns_value(monkeypatch):
    monkeypatch.setenv("EVENTIFY_TEST_SECRET", "s3cret")
    assert required_env("EVENTIFY_TEST_SECRET") == "s3cret"


@pytest.mark.parametrize("value", [None, ""])
def test_required_env_refuses_missing_value(monkeypatch, value):
    if value is None:
        monkeypatch.delenv("EVENTIFY_TEST_SECRET", raising=False)
    else:
        monkeypatch.setenv("EVENTIFY_TEST_SECRET", value)

    with pytest.raises(RuntimeError, match="EVENTIFY_TEST_SECRET must be set"):
        required_env("EVENTIFY_TEST_SECRET")
