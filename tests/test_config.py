import config
from config import _int_env


class _RecordingLogger:
    def __init__(self):
        self.sinks = []
        self.removed = 0

    def remove(self, handler_id=None):
        self.removed += 1

    def add(self, sink, **kwargs):
        self.sinks.append((sink, kwargs))
        return len(self.sinks)


class TestIntEnv:
    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("INBOX_DIGEST_TEST_INT", raising=False)
        assert _int_env("INBOX_DIGEST_TEST_INT", 7) == 7

    def test_parses_value(self, monkeypatch):
        monkeypatch.setenv("INBOX_DIGEST_TEST_INT", "250")
        assert _int_env("INBOX_DIGEST_TEST_INT", 7) == 250

    def test_invalid_falls_back(self, monkeypatch):
        monkeypatch.setenv("INBOX_DIGEST_TEST_INT", "fast")
        assert _int_env("INBOX_DIGEST_TEST_INT", 7) == 7


class TestConfigureLogging:
    def test_installs_a_single_sink(self, monkeypatch):
        recorder = _RecordingLogger()
        monkeypatch.setattr(config, "logger", recorder)
        monkeypatch.setattr(config, "_sink_id", None)

        config.configure_logging("DEBUG")
        config.configure_logging("INFO")

        assert recorder.removed == 1
        assert len(recorder.sinks) == 1
        assert recorder.sinks[0][1]["level"] == "DEBUG"
        assert recorder.sinks[0][1]["format"] == config.LOG_FORMAT
