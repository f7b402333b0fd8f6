from qlspectrumlib import log
from qlspectrumlib.log import dbg, timed


class Worker:
    def run(self):
        with timed("step"):
            pass

    def say(self):
        dbg("hello")


def test_timed_is_tagged_with_the_enclosing_class(monkeypatch, capsys):
    monkeypatch.setattr(log, "_ENABLED", True)
    Worker().run()
    err = capsys.readouterr().err
    assert "Worker] step:" in err
    assert "log] step:" not in err


def test_dbg_is_tagged_with_its_caller(monkeypatch, capsys):
    monkeypatch.setattr(log, "_ENABLED", True)
    Worker().say()
    assert "Worker] hello" in capsys.readouterr().err


def test_dbg_name_override(monkeypatch, capsys):
    monkeypatch.setattr(log, "_ENABLED", True)
    dbg("x", name="engine")
    assert "engine] x" in capsys.readouterr().err


def test_disabled_is_silent(monkeypatch, capsys):
    monkeypatch.setattr(log, "_ENABLED", False)
    Worker().run()
    Worker().say()
    assert capsys.readouterr().err == ""
