import io

from pip_anywhere.main import build_parser, run_prompt


class RecordingTool:
    def __init__(self, success=True):
        self.success = success
        self.calls = []

    def execute(self, args):
        self.calls.append(args)
        return {"success": self.success, "reason": "ok" if self.success else "no_candidates"}


class FakeRegistry:
    def __init__(self, tool):
        self.tool = tool

    def get(self, name):
        assert name == "browsers.trigger_pip"
        return self.tool


def test_prompt_maps_keys_to_sources(capsys):
    tool = RecordingTool()
    fired = run_prompt(FakeRegistry(tool), stdin=io.StringIO("\np\ns\nx\nq\ns\n"))

    assert fired == 3
    assert tool.calls == [
        {"source": "toolbar"},
        {"source": "toolbar"},
        {"command": "trigger-pip"},
    ]
    assert "Unknown command: 'x'" in capsys.readouterr().out


def test_prompt_reports_failure_reason(capsys):
    run_prompt(FakeRegistry(RecordingTool(success=False)), stdin=io.StringIO("p\n"))
    assert "PiP failed: no_candidates" in capsys.readouterr().out


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.url is None
    assert args.headless is None

    args = build_parser().parse_args(["--browser", "chrome", "--headless"])
    assert args.browser == "chrome"
    assert args.headless is True
