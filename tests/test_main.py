from unittest.mock import patch

from surface_prober.core.bridge import BridgeError
from surface_prober.core.outcomes import DatasetInconsistencyError
from surface_prober.main import build_parser, main


def _dataset(tmp_path):
    path = tmp_path / "namespaces.yaml"
    path.write_text("Window:\n  - alert\n", encoding="utf-8")
    return str(path)


def test_parser_defaults():
    args = build_parser().parse_args(["data.json"])
    assert args.output == "meta.json"
    assert args.sessions == 2
    assert args.browser == "chromium"
    assert args.headed is False


def test_main_runs_the_catalogue(tmp_path):
    with patch("surface_prober.main.classify_catalogue") as classify:
        code = main([_dataset(tmp_path), "-o", str(tmp_path / "meta.json"), "-s", "3", "-b", "firefox", "-q"])

    assert code == 0
    records = classify.call_args.args[0]
    assert [r.proto_chain_id for r in records] == ["Window", "Window.alert"]
    bridge = classify.call_args.kwargs["bridge"]
    assert bridge.sessions == 3
    assert bridge.browser == "firefox"
    assert bridge.headless is True


def test_missing_dataset_exits_with_error(tmp_path, capsys):
    assert main([str(tmp_path / "nope.json")]) == 1
    assert "Could not load dataset" in capsys.readouterr().out


def test_dataset_inconsistency_exits_with_error(tmp_path, capsys):
    error = DatasetInconsistencyError(["Foo is not supported but foo is supported"])
    with patch("surface_prober.main.classify_catalogue", side_effect=error):
        assert main([_dataset(tmp_path)]) == 1
    assert "Foo is not supported but foo is supported" in capsys.readouterr().out


def test_bridge_failure_exits_with_error(tmp_path, capsys):
    with patch("surface_prober.main.classify_catalogue", side_effect=BridgeError("chromium session failed")):
        assert main([_dataset(tmp_path), "-q"]) == 1
    assert "Browser run failed" in capsys.readouterr().out


def test_scalar_members_exit_with_error(tmp_path, capsys):
    path = tmp_path / "namespaces.yaml"
    path.write_text("Window: alert\n", encoding="utf-8")

    with patch("surface_prober.main.classify_catalogue") as classify:
        assert main([str(path), "-q"]) == 1

    classify.assert_not_called()
    assert "must be a list" in capsys.readouterr().out
