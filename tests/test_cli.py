# tests/test_cli.py
import json

import pytest
from click.testing import CliRunner

import main
from launcher.claude_launcher import COMMAND_NOT_FOUND
from models.endpoint_model import ProbeResult


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "cc" / "config.json", tmp_path / ".claude" / "settings.json"


@pytest.fixture
def invoke(paths):
    config_file, settings_file = paths
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(
            main.cli,
            ["--config-file", str(config_file), "--settings-file", str(settings_file), *args],
        )
    return _invoke


def _read(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def test_url_add_reports_added_and_duplicates(invoke, paths):
    assert invoke("url", "add", "a.com,b.com").exit_code == 0
    result = invoke("url", "add", "b.com", "d.com")

    assert result.exit_code == 0
    assert "已添加 1 个URL" in result.output
    assert "+ d.com" in result.output
    assert "跳过 1 个重复URL" in result.output
    assert _read(paths[0]) == {"baseUrls": ["a.com", "b.com", "d.com"]}


def test_url_list_rm_and_clear(invoke, paths):
    invoke("url", "add", "a.com b.com c.com")

    listed = invoke("url", "list")
    assert "1. a.com" in listed.output
    assert "3. c.com" in listed.output

    assert invoke("url", "rm", "b.com").exit_code == 0
    assert _read(paths[0]) == {"baseUrls": ["a.com", "c.com"]}

    missing = invoke("url", "rm", "nope.com")
    assert missing.exit_code == 0
    assert "URL不存在" in missing.output

    assert invoke("url", "clear").exit_code == 0
    assert "没有配置URL" in invoke("url", "list").output


def test_config_set_token_and_url(invoke, paths):
    assert invoke("config", "set", "token=sk-ant-0123456789abcdefXYZ").exit_code == 0
    result = invoke("config", "set", "URL=https://api.example.com")
    assert result.exit_code == 0
    assert "https://api.example.com" in result.output

    assert _read(paths[1]) == {
        "env": {
            "ANTHROPIC_AUTH_TOKEN": "sk-ant-0123456789abcdefXYZ",
            "ANTHROPIC_BASE_URL": "https://api.example.com",
        }
    }


def test_config_set_invalid_url_leaves_file_unchanged(invoke, paths):
    settings_file = paths[1]
    settings_file.parent.mkdir(parents=True)
    settings_file.write_text('{"env": {"ANTHROPIC_BASE_URL": "https://old.example"}}', encoding="utf-8")

    result = invoke("config", "set", "url=not-a-url")
    assert result.exit_code == 1
    assert "无效的URL" in result.output
    assert settings_file.read_text(encoding="utf-8") == '{"env": {"ANTHROPIC_BASE_URL": "https://old.example"}}'


@pytest.mark.parametrize("setting", ["token", "model=opus"])
def test_config_set_rejects_bad_syntax_and_unknown_keys(invoke, paths, setting):
    result = invoke("config", "set", setting)
    assert result.exit_code == 1
    assert "支持的配置项" in result.output
    assert not paths[1].exists()


def test_config_list_masks_token_and_marks_active_url(invoke, paths):
    invoke("url", "add", "https://a.example,https://b.example")
    invoke("config", "set", "token=abcdefghWXYZ12345678")
    invoke("config", "set", "url=https://b.example")

    output = invoke("config", "list").output
    assert "abcdefgh****12345678" in output
    assert "WXYZ" not in output
    assert "2. https://b.example (当前使用)" in output
    assert "1. https://a.example" in output


def test_config_list_without_settings(invoke):
    result = invoke("config", "list")
    assert result.exit_code == 0
    assert "未找到配置信息" in result.output
    assert "没有配置备选URL" in result.output


def test_config_open_creates_skeleton(invoke, paths, monkeypatch):
    opened = []
    monkeypatch.setattr(main, "open_in_file_browser", lambda path: opened.append(path) or True)

    result = invoke("config", "open")
    assert result.exit_code == 0
    assert opened == [str(paths[1].parent)]
    assert _read(paths[1]) == {"env": {}, "permissions": {"allow": [], "deny": []}}


def test_config_open_reports_directory_when_browser_fails(invoke, paths, monkeypatch):
    monkeypatch.setattr(main, "open_in_file_browser", lambda path: False)
    result = invoke("config", "open")
    assert result.exit_code == 0
    assert "无法打开目录" in result.output
    assert str(paths[1].parent) in result.output


def test_test_command_writes_fastest(invoke, paths, monkeypatch):
    invoke("url", "add", "fast.example slow.example err.example")
    seen = []

    def fake_run_probe(urls, app_config, observer=None):
        seen.append(urls)
        return [ProbeResult("fast.example", 50.0), ProbeResult("slow.example"), ProbeResult("err.example")]

    monkeypatch.setattr(main, "run_probe", fake_run_probe)
    result = invoke("test")

    assert result.exit_code == 0
    assert seen == [["fast.example", "slow.example", "err.example"]]
    assert "最快的URL: fast.example (50ms)" in result.output
    assert _read(paths[1])["env"]["ANTHROPIC_BASE_URL"] == "fast.example"


def test_test_command_fails_when_nothing_reachable(invoke, paths, monkeypatch):
    invoke("url", "add", "a.example")
    monkeypatch.setattr(main, "run_probe", lambda urls, app_config, observer=None: [ProbeResult("a.example")])

    result = invoke("test")
    assert result.exit_code == 1
    assert "所有URL都无法访问" in result.output
    assert not paths[1].exists()


def test_test_command_fails_without_candidates(invoke):
    result = invoke("test")
    assert result.exit_code == 1
    assert "配置文件中没有URL" in result.output


def test_no_subcommand_mirrors_claude_exit_code(invoke, monkeypatch):
    monkeypatch.setattr(main, "run_claude", lambda command: 3)
    assert invoke().exit_code == 3


def test_no_subcommand_reports_missing_claude(invoke, monkeypatch):
    monkeypatch.setattr(main, "run_claude", lambda command: COMMAND_NOT_FOUND)
    result = invoke()
    assert result.exit_code == COMMAND_NOT_FOUND
    assert "无法启动Claude" in result.output


def test_config_set_malformed_ipv6_url_is_rejected_cleanly(invoke, paths):
    result = invoke("config", "set", "url=http://[::1")
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "无效的URL" in result.output
    assert not paths[1].exists()


def test_url_add_fails_when_list_cannot_be_saved(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    result = CliRunner().invoke(
        main.cli,
        ["--config-file", str(blocker / "config.json"),
         "--settings-file", str(tmp_path / "settings.json"),
         "url", "add", "a.com"],
    )
    assert result.exit_code == 1
    assert "配置文件保存失败" in result.output
    assert "已添加" not in result.output


def test_url_rm_reports_failed_save(invoke, paths, monkeypatch):
    invoke("url", "add", "a.com")
    monkeypatch.setattr(main.UrlListStore, "save", lambda self, urls: False)

    result = invoke("url", "rm", "a.com")
    assert result.exit_code == 1
    assert "配置文件保存失败" in result.output
    assert "URL不存在" not in result.output
    assert _read(paths[0]) == {"baseUrls": ["a.com"]}


def test_results_table_aligns_by_display_width(capsys):
    assert main.display_width("响应时间") == 8
    assert main.display_width(main.pad_display("响应时间", 15)) == 15
    assert main.pad_display("a" * 60, 50) == "a" * 60

    main.print_results_table([ProbeResult("fast.example", 12.0), ProbeResult("dead.example")])
    header, _rule, fast, dead = capsys.readouterr().out.splitlines()

    status_column = main.URL_COLUMN + main.TIME_COLUMN
    assert main.display_width(header) - main.display_width("状态") == status_column
    assert main.display_width(fast) - main.display_width("✅ 最快") == status_column
    assert main.display_width(dead) - main.display_width("❌ 不可用") == status_column
