# main.py

import sys
import logging
import unicodedata
from typing import List

import click

# 从项目结构中导入模块
import config # 导入 config.py
from models.endpoint_model import ProbeResult # 从 models/endpoint_model.py 导入
from models.setting_model import SettingError # 从 models/setting_model.py 导入
from parser.input_parser import parse_setting, mask_token # 从 parser/input_parser.py 导入
from store.url_store import UrlListStore # 从 store/url_store.py 导入
from store.settings_store import ClaudeSettingsStore # 从 store/settings_store.py 导入
from validator.prober import ProbeObserver, pick_winner, run_probe # 从 validator/prober.py 导入
from output.settings_writer import write_fastest, apply_setting # 从 output/settings_writer.py 导入
from launcher.file_browser import open_in_file_browser # 从 launcher/file_browser.py 导入
from launcher.claude_launcher import COMMAND_NOT_FOUND, run_claude # 从 launcher/claude_launcher.py 导入

__version__ = "1.0.0"

ADD_URL_HINT = "使用 'cc url add url1,url2' 添加URL"
RULE = "─" * 50
URL_COLUMN = 50
TIME_COLUMN = 15


def setup_logging(verbosity: int) -> None:
    """配置日志：默认只输出警告和错误，-v 输出 INFO，-vv 输出 DEBUG。"""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
        force=True,
    )


def _url_store(ctx: click.Context) -> UrlListStore:
    return UrlListStore(ctx.obj.config_file)


def _settings_store(ctx: click.Context) -> ClaudeSettingsStore:
    return ClaudeSettingsStore(ctx.obj.settings_file)


class ConsoleProbeObserver(ProbeObserver):
    """在终端实时输出探测进度。"""
    def on_probe_start(self, url: str) -> None:
        click.secho(f"  测试: {url}", fg="bright_black")

    def on_probe_complete(self, url: str, result: ProbeResult) -> None:
        if result.reachable:
            click.secho(f"  完成: {url} ({result.latency_display()})", fg="bright_black")
        else:
            click.secho(f"  失败: {url}", fg="bright_black")


def display_width(text: str) -> int:
    """终端显示宽度：全角和宽字符（中文、多数 emoji）占两列。"""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def pad_display(text: str, width: int) -> str:
    """按显示宽度而不是字符数向右补齐空格。"""
    return text + " " * max(width - display_width(text), 0)


def print_results_table(ranked: List[ProbeResult]) -> None:
    """以表格形式输出排序后的探测结果，并标记最快的 URL。"""
    fastest = pick_winner(ranked)
    click.echo(pad_display("URL", URL_COLUMN) + pad_display("响应时间", TIME_COLUMN) + "状态")
    click.echo(RULE + "─" * 25)
    for result in ranked:
        url_cell = pad_display(result.url, URL_COLUMN)
        time_cell = pad_display(result.latency_display(), TIME_COLUMN)
        if not result.reachable:
            click.echo(click.style(url_cell, fg="red") + click.style(time_cell, fg="red")
                       + click.style("❌ 不可用", fg="red"))
        elif result is fastest:
            click.echo(click.style(url_cell, fg="green", bold=True) + click.style(time_cell, fg="green")
                       + click.style("✅ 最快", fg="green"))
        else:
            click.echo(url_cell + click.style(time_cell, fg="green"))


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="cc")
@click.option("-v", "--verbose", count=True, help="输出更多日志（-vv 输出调试日志）")
@click.option("--config-file", hidden=True, type=click.Path(dir_okay=False),
              default=config.CONFIG_FILE, help="备选URL配置文件路径")
@click.option("--settings-file", hidden=True, type=click.Path(dir_okay=False),
              default=config.CLAUDE_SETTINGS_FILE, help="Claude settings 文件路径")
@click.pass_context
def cli(ctx, verbose, config_file, settings_file):
    """Claude 配置管理工具。不带子命令时直接启动 Claude。"""
    setup_logging(verbose)
    ctx.obj = config.AppConfig(config_file=config_file, settings_file=settings_file)
    if ctx.invoked_subcommand is None:
        exit_code = run_claude(ctx.obj.claude_command)
        if exit_code == COMMAND_NOT_FOUND:
            click.secho("❌ 无法启动Claude", fg="red")
            click.secho("请确保Claude已安装并在PATH中", fg="bright_black")
        ctx.exit(exit_code)


# --- URL管理命令 ---
@cli.group("url")
def url_group():
    """URL管理"""


@url_group.command("add")
@click.argument("urls", nargs=-1, required=True)
@click.pass_context
def url_add(ctx, urls):
    """添加URL (多个URL可用逗号、分号或空格分隔)"""
    report = _url_store(ctx).add(urls)
    if not report.added and not report.duplicates:
        click.secho("❌ 没有可添加的URL", fg="red")
        ctx.exit(1)
    if not report.saved:
        click.secho(f"❌ 配置文件保存失败: {ctx.obj.config_file}", fg="red")
        ctx.exit(1)

    click.secho(f"✅ 已添加 {len(report.added)} 个URL", fg="green")
    for url in report.added:
        click.secho(f"  + {url}", fg="bright_black")
    if report.duplicates:
        click.secho(f"⚠️  跳过 {len(report.duplicates)} 个重复URL", fg="yellow")
        for url in report.duplicates:
            click.secho(f"  = {url}", fg="bright_black")


@url_group.command("rm")
@click.argument("url")
@click.pass_context
def url_rm(ctx, url):
    """删除指定URL"""
    removed = _url_store(ctx).remove(url)
    if removed is None:
        click.secho(f"⚠️  URL不存在: {url}", fg="yellow")
    elif not removed:
        click.secho(f"❌ 配置文件保存失败: {ctx.obj.config_file}", fg="red")
        ctx.exit(1)
    else:
        click.secho(f"✅ 已删除URL: {url}", fg="green")


@url_group.command("clear")
@click.pass_context
def url_clear(ctx):
    """清除所有URL"""
    if not _url_store(ctx).clear():
        ctx.exit(1)
    click.secho("✅ 已清除所有URL", fg="green")


@url_group.command("list")
@click.pass_context
def url_list(ctx):
    """列出所有URL"""
    urls = _url_store(ctx).load()
    if not urls:
        click.secho("⚠️  没有配置URL", fg="yellow")
        click.secho(ADD_URL_HINT, fg="bright_black")
        return

    click.secho("📋 当前配置的URL:", fg="cyan", bold=True)
    for index, url in enumerate(urls, start=1):
        click.secho(f"  {index}. {url}", fg="bright_black")


# --- Config管理命令 ---
@cli.group("config")
def config_group():
    """配置管理"""


@config_group.command("open")
@click.pass_context
def config_open(ctx):
    """打开Claude配置目录"""
    store = _settings_store(ctx)
    if not store.ensure_exists():
        click.secho(f"⚠️  无法创建配置文件: {store.path}", fg="yellow")

    if open_in_file_browser(store.directory):
        click.secho(f"📁 已打开Claude配置目录: {store.directory}", fg="green")
        click.secho(f"配置文件: {store.path}", fg="bright_black")
    else:
        click.secho("❌ 无法打开目录", fg="red")
        click.secho(f"配置目录: {store.directory}", fg="bright_black")


@config_group.command("list")
@click.pass_context
def config_list(ctx):
    """列出Claude当前配置和备选URL"""
    click.secho("📋 Claude 当前配置:", fg="cyan", bold=True)
    click.secho(RULE, fg="bright_black")

    settings = _settings_store(ctx).load()
    env = settings.get(config.ENV_SECTION)
    active_url = None
    if isinstance(env, dict):
        token = env.get(config.AUTH_TOKEN_KEY)
        active_url = env.get(config.BASE_URL_KEY)

        click.secho("🔑 认证Token:", fg="green")
        if token:
            click.secho(f"   {mask_token(str(token))}", fg="bright_black")
        else:
            click.secho("   未设置", fg="yellow")

        click.echo()
        click.secho("🌐 Base URL:", fg="green")
        if active_url:
            click.secho(f"   {active_url}", fg="bright_black")
        else:
            click.secho("   未设置", fg="yellow")
    else:
        click.secho("⚠️  未找到配置信息", fg="yellow")

    click.echo()
    click.secho("📋 备选 URL 列表:", fg="cyan", bold=True)
    click.secho(RULE, fg="bright_black")

    urls = _url_store(ctx).load()
    if not urls:
        click.secho("⚠️  没有配置备选URL", fg="yellow")
        click.secho(ADD_URL_HINT, fg="bright_black")
        return

    for index, url in enumerate(urls, start=1):
        if url == active_url:
            click.echo(click.style("✅ ", fg="green") + f"{index}. "
                       + click.style(url, fg="green", bold=True) + click.style(" (当前使用)", fg="green"))
        else:
            click.echo(f"   {index}. " + click.style(url, fg="bright_black"))


@config_group.command("set")
@click.argument("setting")
@click.pass_context
def config_set(ctx, setting):
    """设置Claude配置 (token=xxx 或 url=xxx)"""
    try:
        parsed = parse_setting(setting)
    except SettingError as e:
        click.secho(f"❌ {e}", fg="red")
        click.secho("支持的配置项: token, url", fg="bright_black")
        ctx.exit(1)

    if not apply_setting(parsed, _settings_store(ctx)):
        ctx.exit(1)
    click.secho(f"✅ {parsed.describe()}", fg="green")


# --- Test命令 ---
@cli.command("test")
@click.pass_context
def test_command(ctx):
    """测试URL速度并更新配置"""
    urls = _url_store(ctx).load()
    if not urls:
        click.secho("⚠️  配置文件中没有URL", fg="yellow")
        click.secho(ADD_URL_HINT, fg="bright_black")
        ctx.exit(1)

    click.secho("🔍 正在测试URL响应速度...", fg="blue")
    ranked = run_probe(urls, ctx.obj, ConsoleProbeObserver())
    click.echo()
    print_results_table(ranked)

    fastest = pick_winner(ranked)
    if fastest is None:
        click.secho("❌ 所有URL都无法访问", fg="red")
        click.secho("💡 请检查网络连接或URL配置", fg="yellow")
        ctx.exit(1)

    click.secho(f"\n🚀 最快的URL: {fastest.url} ({fastest.latency_display()})", fg="green")
    click.secho("\n🔧 正在更新Claude设置...", fg="blue")
    written = write_fastest(ranked, _settings_store(ctx))
    if written is None:
        ctx.exit(1)
    click.secho(f"✅ Claude URL 已更新: {written}", fg="green")


if __name__ == "__main__":
    cli()
