#!filepath: tycoon/cli.py
import time
from typing import Optional

import typer
from rich import print
from rich.table import Table

from tycoon.config.app_config import AppConfig
from tycoon.core.types import AutomationFeature, PrestigeTier
from tycoon.engine.scheduler import ManualClock
from tycoon.game import Game, build_game
from tycoon.utils.errors import UserInputError
from tycoon.utils.logger import init_logging, logs

__version__ = "0.1.0"

app = typer.Typer(help="Idle Tycoon simulation core CLI")

_FEATURES = {
    "collect": AutomationFeature.COLLECT,
    "accept": AutomationFeature.ACCEPT,
    "assign": AutomationFeature.ASSIGN,
}


def _load_game(config: Optional[str]) -> Game:
    cfg = AppConfig.load(config)
    init_logging(cfg.log)
    # CLI 永远 headless：模拟时钟从当前时间开始，每 tick 推进 tick_seconds
    return build_game(cfg, clock=ManualClock(time.time()))


def _parse_tier(name: str) -> PrestigeTier:
    try:
        tier = PrestigeTier[name.upper()]
    except KeyError:
        raise UserInputError(f"unknown prestige tier: {name}")
    if tier == PrestigeTier.NONE:
        raise UserInputError("tier must be bronze, silver or gold")
    return tier


def _print_status(game: Game) -> None:
    table = Table(title="Tycoon status")
    table.add_column("field")
    table.add_column("value", justify="right")
    for key, value in game.status().items():
        table.add_row(key, str(value))
    print(table)


def _report(ok: bool, what: str) -> None:
    if ok:
        print(f"[green]{what}: ok[/green]")
    else:
        print(f"[red]{what}: not possible right now[/red]")
        raise typer.Exit(code=1)


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
@logs.catch(msg="run failed")
def run(
    ticks: int = typer.Option(600, "--ticks", "-n", min=1, help="模拟的 tick 数（1 tick = 1 秒）"),
    config: Optional[str] = typer.Option(None, "--config", "-c"),
):
    """
    headless 快进 N 个 tick，然后保存并打印状态
    """
    game = _load_game(config)
    print(f"[blue]Running {ticks} ticks[/blue]")

    game.start()
    game.run_ticks(ticks)
    game.close()

    _print_status(game)


@app.command()
def status(config: Optional[str] = typer.Option(None, "--config", "-c")):
    game = _load_game(config)
    _print_status(game)


@app.command()
def prestige(tier: str, config: Optional[str] = typer.Option(None, "--config", "-c")):
    """
    执行 prestige（bronze / silver / gold）
    """
    try:
        parsed = _parse_tier(tier)
    except UserInputError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    game = _load_game(config)
    ok = game.do_prestige(parsed)
    game.close()
    _report(ok, f"prestige {parsed.name}")


@app.command()
def ascend(config: Optional[str] = typer.Option(None, "--config", "-c")):
    game = _load_game(config)
    ok = game.do_ascension()
    game.close()
    _report(ok, "ascension")


@app.command("buy-upgrade")
def buy_upgrade(upgrade_id: str, config: Optional[str] = typer.Option(None, "--config", "-c")):
    game = _load_game(config)
    ok = game.buy_upgrade(upgrade_id)
    if ok:
        game.save()
    game.close()
    _report(ok, f"buy upgrade {upgrade_id}")


@app.command("buy-perk")
def buy_perk(perk_id: str, config: Optional[str] = typer.Option(None, "--config", "-c")):
    game = _load_game(config)
    ok = game.buy_perk(perk_id)
    if ok:
        game.save()
    game.close()
    _report(ok, f"buy perk {perk_id}")


@app.command()
def automation(
    feature: str,
    state: str,
    config: Optional[str] = typer.Option(None, "--config", "-c"),
):
    """
    开关自动化：automation collect|accept|assign on|off
    """
    if feature not in _FEATURES or state not in ("on", "off"):
        print("[red]usage: automation collect|accept|assign on|off[/red]")
        raise typer.Exit(code=2)

    game = _load_game(config)
    ok = game.set_automation(_FEATURES[feature], state == "on")
    if ok:
        game.save()
    game.close()
    _report(ok, f"automation {feature} {state}")


if __name__ == "__main__":
    app()

# python -m tycoon.cli run --ticks 3600
