"""Operator console - drive scheduler and governor cycles against a realm."""

from __future__ import annotations
import asyncio
import json
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Coroutine, Optional, TypeVar

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from thefuzz import fuzz

from empire_sim.catalogs import Catalog, default_catalog
from empire_sim.config import SimulationConfig
from empire_sim.log import configure_logging
from empire_sim.models import Building, Governor, Personality, ProvinceSnapshot, ResourceType
from empire_sim.store import InMemoryStore
from empire_sim.systems import (
    EventScheduler,
    FixedClock,
    GovernorRunner,
    auto_resolve_raid,
    generate_governor_report,
    resolve_event_choice,
)


console = Console()

HISTORY_DIR = Path.home() / ".empire_sim"
HISTORY_DIR.mkdir(exist_ok=True)

T = TypeVar("T")

RESOURCE_COLUMNS = [r.value for r in ResourceType]


def demo_provinces() -> list[ProvinceSnapshot]:
    """A small three-province realm to poke at."""
    return [
        ProvinceSnapshot(
            name="Highmarch",
            city_id="demo",
            level=3,
            threat=22,
            buildings=[
                Building(type="FARM", level=2),
                Building(type="MINE", level=2),
                Building(type="BARRACKS", level=1),
                Building(type="MARKETPLACE", level=1),
                Building(type="WALLS", level=1),
            ],
            resources={"gold": 1800, "food": 1200, "stone": 900, "iron": 400, "population": 600, "influence": 150},
            governor=Governor(name="Aldric", personality=Personality.CONSERVATIVE, loyalty=75),
        ),
        ProvinceSnapshot(
            name="Saltmere",
            city_id="demo",
            level=2,
            threat=12,
            buildings=[Building(type="FARM", level=1), Building(type="MARKETPLACE", level=1)],
            resources={"gold": 2400, "food": 700, "stone": 500, "iron": 150, "population": 320, "influence": 80},
            governor=Governor(name="Mira", personality=Personality.MERCHANT, loyalty=60, xp=300),
        ),
        ProvinceSnapshot(
            name="Thornwood",
            city_id="demo",
            level=1,
            threat=6,
            buildings=[Building(type="FARM", level=1)],
            resources={"gold": 400, "food": 900, "stone": 200, "iron": 50, "population": 150, "influence": 10},
        ),
    ]


class Realm:
    """Console controller: one store, one clock, both periodic drivers."""

    def __init__(self, config: Optional[SimulationConfig] = None, catalog: Optional[Catalog] = None, seed: Optional[int] = None):
        self.config = config or SimulationConfig.from_env()
        self.catalog = catalog or default_catalog()
        self.rng = random.Random(seed)
        self.clock = FixedClock()
        self.store = InMemoryStore()
        self._loop = asyncio.new_event_loop()
        self._save_dir = Path("saves")
        self._save_dir.mkdir(exist_ok=True)
        self._build_drivers()

    def _build_drivers(self) -> None:
        self.scheduler = EventScheduler(self.store, self.config, self.catalog, self.rng, self.clock)
        self.governors = GovernorRunner(self.store, self.config, self.catalog, self.rng, self.clock)

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        return self._loop.run_until_complete(coro)

    def seed_demo(self) -> None:
        for province in demo_provinces():
            self.store.add_province(province, user_id="player")

    def provinces(self) -> list[ProvinceSnapshot]:
        ids = self.run(self.store.list_province_ids())
        return [self.run(self.store.get_province(pid)) for pid in ids]

    def fuzzy_match_province(self, query: str, threshold: int = 60) -> Optional[ProvinceSnapshot]:
        """Find the province whose name best matches the query."""
        best_match = None
        best_score = 0
        for province in self.provinces():
            score = fuzz.ratio(query.lower(), province.name.lower())
            if score > best_score and score >= threshold:
                best_score = score
                best_match = province
        return best_match

    def save(self, filename: str = "quicksave") -> bool:
        save_data = {
            "version": 1,
            "clock": self.clock.now().isoformat(),
            "store": self.store.export(),
        }
        filepath = self._save_dir / f"{filename}.json"
        with open(filepath, "w") as f:
            json.dump(save_data, f, indent=2, default=str)
        console.print(f"[green]Realm saved to {filepath}[/green]")
        return True

    def load(self, filename: str = "quicksave") -> bool:
        filepath = self._save_dir / f"{filename}.json"
        if not filepath.exists():
            console.print(f"[red]Save file not found: {filepath}[/red]")
            return False

        with open(filepath, "r") as f:
            save_data = json.load(f)

        self.store = InMemoryStore.load(save_data["store"])
        self.clock = FixedClock(datetime.fromisoformat(save_data["clock"]))
        self._build_drivers()
        console.print(f"[green]Realm loaded from {filepath}[/green]")
        return True

    def list_saves(self) -> list[str]:
        return [f.stem for f in self._save_dir.glob("*.json")]

    def close(self) -> None:
        self._loop.close()


# ------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------

def print_help() -> None:
    table = Table(title="Commands", show_header=False, box=None)
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("status", "Overview of every province")
    table.add_row("province <name>", "Details, governor report and pending events/raids")
    table.add_row("events", "Run one scheduler cycle")
    table.add_row("governors", "Run one governor cycle")
    table.add_row("raid <province>", "Auto-defend the pending raid")
    table.add_row("choose <province> [choice]", "Answer the pending event (lists choices if omitted)")
    table.add_row("advance <minutes>", "Move the clock forward")
    table.add_row("save/load [name]", "Save or load the realm")
    table.add_row("saves", "List save files")
    table.add_row("quit", "Exit")
    console.print(table)


def handle_status(realm: Realm) -> None:
    table = Table(title=f"Realm at {realm.clock.now():%Y-%m-%d %H:%M}")
    table.add_column("Province", style="bold")
    table.add_column("Lvl", justify="right")
    table.add_column("Threat", justify="right")
    table.add_column("Governor")
    for resource in RESOURCE_COLUMNS:
        table.add_column(resource.capitalize(), justify="right")

    for province in realm.provinces():
        governor = province.governor
        gov_text = f"{governor.name} ({governor.personality.value.lower()}, {governor.loyalty})" if governor else "[dim]none[/dim]"
        table.add_row(
            province.name,
            str(province.level),
            str(province.threat),
            gov_text,
            *[str(province.resource(r)) for r in RESOURCE_COLUMNS],
        )
    console.print(table)


def handle_province(realm: Realm, parts: list[str]) -> None:
    if len(parts) < 2:
        console.print("[red]Usage: province <name>[/red]")
        return
    province = realm.fuzzy_match_province(" ".join(parts[1:]))
    if province is None:
        console.print(f"[red]No province matches '{' '.join(parts[1:])}'[/red]")
        return

    lines = [
        f"Level {province.level}, threat {province.threat}",
        "Buildings: " + (", ".join(f"{b.type.lower()} {b.level}" for b in province.buildings) or "none"),
        "Resources: " + ", ".join(f"{k} {v}" for k, v in sorted(province.resources.items())),
    ]
    if province.active_constructions:
        lines.append("Constructing: " + ", ".join(
            f"{c.building_type.lower()} {c.target_level} (done {c.finishes_at:%H:%M})" for c in province.active_constructions
        ))
    lines.append("")
    lines.append(generate_governor_report(province))

    events = realm.run(realm.store.list_event_instances(province.id, unresolved_only=True))
    raids = realm.run(realm.store.list_raids(province.id, unresolved_only=True))
    for instance in events:
        lines.append(f"[yellow]Event:[/yellow] {instance.image_icon} {instance.summary()}")
    for raid in raids:
        lines.append(f"[red]Raid:[/red] {raid.summary()}")

    console.print(Panel("\n".join(lines), title=province.name, border_style="blue"))


def handle_events(realm: Realm) -> None:
    report = realm.run(realm.scheduler.run_once())
    console.print(Panel(report.summary(), title="Scheduler cycle", border_style="yellow"))


def handle_governors(realm: Realm) -> None:
    report = realm.run(realm.governors.run_once())
    body = "\n".join(f"• {a}" for a in report.actions) or "[dim]No governor acted[/dim]"
    console.print(Panel(f"{body}\n\n[dim]{report.summary()}[/dim]", title="Governor cycle", border_style="green"))


def handle_raid(realm: Realm, parts: list[str]) -> None:
    if len(parts) < 2:
        console.print("[red]Usage: raid <province>[/red]")
        return
    province = realm.fuzzy_match_province(" ".join(parts[1:]))
    if province is None:
        console.print("[red]Unknown province[/red]")
        return
    raids = realm.run(realm.store.list_raids(province.id, unresolved_only=True))
    if not raids:
        console.print(f"[dim]No pending raid on {province.name}[/dim]")
        return

    resolved = realm.run(auto_resolve_raid(realm.store, raids[0].id, realm.catalog, realm.rng, realm.clock))
    result = resolved.combat_result
    changes = ", ".join(f"{k} {v:+d}" for k, v in result.net_resource_changes().items()) or "none"
    style = {"VICTORY": "green", "DRAW": "yellow", "DEFEAT": "red"}[result.outcome.value]
    console.print(Panel(
        f"{result.battle_report}\n\n"
        f"Casualties: {result.defender_casualties} defenders, {result.enemy_casualties} attackers\n"
        f"Resources: {changes}",
        title=f"{resolved.enemy_name} - {result.summary()}",
        border_style=style,
    ))


def handle_choose(realm: Realm, parts: list[str]) -> None:
    if len(parts) < 2:
        console.print("[red]Usage: choose <province> [choice][/red]")
        return
    province = realm.fuzzy_match_province(parts[1])
    if province is None:
        console.print("[red]Unknown province[/red]")
        return
    pending = realm.run(realm.store.list_event_instances(province.id, unresolved_only=True))
    if not pending:
        console.print(f"[dim]No pending event in {province.name}[/dim]")
        return

    instance = pending[0]
    event = realm.catalog.get_event(instance.event_key)
    if len(parts) < 3:
        console.print(f"\n[bold]{event.image_icon} {event.title}[/bold]\n{event.description}\n")
        for choice in event.choices:
            cost = ", ".join(f"{k} {v}" for k, v in choice.cost.items()) or "free"
            console.print(f"  [cyan]{choice.id}[/cyan]: {choice.text} [dim]({cost})[/dim]")
        return

    resolved, outcome = realm.run(resolve_event_choice(
        realm.store, instance.id, parts[2], realm.catalog, realm.rng, realm.clock
    ))
    changes = ", ".join(f"{k} {v:+d}" for k, v in resolved.resource_changes.items()) or "none"
    console.print(Panel(f"{outcome.message}\n\nResources: {changes}", title=event.title, border_style="cyan"))


def handle_advance(realm: Realm, parts: list[str]) -> None:
    try:
        minutes = int(parts[1]) if len(parts) > 1 else 30
    except ValueError:
        console.print("[red]Usage: advance <minutes>[/red]")
        return
    if minutes < 1:
        console.print("[red]Minutes must be at least 1[/red]")
        return
    now = realm.clock.advance(timedelta(minutes=minutes))
    console.print(f"[dim]Clock is now {now:%Y-%m-%d %H:%M}[/dim]")


def main():
    """Main entry point."""
    config = SimulationConfig.from_env()
    configure_logging(config.log_level, console)

    console.print(Panel(
        "[bold magenta]Empire Simulation Console[/bold magenta]\n"
        "[dim]Events, raids and governors between visits[/dim]",
        border_style="magenta",
    ))

    session = PromptSession(
        history=FileHistory(str(HISTORY_DIR / "command_history")),
        auto_suggest=AutoSuggestFromHistory(),
    )

    realm = Realm(config)

    if len(sys.argv) > 1:
        if sys.argv[1] == "load" and len(sys.argv) > 2:
            if not realm.load(sys.argv[2]):
                sys.exit(1)
        else:
            console.print("[yellow]Usage: python -m empire_sim.main [load <savename>][/yellow]")
            sys.exit(1)
    else:
        realm.seed_demo()

    console.print("\n[dim]Type 'help' for commands[/dim]\n")

    while True:
        try:
            command = session.prompt("> ")

            if not command.strip():
                continue

            parts = command.strip().split()
            cmd = parts[0].lower()

            if cmd in ("quit", "exit"):
                console.print("[dim]Farewell.[/dim]")
                break

            elif cmd == "help":
                print_help()

            elif cmd == "status":
                handle_status(realm)

            elif cmd == "province":
                handle_province(realm, parts)

            elif cmd == "events":
                handle_events(realm)

            elif cmd == "governors":
                handle_governors(realm)

            elif cmd == "raid":
                handle_raid(realm, parts)

            elif cmd == "choose":
                handle_choose(realm, parts)

            elif cmd == "advance":
                handle_advance(realm, parts)

            elif cmd == "save":
                realm.save(parts[1] if len(parts) > 1 else "quicksave")

            elif cmd == "load":
                realm.load(parts[1] if len(parts) > 1 else "quicksave")

            elif cmd == "saves":
                saves = realm.list_saves()
                if saves:
                    console.print("[bold]Available saves:[/bold]")
                    for s in saves:
                        console.print(f"  • {s}")
                else:
                    console.print("[dim]No saves found[/dim]")

            else:
                console.print(f"[red]Unknown command: {cmd}[/red] [dim](try 'help')[/dim]")

        except KeyboardInterrupt:
            console.print("\n[dim]Type 'quit' to exit[/dim]")

        except EOFError:
            console.print("\n[dim]Farewell.[/dim]")
            break

        except Exception as e:
            console.print(f"[red]{e}[/red]")

    realm.close()


if __name__ == "__main__":
    main()
