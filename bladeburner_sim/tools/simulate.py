from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from bladeburner_sim.app.services.logger import configure_logging, write_action_log
from bladeburner_sim.app.services.settings_store import SettingsStore
from bladeburner_sim.core.api import ActionEconomy
from bladeburner_sim.core.engine import create_session, run_simulation
from bladeburner_sim.core.errors import ActionEconomyError
from bladeburner_sim.core.loader import ContentValidationError, load_catalog
from bladeburner_sim.core.settings import SimulationSettings

app = typer.Typer(add_completion=False, help="Run a deterministic headless operative simulation.")
console = Console()


def _normalize_seed(raw_seed: str) -> int | str:
    try:
        return int(raw_seed)
    except ValueError:
        return raw_seed


def _session_signature_payload(session, logs) -> dict:
    return {
        "seed": session.seed,
        "rank": round(session.rank, 6),
        "skill_points": session.skill_points,
        "stamina": round(session.stamina, 6),
        "max_stamina": round(session.max_stamina, 6),
        "personnel": session.personnel,
        "city": session.city,
        "cities": {
            name: {
                "population": round(city.population, 3),
                "estimate": round(city.population_estimate, 3),
                "communities": city.communities,
                "chaos": round(city.chaos, 6),
            }
            for name, city in sorted(session.cities.items())
        },
        "actions": {key: progress.model_dump(mode="json") for key, progress in sorted(session.actions.items())},
        "completed_black_ops": sorted(session.completed_black_ops),
        "rng_state": session.rng_state,
        "rng_calls": session.rng_calls,
        "timeline": [entry.format() for entry in logs],
    }


@app.command()
def main(
    seed: str = typer.Option("123", "--seed", help="Seed value (int or string)."),
    seconds: int = typer.Option(600, "--seconds", min=1, help="Simulated seconds to run."),
    action_type: str = typer.Option("contract", "--type", help="Action type: contract|operation|blackop|general."),
    action: str = typer.Option("Tracking", "--action", help="Action name to run on repeat."),
    autolevel: bool = typer.Option(False, "--autolevel/--no-autolevel", help="Auto-advance the action level."),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Simulation settings JSON file."),
    logs_dir: Optional[Path] = typer.Option(None, "--logs-dir", help="Write latest.log and actions.log here."),
) -> None:
    content_dir = Path(__file__).resolve().parents[1] / "content"
    try:
        catalog = load_catalog(content_dir)
    except ContentValidationError as exc:
        console.print(f"[bold red]Content load failed:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    settings = SettingsStore(settings_path).load() if settings_path is not None else SimulationSettings()
    session = create_session(_normalize_seed(seed), catalog, settings=settings)
    economy = ActionEconomy(session, catalog)

    try:
        economy.set_action_autolevel(action_type, action, autolevel)
        economy.start_action(action_type, action)
    except ActionEconomyError as exc:
        console.print(f"[bold red]Cannot start action:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    final_session, logs = run_simulation(session, catalog, seconds)

    for entry in logs:
        console.print(entry.format(), markup=False)

    if logs_dir is not None:
        bundle = configure_logging(logs_dir, console=False)
        write_action_log(bundle.actions, logs)
        bundle.app.info("Simulated %d seconds of %s '%s' with seed %s.", seconds, action_type, action, seed)

    snapshot = economy.snapshot()
    summary = Table(title="Simulation Summary")
    summary.add_column("Field", style="cyan", no_wrap=True)
    summary.add_column("Value", style="white")
    summary.add_row("Seed", str(final_session.seed))
    summary.add_row("Action", f"{action_type}: {action}")
    summary.add_row("Current", f"{snapshot['currentAction']['type']}: {snapshot['currentAction']['name']}")
    summary.add_row("Rank", f"{final_session.rank:.3f}")
    summary.add_row("Skill Points", str(final_session.skill_points))
    summary.add_row("Stamina", f"{final_session.stamina:.2f}/{final_session.max_stamina:.2f}")
    summary.add_row("Personnel", f"{final_session.personnel} (lost {final_session.team_lost})")
    summary.add_row(
        "Level",
        f"{economy.get_action_current_level(action_type, action)}/{economy.get_action_max_level(action_type, action)}",
    )
    summary.add_row("Remaining", str(economy.get_action_count_remaining(action_type, action)))
    city = final_session.current_city
    summary.add_row(
        "City",
        (
            f"{city.name}: est {city.population_estimate:,.0f} / pop {city.population:,.0f}, "
            f"communities {city.communities}, chaos {city.chaos:.3f}"
        ),
    )
    console.print()
    console.print(summary)

    payload = _session_signature_payload(final_session, logs)
    signature = hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()[:16]
    console.print(f"\n[bold green]Deterministic signature:[/bold green] {signature}")


if __name__ == "__main__":
    app()
