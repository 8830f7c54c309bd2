from __future__ import annotations

import argparse
import logging
from pathlib import Path

from retakes.core import get_settings
from retakes.simulation import ReplayHarness


def _config_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.max_players is not None:
        overrides["max_active_players"] = args.max_players
    if args.ratio is not None:
        overrides["terrorist_ratio"] = args.ratio
    if args.priority_tags is not None:
        overrides["priority_tags"] = args.priority_tags
    if args.no_force_even:
        overrides["force_even_teams_on_multiple_of_ten"] = False
    if args.allow_mid_round_changes:
        overrides["prevent_mid_round_team_changes"] = False
    return overrides


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Retakes queue scheduler: replay a scripted scenario")
    parser.add_argument("scenario", type=Path, help="scenario JSON file")
    parser.add_argument("--max-players", type=int, default=None, help="override max active players")
    parser.add_argument("--ratio", type=float, default=None, help="override terrorist ratio")
    parser.add_argument("--priority-tags", default=None, help="comma-separated priority tags")
    parser.add_argument("--no-force-even", action="store_true", help="do not force 50/50 teams on multiples of ten")
    parser.add_argument("--allow-mid-round-changes", action="store_true", help="disable the round team lock")
    parser.add_argument("--check-determinism", action="store_true", help="replay twice and compare results")
    parser.add_argument("--debug", action="store_true", help="log every queue decision")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    defaults = get_settings().to_config()
    base = {
        "max_active_players": defaults.max_active_players,
        "terrorist_ratio": defaults.terrorist_ratio,
        "priority_tags": list(defaults.priority_tags),
        "force_even_teams_on_multiple_of_ten": defaults.force_even_teams_on_multiple_of_ten,
        "prevent_mid_round_team_changes": defaults.prevent_mid_round_team_changes,
    }
    harness = ReplayHarness.load(args.scenario, overrides=_config_overrides(args), defaults=base)

    if args.check_determinism:
        first, second = harness.replay()
        if first != second:
            print("Replay diverged:")
            print(first)
            print(second)
            return 1
        print("Replay deterministic.")

    runner = harness.run()
    snapshot = runner.runtime.snapshot()
    print(f"Active ({len(snapshot['active'])}/{harness.config.max_active_players}): {', '.join(snapshot['active']) or '-'}")
    print(f"Waiting: {', '.join(snapshot['waiting']) or '-'}")
    print(f"Spectating: {', '.join(snapshot['spectators']) or '-'}")
    print(f"Target teams: T={snapshot['target_terrorists']} CT={snapshot['target_counter_terrorists']}")
    for message in runner.server.inbox:
        print(f"- [{message.player}] {message.text}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
