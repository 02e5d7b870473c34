#!/usr/bin/env python3
"""
Minefield - Main entry point.

Usage:
    python main.py play [--difficulty D] [--config PATH] [--seed N] [--no-powerups]
    python main.py demo [--games N] [--delay S] [--difficulty D]
"""
import argparse
import logging
import os
import random
import time

from src.minefield.cell import PowerupKind
from src.minefield.config import GameConfig, load_config
from src.minefield.environment import MinefieldEnv, render_ansi
from src.minefield.session import GameSession, MoveResult, SessionState


HELP_TEXT = """Commands:
  r ROW COL   reveal a cell
  f ROW COL   cycle flag / question mark
  c ROW COL   chord a revealed number
  u KIND      use a power-up (detector, freeze, safeReveal)
  n [LEVEL]   new game, optionally at another difficulty
  q           quit"""


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def print_status(session: GameSession) -> None:
    """Print the board with counters and power-up state."""
    modifiers = session.modifiers
    frozen = " (frozen)" if modifiers.is_timer_frozen() else ""
    print(
        f"Mines: {session.mines_remaining:>3} | "
        f"Time: {session.elapsed_seconds:>3}{frozen} | "
        f"State: {session.state.name}"
    )
    inventory = ", ".join(item.kind.value for item in modifiers.inventory)
    shield = "armed" if modifiers.has_shield else "none"
    print(f"Shield: {shield} | Inventory: {inventory or '-'}")
    detected = modifiers.detected_mine
    if detected is not None:
        print(f"Detector: mine at ({detected.row}, {detected.col})")
    print()
    print(render_ansi(session.board))


def describe(result: MoveResult) -> str:
    """One-line summary of a move for the player."""
    if not result.accepted:
        return "Nothing happens."
    parts = []
    if result.shield_used:
        parts.append("Your shield absorbed a mine!")
    for kind in result.powerups:
        parts.append(f"Picked up {kind.value}.")
    if result.state == SessionState.WON:
        parts.append("*** WIN! ***")
    elif result.state == SessionState.LOST:
        parts.append("*** LOST (hit mine) ***")
    return " ".join(parts)


def play(args: argparse.Namespace, config: GameConfig) -> None:
    """Play an interactive game in the terminal."""
    session = GameSession(
        config=config,
        difficulty=args.difficulty,
        powerups_enabled=False if args.no_powerups else None,
        rng=random.Random(args.seed),
    )
    kinds = {kind.value: kind for kind in PowerupKind}

    print(HELP_TEXT)
    last_tick = time.monotonic()
    message = ""

    while True:
        print()
        print_status(session)
        if message:
            print(f"\n{message}")

        try:
            line = input("> ").split()
        except EOFError:
            break

        # Drive the session clock with whole seconds of wall time.
        now = time.monotonic()
        for _ in range(int(now - last_tick)):
            session.tick()
        last_tick += int(now - last_tick)

        if not line:
            message = ""
            continue
        command, params = line[0].lower(), line[1:]

        if command == "q":
            break
        if command == "n":
            try:
                session.reset(params[0] if params else None)
            except ValueError as exc:
                message = str(exc)
                continue
            last_tick = time.monotonic()
            message = "New game."
            continue
        if command == "u" and params:
            kind = kinds.get(params[0])
            if kind is None:
                message = f"Unknown power-up: {params[0]}"
                continue
            message = describe(session.on_use_modifier(kind))
            continue
        if command in ("r", "f", "c") and len(params) == 2:
            try:
                row, col = int(params[0]), int(params[1])
            except ValueError:
                message = "Row and column must be numbers."
                continue
            handler = {
                "r": session.on_reveal,
                "f": session.on_flag,
                "c": session.on_chord,
            }[command]
            message = describe(handler(row, col))
            continue

        message = HELP_TEXT


def demo(args: argparse.Namespace, config: GameConfig) -> None:
    """Watch random moves play out through the Gymnasium environment."""
    env = MinefieldEnv(
        config=config,
        difficulty=args.difficulty,
        render_mode="ansi",
    )

    wins = 0
    for game in range(args.games):
        obs, info = env.reset(seed=None if args.seed is None else args.seed + game)
        env.action_space.seed(None if args.seed is None else args.seed + game)
        done = False
        step = 0

        while not done:
            action = env.action_space.sample(mask=env.get_action_mask())
            row, col = divmod(int(action), env.cols)

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1

            clear_screen()
            print(f"=== Game {game + 1}/{args.games} | Step {step} ===")
            print(f"Wins so far: {wins}")
            print(f"Last move: ({row}, {col}) reward {reward:+.1f}\n")
            print(env.render())

            if done:
                if info.get("game_state") == "WON":
                    wins += 1
                    print(f"\n*** WIN! ***")
                else:
                    print(f"\n*** LOST (hit mine) ***")

            time.sleep(args.delay)

        time.sleep(1.0)  # Pause between games

    print(f"\n=== Final: {wins}/{args.games} wins ({100*wins/args.games:.0f}%) ===")


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Minefield - Minesweeper with power-ups"
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Logging level (e.g. DEBUG)"
    )
    parser.add_argument(
        "--config", default=None, help="Path to a config.json file"
    )
    parser.add_argument(
        "--difficulty", default="beginner",
        help="Difficulty name (beginner, intermediate, expert)",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument(
        "--no-powerups", action="store_true", help="Disable power-ups"
    )

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Watch random play")
    demo_parser.add_argument(
        "--games", type=int, default=5, help="Number of games"
    )
    demo_parser.add_argument(
        "--delay", type=float, default=0.3, help="Delay between moves"
    )

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())

    try:
        config = load_config(args.config)
        config.board_config(args.difficulty)
    except ValueError as exc:
        parser.error(str(exc))

    if args.command == "play":
        play(args, config)
    elif args.command == "demo":
        demo(args, config)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
