"""
Mindread CLI - Command-line interface for the engine.

Usage:
    mindread play [--delay S]        Play in the terminal
    mindread cards                   Print the question cards
    mindread serve [--host --port]   Run the REST API with uvicorn
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
import time
from dataclasses import replace
from typing import Callable

from .config import GameConfig
from .engine_core.cards import generate_cards
from .engine_core.state import Phase
from .session import SessionManager, ManualScheduler, Session

YES_WORDS = {"y", "yes"}
NO_WORDS = {"n", "no"}


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Mindread - I can guess the number you are thinking of",
        prog="mindread",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("MINDREAD_LOG_LEVEL", "WARNING"),
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--delay", type=float, default=None, help="Thinking pause in seconds")

    subparsers.add_parser("cards", help="Print the question cards")

    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "cards":
        cmd_cards(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Interactive terminal game."""
    config = GameConfig.from_env()
    if args.delay is not None:
        config = replace(config, thinking_delay=args.delay)

    scheduler = ManualScheduler()
    manager = SessionManager(scheduler=scheduler, config=config)
    session = manager.create_session()

    try:
        play(session, scheduler)
    except (KeyboardInterrupt, EOFError):
        print("\nBye!")
    finally:
        manager.end_session(session.session_id)


def play(
    session: Session,
    scheduler: ManualScheduler,
    ask: Callable[[str], str] = input,
    sleep: Callable[[float], None] = time.sleep,
    out: Callable[[str], None] = print,
):
    """
    Run rounds until the player declines another.

    The thinking pause is real time: sleep for the delay,
    then move the virtual clock so the reveal timer fires.
    """
    out(f"Think of a number between 1 and {session.config.max_number}.")
    out(f"I'll read your mind with {session.total_questions} questions!")

    while True:
        session.start()

        while session.phase == Phase.ASKING:
            out("")
            out(f"Question {session.question_index + 1} of {session.total_questions}")
            out(format_card(session.current_card))
            session.submit_answer(ask_yes_no("Is your number on this card? [y/n] ", ask, out))

        out("")
        out("Let me think...")
        sleep(session.config.thinking_delay)
        scheduler.advance(session.config.thinking_delay)

        out(f"Your number is: {session.result}")

        if not ask_yes_no("Play again? [y/n] ", ask, out):
            session.restart()
            return


def ask_yes_no(prompt: str, ask: Callable[[str], str], out: Callable[[str], None]) -> bool:
    """Prompt until the reply is yes or no."""
    while True:
        reply = ask(prompt).strip().lower()
        if reply in YES_WORDS:
            return True
        if reply in NO_WORDS:
            return False
        out("Please answer y or n.")


def format_card(numbers, per_row: int = 8) -> str:
    """Lay the numbers out in aligned rows."""
    width = len(str(max(numbers)))
    rows = [
        " ".join(str(n).rjust(width) for n in numbers[i:i + per_row])
        for i in range(0, len(numbers), per_row)
    ]
    return "\n".join(rows)


def cmd_cards(args):
    """Print every card."""
    config = GameConfig.from_env()

    for i, card in enumerate(generate_cards(config.bits)):
        print(f"Card {i + 1} (bit value {2**i}):")
        print(format_card(card))
        print()


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn

    uvicorn.run("mindread.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
