"""
Terminal chat client for FitCoach AI.

Talks to a running chat backend, keeps the conversation in memory and can
export it as a PDF report.

Usage:
    python chat_cli.py [--api-url URL] [--report-dir DIR]

Commands:
    1-4       send one of the quick prompts (empty session only)
    /report   save the PDF report of this session
    /quit     leave
"""
import argparse
import sys
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from config import CHAT_API_URL, REPORT_DIR
from services.chat_session import ChatSession, QUICK_PROMPTS

logger = logging.getLogger(__name__)

REPORT_COMMAND = "/report"
QUIT_COMMANDS = {"/quit", "/exit"}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat with FitCoach AI from the terminal.")
    parser.add_argument("--api-url", default=CHAT_API_URL, help="Chat endpoint URL")
    parser.add_argument("--report-dir", default=REPORT_DIR, help="Directory for exported reports")
    return parser.parse_args(argv)


def resolve_input(session: ChatSession, raw: str) -> str:
    """Map a quick-prompt number to its text while the session is empty."""
    choice = raw.strip()
    if not session.turns and choice.isdigit() and 1 <= int(choice) <= len(QUICK_PROMPTS):
        return QUICK_PROMPTS[int(choice) - 1]
    return choice


def print_welcome() -> None:
    print("Hey there, champ! I'm your personal AI fitness coach.")
    print("Ask me about workouts, nutrition, recovery, or anything health & wellness related.\n")
    for number, prompt in enumerate(QUICK_PROMPTS, start=1):
        print(f"  {number}. {prompt}")
    print(f"\nType {REPORT_COMMAND} to export a report, /quit to leave.\n")


def main(argv=None) -> int:
    """Run the interactive chat loop."""
    args = parse_args(argv)
    session = ChatSession(api_url=args.api_url)
    print_welcome()

    try:
        while True:
            try:
                raw = input("You: ")
            except EOFError:
                break

            command = raw.strip().lower()
            if command in QUIT_COMMANDS:
                break
            if command == REPORT_COMMAND:
                try:
                    path = session.export_report(args.report_dir)
                except OSError as e:
                    logger.error(f"Report export failed: {e}")
                    print(f"Could not save report: {e}\n")
                    continue
                print(f"Report saved to {path}\n" if path else "Nothing to export yet.\n")
                continue

            text = resolve_input(session, raw)
            if not text:
                continue

            print("Coach is thinking...")
            reply = session.send(text)
            if reply:
                print(f"\nCoach: {reply.content}\n")
    except KeyboardInterrupt:
        print()
    finally:
        session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
