import argparse
import sys
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme
from rich_argparse import RichHelpFormatter
from signcheck import __version__
from signcheck.arguments import add_profile_arguments, add_verify_arguments

APP_DESCRIPTION = "Diagnose mismatches between an app, its provisioning profile and its push certificate"


class SignCheckHelpFormatter(RichHelpFormatter):
    """Custom formatter for the signcheck CLI with rich styling."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=30, width=100)
        self.console = Console(
            theme=Theme(
                {
                    "command": "bold cyan",
                    "argument": "green",
                    "option": "yellow",
                    "version": "blue",
                }
            )
        )


def display_banner():
    """Display a banner above the help text."""
    console = Console()
    panel = Panel.fit(
        Text.assemble(
            Text("signcheck", style="bold green"),
            "\n",
            Text(APP_DESCRIPTION, style="italic"),
            "\n",
            Text(f"v{__version__}", style="blue"),
        ),
        border_style="green",
        padding=(1, 2),
    )
    console.print(panel)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signcheck",
        description=f"signcheck: {APP_DESCRIPTION}",
        formatter_class=SignCheckHelpFormatter,
        add_help=True,
    )

    parser.add_argument(
        "--version", action="version", version=f"signcheck {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    # Verify command
    verify_parser = subparsers.add_parser(
        "verify",
        help="Check an IPA against its provisioning profile",
        formatter_class=SignCheckHelpFormatter,
        description="Check bundle id, push environment, push certificate and device enrollment for an IPA.",
    )
    add_verify_arguments(verify_parser)

    # Profile command
    profile_parser = subparsers.add_parser(
        "profile",
        help="Show a provisioning profile summary",
        formatter_class=SignCheckHelpFormatter,
        description="Show the environments and devices of a .mobileprovision file.",
    )
    add_profile_arguments(profile_parser)

    return parser


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    # Display the banner before the help text
    if not argv or "-h" in argv or "--help" in argv:
        display_banner()

    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "verify":
        from signcheck.commands.verify import run_verify_command

        return run_verify_command(args)
    elif args.command == "profile":
        from signcheck.commands.profile import run_profile_command

        return run_profile_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
