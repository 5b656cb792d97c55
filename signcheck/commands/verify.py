import sys

from rich.markup import escape

from signcheck.logger import get_console
from signcheck.src.core.models import ArtifactError
from signcheck.src.core.verifier import AppVerifier
from signcheck.src.utils.config_loader import get_verify_settings
from signcheck.src.utils.report_printer import print_report, print_report_json

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CHECKS_FAILED = 2


def run_verify_command(args) -> int:
    """Entry point for the verify command from CLI"""
    console = get_console()

    try:
        settings = get_verify_settings(
            udid=args.udid,
            certificate=args.certificate,
            certificate_password=args.certificate_password,
            verbose=args.verbose,
            output=args.output,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return EXIT_ERROR

    verifier = AppVerifier(
        args.ipa_path,
        certificate_path=settings["certificate"],
        certificate_password=settings["certificate_password"],
        udid=settings["udid"],
    )

    try:
        report = verifier.verify()
    except ArtifactError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return EXIT_ERROR

    if settings["output"] == "json":
        print_report_json(report, console)
    else:
        print_report(report, console, verbose=settings["verbose"])

    return EXIT_OK if report.passed else EXIT_CHECKS_FAILED


# For direct script execution - route through the CLI
if __name__ == "__main__":
    from signcheck.cli import main as cli_main

    sys.exit(cli_main())
