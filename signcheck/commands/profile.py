from rich.markup import escape

from signcheck.logger import get_console
from signcheck.src.core.models import ArtifactError
from signcheck.src.ipa.ipa_inspector import IPAInspector
from signcheck.src.ipa.provisioning_profile_analyser import load_profile
from signcheck.src.utils.report_printer import print_profile_summary


def run_profile_command(args) -> int:
    """Print what the checks will see in a provisioning profile"""
    console = get_console()
    path = args.profile_path

    try:
        if path.suffix.lower() in (".ipa", ".app"):
            with IPAInspector(path) as inspector:
                profile = load_profile(inspector.get_embedded_profile_path())
        else:
            if not path.exists():
                raise ArtifactError(f"Provisioning profile not found: {path}")
            profile = load_profile(path)
    except ArtifactError as e:
        console.print(f"[red]Error reading profile:[/] {escape(str(e))}")
        return 1

    print_profile_summary(profile, console)
    return 0
