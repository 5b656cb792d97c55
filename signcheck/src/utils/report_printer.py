import json
from rich.console import Console
from rich.table import Table
from rich import box

from signcheck.src.core.models import ProvisioningProfile
from signcheck.src.core.report import CheckStatus, DiagnosticReport, environment_label

CHECK_TITLES = {
    "bundleIdentity": "Bundle identifier",
    "environmentConsistency": "Push environment",
    "certificateConsistency": "Push certificate",
    "deviceEnrollment": "Device enrollment",
}

STATUS_MARKUP = {
    CheckStatus.PASS: "[pass]✓ PASS[/]",
    CheckStatus.FAIL: "[fail]❌ FAIL[/]",
    CheckStatus.NOT_APPLICABLE: "[skip]– N/A[/]",
}


def _format_value(value) -> str:
    if hasattr(value, "value"):
        return str(value.value)
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def print_report(
    report: DiagnosticReport, console: Console, verbose: bool = False
) -> None:
    """Print the report as a table followed by remediation text for failures"""
    table = Table(title="Signing diagnostics", box=box.ROUNDED)
    table.add_column("Check", style="key")
    table.add_column("Result")
    table.add_column("Details")

    for check_id, result in report.items():
        details = result.explanation or ""
        # Device count is handy even when the check passed
        if check_id == "deviceEnrollment" and not verbose:
            details = f"{details} ({result.values['device_count']} devices)"
        if verbose:
            raw = "\n".join(
                f"{key}: {_format_value(value)}" for key, value in result.values.items()
            )
            details = f"{details}\n[dim]{raw}[/]" if raw else details
        table.add_row(
            CHECK_TITLES.get(check_id, check_id), STATUS_MARKUP[result.status], details
        )

    console.print(table)

    failures = report.failures()
    if failures:
        console.print("\n[bold]How to fix:[/]")
        for check_id in failures:
            console.print(
                f"[fail]•[/] [bold]{CHECK_TITLES[check_id]}:[/] {report[check_id].explanation}"
            )

    console.print("\n" + "=" * 80)
    if report.passed:
        console.print("[pass]✅ Verification PASSED[/]")
    else:
        console.print(f"[fail]❌ Verification FAILED ({len(failures)} checks)[/]")


def print_report_json(report: DiagnosticReport, console: Console) -> None:
    console.print_json(json.dumps(report.to_dict()))


def print_profile_summary(profile: ProvisioningProfile, console: Console) -> None:
    """Print the fields of a provisioning profile the checks look at"""
    table = Table(show_header=False, box=box.SIMPLE)
    table.add_column("Field", style="key")
    table.add_column("Value")

    table.add_row("Name", profile.display_name)
    table.add_row("Team", profile.team_name)
    table.add_row("Bundle ID", profile.bundle_id)
    table.add_row("App environment", profile.app_environment.value)
    table.add_row("Push environment", environment_label(profile.apns_environment))
    table.add_row("get-task-allow", str(profile.get_task_allow).lower())
    if profile.is_app_store_build:
        table.add_row("Devices", "none (distribution profile)")
    else:
        table.add_row("Devices", str(len(profile.provisioned_devices)))

    console.print(table)
    if profile.provisioned_devices:
        for udid in sorted(profile.provisioned_devices):
            console.print(f"  • {udid}")
