from pathlib import Path


def add_verify_arguments(parser):
    """Add all verification-related arguments to an existing parser."""
    # Required argument
    parser.add_argument(
        "ipa_path", type=Path, help="Path to the IPA file (or extracted .app) to check"
    )

    parser.add_argument(
        "--certificate",
        "-c",
        type=Path,
        help="APNs certificate (.p12, .pem or .cer) to compare against the profile [default: none]",
    )

    parser.add_argument(
        "--password",
        "-p",
        dest="certificate_password",
        type=str,
        help="Password for a .p12 certificate [default: empty]",
    )

    parser.add_argument(
        "--udid",
        "-u",
        type=str,
        help="Device UDID to look up in the profile's device list [default: skip]",
    )

    parser.add_argument(
        "--json",
        action="store_const",
        const="json",
        dest="output",
        help="Print the report as JSON [default: table]",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=None,
        help="Show the raw values each check compared [default: disabled]",
    )


def add_profile_arguments(parser):
    """Add the arguments of the profile summary command."""
    parser.add_argument(
        "profile_path",
        type=Path,
        help="Path to a .mobileprovision file, or an IPA to read the embedded one from",
    )
