"""Input validation for CLI arguments."""
import re
import sys

SECRET_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches GCP requirements.

    GCP Secret Manager allows only: [a-zA-Z0-9_-]

    Args:
        name: Secret name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Secret name cannot be empty", file=sys.stderr)
        sys.exit(2)

    if not SECRET_NAME_PATTERN.match(name):
        print(f"Error: Invalid secret name '{name}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
        sys.exit(2)


def validate_label_filter(label_filter: str) -> None:
    """
    Reject label filters that are not 'labels.<key>=<value>' or 'labels.<key>:*'.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not re.match(r'^labels\.[a-z0-9_-]+(=[a-z0-9_-]*|:\*)$', label_filter):
        print(f"Error: Invalid label filter '{label_filter}'", file=sys.stderr)
        print("\nExpected 'labels.<key>=<value>' or 'labels.<key>:*'", file=sys.stderr)
        sys.exit(2)
