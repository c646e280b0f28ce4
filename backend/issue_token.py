"""Print a signed access token for a staff user to stdout.

Sessions are issued by the hospital identity provider; this is for local
development against the API.

Usage:
    python -m backend.issue_token doctor@hospital.org
    python -m backend.issue_token admin@hospital.org --minutes 30

The role comes from the user's row in the users table, not from the token.
"""
import argparse
import sys

from backend.auth.jwt_handler import create_access_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue a development access token.")
    parser.add_argument("email")
    parser.add_argument("--minutes", type=int, default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    email = args.email.strip().lower()
    if not email:
        print("Email is required.", file=sys.stderr)
        return 1

    print(create_access_token(email, expires_minutes=args.minutes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
