#!/usr/bin/env python3
"""Print an Argon2 hash suitable for ADMIN_PASSWORD_HASH."""
import getpass
import sys

from app.auth.password import hash_password, verify_password


def main():
    password = getpass.getpass("Admin password: ")
    if not password:
        print("✗ Password must not be empty", file=sys.stderr)
        sys.exit(1)
    if getpass.getpass("Confirm password: ") != password:
        print("✗ Passwords do not match", file=sys.stderr)
        sys.exit(1)

    hashed = hash_password(password)
    assert verify_password(password, hashed)

    print("\nAdd this to your environment:\n")
    print(f"ADMIN_PASSWORD_HASH='{hashed}'")


if __name__ == "__main__":
    main()
