#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from wastewise.auth.passwords import hash_password
from wastewise.config import Settings
from wastewise.infra.account_repo import EmailTakenError, YamlAccountStore


def main() -> None:
    store = YamlAccountStore(Settings.from_env().accounts_path)

    email = input("Email: ").strip()
    if "@" not in email:
        raise SystemExit("Invalid email")
    name = input("Name (optional): ").strip() or email.split("@")[0]

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        rec = store.create(email=email, name=name, password_hash=hash_password(pw1))
    except EmailTakenError:
        raise SystemExit(f"Email already registered: {email}")
    print(f"OK -> id={rec.id} in {store.path}")


if __name__ == "__main__":
    main()
