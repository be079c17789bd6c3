#!/usr/bin/env python3
"""
Script to create the head administrator account.
Promotes the account if a user with that email already exists.
"""

from getpass import getpass

from feedback_delivery import create_app
from feedback_delivery.seed import ensure_head_admin


def main():
    print("=" * 60)
    print("Feedback Delivery - Head Administrator")
    print("=" * 60)
    print()

    app = create_app()
    with app.app_context():
        default_email = app.config['HEAD_ADMIN_EMAIL']
        email = input(f"Email [{default_email}]: ").strip().lower() or default_email
        name = input("Full Name [Head Administrator]: ").strip() or 'Head Administrator'
        password = getpass("Password (leave empty to keep an existing one): ").strip()

        print()
        confirm = input(f"Create or promote {email}? (yes/no): ").lower()
        if confirm != 'yes':
            print("Cancelled.")
            return

        try:
            user, created = ensure_head_admin(email, password or None, name)
        except ValueError as e:
            print(f"Error: {e}")
            raise SystemExit(1)

        if created:
            print(f"Head administrator {user.email} created.")
        else:
            print(f"User {user.email} promoted to head administrator.")


if __name__ == '__main__':
    main()
