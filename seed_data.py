"""Seed script to populate database with sample data."""

from feedback_delivery import create_app
from feedback_delivery.seed import seed_database


def main():
    app = create_app()

    with app.app_context():
        print('Seeding database...')
        if seed_database():
            print('Database seeded successfully!')
            print('\nSample accounts:')
            print('  Manager: manager@example.com / manager123')
            print('  Guest:   anna@example.com / guest1234')
            print('\nCreate the head administrator with: python create_admin.py')
        else:
            print('Database already seeded!')


if __name__ == '__main__':
    main()
