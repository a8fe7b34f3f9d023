"""CLI management commands for administration.

Usage:
    python -m gripinvest.webapp.manage create-admin <email> [first_name]
    python -m gripinvest.webapp.manage reset-password <email>
    python -m gripinvest.webapp.manage list-users
    python -m gripinvest.webapp.manage mature-investments [YYYY-MM-DD]
    python -m gripinvest.webapp.manage seed-products
"""

import getpass
import sys
from datetime import datetime

from gripinvest.validators import check_password_strength, normalize_email
from gripinvest.helpers import format_currency, is_valid_email
from gripinvest.webapp.db.connection import init_db
from gripinvest.webapp.db.investments import mature_due_investments
from gripinvest.webapp.db.products import create_product, get_all_products
from gripinvest.webapp.db.users import (
    create_user, get_all_users, get_user_by_email, set_admin, update_password,
)

SAMPLE_PRODUCTS = [
    ('Government Savings Bond 2031', 'bond', 60, 7.5, 'low', 10000, 1000000),
    ('Corporate Bond AAA Series', 'bond', 36, 9.2, 'moderate', 10000, 500000),
    ('Senior Citizen Fixed Deposit', 'fixed_deposit', 24, 7.8, 'low', 5000, None),
    ('Flexi Fixed Deposit', 'fixed_deposit', 12, 6.9, 'low', 1000, None),
    ('Balanced Advantage Fund', 'mutual_fund', 36, 11.0, 'moderate', 1000, None),
    ('Small Cap Growth Fund', 'mutual_fund', 60, 16.5, 'high', 5000, None),
    ('Nifty 50 Index ETF', 'etf', 60, 12.5, 'moderate', 1000, None),
    ('Emerging Tech ETF', 'etf', 48, 18.0, 'high', 5000, 1000000),
]


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        print("Error: Passwords do not match.")
        sys.exit(1)
    strength = check_password_strength(password)
    if not strength.is_strong:
        print("Error: Password is not strong enough. " + ", ".join(strength.feedback))
        sys.exit(1)
    return password


def cmd_create_admin(args):
    if len(args) < 1:
        print("Usage: create-admin <email> [first_name]")
        sys.exit(1)
    email = normalize_email(args[0])
    if not is_valid_email(email):
        print(f"Error: '{email}' is not a valid email.")
        sys.exit(1)
    first_name = args[1] if len(args) > 1 else 'Admin'

    existing = get_user_by_email(email)
    if existing:
        if existing['is_admin']:
            print(f"Error: User '{email}' is already an admin.")
            sys.exit(1)
        set_admin(existing['id'])
        print(f"User '{email}' promoted to admin.")
        return

    password = _prompt_password()
    user_id = create_user(first_name, email, password, is_admin=True, email_verified=True)
    print(f"Admin user '{email}' created (id={user_id}).")


def cmd_reset_password(args):
    if len(args) < 1:
        print("Usage: reset-password <email>")
        sys.exit(1)
    email = normalize_email(args[0])
    user = get_user_by_email(email)
    if not user:
        print(f"Error: User '{email}' not found.")
        sys.exit(1)

    update_password(user['id'], _prompt_password())
    print(f"Password for '{email}' has been reset.")


def cmd_list_users(_args):
    users = get_all_users()
    if not users:
        print("No users found.")
        return
    print(f"{'Email':<32} {'Name':<20} {'Risk':<9} {'Admin':<6} {'2FA':<4} {'Balance':>14}")
    print("-" * 90)
    for u in users:
        name = ' '.join(filter(None, [u['first_name'], u['last_name']]))
        admin = "Yes" if u['is_admin'] else "No"
        two_fa = "Yes" if u['two_factor_enabled'] else "No"
        print(f"{u['email']:<32} {name:<20} {u['risk_appetite']:<9} {admin:<6} {two_fa:<4} "
              f"{format_currency(u['balance'], decimals=2):>14}")


def cmd_mature_investments(args):
    as_of = None
    if args:
        try:
            as_of = datetime.strptime(args[0], '%Y-%m-%d').date()
        except ValueError:
            print("Error: Date must be YYYY-MM-DD.")
            sys.exit(1)
    matured = mature_due_investments(as_of)
    print(f"Matured {len(matured)} investment(s).")


def cmd_seed_products(_args):
    existing = {p['name'] for p in get_all_products()}
    created = 0
    for name, inv_type, tenure, annual_yield, risk, minimum, maximum in SAMPLE_PRODUCTS:
        if name in existing:
            continue
        create_product(name, inv_type, tenure, annual_yield, risk,
                       min_investment=minimum, max_investment=maximum)
        created += 1
    print(f"Seeded {created} product(s).")


COMMANDS = {
    'create-admin': cmd_create_admin,
    'reset-password': cmd_reset_password,
    'list-users': cmd_list_users,
    'mature-investments': cmd_mature_investments,
    'seed-products': cmd_seed_products,
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print("Available commands: " + ", ".join(COMMANDS.keys()))
        sys.exit(1)

    init_db()
    COMMANDS[sys.argv[1]](sys.argv[2:])


if __name__ == '__main__':
    main()
