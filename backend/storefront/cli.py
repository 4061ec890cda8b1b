# Overview: Flask CLI command groups for bootstrap, inspection, and sample data.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent). Use "flask db upgrade" for migrated deployments.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --name "Admin" --email admin@example.com --password "Password123!" --role admin
#   Create a user (prompts if options are omitted).
#
# Catalog:
# - python -m flask catalog seed
#   Insert sample categories and products (skips names that already exist).

from decimal import Decimal

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db, get_container
from .models import Category, Product
from .permissions import Role
from .services.auth_service import hash_password


SAMPLE_CATEGORIES = [
    ("Herbal Teas", "Natural herbal tea blends for wellness"),
    ("Supplements", "Herbal supplements and vitamins"),
    ("Essential Oils", "Pure essential oils for aromatherapy"),
]

# (name, description, price, stock, image_url, category name)
SAMPLE_PRODUCTS = [
    ("Chamomile Tea", "Organic chamomile tea for relaxation", "15.99", 100,
     "https://example.com/chamomile.jpg", "Herbal Teas"),
    ("Green Tea", "Antioxidant-rich green tea", "12.99", 150,
     "https://example.com/green-tea.jpg", "Herbal Teas"),
    ("Turmeric Capsules", "Natural anti-inflammatory supplement", "24.99", 75,
     "https://example.com/turmeric.jpg", "Supplements"),
    ("Lavender Oil", "Pure lavender essential oil", "29.99", 50,
     "https://example.com/lavender.jpg", "Essential Oils"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask catalog seed' for sample data.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(Role.values()), default=Role.USER.value, show_default=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """
    Create a user with any role.

    This is the only way to create the first admin: self-registration
    always produces role "user".

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        password_hash = hash_password(password, rounds=current_app.config["BCRYPT_ROUNDS"])
        user = get_container().users.create(
            {"name": name, "email": email},
            password_hash=password_hash,
            role=Role.parse(role),
        )
    except ServiceError as e:
        click.echo(f"FAIL Failed to create user: {e.message}")
        for detail in e.details or []:
            if isinstance(detail, dict):
                click.echo(f"     {detail.get('field')}: {detail.get('message')}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users, _ = get_container().users.list()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<38} {'Email':<30} {'Role':<10} {'Active':<8} {'Name'}")
    click.echo("="*100)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<38} {user.email:<30} {user.role:<10} {active_str:<8} {user.name}")

    click.echo("="*100 + "\n")


@click.group('catalog')
def catalog_group():
    """Catalog sample data."""


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Insert sample categories and products. Existing names are left alone."""
    categories = {}
    created_categories = 0
    for name, description in SAMPLE_CATEGORIES:
        category = db.session.query(Category).filter_by(name=name).first()
        if category is None:
            category = Category(name=name, description=description)
            db.session.add(category)
            db.session.flush()
            created_categories += 1
        categories[name] = category

    created_products = 0
    for name, description, price, stock, image_url, category_name in SAMPLE_PRODUCTS:
        if db.session.query(Product).filter_by(name=name).first() is not None:
            continue
        db.session.add(Product(
            name=name,
            description=description,
            price=Decimal(price),
            stock=stock,
            image_url=image_url,
            category_id=categories[category_name].id,
        ))
        created_products += 1

    db.session.commit()
    click.echo(f"PASS Seeded {created_categories} categories and {created_products} products.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(catalog_group)
