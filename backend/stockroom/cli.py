# Overview: Flask CLI command groups for bootstrap, demo data, and user management.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app wsgi <group> <command> [options]
#
# System bootstrap/repair:
# - flask --app wsgi system init-db
#   Create all tables that do not exist yet.
# - flask --app wsgi system seed
#   Idempotent demo data: users admin/manager/user1, suppliers, categories,
#   products, inventory rows and opening stock movements.
# - flask --app wsgi system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - flask --app wsgi users list
#   List all users with role and active status.
# - flask --app wsgi users create --username admin --email admin@example.com --password "secret1" --role ADMIN
#   Create a user (prompts if options are omitted).

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import (
    Category,
    InventoryItem,
    Product,
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_USER,
    StockMovement,
    Supplier,
    User,
    VALID_ROLES,
)
from .models.inventory import MOVEMENT_PURCHASE
from .services.auth_service import create_user, hash_password
from .time_utils import parse_iso_datetime

DEMO_USERS = [
    # username, email, password, role, first name, last name
    ("admin", "admin@inventory.local", "admin123", ROLE_ADMIN, "Admin", "User"),
    ("manager", "manager@inventory.local", "manager123", ROLE_MANAGER, "Manager", "User"),
    ("user1", "user1@inventory.local", "user123", ROLE_USER, "Regular", "User"),
]

DEMO_SUPPLIERS = [
    ("Northwind Electronics", "Ana Trujillo", "+1-555-0101", "sales@northwind.example", "1 Harbor Way"),
    ("Contoso Components", "Lee Chen", "+1-555-0102", "orders@contoso.example", "22 Market Street"),
    ("Fabrikam Supply", "Maria Anders", "+1-555-0103", "hello@fabrikam.example", "300 Mill Road"),
]

DEMO_CATEGORIES = [
    ("Laptops", "Portable computers"),
    ("Phones", "Smartphones and accessories"),
    ("Peripherals", "Keyboards, mice and displays"),
]

DEMO_PRODUCTS = [
    # sku, name, category, supplier, purchase, selling, threshold
    ("LAP-001", "Ultrabook 14", "Laptops", "Northwind Electronics", "850.00", "1199.00", 5),
    ("PHN-001", "Smartphone X", "Phones", "Contoso Components", "420.00", "699.00", 10),
    ("PER-001", "Mechanical Keyboard", "Peripherals", "Fabrikam Supply", "45.00", "89.99", 15),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('seed')
@with_appcontext
def seed():
    """
    Load demo data. Safe to run repeatedly: existing rows are reused.

    Demo logins: admin/admin123, manager/manager123, user1/user123.
    Change or remove these accounts outside local development.
    """
    click.echo("START Seeding demo data...")

    users = {}
    for username, email, password, role, first_name, last_name in DEMO_USERS:
        user = db.session.query(User).filter_by(username=username).first()
        if not user:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=role,
                first_name=first_name,
                last_name=last_name,
                is_active=True,
            )
            db.session.add(user)
        users[username] = user
    db.session.commit()
    click.echo(f"PASS Users: {', '.join(users)}")

    suppliers = {}
    for name, contact, phone, email, address in DEMO_SUPPLIERS:
        supplier = db.session.query(Supplier).filter_by(name=name).first()
        if not supplier:
            supplier = Supplier(name=name, contact_person=contact, phone=phone, email=email, address=address)
            db.session.add(supplier)
        suppliers[name] = supplier

    categories = {}
    for name, description in DEMO_CATEGORIES:
        category = db.session.query(Category).filter_by(name=name).first()
        if not category:
            category = Category(name=name, description=description)
            db.session.add(category)
        categories[name] = category
    db.session.commit()
    click.echo(f"PASS Suppliers: {len(suppliers)}, categories: {len(categories)}")

    expiry = parse_iso_datetime("2030-12-31")
    created_movements = 0
    for index, (sku, name, category, supplier, purchase, selling, threshold) in enumerate(DEMO_PRODUCTS, start=1):
        product = db.session.query(Product).filter_by(sku=sku).first()
        if not product:
            product = Product(
                sku=sku,
                name=name,
                category=categories[category],
                supplier=suppliers[supplier],
                purchase_price=Decimal(purchase),
                selling_price=Decimal(selling),
                low_stock_threshold=threshold,
            )
            db.session.add(product)
            db.session.flush()

        batch = f"BATCH-{index:03d}"
        item = db.session.query(InventoryItem).filter_by(product_id=product.id, batch_number=batch).first()
        if item:
            continue

        opening_quantity = 25 * (index + 1)
        item = InventoryItem(
            product=product,
            quantity=opening_quantity,
            location=f"A-{index:02d}-01",
            batch_number=batch,
            expiry_date=expiry,
        )
        db.session.add(item)
        db.session.add(StockMovement(
            product=product,
            inventory_item=item,
            user=users["admin"],
            type=MOVEMENT_PURCHASE,
            quantity=opening_quantity,
            reason="Opening stock",
            reference=f"SEED-{index:03d}",
        ))
        created_movements += 1
    db.session.commit()
    click.echo(f"PASS Products: {len(DEMO_PRODUCTS)}, new inventory rows: {created_movements}")
    click.echo("DONE Demo data ready")


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

    click.echo("PASS Database reset complete")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(VALID_ROLES), default=ROLE_USER, show_default=True, help='Role')
@click.option('--first-name', default=None, help='First name')
@click.option('--last-name', default=None, help='Last name')
@with_appcontext
def create_user_cli(username, email, password, role, first_name, last_name):
    """Create a user with the same validation as the API."""
    try:
        user = create_user(
            {
                "username": username,
                "email": email,
                "password": password,
                "role": role,
                "firstName": first_name,
                "lastName": last_name,
            },
            allow_role=True,
        )
    except ApiError as e:
        raise click.ClickException(f"FAIL Failed to create user: {e.message}")

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role':<10} {'Active'}")
    click.echo("=" * 80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<30} {user.role:<10} {active_str}")

    click.echo("=" * 80 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
