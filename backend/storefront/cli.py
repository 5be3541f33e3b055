# Overview: Flask CLI command groups for bootstrap, dataset loading, orders and reports.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Dataset:
# - python -m flask data load ./datasets [--lenient]
#   Load category/customers/sellers/products/orders/order_items/payments/shipping/inventory CSVs.
#
# Orders:
# - python -m flask orders place --order-id 25000 --customer-id 2 --seller-id 5 --item-id 25001 --product-id 1 --quantity 40
#   Place a single-line order and decrement inventory.
# - python -m flask orders show 25000
#
# Reports:
# - python -m flask reports list
# - python -m flask reports run top-products

import json

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import analytics_service, import_service, order_service
from .services.import_service import DatasetImportError
from .services.order_service import OrderPlacementError


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('data')
def data_group():
    """Dataset import commands."""


@data_group.command('load')
@click.argument('directory', type=click.Path(exists=True, file_okay=False))
@click.option('--lenient', is_flag=True, help='Commit valid rows and only report invalid ones')
@with_appcontext
def load_data(directory, lenient):
    """Load the CSV exports found in DIRECTORY."""
    try:
        report = import_service.load_dataset(directory, strict=not lenient)
    except DatasetImportError as exc:
        _echo_json(exc.report.to_dict())
        raise click.ClickException(str(exc))

    for table in report.tables:
        if not table.found:
            click.echo(f"SKIP {table.filename} (not found)")
            continue
        click.echo(
            f"PASS {table.filename}: {table.rows} rows, "
            f"{table.created} created, {table.updated} updated, {len(table.errors)} errors"
        )


@click.group('orders')
def orders_group():
    """Order placement commands."""


@orders_group.command('place')
@click.option('--order-id', type=int, required=True)
@click.option('--customer-id', type=int, required=True)
@click.option('--seller-id', type=int, required=True)
@click.option('--item-id', 'order_item_id', type=int, required=True)
@click.option('--product-id', type=int, required=True)
@click.option('--quantity', type=int, required=True)
@click.option('--warehouse-id', type=int, default=None, help='Reserve from this warehouse only')
@with_appcontext
def place_order_cli(order_id, customer_id, seller_id, order_item_id, product_id, quantity, warehouse_id):
    """Place a single-line order."""
    try:
        placed = order_service.place_order(
            order_id,
            customer_id,
            seller_id,
            order_item_id,
            product_id,
            quantity,
            warehouse_id=warehouse_id,
        )
    except OrderPlacementError as exc:
        _echo_json(exc.to_dict())
        raise click.ClickException(f"{exc.reason}: {exc}")

    item = placed.item
    click.echo(
        f"PASS Order {placed.order_id} placed: product {item.product_id} x{item.quantity} "
        f"@ {item.price_per_unit_cents / 100:.2f} = {item.total_sale_cents / 100:.2f}"
    )


@orders_group.command('show')
@click.argument('order_id', type=int)
@with_appcontext
def show_order_cli(order_id):
    try:
        _echo_json(order_service.get_order(order_id))
    except OrderPlacementError as exc:
        raise click.ClickException(str(exc))


@click.group('reports')
def reports_group():
    """Analytical projections."""


@reports_group.command('list')
def list_reports_cli():
    for name in analytics_service.PROJECTIONS:
        click.echo(name)


@reports_group.command('run')
@click.argument('name', type=click.Choice(sorted(analytics_service.PROJECTIONS)))
@with_appcontext
def run_report_cli(name):
    """Run one projection with its default parameters and print JSON."""
    try:
        _echo_json(analytics_service.PROJECTIONS[name]())
    except analytics_service.ReportError as exc:
        raise click.ClickException(str(exc))


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(data_group)
    app.cli.add_command(orders_group)
    app.cli.add_command(reports_group)
