"""
Flask CLI commands for checkout administration.

Commands:
- flask init-db: Create all tables
- flask create-coupon: Issue a local coupon code to a user
- flask release-coupon: Clear a stuck lock on a coupon code
"""
from decimal import Decimal, InvalidOperation

import click
from sqlalchemy.exc import SQLAlchemyError

from order_checkout.database import create_all, db_session
from order_checkout.dto import DISCOUNT_FIXED, DISCOUNT_PERCENT
from order_checkout.models import CouponCode


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the checkout tables."""
        create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('create-coupon')
    @click.option('--code', required=True, help='Coupon code')
    @click.option('--owner', required=True, help='Owner user id')
    @click.option('--value', required=True, help='Discount amount, or percent for --type percent')
    @click.option('--type', 'discount_type', type=click.Choice([DISCOUNT_FIXED, DISCOUNT_PERCENT]),
                  default=DISCOUNT_FIXED, show_default=True)
    @click.option('--min-amount', default='0.00', show_default=True, help='Minimum payable amount')
    @click.option('--name', default=None, help='Display name')
    def create_coupon(code, owner, value, discount_type, min_amount, name):
        """Issue a local coupon code to a user."""
        try:
            discount_value = Decimal(value)
            minimum = Decimal(min_amount)
        except InvalidOperation:
            click.echo(click.style('Value and min amount must be decimal numbers.', fg='red'))
            return

        if discount_value <= 0:
            click.echo(click.style('Value must be greater than 0.', fg='red'))
            return

        if db_session.query(CouponCode).filter_by(code=code).first():
            click.echo(click.style(f'Coupon code already exists: {code}', fg='red'))
            return

        try:
            coupon = CouponCode(
                code=code,
                owner_id=str(owner),
                name=name,
                discount_type=discount_type,
                discount_value=discount_value,
                min_amount=minimum,
                valid=True,
                locked=False
            )
            db_session.add(coupon)
            db_session.commit()
            click.echo(click.style(f'Coupon {code} created (id={coupon.id}) for user {owner}.', fg='green'))
        except SQLAlchemyError as e:
            db_session.rollback()
            click.echo(click.style(f'Error creating coupon: {e}', fg='red'))

    @app.cli.command('release-coupon')
    @click.argument('code')
    def release_coupon(code):
        """Clear the lock on a coupon code left by an interrupted checkout."""
        coupon = db_session.query(CouponCode).filter_by(code=code).first()
        if coupon is None:
            click.echo(click.style(f'Coupon not found: {code}', fg='red'))
            return

        if not coupon.locked:
            click.echo(f'Coupon {code} is not locked.')
            return

        coupon.locked = False
        coupon.lock_time = None
        db_session.commit()
        click.echo(click.style(f'Coupon {code} released.', fg='green'))
