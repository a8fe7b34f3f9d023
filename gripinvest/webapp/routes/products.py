"""Product catalogue routes. Reads are public, writes are admin only."""

import logging

from flask import Blueprint, g, request

from gripinvest.helpers import format_currency
from gripinvest.validators import DEFAULT_MIN_INVESTMENT, validate_product
from gripinvest.webapp import db
from gripinvest.webapp.auth import admin_required, login_required
from gripinvest.webapp.errors import ApiError, NotFound
from gripinvest.webapp.routes import ensure_valid, json_body, success

logger = logging.getLogger(__name__)

products_bp = Blueprint('products', __name__)


def _default_description(data: dict) -> str:
    minimum = data.get('min_investment') or DEFAULT_MIN_INVESTMENT
    return (
        f"{data['name']} is a {data['risk_level']} risk {data['investment_type']} with "
        f"{int(float(data['tenure_months']))} months tenure offering {data['annual_yield']}% "
        f"annual yield. Minimum investment: {format_currency(minimum)}."
    )


@products_bp.route('', methods=['GET'])
def list_products():
    """Get all active products."""
    min_yield = request.args.get('min_yield')
    if min_yield:
        try:
            min_yield = float(min_yield)
        except ValueError:
            raise ApiError('Invalid min_yield value', 400)
    else:
        min_yield = None

    products = db.get_all_products(
        investment_type=request.args.get('investment_type') or None,
        risk_level=request.args.get('risk_level') or None,
        min_yield=min_yield,
    )
    logger.debug(f"Listed {len(products)} products")
    return success({'products': products}, results=len(products))


@products_bp.route('/top', methods=['GET'])
def top_products():
    """Get the highest yield products."""
    raw = request.args.get('limit') or '5'
    try:
        limit = int(raw)
    except ValueError:
        limit = 0
    if limit < 1 or limit > 50:
        raise ApiError('Limit must be between 1 and 50', 400)

    products = db.get_top_products(limit)
    return success({'products': products}, 'Top performing products', results=len(products))


@products_bp.route('/recommended/me', methods=['GET'])
@login_required
def recommended_products():
    """Get products matching the user's risk appetite."""
    risk = g.current_user.get('risk_appetite')
    if not risk:
        raise ApiError('User risk appetite not set', 400)
    products = db.get_recommended_products(risk)
    return success({'products': products},
                   f'Products recommended based on your {risk} risk appetite',
                   results=len(products))


@products_bp.route('/<product_id>', methods=['GET'])
def get_product(product_id):
    """Get a single product."""
    product = db.get_product_by_id(product_id)
    if not product:
        raise NotFound('Product not found')
    return success({'product': product})


@products_bp.route('', methods=['POST'])
@admin_required
def create_product():
    """Create a product."""
    data = json_body()
    ensure_valid(validate_product(data))

    product_id = db.create_product(
        name=data['name'].strip(),
        investment_type=data['investment_type'],
        tenure_months=int(float(data['tenure_months'])),
        annual_yield=float(data['annual_yield']),
        risk_level=data['risk_level'],
        min_investment=float(data.get('min_investment') or DEFAULT_MIN_INVESTMENT),
        max_investment=float(data['max_investment']) if data.get('max_investment') else None,
        description=data.get('description') or _default_description(data),
    )
    product = db.get_product_by_id(product_id)
    return success({'product': product}, 'Product created successfully', 201)


@products_bp.route('/<product_id>', methods=['PUT'])
@admin_required
def update_product(product_id):
    """Update the given fields of an active product."""
    data = json_body()
    updates = {key: data[key] for key in db.UPDATABLE_PRODUCT_FIELDS if key in data}
    if not updates:
        raise ApiError('No valid fields to update', 400)

    current = db.get_product_by_id(product_id)
    if not current:
        raise NotFound('Product not found')
    ensure_valid(validate_product(updates, partial=True, current=current))

    if 'tenure_months' in updates:
        updates['tenure_months'] = int(float(updates['tenure_months']))
    for key in ('annual_yield', 'min_investment', 'max_investment'):
        if updates.get(key) is not None:
            updates[key] = float(updates[key])

    product = db.update_product(product_id, updates)
    if not product:
        raise NotFound('Product not found')
    logger.info(f"Updated product {product_id}: {sorted(updates)}")
    return success({'product': product}, 'Product updated successfully')


@products_bp.route('/<product_id>', methods=['DELETE'])
@admin_required
def delete_product(product_id):
    """Deactivate a product."""
    if not db.delete_product(product_id):
        raise NotFound('Product not found')
    logger.info(f"Deactivated product {product_id}")
    return success(message='Product deleted successfully')
