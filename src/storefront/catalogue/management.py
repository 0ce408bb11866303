"""Admin product management: commands and handler.

Every command names the user asking for the change. Only administrators may
add, edit or remove products; everyone else is refused before the backend
sees a write.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, Integer, String, Text

from storefront.backend import get_backend
from storefront.backend.port import PRODUCTS, BackendError, eq
from storefront.catalogue.product import MAX_PRICE, Product, check_price
from storefront.domain import storefront
from storefront.identity.profiles import load_profile_by_id

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    requested_by: Identifier(required=True)
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0, max_value=MAX_PRICE)
    stock_quantity: Integer(required=True, min_value=0)
    category: String(required=True, max_length=100)
    image_url: String(max_length=500)


@storefront.command(part_of="Product")
class UpdateProduct:
    requested_by: Identifier(required=True)
    product_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0, max_value=MAX_PRICE)
    stock_quantity: Integer(required=True, min_value=0)
    category: String(required=True, max_length=100)
    image_url: String(max_length=500)


@storefront.command(part_of="Product")
class DeleteProduct:
    requested_by: Identifier(required=True)
    product_id: Identifier(required=True)


def _require_admin(user_id):
    user = load_profile_by_id(str(user_id))
    if user is None or not user.is_admin:
        raise ValidationError({"requested_by": ["Only administrators can manage products"]})
    return user


def _details(command):
    check_price(command.price)
    return {
        "name": command.name,
        "description": command.description,
        "price": command.price,
        "stock_quantity": command.stock_quantity,
        "category": command.category,
        "image_url": command.image_url or "",
    }


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        admin = _require_admin(command.requested_by)

        rows = get_backend().insert(PRODUCTS, [{**_details(command), "created_by": str(admin.id)}])
        if not rows:
            raise BackendError("Failed to create product")
        product = Product.from_row(rows[0])

        logger.info("product_added", product_id=str(product.id), admin_id=str(admin.id))
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        admin = _require_admin(command.requested_by)

        values = {**_details(command), "updated_at": datetime.now(UTC).isoformat()}
        rows = get_backend().update(PRODUCTS, values, [eq("id", str(command.product_id))])
        if not rows:
            raise ObjectNotFoundError(f"Product with id {command.product_id} does not exist")

        logger.info("product_updated", product_id=str(command.product_id), admin_id=str(admin.id))
        return str(command.product_id)

    @handle(DeleteProduct)
    def delete_product(self, command):
        admin = _require_admin(command.requested_by)

        deleted = get_backend().delete(PRODUCTS, [eq("id", str(command.product_id))])
        if not deleted:
            raise ObjectNotFoundError(f"Product with id {command.product_id} does not exist")

        logger.info("product_deleted", product_id=str(command.product_id), admin_id=str(admin.id))
