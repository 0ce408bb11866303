"""Admin panel page state: product list plus an add/edit form."""

from dataclasses import asdict, dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.listing import load_all_products, load_product
from storefront.catalogue.management import AddProduct, DeleteProduct, UpdateProduct
from storefront.catalogue.product import Product, check_price
from storefront.views.feedback import reporting
from storefront.views.navigation import DASHBOARD, Redirect

logger = structlog.get_logger(__name__)


@dataclass
class ProductForm:
    """Form fields as typed, before conversion. `editing_id` is None for a new product."""

    name: str = ""
    description: str = ""
    price: str = ""
    stock_quantity: str = ""
    category: str = ""
    image_url: str = ""
    editing_id: str | None = None

    @classmethod
    def for_product(cls, product: Product):
        return cls(
            name=product.name or "",
            description=product.description or "",
            price=str(product.price),
            stock_quantity=str(product.stock_quantity),
            category=product.category or "",
            image_url=product.image_url or "",
            editing_id=str(product.id),
        )

    def values(self) -> dict:
        errors = {}
        try:
            price = float(self.price)
        except (TypeError, ValueError):
            errors["price"] = ["Price must be a number"]
        try:
            stock_quantity = int(self.stock_quantity)
        except (TypeError, ValueError):
            errors["stock_quantity"] = ["Stock quantity must be a whole number"]
        if errors:
            raise ValidationError(errors)
        check_price(price)

        data = asdict(self)
        data.pop("editing_id")
        data.update(price=price, stock_quantity=stock_quantity)
        return data


class AdminPanel:
    def __init__(self, user) -> None:
        self.user = user
        self.products: list[Product] = []
        self.form: ProductForm | None = None
        self.loading = False
        self.error: str | None = None
        self.success: str | None = None

    @property
    def allowed(self) -> bool:
        return self.user is not None and self.user.is_admin

    def _require_admin(self) -> None:
        if not self.allowed:
            raise ValidationError({"requested_by": ["Only administrators can manage products"]})

    def enter(self) -> Redirect | None:
        if not self.allowed:
            return Redirect(DASHBOARD)
        self.load()
        return None

    def load(self) -> None:
        self.loading = True
        try:
            with reporting(self, "admin_products_failed"):
                self.products = load_all_products()
        finally:
            self.loading = False

    # -------------------------------------------------------------------
    # Form
    # -------------------------------------------------------------------
    def open_form(self, product_id=None) -> ProductForm:
        if product_id is None:
            self.form = ProductForm()
        else:
            product = next((p for p in self.products if str(p.id) == str(product_id)), None)
            if product is None:
                # Added by another admin since the list was loaded
                product = load_product(str(product_id))
            if product is None:
                raise ValidationError({"product_id": ["This product no longer exists"]})
            self.form = ProductForm.for_product(product)
        return self.form

    def close_form(self) -> None:
        self.form = None

    def save(self, form: ProductForm | None = None) -> str:
        self._require_admin()
        form = form or self.form
        if form is None:
            raise ValidationError({"form": ["Open the product form first"]})

        self.success = None
        with reporting(self, "product_save_failed", product_id=form.editing_id):
            values = form.values()
            if form.editing_id:
                product_id = current_domain.process(
                    UpdateProduct(requested_by=str(self.user.id), product_id=form.editing_id, **values),
                    asynchronous=False,
                )
                self.success = "Product updated successfully"
            else:
                product_id = current_domain.process(
                    AddProduct(requested_by=str(self.user.id), **values),
                    asynchronous=False,
                )
                self.success = "Product added successfully"

        self.form = None
        self.load()
        return product_id

    def delete(self, product_id) -> None:
        self._require_admin()
        self.success = None
        with reporting(self, "product_delete_failed", product_id=str(product_id)):
            current_domain.process(
                DeleteProduct(requested_by=str(self.user.id), product_id=str(product_id)),
                asynchronous=False,
            )
        self.success = "Product deleted successfully"
        self.load()
