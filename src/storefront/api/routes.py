"""FastAPI endpoints over the storefront shell.

Each request arrives with its browser's shell on `request.state.shell` (see
`storefront.api.sessions`). The shell carries that shopper's page state between
requests, the way a browser tab would.
"""

from fastapi import APIRouter, HTTPException, Request
from protean.exceptions import ValidationError

from storefront.api.schemas import (
    AddToCartRequest,
    CartLineResponse,
    CartResponse,
    CatalogResponse,
    CheckoutResponse,
    NavigationResponse,
    OrderItemResponse,
    OrderResponse,
    ProductIdResponse,
    ProductRequest,
    ProductResponse,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    StatusResponse,
    UserResponse,
)
from storefront.catalogue.product import Product
from storefront.ordering.pricing import to_money
from storefront.views.admin import ProductForm
from storefront.views.catalog import CatalogView
from storefront.views.checkout import CheckoutView
from storefront.views.navigation import Redirect
from storefront.views.shell import StorefrontShell

auth_router = APIRouter(prefix="/auth", tags=["auth"])
catalog_router = APIRouter(prefix="/catalog", tags=["catalog"])
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])
orders_router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/products", tags=["admin"])


def _shell(request: Request) -> StorefrontShell:
    return request.state.shell


def _require_user(shell: StorefrontShell):
    if shell.user is None:
        raise HTTPException(status_code=401, detail="Sign in to continue")
    return shell.user


def _navigation(redirect: Redirect, message: str | None = None) -> NavigationResponse:
    return NavigationResponse(path=redirect.path, delay_seconds=redirect.delay_seconds, message=message)


def _product(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        stock_quantity=product.stock_quantity or 0,
        category=product.category,
        image_url=product.image_url,
    )


def _cart(view: CatalogView) -> CartResponse:
    return CartResponse(
        lines=[CartLineResponse(**line) for line in view.cart_summary()],
        item_count=view.cart.item_count,
        total=view.cart_total,
    )


def _checkout(view: CheckoutView, redirect: Redirect | None = None) -> CheckoutResponse:
    return CheckoutResponse(
        state=view.state.value,
        cart=view.cart.quantities() if view.cart is not None else {},
        total=view.total,
        order_id=view.order_id,
        success=view.success,
        redirect=_navigation(redirect) if redirect else None,
    )


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
@auth_router.get("/session", response_model=SessionResponse)
async def current_session(request: Request) -> SessionResponse:
    shell = _shell(request)
    profile = shell.account.profile()
    return SessionResponse(user=UserResponse(**profile) if profile else None, home_route=shell.home_route())


@auth_router.post("/login", response_model=NavigationResponse)
async def login(request: Request, body: SignInRequest) -> NavigationResponse:
    redirect = _shell(request).account.login(body.email, body.password)
    return _navigation(redirect)


@auth_router.post("/signup", status_code=201, response_model=NavigationResponse)
async def signup(request: Request, body: SignUpRequest) -> NavigationResponse:
    account = _shell(request).account
    redirect = account.signup(body.email, body.password, body.full_name)
    return _navigation(redirect, account.success)


@auth_router.post("/logout", response_model=NavigationResponse)
async def logout(request: Request) -> NavigationResponse:
    return _navigation(_shell(request).account.logout())


@auth_router.get("/profile", response_model=UserResponse)
async def profile(request: Request) -> UserResponse:
    shell = _shell(request)
    _require_user(shell)
    return UserResponse(**shell.account.profile())


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
@catalog_router.get("", response_model=CatalogResponse)
async def browse_catalog(request: Request, search: str | None = None, category: str | None = None) -> CatalogResponse:
    shell = _shell(request)
    _require_user(shell)
    view = shell.current_catalog()
    view.set_filters(search_term=search, category=category)
    return CatalogResponse(
        products=[_product(p) for p in view.visible_products],
        categories=view.categories,
        search_term=view.search_term,
        category=view.category,
        cart=_cart(view),
    )


@catalog_router.get("/cart", response_model=CartResponse)
async def view_cart(request: Request) -> CartResponse:
    shell = _shell(request)
    _require_user(shell)
    return _cart(shell.current_catalog())


@catalog_router.post("/cart", response_model=CartResponse)
async def add_to_cart(request: Request, body: AddToCartRequest) -> CartResponse:
    shell = _shell(request)
    _require_user(shell)
    view = shell.current_catalog()
    view.add_to_cart(body.product_id)
    return _cart(view)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@checkout_router.post("", response_model=CheckoutResponse)
async def open_checkout(request: Request) -> CheckoutResponse:
    shell = _shell(request)
    _require_user(shell)
    view = shell.open_checkout()
    return _checkout(view, view.enter())


@checkout_router.get("", response_model=CheckoutResponse)
async def checkout_state(request: Request) -> CheckoutResponse:
    shell = _shell(request)
    _require_user(shell)
    if shell.checkout is None:
        raise HTTPException(status_code=404, detail="No checkout in progress")
    return _checkout(shell.checkout)


@checkout_router.post("/submit", response_model=CheckoutResponse)
async def submit_order(request: Request) -> CheckoutResponse:
    shell = _shell(request)
    _require_user(shell)
    if shell.checkout is None:
        raise ValidationError({"cart": ["Your cart is empty"]})
    redirect = shell.checkout.submit()
    return _checkout(shell.checkout, redirect)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@orders_router.get("", response_model=list[OrderResponse])
async def order_history(request: Request) -> list[OrderResponse]:
    shell = _shell(request)
    _require_user(shell)
    view = shell.open_orders()
    return [
        OrderResponse(
            id=str(order.id),
            total_amount=order.total,
            status=order.status,
            created_at=order.created_at,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    price_at_purchase=to_money(item.price_at_purchase),
                    line_total=item.line_total,
                )
                for item in view.items_of(order.id)
            ],
        )
        for order in view.orders
    ]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
def _admin_panel(request: Request):
    shell = _shell(request)
    _require_user(shell)
    panel = shell.open_admin()
    redirect = panel.enter()
    if redirect is not None:
        raise HTTPException(status_code=403, detail={"error": "Administrators only", "redirect": redirect.path})
    return panel


def _form(body: ProductRequest, editing_id: str | None = None) -> ProductForm:
    return ProductForm(
        name=body.name,
        description=body.description,
        price=str(body.price),
        stock_quantity=str(body.stock_quantity),
        category=body.category,
        image_url=body.image_url,
        editing_id=editing_id,
    )


@admin_router.get("", response_model=list[ProductResponse])
async def list_products(request: Request) -> list[ProductResponse]:
    return [_product(p) for p in _admin_panel(request).products]


@admin_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(request: Request, body: ProductRequest) -> ProductIdResponse:
    product_id = _admin_panel(request).save(_form(body))
    return ProductIdResponse(product_id=product_id)


@admin_router.put("/{product_id}", response_model=ProductIdResponse)
async def update_product(request: Request, product_id: str, body: ProductRequest) -> ProductIdResponse:
    _admin_panel(request).save(_form(body, editing_id=product_id))
    return ProductIdResponse(product_id=product_id)


@admin_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(request: Request, product_id: str) -> StatusResponse:
    _admin_panel(request).delete(product_id)
    return StatusResponse()
