# Overview: Builds the per-application repositories and workflows.

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .extensions import db
from .repositories.categories import CategoryRepository
from .repositories.orders import OrderRepository
from .repositories.products import ProductRepository
from .repositories.users import UserRepository
from .services.auth_service import AuthService
from .services.login_throttle_service import LoginThrottle
from .services.order_service import OrderWorkflow, make_write_strategy
from .services.token_service import TokenService


@dataclass
class Container:
    """
    One instance per Flask app, stored in app.extensions["storefront"].

    Repositories hold the scoped db.session, which resolves to the session
    of the current app context, so sharing them across requests is safe.
    """
    users: UserRepository
    categories: CategoryRepository
    products: ProductRepository
    orders: OrderRepository
    order_workflow: OrderWorkflow
    tokens: TokenService
    login_throttle: LoginThrottle
    auth: AuthService


def build_container(app, session=None) -> Container:
    session = session if session is not None else db.session
    config = app.config

    users = UserRepository(session)
    products = ProductRepository(session)
    orders = OrderRepository(session)
    tokens = TokenService.from_config(config)
    throttle = LoginThrottle(
        session,
        max_failed_attempts=config["LOGIN_MAX_FAILED_ATTEMPTS"],
        lockout_window=timedelta(minutes=config["LOGIN_LOCKOUT_MINUTES"]),
    )

    return Container(
        users=users,
        categories=CategoryRepository(session),
        products=products,
        orders=orders,
        order_workflow=OrderWorkflow(
            orders=orders,
            products=products,
            writes=make_write_strategy(config["ORDER_WRITE_STRATEGY"], app.logger),
        ),
        tokens=tokens,
        login_throttle=throttle,
        auth=AuthService(
            users=users,
            tokens=tokens,
            throttle=throttle,
            bcrypt_rounds=config["BCRYPT_ROUNDS"],
            logger=app.logger,
        ),
    )
