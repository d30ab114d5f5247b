from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from storefront.config import settings
from storefront.models.catalog import Product
from storefront.models.orders import Order
from storefront.models.users import User
from storefront.schemas.dashboard import DashboardStats, LowStockProduct, RecentOrder
from storefront.utils.logger import log_database_operation


@log_database_operation("dashboard stats")
def get_dashboard_stats(db: Session) -> DashboardStats:
    """
    Summary numbers for the admin dashboard

    Low-stock products are those at or below ``LOW_STOCK_THRESHOLD``,
    lowest stock first.
    """
    total_orders, total_revenue = db.query(
        func.count(Order.id), func.coalesce(func.sum(Order.total_price), 0)
    ).one()

    recent_orders = (
        db.query(Order)
        .options(joinedload(Order.user))
        .order_by(Order.order_date.desc(), Order.id.desc())
        .limit(settings.RECENT_ORDERS_LIMIT)
        .all()
    )
    low_stock = (
        db.query(Product)
        .options(joinedload(Product.category))
        .filter(Product.stock <= settings.LOW_STOCK_THRESHOLD)
        .order_by(Product.stock.asc(), Product.id.asc())
        .all()
    )

    return DashboardStats(
        total_orders=total_orders,
        total_revenue=round(float(total_revenue), 2),
        total_products=db.query(func.count(Product.id)).scalar(),
        total_users=db.query(func.count(User.id)).scalar(),
        recent_orders=[RecentOrder.model_validate(o) for o in recent_orders],
        low_stock_products=[LowStockProduct.model_validate(p) for p in low_stock],
    )
