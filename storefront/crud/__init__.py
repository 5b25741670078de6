"""CRUD 操作模块"""
from .cart import add_item as add_cart_item
from .cart import clear as clear_cart
from .cart import count_items as count_cart_items
from .cart import delete_item as delete_cart_item
from .cart import get_item as get_cart_item
from .cart import list_items as list_cart_items
from .catalog import get_product, list_products
from .order import get_order, list_orders
from .order import update_status as update_order_status
from .proposal import create_proposal, get_proposal
from .proposal import list_for_customer as list_proposals_for_customer
from .user import (
    create as create_user,
)
from .user import (
    get_by_email as get_user_by_email,
)
from .user import (
    get_by_id as get_user_by_id,
)
from .voucher import (
    backfill_expiry as backfill_voucher_expiry,
)
from .voucher import (
    create_voucher,
    get_user_voucher,
    get_voucher,
    mark_used,
)
from .voucher import (
    issue_grant as issue_voucher_grant,
)
from .voucher import (
    list_unused_grants as list_unused_voucher_grants,
)
from .voucher import (
    toggle_status as toggle_voucher_status,
)

__all__ = [
    "add_cart_item",
    "clear_cart",
    "count_cart_items",
    "delete_cart_item",
    "get_cart_item",
    "list_cart_items",
    "get_product",
    "list_products",
    "get_order",
    "list_orders",
    "update_order_status",
    "create_proposal",
    "get_proposal",
    "list_proposals_for_customer",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "backfill_voucher_expiry",
    "create_voucher",
    "get_user_voucher",
    "get_voucher",
    "mark_used",
    "issue_voucher_grant",
    "list_unused_voucher_grants",
    "toggle_voucher_status",
]
