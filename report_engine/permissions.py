"""
Client-side permission gate. The server enforces the same table on every report
route; this check only decides whether an export is offered at all.
"""

VIEW_REPORTS = "view_reports"

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "owner": frozenset(
        {
            "view_customers",
            "add_customer",
            "edit_customer",
            "delete_customer",
            "view_customer_payments",
            "manage_customer_payments",
            "view_orders",
            "add_order",
            "edit_order",
            "delete_order",
            "manage_deliveries",
            "view_deliveries",
            "view_products",
            "manage_products",
            "view_suppliers",
            "manage_suppliers",
            "view_sales_reps",
            "manage_sales_reps",
            "view_drivers",
            "manage_drivers",
            "view_reports",
            "manage_reports",
            "view_inventory",
            "manage_inventory",
        }
    ),
    "sales_rep": frozenset(
        {
            "view_customers",
            "add_customer",
            "edit_customer",
            "view_customer_payments",
            "manage_customer_payments",
            "view_orders",
            "add_order",
            "edit_order",
            "delete_order",
            "view_products",
        }
    ),
    "lorry_driver": frozenset(
        {
            "view_customers",
            "view_customer_payments",
            "manage_customer_payments",
            "view_orders",
            "update_delivery_status",
            "view_deliveries",
            "view_products",
        }
    ),
}


def has_permission(role: str | None, permission: str) -> bool:
    """Unknown or missing roles have no permissions."""
    if not role:
        return False
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def can_export_reports(role: str | None) -> bool:
    return has_permission(role, VIEW_REPORTS)
