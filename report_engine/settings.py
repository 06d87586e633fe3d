import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Report API ---
API_URL = os.getenv("REPORT_API_URL", "http://localhost:3000/api")
API_TOKEN = os.getenv("REPORT_API_TOKEN")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))

# --- Webhook (default share target for exported files) ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Branding ---
COMPANY_NAME = os.getenv("COMPANY_NAME", "Roo Herbals")
CURRENCY_PREFIX = os.getenv("CURRENCY_PREFIX", "Rs.")

# --- Shared Business Logic ---
# Stock health is current stock as a percentage of the reorder level.
# Upper bounds are inclusive; anything above the last bound is "Adequate".
STOCK_STATUS_THRESHOLDS = [
    (25, "Critical"),
    (75, "Low"),
]
STOCK_STATUS_DEFAULT = "Adequate"
STOCK_HEALTH_DISPLAY_CAP = 200

# Days until expiry, inclusive upper bounds.
EXPIRY_TIERS = [
    (7, "urgent"),
    (15, "warning"),
    (30, "notice"),
]
EXPIRY_TIER_DEFAULT = "safe"

# Credit usage percentage, exclusive lower bounds.
CREDIT_RISK_LEVELS = [
    (80, "High Risk"),
    (60, "Medium Risk"),
]
CREDIT_RISK_DEFAULT = "Low Risk"

# Colors shared by table cells and status badges.
STATUS_COLORS = {
    "Critical": "#dc3545",
    "Low": "#fd7e14",
    "Adequate": "#28a745",
    "urgent": "#dc3545",
    "warning": "#fd7e14",
    "notice": "#ffc107",
    "safe": "#28a745",
    "High Risk": "#dc3545",
    "Medium Risk": "#fd7e14",
    "Low Risk": "#28a745",
}

CHART_COLORS = [
    "#4ECDC4",
    "#FF7675",
    "#A29BFE",
    "#FDCB6E",
    "#7DA453",
    "#346491",
]

# Used when the inventory payload carries no per-category product counts.
FALLBACK_UNIT_COST = 300
# Used when the inventory payload omits totalProductsCount.
FALLBACK_TOTAL_PRODUCTS = 20

INVENTORY_TURNOVER_TARGET = 4
HIGH_CREDIT_SHARE = 40
HIGH_DISCOUNT_SHARE = 10
EXPIRY_ALERT_DAYS = 15
TOP_ROWS_LIMIT = 10

# Order in which main.py runs the report pipelines.
REPORT_ORDER = [
    "inventory",
    "sales",
    "commission",
    "daily_sales",
    "products",
    "sales_reps",
    "customers",
]
