"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_ADMIN_ATTENDANCE_LIMIT = 50
MIN_PASSWORD_LENGTH = 6

# A missing leave_balances row reads as these counters.
DEFAULT_LEAVE_BALANCE = {
    "casual": 12,
    "sick": 10,
    "earned": 15,
    "compensatory": 0,
}

# Object storage buckets (public-read).
SELFIE_BUCKET = "employee-selfies"
DOCUMENT_BUCKET = "employee-documents"

# Fixed salary formula.
BASIC_PAY = Decimal("25000")
HRA_RATE = Decimal("0.40")
CONVEYANCE_ALLOWANCE = Decimal("1600")
MEDICAL_ALLOWANCE = Decimal("1250")
PROFESSIONAL_TAX = Decimal("200")
PROVIDENT_FUND_RATE = Decimal("0.12")
