# form checks run before anything is sent to the backend
# every validator returns an error message, or "" when the input is fine
import re
from typing import Optional, Tuple

from utils.token import ROLE_CUSTOMER, ROLE_MERCHANT

TARGET_PHONE = 1
TARGET_EMAIL = 2

MIN_PASSWORD_LENGTH = 6
CAPTCHA_COOLDOWN = 60  # seconds
CAPTCHA_BIZ_REGISTER = "user_register"

_PHONE_RE = re.compile(r"^1[3-9]\d{9}$")
_EMAIL_RE = re.compile(r"^[\w.-]+@[\w.-]+\.\w+$")


def login_target_type(target_type: int) -> int:
    """The login endpoint numbers phone and email the other way round."""
    return TARGET_EMAIL if target_type == TARGET_PHONE else TARGET_PHONE


def target_label(target_type: int) -> str:
    return "Phone" if target_type == TARGET_PHONE else "Email"


def validate_target(target_type: Optional[int], target: str) -> str:
    if target_type not in (TARGET_PHONE, TARGET_EMAIL):
        return "Choose phone or email."
    if not target.strip():
        return f"{target_label(target_type)} cannot be empty."
    if target_type == TARGET_PHONE and not _PHONE_RE.match(target):
        return "Invalid phone number."
    if target_type == TARGET_EMAIL and not _EMAIL_RE.match(target):
        return "Invalid email address."
    return ""


def validate_captcha_request(target_type: Optional[int], target: str) -> str:
    return validate_target(target_type, target)


def validate_login(target_type: Optional[int], target: str, password: str) -> str:
    msg = validate_target(target_type, target)
    if msg:
        return msg
    if not password.strip():
        return "Password cannot be empty."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    return ""


def validate_registration(
    target_type: Optional[int],
    target: str,
    username: str,
    password: str,
    confirm_password: str,
    captcha: str,
    user_type: Optional[int],
) -> str:
    msg = validate_target(target_type, target)
    if msg:
        return msg
    if not username.strip():
        return "Username cannot be empty."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    if password != confirm_password:
        return "Passwords do not match."
    if not captcha.strip():
        return "Captcha cannot be empty."
    if user_type not in (ROLE_CUSTOMER, ROLE_MERCHANT):
        return "Choose an account type."
    return ""


def parse_sku_form(
    sku_code: str, price: str, stock: str
) -> Tuple[str, Optional[Tuple[str, int, int]]]:
    """
    Validate the SKU creation form.
    Returns (error, None) or ("", (sku_code, price_in_fen, stock)).
    """
    sku_code = sku_code.strip()
    if not sku_code:
        return "SKU code cannot be empty.", None
    try:
        price_val = int(price)
    except ValueError:
        return "Price must be a whole number of fen.", None
    try:
        stock_val = int(stock)
    except ValueError:
        return "Stock must be a whole number.", None
    if price_val < 0:
        return "Price cannot be negative.", None
    if stock_val < 0:
        return "Stock cannot be negative.", None
    return "", (sku_code, price_val, stock_val)
