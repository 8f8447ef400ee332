import os
import sys
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from flows.auth_forms import (  # noqa: E402
    TARGET_EMAIL,
    TARGET_PHONE,
    login_target_type,
    parse_sku_form,
    validate_captcha_request,
    validate_login,
    validate_registration,
    validate_target,
)
from utils.config import Settings, load_settings  # noqa: E402
from utils.pure import format_price, generate_markdown_table, page_count  # noqa: E402
from utils.token import ROLE_CUSTOMER, ROLE_MERCHANT  # noqa: E402


class AuthFormsTestCase(unittest.TestCase):
    def test_login_swaps_target_type(self):
        self.assertEqual(login_target_type(TARGET_PHONE), TARGET_EMAIL)
        self.assertEqual(login_target_type(TARGET_EMAIL), TARGET_PHONE)

    def test_validate_target(self):
        self.assertEqual(validate_target(None, "13800000000"), "Choose phone or email.")
        self.assertEqual(validate_target(TARGET_PHONE, "  "), "Phone cannot be empty.")
        self.assertEqual(validate_target(TARGET_EMAIL, ""), "Email cannot be empty.")
        self.assertEqual(validate_target(TARGET_PHONE, "12800000000"), "Invalid phone number.")
        self.assertEqual(validate_target(TARGET_PHONE, "1380000000"), "Invalid phone number.")
        self.assertEqual(validate_target(TARGET_EMAIL, "jane@"), "Invalid email address.")
        self.assertEqual(validate_target(TARGET_PHONE, "13800000000"), "")
        self.assertEqual(validate_target(TARGET_EMAIL, "jane.doe@example.com"), "")

    def test_validate_captcha_request(self):
        self.assertEqual(validate_captcha_request(TARGET_EMAIL, "a@b.co"), "")
        self.assertTrue(validate_captcha_request(TARGET_EMAIL, "nope"))

    def test_validate_login(self):
        self.assertEqual(
            validate_login(TARGET_PHONE, "13800000000", ""), "Password cannot be empty."
        )
        self.assertEqual(
            validate_login(TARGET_PHONE, "13800000000", "12345"),
            "Password must be at least 6 characters.",
        )
        self.assertEqual(validate_login(TARGET_PHONE, "13800000000", "123456"), "")

    def test_validate_registration(self):
        ok = dict(
            target_type=TARGET_EMAIL,
            target="jane@example.com",
            username="Jane",
            password="secret1",
            confirm_password="secret1",
            captcha="123456",
            user_type=ROLE_MERCHANT,
        )
        self.assertEqual(validate_registration(**ok), "")
        self.assertEqual(validate_registration(**{**ok, "user_type": ROLE_CUSTOMER}), "")

        cases = [
            ({"username": " "}, "Username cannot be empty."),
            ({"password": "123"}, "Password must be at least 6 characters."),
            ({"confirm_password": "secret2"}, "Passwords do not match."),
            ({"captcha": ""}, "Captcha cannot be empty."),
            ({"user_type": None}, "Choose an account type."),
        ]
        for change, expected in cases:
            with self.subTest(change=change):
                self.assertEqual(validate_registration(**{**ok, **change}), expected)

    def test_parse_sku_form(self):
        self.assertEqual(parse_sku_form(" red-XL ", "9900", "3"), ("", ("red-XL", 9900, 3)))
        self.assertEqual(parse_sku_form("", "1", "1")[0], "SKU code cannot be empty.")
        self.assertEqual(
            parse_sku_form("c", "99.5", "1")[0], "Price must be a whole number of fen."
        )
        self.assertEqual(parse_sku_form("c", "1", "")[0], "Stock must be a whole number.")
        self.assertEqual(parse_sku_form("c", "-1", "1")[0], "Price cannot be negative.")
        self.assertEqual(parse_sku_form("c", "1", "-1")[0], "Stock cannot be negative.")
        self.assertIsNone(parse_sku_form("", "1", "1")[1])


class PureTestCase(unittest.TestCase):
    def test_format_price(self):
        self.assertEqual(format_price(19800), "¥198.00")
        self.assertEqual(format_price(5), "¥0.05")
        self.assertEqual(format_price(0), "¥0.00")
        self.assertEqual(format_price(-150), "-¥1.50")

    def test_page_count(self):
        self.assertEqual(page_count(0, 20), 0)
        self.assertEqual(page_count(20, 20), 1)
        self.assertEqual(page_count(21, 20), 2)
        self.assertEqual(page_count(5, 0), 0)

    def test_markdown_table(self):
        table = generate_markdown_table(["A", "B"], [[1, "x|y"]], ["l", "r"])
        self.assertEqual(
            table.splitlines(), ["| A | B |", "| :--- | ---: |", "| 1 | x\\|y |"]
        )
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [[1, 2]], ["l"])

    def test_markdown_table_first_row_as_header(self):
        table = generate_markdown_table(None, [["k", "v"], ["id", 3]])
        self.assertEqual(table.splitlines()[0], "| k | v |")
        self.assertEqual(len(table.splitlines()), 3)


class SettingsTestCase(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(load_settings({}), Settings())

    def test_from_env(self):
        s = load_settings(
            {
                "STOREFRONT_API_URL": "http://api.example.com/",
                "STOREFRONT_API_TIMEOUT": "2.5",
                "STOREFRONT_AUTH_HEADER": "Authorization",
                "STOREFRONT_STORAGE_PATH": "/tmp/s.sqlite",
                "STOREFRONT_LOG_FILE": "/tmp/storefront.log",
                "DEBUG": "1",
            }
        )
        self.assertEqual(s.api_url, "http://api.example.com")
        self.assertEqual(s.api_timeout, 2.5)
        self.assertEqual(s.auth_header, "Authorization")
        self.assertEqual(s.storage_path, "/tmp/s.sqlite")
        self.assertEqual(s.log_file, "/tmp/storefront.log")
        self.assertTrue(s.debug)

    def test_bad_timeout_falls_back(self):
        self.assertEqual(load_settings({"STOREFRONT_API_TIMEOUT": "soon"}).api_timeout, 5.0)


if __name__ == "__main__":
    unittest.main()
