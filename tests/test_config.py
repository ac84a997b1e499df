"""Tests for storefront.core.config validation and defaults."""

import unittest

from pydantic import ValidationError

from storefront.core.config import Settings


class TestDatabaseUrl(unittest.TestCase):
    def test_default_names_the_installed_driver(self) -> None:
        default = Settings.model_fields["DATABASE_URL"].default
        self.assertTrue(default.startswith("postgresql+psycopg2://"), default)

    def test_non_postgres_url_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(DATABASE_URL="mysql://root@localhost/storefront")

    def test_url_is_stripped(self) -> None:
        settings = Settings(DATABASE_URL="postgresql://u:p@db:5432/shop ")
        self.assertEqual(settings.DATABASE_URL, "postgresql://u:p@db:5432/shop")


class TestBaseUrls(unittest.TestCase):
    def test_trailing_slash_is_removed(self) -> None:
        settings = Settings(CLIENT_BASE_URL="https://shop.test/")
        self.assertEqual(settings.CLIENT_BASE_URL, "https://shop.test")

    def test_non_http_scheme_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(ADMIN_BASE_URL="ftp://admin.test")


if __name__ == "__main__":
    unittest.main()
