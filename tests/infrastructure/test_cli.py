"""Smoke tests for the click entry point, run against a temporary database."""

import re
from datetime import date, timedelta

import pytest
from click.testing import CliRunner

from foodhub.infrastructure.cli.main import cli

pytestmark = pytest.mark.usefixtures("cli_env")

SUPPLIER = ["--user", "sup-1", "--role", "supplier"]
SHOPKEEPER = ["--user", "shop-1", "--role", "shopkeeper"]
ADMIN = ["--user", "admin", "--role", "superadmin"]


def _run(*args):
    return CliRunner().invoke(cli, list(args))


def _add_product(quantity=10) -> str:
    result = _run(
        *SUPPLIER, "product", "add",
        "--name", "Apples", "--price", "10.00", "--unit", "kg",
        "--quantity", str(quantity), "--min-stock", "2",
        "--expiry-date", "2026-12-01",
    )
    assert result.exit_code == 0, result.output
    return re.search(r"Product (\w+) 'Apples'", result.output).group(1)


def _create_order(product_id: str, qty: int = 5) -> int:
    result = _run(
        *SHOPKEEPER, "order", "create",
        "--items", f"{product_id}:{qty}", "--payment", "cash",
    )
    assert result.exit_code == 0, result.output
    return int(re.search(r"\(#(\d+)\) created", result.output).group(1))


class TestCli:

    def test_db_init(self):
        result = _run("db", "init")
        assert result.exit_code == 0
        assert "Database ready" in result.output

    def test_order_flow(self):
        pid = _add_product(quantity=10)
        result = _run(*SHOPKEEPER, "order", "create", "--items", f"{pid}:5", "--payment", "cash")
        assert "Total: 50.00" in result.output
        order_id = int(re.search(r"\(#(\d+)\) created", result.output).group(1))

        for status in ("confirmed", "processing", "delivered"):
            result = _run(*SUPPLIER, "order", "status", "--id", str(order_id), "--to", status)
            assert result.exit_code == 0, result.output

        result = _run(*SUPPLIER, "product", "list")
        assert re.search(rf"{pid}\s+Apples\s+10.00\s+5\s", result.output)

        result = _run(*SHOPKEEPER, "return", "request", "--order", str(order_id),
                      "--product", pid, "--quantity", "5", "--reason", "bruised")
        assert result.exit_code == 0, result.output
        result = _run(*SUPPLIER, "return", "status", "--order", str(order_id),
                      "--product", pid, "--to", "approved")
        assert "order status=returned" in result.output

        result = _run(*SHOPKEEPER, "order", "show", "--id", str(order_id))
        assert "status=returned" in result.output

    def test_domain_errors_become_click_errors(self):
        pid = _add_product()
        order_id = _create_order(pid)
        result = _run(*SUPPLIER, "order", "status", "--id", str(order_id), "--to", "delivered")
        assert result.exit_code == 1
        assert "invalid_transition:" in result.output

    def test_forbidden(self):
        pid = _add_product()
        order_id = _create_order(pid)
        result = _run("--user", "sup-9", "--role", "supplier", "order", "show", "--id", str(order_id))
        assert result.exit_code == 1
        assert "forbidden:" in result.output

    def test_caller_required(self):
        result = _run("order", "list")
        assert result.exit_code == 2
        assert "--user and --role are required" in result.output

    def test_bad_items_format(self):
        result = _run(*SHOPKEEPER, "order", "create", "--items", "apples", "--payment", "cash")
        assert result.exit_code == 2
        assert "Expected 'ProductId:Quantity'" in result.output

    def test_disputes(self):
        pid = _add_product()
        order_id = _create_order(pid)
        result = _run(*SHOPKEEPER, "dispute", "add", "--order", str(order_id),
                      "--description", "late")
        assert "Dispute #0 raised" in result.output
        result = _run(*ADMIN, "dispute", "status", "--order", str(order_id),
                      "--index", "0", "--to", "resolved")
        assert result.exit_code == 0, result.output

    def test_invoice(self):
        pid = _add_product()
        order_id = _create_order(pid)
        result = _run(*SHOPKEEPER, "order", "invoice", "--id", str(order_id))
        assert result.exit_code == 0, result.output
        assert "INVOICE ORD" in result.output
        assert "Bill to:  shop-1" in result.output

    def test_low_stock(self):
        _add_product(quantity=1)
        result = _run(*SUPPLIER, "product", "low-stock")
        assert "Apples" in result.output

    def test_update_product(self):
        pid = _add_product()
        result = _run(*SUPPLIER, "product", "update", "--id", pid,
                      "--price", "12.50", "--unit", "crate")
        assert result.exit_code == 0, result.output
        assert "12.50 per crate" in result.output
        result = _run("--user", "sup-9", "--role", "supplier", "product", "update",
                      "--id", pid, "--name", "Pears")
        assert result.exit_code == 1
        assert "forbidden:" in result.output

    def test_expiring_and_expired(self):
        soon = (date.today() + timedelta(days=3)).isoformat()
        past = (date.today() - timedelta(days=2)).isoformat()
        for name, expires in (("Milk", soon), ("Butter", past)):
            result = _run(*SUPPLIER, "product", "add", "--name", name, "--price", "1.00",
                          "--unit", "litre", "--expiry-date", expires)
            assert result.exit_code == 0, result.output

        result = _run(*SUPPLIER, "product", "expiring")
        assert "Milk" in result.output
        assert "Butter" not in result.output

        result = _run(*SUPPLIER, "product", "expiring", "--days", "1")
        assert "No products expire within 1 days." in result.output

        result = _run(*SUPPLIER, "product", "expired")
        assert "Butter" in result.output
        assert "Milk" not in result.output
