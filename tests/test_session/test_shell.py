"""
Tests for the session context and the interactive shell.
"""

import os
import tempfile

import pytest

from src.errors import AuthorizationError, ValidationError
from src.models.review import ReviewType
from src.models.user import Role
from src.session import CatalogSession
from src.shell import InteractiveShell, parse_id_list


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def session(workdir):
    """Session with an admin, two experts, a shopper and three products."""
    session = CatalogSession(
        bills_dir=os.path.join(workdir, "bills"),
        output_dir=os.path.join(workdir, "output")
    )
    session.auth.signup("admin", "admin", Role.ADMIN)
    alice = session.auth.signup("alice", "pass", Role.EXPERT, expertise_domain="Laptops")
    bob = session.auth.signup("bob", "pass", Role.EXPERT, expertise_domain="Mobiles")
    alice.expertise_trust = 0.8
    bob.expertise_trust = 0.9
    session.auth.signup("charlie", "pass", Role.USER)
    session.catalog.add_product("LP-001", "ZenBook X", "Asutek", "Laptops", "Thin-and-light laptop.", 79990)
    session.catalog.add_product("MB-100", "Pixelate 9", "Googlo", "Mobiles", "Camera-focused phone.", 65999)
    session.catalog.add_product("HP-250", "HyperPods", "Pome", "Audio", "Wireless earbuds.", 8990)
    return session


def _shell(session, answers, snapshot_path="catalog.json"):
    """Shell fed from a list of answers, collecting output lines."""
    feed = iter(answers)
    output = []

    def fake_input(prompt):
        try:
            return next(feed)
        except StopIteration:
            raise EOFError

    shell = InteractiveShell(session, snapshot_path=snapshot_path,
                             input_fn=fake_input, output_fn=output.append)
    return shell, output


def test_session_review_flow(session):
    """Worked example: alice 8 (boosted) and bob 6 on the laptop -> ~7.05."""
    session.auth.login("alice", "pass")
    session.post_review(1, 8, "Great", ReviewType.EXPERT)
    session.auth.login("bob", "pass")
    session.post_review(1, 6, "Fine", ReviewType.EXPERT)

    assert session.catalog.get_product(1).avg_expert_score == pytest.approx(13.4 / 1.9)


def test_session_requires_login(session):
    with pytest.raises(AuthorizationError):
        session.post_review(1, 5, "", ReviewType.USER)
    with pytest.raises(AuthorizationError):
        session.purchase([1])


def test_purchase_writes_bill(session, workdir):
    session.auth.login("charlie", "pass")

    order, bill, bill_path = session.purchase([3, 3, 1])

    assert order.subtotal == 97970.0
    assert bill_path == os.path.join(workdir, "bills", f"bill-{order.id}.txt")
    with open(bill_path, encoding="utf-8") as f:
        assert f.read() == bill
    assert session.my_orders() == [order]


def test_sales_report_is_admin_only(session, workdir):
    session.auth.login("charlie", "pass")
    session.purchase([2])
    with pytest.raises(AuthorizationError):
        session.export_sales_report()

    session.auth.login("admin", "admin")
    path = session.export_sales_report()
    assert path == os.path.join(workdir, "output", "sales_report.csv")
    assert os.path.exists(path)


def test_save_load_round_trip(session, workdir):
    """Load reproduces entities, counters and scores; no renumbering."""
    session.auth.login("alice", "pass")
    session.post_review(1, 8, "Great", ReviewType.EXPERT)
    session.post_review(2, 5, "Meh", ReviewType.USER)
    session.purchase([1, 2, 2])
    before = session.repository.to_dict()
    path = os.path.join(workdir, "catalog.json")
    session.save(path)

    fresh = CatalogSession(bills_dir=os.path.join(workdir, "bills"))
    fresh.load(path)
    after = fresh.repository.to_dict()

    for key in ("sequences", "products", "users", "reviews", "orders"):
        assert after[key] == before[key]
    assert fresh.repository.next_id("review") == 3


def test_load_failure_keeps_state(session, workdir):
    with pytest.raises(OSError):
        session.load(os.path.join(workdir, "missing.json"))
    assert len(session.repository.products) == 3


def test_load_keeps_logged_in_user(session, workdir):
    path = os.path.join(workdir, "catalog.json")
    session.save(path)
    session.auth.login("charlie", "pass")

    session.load(path)

    assert session.current_user.username == "charlie"
    assert session.current_user is session.repository.get_user(4)


def test_parse_id_list():
    assert parse_id_list("1, 1,2,") == [1, 1, 2]
    with pytest.raises(ValidationError):
        parse_id_list(" , ")
    with pytest.raises(ValidationError):
        parse_id_list("1,x")


def test_shell_purchase_flow(session):
    shell, output = _shell(session, [
        "4", "charlie", "pass",
        "11", "1,1",
        "12",
        "0",
    ])

    shell.run()

    text = "\n".join(output)
    assert "Logged in as [#4] charlie" in text
    assert "=== BILL ===" in text
    assert "Order #1 by User 4" in text
    assert output[-1] == "Bye"


def test_shell_reports_errors_and_continues(session):
    """Errors are shown and the menu keeps running."""
    shell, output = _shell(session, [
        "5",                      # Not logged in
        "4", "charlie", "pass",
        "5",                      # Not an expert
        "6", "99",                # Unknown product
        "6", "1", "eleven",       # Malformed score
        "6", "1", "11", "",       # Out of range
        "2",                      # Not an admin
        "42",
        "0",
    ])

    shell.run()

    errors = [line for line in output if line.startswith("Error: ")]
    assert errors[0] == "Error: Login first"
    assert "not allowed" in errors[1]
    assert "Product not found" in errors[2]
    assert "Invalid score" in errors[3]
    assert "Score must be" in errors[4]
    assert "not allowed" in errors[5]
    assert "Unknown choice" in output
    assert output[-1] == "Bye"


def test_shell_register_and_review(session):
    shell, output = _shell(session, [
        "3", "dana", "pw", "expert", "Audio",
        "4", "DANA", "pw",
        "5", "3", "9", "Superb bass",
        "7", "3",
        "0",
    ])

    shell.run()

    dana = session.repository.find_user_by_username("dana")
    assert dana.expertise_domain == "Audio"
    assert dana.expertise_trust == 0.7
    assert session.catalog.get_product(3).avg_expert_score == pytest.approx(9.0)
    assert "-- Expert Reviews --" in "\n".join(output)


def test_shell_ends_on_eof(session):
    shell, output = _shell(session, ["4", "charlie"])
    shell.run()
    assert output[-1] == "\nBye"


def test_shell_save_and_load_default_path(session, workdir):
    path = os.path.join(workdir, "snap.json")
    shell, output = _shell(session, ["9", "", "10", "", "0"], snapshot_path=path)

    shell.run()

    assert os.path.exists(path)
    assert f"Saved to {path}" in output
    assert f"Loaded from {path}" in output


@pytest.fixture
def blocked_bills(session, workdir):
    """Point bill storage at a regular file so writes fail."""
    blocker = os.path.join(workdir, "blocked")
    with open(blocker, "w") as f:
        f.write("not a directory")
    session.storage.bills_dir = blocker
    return session


def test_purchase_survives_bill_write_failure(blocked_bills):
    """The order is kept once and the bill text is still returned."""
    session = blocked_bills
    session.auth.login("charlie", "pass")

    order, bill, bill_path = session.purchase([3])

    assert bill_path is None
    assert bill.startswith(f"Invoice No: {order.id}")
    assert list(session.repository.orders) == [order.id]


def test_shell_shows_bill_when_it_cannot_be_saved(blocked_bills):
    shell, output = _shell(blocked_bills, [
        "4", "charlie", "pass",
        "11", "3",
        "0",
    ])

    shell.run()

    text = "\n".join(output)
    assert "=== BILL ===" in text
    assert "Could not save bill for order #1" in output
    assert not any(line.startswith("Error: ") for line in output)
    assert len(blocked_bills.repository.orders) == 1
