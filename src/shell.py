"""
Interactive Shell.

Text menu over a CatalogSession. Every command error is reported and
the loop continues; only Exit (or end of input) ends the session.
"""

import logging
from typing import Callable, List

import config.settings as settings
from src.errors import CatalogError, ValidationError
from src.models.review import ReviewType
from src.models.user import Capability, Role
from src.services.auth import parse_role
from src.session import CatalogSession

logger = logging.getLogger(__name__)

MENU = [
    ("1", "List products"),
    ("2", "Add product"),
    ("3", "Register user"),
    ("4", "Login"),
    ("5", "Post EXPERT review"),
    ("6", "Post USER review"),
    ("7", "View product details"),
    ("8", "Recompute all scores"),
    ("9", "Save DB to file"),
    ("10", "Load DB from file"),
    ("11", "Purchase products"),
    ("12", "View my orders"),
    ("13", "Export sales report"),
    ("14", "Logout"),
    ("0", "Exit"),
]


def parse_int(text: str, label: str = "number") -> int:
    """Parse an integer, raising ValidationError on malformed input."""
    try:
        return int(text.strip())
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid {label}: {text!r}")


def parse_float(text: str, label: str = "number") -> float:
    try:
        return float(text.strip())
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid {label}: {text!r}")


def parse_id_list(text: str) -> List[int]:
    """Parse comma separated product ids: "1, 1,2" -> [1, 1, 2]."""
    ids = [parse_int(part, "product id") for part in text.split(",") if part.strip()]
    if not ids:
        raise ValidationError("Nothing entered")
    return ids


class InteractiveShell:
    """
    Menu-driven front end.

    Args:
        session: Session the commands act on
        snapshot_path: Default path offered for save/load
        input_fn: Reads one line given a prompt (default: input)
        output_fn: Writes one line (default: print)
    """

    def __init__(
        self,
        session: CatalogSession,
        snapshot_path: str = str(settings.SNAPSHOT_PATH),
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print
    ):
        self.session = session
        self.snapshot_path = snapshot_path
        self.input = input_fn
        self.output = output_fn
        self.commands = {
            "1": self.list_products,
            "2": self.add_product,
            "3": self.register_user,
            "4": self.login,
            "5": self.post_expert_review,
            "6": self.post_user_review,
            "7": self.view_product_details,
            "8": self.recompute_all,
            "9": self.save,
            "10": self.load,
            "11": self.purchase_products,
            "12": self.list_orders,
            "13": self.export_sales_report,
            "14": self.logout,
        }

    def run(self) -> None:
        self.output("\n=== ExpertCart: Expert-Driven Product Reviews + Purchasing ===\n")
        while True:
            self.show_menu()
            try:
                choice = self.input("Choose: ").strip()
            except (EOFError, KeyboardInterrupt):
                self.output("\nBye")
                return

            if choice == "0":
                self.output("Bye")
                return
            if not self.execute(choice):
                # End of input inside a prompt
                self.output("\nBye")
                return

    def execute(self, choice: str) -> bool:
        """
        Run one menu command, reporting any error.

        Returns:
            False if input ended while the command was prompting
        """
        command = self.commands.get(choice)
        if command is None:
            self.output("Unknown choice")
            return True

        try:
            command()
        except CatalogError as e:
            logger.warning(f"Command {choice} rejected: {e}")
            self.output(f"Error: {e}")
        except (EOFError, KeyboardInterrupt):
            return False
        except Exception as e:
            logger.error(f"Command {choice} failed: {e}", exc_info=True)
            self.output(f"Error: {e}")
        return True

    def show_menu(self) -> None:
        self.output("\n-- MENU --")
        for key, label in MENU:
            self.output(f"{key}) {label}")
        if self.session.current_user is not None:
            self.output(f"Logged in as: {self.session.current_user}")

    def ask(self, prompt: str) -> str:
        return self.input(prompt).strip()

    # Commands

    def list_products(self) -> None:
        products = self.session.catalog.list_products()
        if not products:
            self.output("No products yet")
            return
        for product in products:
            self.output(str(product))

    def add_product(self) -> None:
        self.session.auth.require_capability(Capability.MANAGE_CATALOG)
        sku = self.ask("SKU: ")
        name = self.ask("Name: ")
        brand = self.ask("Brand: ")
        category = self.ask("Category: ")
        description = self.ask("Description: ")
        price = parse_float(self.ask(f"Price (in {settings.CURRENCY}): "), "price")
        product = self.session.catalog.add_product(sku, name, brand, category, description, price)
        self.output(f"Added: {product}")

    def register_user(self) -> None:
        username = self.ask("Username: ")
        password = self.ask("Password: ")
        role = parse_role(self.ask("Role (ADMIN/EXPERT/USER): "))
        domain = self.ask("Expertise domain: ") if role == Role.EXPERT else None
        user = self.session.auth.signup(username, password, role, expertise_domain=domain)
        self.output(f"Registered: {user}")

    def login(self) -> None:
        username = self.ask("Username: ")
        password = self.ask("Password: ")
        user = self.session.auth.login(username, password)
        self.output(f"Logged in as {user}")

    def logout(self) -> None:
        self.session.auth.logout()
        self.output("Logged out")

    def post_expert_review(self) -> None:
        self._post_review(ReviewType.EXPERT)

    def post_user_review(self) -> None:
        self._post_review(ReviewType.USER)

    def _post_review(self, review_type: ReviewType) -> None:
        capability = (
            Capability.POST_EXPERT_REVIEW
            if review_type == ReviewType.EXPERT
            else Capability.POST_USER_REVIEW
        )
        self.session.auth.require_capability(capability)
        product_id = self._prompt_product_id()
        score = parse_int(
            self.ask(f"Score {settings.MIN_SCORE}..{settings.MAX_SCORE}: "), "score"
        )
        body = self.input("Body: ")
        review = self.session.post_review(product_id, score, body, review_type)
        self.output(f"Created: \n{review}")

    def view_product_details(self) -> None:
        product_id = self._prompt_product_id()
        product, expert_reviews, user_reviews = self.session.catalog.product_detail(product_id)
        self.output(f"\n== Product ==\n{product}\nDesc: {product.description}")
        self.output("\n-- Expert Reviews --")
        for review in expert_reviews:
            self.output(str(review))
        self.output("\n-- User Reviews --")
        for review in user_reviews:
            self.output(str(review))

    def recompute_all(self) -> None:
        self.session.scoring.recompute_all()
        self.output("Recomputed")

    def save(self) -> None:
        path = self.ask(f"File path to save [{self.snapshot_path}]: ") or self.snapshot_path
        self.session.save(path)
        self.output(f"Saved to {path}")

    def load(self) -> None:
        path = self.ask(f"File path to load [{self.snapshot_path}]: ") or self.snapshot_path
        self.session.load(path)
        self.output(f"Loaded from {path}")

    def purchase_products(self) -> None:
        self.session.auth.require_capability(Capability.PURCHASE)
        self.list_products()
        self.output(
            "Enter product ids (comma separated). "
            "Repeat an id to buy multiple quantities. Example: 1,1,2"
        )
        product_ids = parse_id_list(self.ask("Product ids: "))
        order, bill, bill_path = self.session.purchase(product_ids)
        self.output(f"\n=== BILL ===\n{bill}\n============\n")
        if bill_path is None:
            self.output(f"Could not save bill for order #{order.id}")
        else:
            self.output(f"Bill saved: {bill_path}")

    def list_orders(self) -> None:
        orders = self.session.my_orders()
        if not orders:
            self.output("No orders yet")
            return
        for order in orders:
            self.output(str(order))
            self.output(f"Bill file: {self.session.storage.bill_path(order.id)}")

    def export_sales_report(self) -> None:
        path = self.session.export_sales_report()
        self.output(f"Sales report saved: {path}")

    def _prompt_product_id(self) -> int:
        self.list_products()
        product_id = parse_int(self.ask("Enter product id: "), "product id")
        # Raises NotFoundError for unknown ids
        self.session.catalog.get_product(product_id)
        return product_id
