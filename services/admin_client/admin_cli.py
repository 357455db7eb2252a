#!/usr/bin/env python3
"""
Admin CLI for the furniture distribution backend.
Provides an interactive menu for staff to review the dashboard, manage the
product catalog, and process dealer registrations and product enquiries.
"""

import getpass
import logging
from typing import Any, Dict, List, Optional

from .config import ClientConfig
from .bootstrap import create_session_manager
from .exceptions import AdminAPIError
from .notifications import console_notifier
from .schemas import DEALER_STATUSES, ENQUIRY_STATUSES, DashboardStats, Page, ProductDraft
from .session import SessionManager, SessionStatus


def _split_csv(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def _record_id(record: Dict[str, Any]) -> str:
    return str(record.get("_id", "?"))


class AdminCLI:
    """Interactive CLI for admins"""

    def __init__(self, manager: SessionManager):
        self.manager = manager
        self.api_client = manager.api_client
        # Products from the last listing, by id, so they can be edited
        self.listed_products: Dict[str, Dict[str, Any]] = {}

    def display_authentication_menu(self):
        """Display main menu for logged-out users"""
        print("\n" + "=" * 50)
        print("ADMIN - Furniture Distribution")
        print("=" * 50)
        print("1. Login")
        print("2. Exit")
        print("=" * 50)

    def display_main_menu(self):
        """Display menu for logged-in admins"""
        admin = self.manager.state.admin
        print("\n" + "=" * 50)
        if admin:
            print(f"Welcome {admin.display_name}")
        print("=" * 50)
        print("1. Dashboard")
        print("2. List Products")
        print("3. Create Product")
        print("4. Update Product")
        print("5. Delete Product")
        print("6. List Dealers")
        print("7. View Dealer Details")
        print("8. Approve Dealer")
        print("9. Reject Dealer")
        print("10. List Enquiries")
        print("11. View Enquiry Details")
        print("12. Approve Enquiry")
        print("13. Reject Enquiry")
        print("14. Mark Enquiry Under Process")
        print("15. Test API Connection")
        print("16. Logout")
        print("=" * 50)

    def handle_login(self):
        """Handle admin login"""
        print("\n--- Login ---")
        username = input("Enter username: ").strip()
        if not username:
            print("Error: Username cannot be empty")
            return

        password = getpass.getpass("Enter password: ").strip()
        if not password:
            print("Error: Password cannot be empty")
            return

        # Success and failure are both reported through the notifier
        self.manager.login(username, password)

    def handle_logout(self):
        """Handle admin logout"""
        self.manager.logout()
        print("Logged out.")

    def handle_dashboard(self):
        stats: DashboardStats = self.api_client.get_dashboard()
        print("\n--- Dashboard ---")
        print(f"Total Dealers: {stats.total_dealers} (Pending: {stats.pending_dealers})")
        print(f"Total Products: {stats.total_products}")
        print(f"Total Enquiries: {stats.total_enquiries} (Pending: {stats.pending_enquiries}, "
              f"Approved: {stats.approved_enquiries}, Closed: {stats.closed_enquiries})")

        print("\nRecent Dealers:")
        if not stats.recent_dealers:
            print("  No dealers yet")
        for dealer in stats.recent_dealers:
            print(f"  {dealer.get('businessName') or dealer.get('name', '?')} [{dealer.get('status', '?')}]")

        print("\nRecent Enquiries:")
        if not stats.recent_enquiries:
            print("  No enquiries yet")
        for enquiry in stats.recent_enquiries:
            print(f"  {_record_id(enquiry)} [{enquiry.get('status', '?')}]")

    def _prompt_page(self) -> int:
        text = input("Page (default 1): ").strip()
        return int(text) if text else 1

    def _prompt_status(self, allowed) -> Optional[str]:
        text = input(f"Status filter (all/{'/'.join(allowed)}, default all): ").strip() or "all"
        return None if text == "all" else text

    def _print_page_footer(self, page: Page):
        print(f"Page {page.page} of {page.total_pages}")

    def handle_list_products(self):
        page_number = self._prompt_page()
        search = input("Search (optional): ").strip() or None
        category = input("Category (optional): ").strip() or None
        page = self.api_client.list_products(page=page_number, search=search, category=category)

        if not page.items:
            print("No products found")
            return

        print("\n--- Products ---")
        self.listed_products = {}
        for i, product in enumerate(page.items, start=1):
            self.listed_products[_record_id(product)] = product
            print(f"{i}. Product ID: {_record_id(product)}")
            print(f"  Code: {product.get('productCode', '')}")
            print(f"  Name: {product.get('productName', '')}")
            print(f"  Category: {product.get('category', '')}")
            print(f"  Price: {product.get('price', '')}")
            print(f"  Stock: {product.get('stockQuantity', '')}")
            print()
        self._print_page_footer(page)

    def _fill_product_draft(self, draft: ProductDraft):
        """Prompt for each form field; an empty answer keeps the current value."""
        categories = self.api_client.list_categories()
        if categories:
            print(f"Categories: {', '.join(categories)}")

        draft.product_code = input(f"Product code [{draft.product_code}]: ").strip() or draft.product_code
        draft.product_name = input(f"Product name [{draft.product_name}]: ").strip() or draft.product_name
        draft.category = input(f"Category [{draft.category}]: ").strip() or draft.category
        draft.description = input(f"Description [{draft.description}]: ").strip() or draft.description

        price = input(f"Price [{draft.price if draft.price is not None else ''}]: ").strip()
        if price:
            draft.price = float(price)
        stock = input(f"Stock quantity [{draft.stock_quantity if draft.stock_quantity is not None else ''}]: ").strip()
        if stock:
            draft.stock_quantity = int(stock)
        draft.warranty = input(f"Warranty [{draft.warranty}]: ").strip() or draft.warranty

        for color in _split_csv(input("Add colors (comma-separated, optional): ")):
            draft.add_color(color)
        for spec in _split_csv(input("Add specifications as key=value (comma-separated, optional): ")):
            key, sep, value = spec.partition("=")
            if not sep:
                raise ValueError(f"Specification '{spec}' is not key=value")
            draft.add_specification(key, value)

        image_paths = _split_csv(input("Image files to upload (comma-separated, optional): "))
        if image_paths:
            urls = self.api_client.upload_images(image_paths)
            draft.images.extend(urls)
            print("Images uploaded successfully")

    def handle_create_product(self):
        print("\n--- Create Product ---")
        draft = ProductDraft()
        self._fill_product_draft(draft)
        self.api_client.create_product(draft)
        print("Product created successfully")

    def handle_update_product(self):
        print("\n--- Update Product ---")
        product_id = input("Product ID: ").strip()
        product = self.listed_products.get(product_id)
        if product is None:
            print("Error: List the products first and pick an ID from that listing")
            return
        draft = ProductDraft.from_record(product)
        self._fill_product_draft(draft)
        self.api_client.update_product(product_id, draft)
        print("Product updated successfully")

    def handle_delete_product(self):
        product_id = input("Product ID: ").strip()
        if not product_id:
            print("Error: Product ID cannot be empty")
            return
        self.api_client.delete_product(product_id)
        self.listed_products.pop(product_id, None)
        print("Product deleted successfully")

    def handle_list_dealers(self):
        page_number = self._prompt_page()
        status = self._prompt_status(DEALER_STATUSES)
        search = input("Search (optional): ").strip() or None
        page = self.api_client.list_dealers(page=page_number, status=status, search=search)

        if not page.items:
            print("No dealers found")
            return

        print("\n--- Dealers ---")
        for i, dealer in enumerate(page.items, start=1):
            print(f"{i}. Dealer ID: {_record_id(dealer)}")
            print(f"  Business: {dealer.get('businessName', '')}")
            print(f"  Contact: {dealer.get('name', '')} {dealer.get('email', '')}")
            print(f"  Status: {dealer.get('status', '')}")
            print()
        self._print_page_footer(page)

    def handle_dealer_details(self):
        dealer = self.api_client.get_dealer(input("Dealer ID: ").strip())
        print("\n--- Dealer Details ---")
        for key, value in dealer.items():
            if key != "enquiries":
                print(f"  {key}: {value}")
        for enquiry in dealer.get("enquiries") or []:
            print(f"  Enquiry {_record_id(enquiry)} [{enquiry.get('status', '?')}]")

    def handle_approve_dealer(self):
        self.api_client.approve_dealer(input("Dealer ID: ").strip())
        print("Dealer approved successfully")

    def handle_reject_dealer(self):
        dealer_id = input("Dealer ID: ").strip()
        reason = input("Reason for rejection: ").strip()
        if not reason:
            print("Error: Please provide a reason for rejection")
            return
        self.api_client.reject_dealer(dealer_id, reason)
        print("Dealer rejected successfully")

    def handle_list_enquiries(self):
        page_number = self._prompt_page()
        status = self._prompt_status(ENQUIRY_STATUSES)
        page = self.api_client.list_enquiries(page=page_number, status=status)

        if not page.items:
            print("No enquiries found")
            return

        print("\n--- Enquiries ---")
        for i, enquiry in enumerate(page.items, start=1):
            print(f"{i}. Enquiry ID: {_record_id(enquiry)}")
            print(f"  Product: {enquiry.get('productName', '')}")
            print(f"  Quantity: {enquiry.get('quantity', '')}")
            print(f"  Status: {enquiry.get('status', '')}")
            print()
        self._print_page_footer(page)

    def handle_enquiry_details(self):
        enquiry = self.api_client.get_enquiry(input("Enquiry ID: ").strip())
        print("\n--- Enquiry Details ---")
        for key, value in enquiry.items():
            print(f"  {key}: {value}")

    def handle_approve_enquiry(self):
        self.api_client.approve_enquiry(input("Enquiry ID: ").strip())
        print("Enquiry approved successfully")

    def handle_reject_enquiry(self):
        enquiry_id = input("Enquiry ID: ").strip()
        reason = input("Reason for rejection: ").strip()
        if not reason:
            print("Error: Please provide a reason for rejection")
            return
        self.api_client.reject_enquiry(enquiry_id, reason)
        print("Enquiry rejected successfully")

    def handle_under_process(self):
        self.api_client.mark_enquiry_under_process(input("Enquiry ID: ").strip())
        print("Enquiry marked as under process")

    def handle_test_connection(self):
        print(self.api_client.check_connection())

    def run(self):
        """Main CLI loop"""
        print("\nAdmin Client initialized successfully!")
        print(f"API Server: {self.api_client.base_url}")

        if self.manager.restore_session() is SessionStatus.AUTHENTICATED:
            print("Restored previous session.")

        main_actions = {
            "1": self.handle_dashboard,
            "2": self.handle_list_products,
            "3": self.handle_create_product,
            "4": self.handle_update_product,
            "5": self.handle_delete_product,
            "6": self.handle_list_dealers,
            "7": self.handle_dealer_details,
            "8": self.handle_approve_dealer,
            "9": self.handle_reject_dealer,
            "10": self.handle_list_enquiries,
            "11": self.handle_enquiry_details,
            "12": self.handle_approve_enquiry,
            "13": self.handle_reject_enquiry,
            "14": self.handle_under_process,
            "15": self.handle_test_connection,
            "16": self.handle_logout,
        }

        while True:
            try:
                if not self.manager.session.is_logged_in():
                    self.display_authentication_menu()
                    choice = input("Enter your choice: ").strip()

                    if choice == "1":
                        self.handle_login()
                    elif choice == "2":
                        print("\nGoodbye!")
                        break
                    else:
                        print("Invalid choice. Please try again.")

                else:
                    self.display_main_menu()
                    choice = input("Enter your choice: ").strip()

                    action = main_actions.get(choice)
                    if action is None:
                        print("Invalid choice. Please try again.")
                    else:
                        action()

            except KeyboardInterrupt:
                print("\n\nExiting...")
                break
            except AdminAPIError as e:
                # A 401 has already ended the session; the loop falls back to the login menu
                print(f"Error: {e.message}")
            except (ValueError, OSError) as e:
                print(f"Error: Invalid input - {e}")


def main():
    """Entry point"""
    config = ClientConfig.from_env()
    logging.basicConfig(level=config.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    manager = create_session_manager(config, notify=console_notifier)
    cli = AdminCLI(manager)
    try:
        cli.run()
    finally:
        manager.api_client.close()


if __name__ == "__main__":
    main()
