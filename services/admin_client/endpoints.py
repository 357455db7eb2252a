# Paths of the admin backend, relative to the configured base URL

LOGIN = "/admin/login"
VALIDATE_TOKEN = "/admin/validate-token"

DASHBOARD = "/admin/dashboard"

PRODUCTS = "/products"
PRODUCTS_ADMIN_ALL = "/products/admin/all"
PRODUCTS_CATEGORIES = "/products/categories/list"
UPLOAD_IMAGES = "/products/upload-images"

DEALERS = "/admin/dealers"

ENQUIRIES_ADMIN_ALL = "/enquiries/admin/all"


def product(product_id: str) -> str:
    return f"{PRODUCTS}/{product_id}"


def dealer_details(dealer_id: str) -> str:
    return f"{DEALERS}/{dealer_id}"


def approve_dealer(dealer_id: str) -> str:
    return f"{DEALERS}/{dealer_id}/approve"


def reject_dealer(dealer_id: str) -> str:
    return f"{DEALERS}/{dealer_id}/reject"


def enquiry_details(enquiry_id: str) -> str:
    return f"/enquiries/admin/{enquiry_id}"


def approve_enquiry(enquiry_id: str) -> str:
    return f"/enquiries/admin/{enquiry_id}/approve"


def reject_enquiry(enquiry_id: str) -> str:
    return f"/enquiries/admin/{enquiry_id}/reject"


def update_enquiry_status(enquiry_id: str) -> str:
    return f"/enquiries/admin/{enquiry_id}/status"
