"""
Response schemas for the admin backend.

Each endpoint has exactly one accepted payload shape. The decode_* functions
turn a parsed JSON body into typed objects and raise ResponseDecodeError when
the body does not match, instead of guessing at alternative shapes.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .exceptions import ResponseDecodeError

DEALER_STATUSES = ("pending", "approved", "rejected")
ENQUIRY_STATUSES = ("pending", "under_process", "approved", "rejected", "closed")

RECENT_LIMIT = 5


def _require_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ResponseDecodeError(f"Malformed response: {what} must be an object", payload=value)
    return value


def _require_list(value: Any, what: str) -> List[Any]:
    if not isinstance(value, list):
        raise ResponseDecodeError(f"Malformed response: {what} must be a list", payload=value)
    return value


def _require_int(value: Any, what: str) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseDecodeError(f"Malformed response: {what} must be an integer", payload=value)
    return value


@dataclass(frozen=True)
class Admin:
    """The authenticated staff member (the session principal)"""
    username: str
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    # Full server record, kept so it can be persisted and restored verbatim
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.username

    @classmethod
    def from_payload(cls, payload: Any) -> "Admin":
        record = _require_dict(payload, "admin")
        username = record.get("username")
        if not isinstance(username, str) or not username:
            raise ResponseDecodeError("Malformed response: admin.username is missing", payload=payload)

        def optional_str(key: str) -> Optional[str]:
            value = record.get(key)
            return str(value) if value is not None else None

        return cls(
            username=username,
            id=optional_str("_id"),
            name=optional_str("name"),
            email=optional_str("email"),
            role=optional_str("role"),
            raw=dict(record),
        )

    def to_payload(self) -> Dict[str, Any]:
        if self.raw:
            return dict(self.raw)
        payload = {"username": self.username}
        for key, value in (("_id", self.id), ("name", self.name), ("email", self.email), ("role", self.role)):
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True)
class LoginResult:
    token: str
    admin: Admin


def decode_login(payload: Any) -> LoginResult:
    """Decode {token, admin}"""
    body = _require_dict(payload, "login response")
    token = body.get("token")
    if not isinstance(token, str) or not token:
        raise ResponseDecodeError("Malformed response: login token is missing", payload=payload)
    return LoginResult(token=token, admin=Admin.from_payload(body.get("admin")))


def decode_validation(payload: Any) -> Optional[Admin]:
    """
    Decode {success, data: {admin}}.

    Returns None when the server answers success=false, i.e. the token is
    known to be invalid.
    """
    body = _require_dict(payload, "validation response")
    success = body.get("success")
    if not isinstance(success, bool):
        raise ResponseDecodeError("Malformed response: success flag is missing", payload=payload)
    if not success:
        return None
    data = _require_dict(body.get("data"), "data")
    return Admin.from_payload(data.get("admin"))


@dataclass
class Page:
    """One page of a paginated admin listing"""
    items: List[Dict[str, Any]]
    total_pages: int
    page: int = 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def decode_page(payload: Any, key: str, page: int = 1) -> Page:
    """Decode {<key>: [...], totalPages}"""
    body = _require_dict(payload, f"{key} response")
    items = _require_list(body.get(key), key)
    for item in items:
        _require_dict(item, f"{key} entry")
    return Page(items=items, total_pages=_require_int(body.get("totalPages"), "totalPages"), page=page)


def decode_record(payload: Any, key: Optional[str] = None) -> Dict[str, Any]:
    """Decode a single record, either the whole body or the body's `key` member."""
    body = _require_dict(payload, "response")
    if key is None:
        return body
    return _require_dict(body.get(key), key)


def decode_categories(payload: Any) -> List[str]:
    body = _require_dict(payload, "categories response")
    categories = _require_list(body.get("categories"), "categories")
    return [str(category) for category in categories]


def decode_upload(payload: Any) -> List[str]:
    """Decode {urls: [...]}"""
    body = _require_dict(payload, "upload response")
    urls = _require_list(body.get("urls"), "urls")
    if not all(isinstance(url, str) for url in urls):
        raise ResponseDecodeError("Malformed response: urls must be strings", payload=payload)
    return urls


def _created_at(record: Dict[str, Any]) -> datetime:
    value = record.get("createdAt")
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    # Records without a usable timestamp sort last
    return datetime.min.replace(tzinfo=timezone.utc)


def most_recent(records: List[Dict[str, Any]], limit: int = RECENT_LIMIT) -> List[Dict[str, Any]]:
    return sorted(records, key=_created_at, reverse=True)[:limit]


@dataclass
class DashboardStats:
    total_dealers: int = 0
    pending_dealers: int = 0
    total_products: int = 0
    total_enquiries: int = 0
    pending_enquiries: int = 0
    approved_enquiries: int = 0
    closed_enquiries: int = 0
    recent_dealers: List[Dict[str, Any]] = field(default_factory=list)
    recent_enquiries: List[Dict[str, Any]] = field(default_factory=list)


def decode_dashboard(payload: Any) -> DashboardStats:
    """Decode {dashboardStats: {dealers, products, enquiries, recentDealers, recentEnquiries}}"""
    body = _require_dict(payload, "dashboard response")
    stats = _require_dict(body.get("dashboardStats"), "dashboardStats")

    def count(section: str, key: str) -> int:
        block = stats.get(section)
        if block is None:
            return 0
        value = _require_dict(block, section).get(key, 0)
        return _require_int(value, f"{section}.{key}")

    def recent(key: str) -> List[Dict[str, Any]]:
        records = _require_list(stats.get(key, []), key)
        return most_recent([_require_dict(record, key) for record in records])

    return DashboardStats(
        total_dealers=count("dealers", "total"),
        pending_dealers=count("dealers", "pending"),
        total_products=count("products", "total"),
        total_enquiries=count("enquiries", "total"),
        pending_enquiries=count("enquiries", "pending"),
        approved_enquiries=count("enquiries", "approved"),
        closed_enquiries=count("enquiries", "closed"),
        recent_dealers=recent("recentDealers"),
        recent_enquiries=recent("recentEnquiries"),
    )


@dataclass
class ProductDraft:
    """The product form sent on create and update"""
    product_code: str = ""
    product_name: str = ""
    category: str = ""
    description: str = ""
    price: Optional[float] = None
    colors: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    specifications: Dict[str, str] = field(default_factory=dict)
    warranty: str = ""
    stock_quantity: Optional[int] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ProductDraft":
        """Prefill the form from an existing product record."""
        return cls(
            product_code=record.get("productCode") or "",
            product_name=record.get("productName") or "",
            category=record.get("category") or "",
            description=record.get("description") or "",
            price=record.get("price"),
            colors=list(record.get("colors") or []),
            images=list(record.get("images") or []),
            specifications=dict(record.get("specifications") or {}),
            warranty=record.get("warranty") or "",
            stock_quantity=record.get("stockQuantity"),
        )

    def add_color(self, color: str):
        color = color.strip()
        if color:
            self.colors.append(color)

    def add_specification(self, key: str, value: str):
        key, value = key.strip(), value.strip()
        if key and value:
            self.specifications[key] = value

    def to_payload(self) -> Dict[str, Any]:
        return {
            "productCode": self.product_code,
            "productName": self.product_name,
            "category": self.category,
            "description": self.description,
            "price": self.price,
            "colors": list(self.colors),
            "images": list(self.images),
            "specifications": dict(self.specifications),
            "warranty": self.warranty,
            "stockQuantity": self.stock_quantity,
        }
