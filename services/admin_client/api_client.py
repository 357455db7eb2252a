# API client for communicating with the furniture admin backend using REST
import logging
import os
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from . import endpoints
from .config import DEFAULT_TIMEOUT
from .exceptions import ResponseDecodeError, TransportError, error_from_response
from .schemas import (
    DEALER_STATUSES,
    ENQUIRY_STATUSES,
    Admin,
    DashboardStats,
    LoginResult,
    Page,
    ProductDraft,
    decode_categories,
    decode_dashboard,
    decode_login,
    decode_page,
    decode_record,
    decode_upload,
    decode_validation,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
UNDER_PROCESS_NOTE = "Enquiry is under process"


@dataclass(frozen=True)
class Call:
    """Describes the API call a request or response belongs to, for hooks"""
    method: str
    endpoint: str
    # Carries the admin's bearer token
    authenticated: bool = True
    # The token-introspection call; its 401s mean "invalid token", not "session expired"
    introspection: bool = False


RequestHook = Callable[[Call, requests.PreparedRequest], None]
ResponseHook = Callable[[Call, requests.Response], None]


def _status_param(status: Optional[str], allowed: Iterable[str]) -> Optional[str]:
    if status is None or status == "all":
        return None
    if status not in allowed:
        raise ValueError(f"Unknown status filter: {status}")
    return status


class AdminAPIClient:
    """
    Client for making REST API calls to the admin backend.

    Authorization is not handled here. Callers compose it in through request
    hooks (run on the prepared request immediately before it is sent) and
    response hooks (run on every response before it is checked for errors).
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT,
                 request_hooks: Iterable[RequestHook] = (),
                 response_hooks: Iterable[ResponseHook] = (),
                 http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = http or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self._request_hooks: List[RequestHook] = list(request_hooks)
        self._response_hooks: List[ResponseHook] = list(response_hooks)

    def add_request_hook(self, hook: RequestHook):
        self._request_hooks.append(hook)

    def add_response_hook(self, hook: ResponseHook):
        self._response_hooks.append(hook)

    def close(self):
        self.session.close()

    def _request(self, call: Call, *, params: Optional[Dict[str, Any]] = None,
                 json: Any = None, files: Any = None,
                 headers: Optional[Dict[str, str]] = None) -> Any:
        """Send one request through the hooks and return the decoded JSON body."""
        # Drop unset query parameters instead of sending "None"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        request = requests.Request(
            call.method,
            f"{self.base_url}{call.endpoint}",
            params=params,
            json=json,
            files=files,
            headers=headers,
        )
        prepared = self.session.prepare_request(request)
        for hook in self._request_hooks:
            hook(call, prepared)

        try:
            response = self.session.send(prepared, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", call.method, call.endpoint, e)
            raise TransportError(f"Connection error: {e}") from e

        logger.debug("%s %s -> %s", call.method, call.endpoint, response.status_code)
        for hook in self._response_hooks:
            hook(call, response)

        if not response.ok:
            raise error_from_response(response)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError("Malformed response: body is not JSON",
                                      status_code=response.status_code) from e

    # Authentication

    def login(self, username: str, password: str) -> LoginResult:
        """Function to send REST request to log an admin in and obtain a bearer token"""
        data = self._request(
            Call("POST", endpoints.LOGIN, authenticated=False),
            json={"username": username, "password": password},
        )
        return decode_login(data)

    def validate_token(self, token: str) -> Optional[Admin]:
        """
        Function to send REST request to the token-introspection endpoint.

        The token is attached explicitly, so this works before any session
        exists. Returns None when the server answers that the token is invalid.
        """
        data = self._request(
            Call("GET", endpoints.VALIDATE_TOKEN, introspection=True),
            headers={"Authorization": f"Bearer {token}"},
        )
        return decode_validation(data)

    # Dashboard

    def get_dashboard(self) -> DashboardStats:
        """Function to send REST request to retrieve the dashboard summary"""
        return decode_dashboard(self._request(Call("GET", endpoints.DASHBOARD)))

    def check_connection(self) -> str:
        """Probe the dashboard endpoint; returns a status line, raises AdminAPIError on failure"""
        self._request(Call("GET", endpoints.DASHBOARD))
        return "API connection successful"

    # Products

    def list_products(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
                      search: Optional[str] = None, category: Optional[str] = None) -> Page:
        """Function to send REST request to retrieve one page of the product catalog"""
        data = self._request(
            Call("GET", endpoints.PRODUCTS_ADMIN_ALL),
            params={"page": page, "limit": limit, "search": search or None, "category": category or None},
        )
        return decode_page(data, "products", page)

    def list_categories(self) -> List[str]:
        return decode_categories(self._request(Call("GET", endpoints.PRODUCTS_CATEGORIES)))

    def create_product(self, draft: ProductDraft) -> Dict[str, Any]:
        """Function to send REST request to create a product"""
        return decode_record(self._request(Call("POST", endpoints.PRODUCTS), json=draft.to_payload()))

    def update_product(self, product_id: str, draft: ProductDraft) -> Dict[str, Any]:
        """Function to send REST request to update an existing product"""
        return decode_record(self._request(Call("PUT", endpoints.product(product_id)), json=draft.to_payload()))

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        return decode_record(self._request(Call("DELETE", endpoints.product(product_id))))

    def upload_images(self, paths: Iterable[str]) -> List[str]:
        """
        Function to send REST request to upload product images.

        Args:
            paths: local image files, sent as repeated multipart "images" fields

        Returns the hosted URLs in upload order.
        """
        paths = list(paths)
        if not paths:
            return []
        with ExitStack() as stack:
            files = [
                ("images", (os.path.basename(path), stack.enter_context(open(path, "rb"))))
                for path in paths
            ]
            data = self._request(Call("POST", endpoints.UPLOAD_IMAGES), files=files)
        return decode_upload(data)

    # Dealers

    def list_dealers(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
                     status: Optional[str] = None, search: Optional[str] = None) -> Page:
        """Function to send REST request to retrieve one page of dealer registrations"""
        data = self._request(
            Call("GET", endpoints.DEALERS),
            params={
                "page": page,
                "limit": limit,
                "status": _status_param(status, DEALER_STATUSES),
                "search": search or None,
            },
        )
        return decode_page(data, "dealers", page)

    def get_dealer(self, dealer_id: str) -> Dict[str, Any]:
        return decode_record(self._request(Call("GET", endpoints.dealer_details(dealer_id))))

    def approve_dealer(self, dealer_id: str) -> Dict[str, Any]:
        """Function to send REST request to approve a dealer registration"""
        return decode_record(self._request(Call("PUT", endpoints.approve_dealer(dealer_id)), json={}))

    def reject_dealer(self, dealer_id: str, reason: str) -> Dict[str, Any]:
        """Function to send REST request to reject a dealer registration"""
        return decode_record(self._request(Call("PUT", endpoints.reject_dealer(dealer_id)), json={"reason": reason}))

    # Enquiries

    def list_enquiries(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
                       status: Optional[str] = None) -> Page:
        """Function to send REST request to retrieve one page of product enquiries"""
        data = self._request(
            Call("GET", endpoints.ENQUIRIES_ADMIN_ALL),
            params={"page": page, "limit": limit, "status": _status_param(status, ENQUIRY_STATUSES)},
        )
        return decode_page(data, "enquiries", page)

    def get_enquiry(self, enquiry_id: str) -> Dict[str, Any]:
        return decode_record(self._request(Call("GET", endpoints.enquiry_details(enquiry_id))), "enquiry")

    def approve_enquiry(self, enquiry_id: str) -> Dict[str, Any]:
        return decode_record(self._request(Call("PUT", endpoints.approve_enquiry(enquiry_id))))

    def reject_enquiry(self, enquiry_id: str, notes: str) -> Dict[str, Any]:
        """Function to send REST request to reject an enquiry with the admin's notes"""
        return decode_record(self._request(Call("PUT", endpoints.reject_enquiry(enquiry_id)), json={"adminNotes": notes}))

    def mark_enquiry_under_process(self, enquiry_id: str, notes: str = UNDER_PROCESS_NOTE) -> Dict[str, Any]:
        """Function to send REST request to move an enquiry to under_process"""
        return decode_record(self._request(
            Call("PUT", endpoints.update_enquiry_status(enquiry_id)),
            json={"status": "under_process", "adminNotes": notes},
        ))
