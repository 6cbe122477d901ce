"""
Razorpay REST client

Thin wrapper around the provider's Orders API. The client is constructed
explicitly and passed to whoever needs it; its HTTP session lives as long
as the client does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests
from django.conf import settings

from shared.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderOrder:
    """Order as returned by the provider. ``amount`` is in minor units."""

    id: str
    amount: int
    currency: str
    receipt: str = ''
    status: str = ''
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


class RazorpayClient:
    """Client for the Razorpay Orders API using HTTP basic auth."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = 'https://api.razorpay.com/v1/',
        timeout: float = 15,
        session: requests.Session | None = None,
    ):
        self.key_id = key_id or ''
        self.key_secret = key_secret or ''
        self.base_url = base_url if base_url.endswith('/') else f'{base_url}/'
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(cls, session: requests.Session | None = None) -> 'RazorpayClient':
        return cls(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            base_url=settings.RAZORPAY_API_BASE_URL,
            timeout=settings.RAZORPAY_TIMEOUT,
            session=session,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def ensure_configured(self) -> None:
        if not self.is_configured:
            logger.error("Razorpay credentials not configured")
            raise ConfigurationError("Razorpay credentials not configured")

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({'Accept': 'application/json'})
        return self._session

    def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str,
        notes: dict[str, str] | None = None,
    ) -> ProviderOrder:
        """
        Create a provider order.

        Args:
            amount_minor: Amount in the currency's minor unit (paise for INR)
            currency: ISO currency code
            receipt: Our reference for the order, the booking id
            notes: Free-form key/values stored on the order

        Raises:
            ConfigurationError: credentials are missing; no request is sent
            UpstreamError: network failure, non-2xx answer or unusable body
        """
        self.ensure_configured()

        payload = {
            'amount': amount_minor,
            'currency': currency,
            'receipt': receipt,
            'notes': notes or {},
        }

        try:
            response = self.session.post(
                f'{self.base_url}orders',
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"Razorpay order request for receipt {receipt} failed: {exc}")
            raise UpstreamError(f"Provider request failed: {exc}") from exc

        if not response.ok:
            logger.error(
                f"Razorpay order creation failed for receipt {receipt}: "
                f"HTTP {response.status_code} {response.text[:500]}"
            )
            raise UpstreamError(f"Provider answered HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            logger.error(f"Razorpay returned a non-JSON order body for receipt {receipt}")
            raise UpstreamError("Provider returned an unreadable order") from exc

        order_id = data.get('id') if isinstance(data, dict) else None
        if not order_id:
            logger.error(f"Razorpay order body for receipt {receipt} has no id: {data}")
            raise UpstreamError("Provider returned an order without id")

        logger.info(f"Razorpay order {order_id} created for receipt {receipt}")
        return ProviderOrder(
            id=order_id,
            amount=int(data.get('amount', amount_minor)),
            currency=data.get('currency', currency),
            receipt=data.get('receipt', receipt) or '',
            status=data.get('status', '') or '',
            raw=data,
        )

    def close(self) -> None:
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
