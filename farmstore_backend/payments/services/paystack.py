# payments/services/paystack.py

"""
PAYSTACK GATEWAY CLIENT

- initialize: opens a hosted payment session (amount in kobo)
- verify: authoritative status of a reference (safe to repeat)
- signature: HMAC-SHA512 of the RAW request body with the secret key

Every call is bounded by PAYMENTS["PAYSTACK"]["TIMEOUT"]; failures raise
PaystackError and never return partial data.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import socket
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from django.conf import settings

PAYSTACK_BASE = "https://api.paystack.co"
DEFAULT_TIMEOUT = 25


class PaystackError(RuntimeError):
    """Gateway unreachable, timed out, or rejected the request."""


def _paystack_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = (payments.get("PAYSTACK") or {}) if isinstance(payments, dict) else {}
    return cfg if isinstance(cfg, dict) else {}


def _get_secret_key() -> str:
    sk = (_paystack_cfg().get("SECRET_KEY") or "").strip()
    if not sk:
        raise PaystackError(
            "PAYSTACK SECRET_KEY is not configured. "
            "Expected settings.PAYMENTS['PAYSTACK']['SECRET_KEY']."
        )
    return sk


def _timeout() -> int:
    return int(_paystack_cfg().get("TIMEOUT") or DEFAULT_TIMEOUT)


def to_kobo(amount) -> int:
    try:
        naira = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError("amount must be a valid Decimal") from exc
    kobo = (naira * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(kobo)


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json_or_text(raw: str) -> dict[str, Any]:
    raw = raw or ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {"kind": "text", "raw": raw}
    if isinstance(parsed, dict):
        return {"kind": "json", "json": parsed, "raw": raw}
    return {"kind": "json_non_object", "json": parsed, "raw": raw}


def _request_json(method: str, url: str, *, body: dict | None = None) -> dict[str, Any]:
    sk = _get_secret_key()
    data = None
    if body is not None:
        data = json.dumps(body, ensure_ascii=False).encode("utf-8")

    req = Request(
        url,
        data=data,
        headers={
            "Authorization": f"Bearer {sk}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=_timeout()) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
            parsed_any = _parse_json_or_text(raw)
    except HTTPError as e:
        raw = ""
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw = ""
        parsed_any = _parse_json_or_text(raw)

        if parsed_any.get("kind") == "json":
            j = parsed_any.get("json") or {}
            msg = j.get("message") or j.get("error") or "Paystack rejected request"
            raise PaystackError(f"Paystack HTTPError: {e.code} {msg}") from e

        preview = _safe_preview(parsed_any.get("raw") or str(e))
        raise PaystackError(f"Paystack HTTPError: {e.code} {preview}") from e
    except (socket.timeout, TimeoutError) as e:
        raise PaystackError(f"Paystack timed out after {_timeout()}s") from e
    except URLError as e:
        raise PaystackError(f"Paystack URLError: {e}") from e

    if parsed_any.get("kind") != "json":
        raise PaystackError(
            f"Paystack returned non-JSON: {_safe_preview(parsed_any.get('raw') or '')}"
        )

    return parsed_any.get("json") or {}


def paystack_initialize_transaction(
    *,
    email: str,
    amount,
    reference: str,
    currency: str = "",
    callback_url: str = "",
    metadata: dict | None = None,
) -> dict:
    """Returns {"authorization_url", "access_code", "reference"}."""
    payload: dict = {
        "email": str(email).strip(),
        "amount": to_kobo(amount),
        "reference": str(reference).strip(),
    }

    if currency:
        payload["currency"] = str(currency).strip().upper()

    if callback_url:
        payload["callback_url"] = str(callback_url).strip()

    if metadata:
        payload["metadata"] = metadata

    parsed = _request_json("POST", f"{PAYSTACK_BASE}/transaction/initialize", body=payload)

    if not parsed.get("status"):
        raise PaystackError(parsed.get("message") or "Paystack init rejected")

    data = parsed.get("data") or {}
    if not data.get("authorization_url"):
        raise PaystackError("Paystack init returned no authorization_url")
    return data


def verify_paystack_signature(*, raw_body: bytes, signature: str | None) -> bool:
    if not signature:
        return False
    try:
        sk = _get_secret_key().encode("utf-8")
    except PaystackError:
        return False
    computed = hmac.new(sk, raw_body or b"", hashlib.sha512).hexdigest()
    return hmac.compare_digest(computed, str(signature).strip())


def verify_paystack_transaction(*, reference: str) -> dict:
    """
    Returns:
      {ok, status, amount (kobo int|None), currency, reference,
       gateway_response, channel, paid_at, provider_reference, raw}
    """
    ref = str(reference or "").strip()
    if not ref:
        raise ValueError("reference is required")

    raw = _request_json("GET", f"{PAYSTACK_BASE}/transaction/verify/{quote(ref, safe='')}")

    ok = bool(raw.get("status"))
    data = raw.get("data") or {}

    amount = data.get("amount")
    try:
        amount_int = int(amount) if amount is not None else None
    except (TypeError, ValueError):
        amount_int = None

    currency = data.get("currency")
    return {
        "ok": ok,
        "status": str(data.get("status") or "").strip().lower(),
        "amount": amount_int,
        "currency": str(currency) if currency is not None else None,
        "reference": ref,
        "gateway_response": str(data.get("gateway_response") or ""),
        "channel": str(data.get("channel") or ""),
        "paid_at": data.get("paid_at") or data.get("paidAt"),
        "provider_reference": str(data.get("id") or ""),
        "raw": raw,
    }
