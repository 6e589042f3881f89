#!/usr/bin/env python3
"""
Exercise the STK push API end-to-end: initiate, simulate the gateway callback, poll.

Start the API first (in another terminal), in mock mode:
  INTEGRATIONS_MODE=mock uvicorn src.api.main:app --host 127.0.0.1 --port 3000

Then run this script:
  python scripts/test_stk_push_api.py
  python scripts/test_stk_push_api.py --phone 254700000000 --amount 10.4 --result-code 1032

With a real gateway configured, pass --no-callback and complete the prompt on the phone.
"""

from __future__ import annotations

import argparse
import math
import sys
import time
from typing import Any, Dict


import requests


def post_json(url: str, data: Dict[str, Any], timeout: int = 30) -> Dict[str, Any]:
    r = requests.post(url, json=data, timeout=timeout)
    r.raise_for_status()
    return r.json()


def get_json(url: str, params: Dict[str, Any], timeout: int = 30) -> Dict[str, Any]:
    r = requests.get(url, params=params, timeout=timeout)
    r.raise_for_status()
    return r.json()


def build_callback(checkout_id: str, result_code: int, amount: int, phone: str) -> Dict[str, Any]:
    callback: Dict[str, Any] = {
        "MerchantRequestID": "script-merchant-request",
        "CheckoutRequestID": checkout_id,
        "ResultCode": result_code,
        "ResultDesc": "The service request is processed successfully."
        if result_code == 0
        else "Request cancelled by user" if result_code == 1032 else "The balance is insufficient for the transaction",
    }
    if result_code == 0:
        callback["CallbackMetadata"] = {
            "Item": [
                {"Name": "Amount", "Value": amount},
                {"Name": "MpesaReceiptNumber", "Value": "SCRIPT0001"},
                {"Name": "TransactionDate", "Value": int(time.strftime("%Y%m%d%H%M%S"))},
                {"Name": "PhoneNumber", "Value": int(phone)},
            ]
        }
    return {"Body": {"stkCallback": callback}}


def main() -> int:
    parser = argparse.ArgumentParser(description="Test STK push API (initiate, callback, status)")
    parser.add_argument("--base-url", default="http://localhost:3000", help="API base URL")
    parser.add_argument("--phone", default="254700000000", help="Payer phone (MSISDN)")
    parser.add_argument("--amount", type=float, default=10.4)
    parser.add_argument("--result-code", type=int, default=0, help="ResultCode to simulate in the callback")
    parser.add_argument("--no-callback", action="store_true", help="Only poll; wait for the real gateway")
    parser.add_argument("--polls", type=int, default=10)
    args = parser.parse_args()
    base = args.base_url.rstrip("/")

    print("=== STK push API test ===\n")

    print("1) POST /payments")
    try:
        ack = post_json(f"{base}/payments", {"payerPhone": args.phone, "amount": args.amount})
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        if "Connection refused" in str(e) or "Failed to establish" in str(e):
            print("   → Start the API first: uvicorn src.api.main:app --host 127.0.0.1 --port 3000")
        if getattr(e, "response", None) is not None:
            print(f"   body: {e.response.text[:500]}")
        return 1
    checkout_id = ack.get("CheckoutRequestID")
    print(f"   CheckoutRequestID: {checkout_id}\n")
    if not checkout_id:
        print(f"   FAIL: no CheckoutRequestID in {ack}")
        return 1

    print("2) GET /payments/status (before callback)")
    print(f"   {get_json(f'{base}/payments/status', {'id': checkout_id})}\n")

    if not args.no_callback:
        print(f"3) POST /payments/callback (ResultCode={args.result_code})")
        callback = build_callback(checkout_id, args.result_code, math.ceil(args.amount), args.phone)
        print(f"   ack: {post_json(f'{base}/payments/callback', callback)}\n")

    print("4) Poll GET /payments/status")
    for _ in range(args.polls):
        record = get_json(f"{base}/payments/status", {"id": checkout_id})
        print(f"   {record}")
        if record.get("status") != "pending":
            return 0
        time.sleep(3)
    print("   Still pending.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
