import os
import sys

import requests


def check(endpoint: str, expect) -> bool:
    url = f"{BASE_URL}{endpoint}"
    try:
        res = requests.get(url, timeout=10)
    except requests.RequestException:
        print(f"FAIL {endpoint}: request error")
        return False
    if res.status_code != 200:
        print(f"FAIL {endpoint}: HTTP {res.status_code}")
        return False
    body = res.json()
    if not expect(body):
        print(f"FAIL {endpoint}: body={body}")
        return False
    print(f"OK   {endpoint}")
    return True


BASE_URL = os.getenv("STAYDESK_API_BASE_URL", "http://127.0.0.1:8000/api")

ok = True
ok = check("/health", lambda body: body.get("status") == "ok") and ok
ok = check("/whatsapp/status", lambda body: "configured" in body) and ok
ok = check("/dashboard/stats", lambda body: "occupancyRate" in body) and ok

sys.exit(0 if ok else 1)
