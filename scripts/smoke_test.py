"""
Smoke test against a running server (python run.py).
Logs in as the admin, prices a rental through the calculator endpoint and
checks that a new registration waits for approval.
"""
import os
import sys
import time

import requests

BASE_URL = os.environ.get("BASE_URL", "http://127.0.0.1:5000")
ADMIN_LOGIN = os.environ.get("CRANE_ADMIN_LOGIN", "admin")
ADMIN_PASSWORD = os.environ.get("CRANE_ADMIN_PASSWORD", "admin1234")

# 1. サーバ起動待ち
for i in range(10):
    try:
        if requests.get(f"{BASE_URL}/health", timeout=5).status_code == 200:
            break
    except requests.RequestException:
        time.sleep(1)
else:
    print("[ERROR] /health に応答がありません")
    sys.exit(1)

session = requests.Session()

# 2. 管理者ログイン
resp = session.post(
    f"{BASE_URL}/login",
    data={"login_id": ADMIN_LOGIN, "password": ADMIN_PASSWORD},
    allow_redirects=False,
    timeout=5,
)
if resp.status_code != 302:
    print(f"[ERROR] login failed status={resp.status_code}")
    sys.exit(2)
print("[OK] admin login")

# 3. 見積計算
resp = session.get(f"{BASE_URL}/equipment/by-category/mobile_crane", timeout=5)
fleet = resp.json() if resp.status_code == 200 else []
if not fleet:
    print("[ERROR] no available mobile cranes (run scripts/seed_demo_data.py first)")
    sys.exit(3)

resp = session.post(
    f"{BASE_URL}/quotations/calculate",
    json={"equipment_id": fleet[0]["id"], "number_of_days": 12, "shift": "double"},
    timeout=5,
)
if resp.status_code != 200:
    print(f"[ERROR] calculate failed status={resp.status_code} body={resp.text[:200]}")
    sys.exit(4)
body = resp.json()
print(f"[OK] {fleet[0]['equipmentId']} orderType={body['orderType']} total={body['formatted']['total_amount']}")

# 4. 新規登録は承認待ち
login_id = f"smoke{int(time.time())}"
requests.post(
    f"{BASE_URL}/register",
    data={"login_id": login_id, "display_name": "Smoke Test", "password": "smokepass123"},
    timeout=5,
)
resp = requests.post(
    f"{BASE_URL}/login",
    data={"login_id": login_id, "password": "smokepass123"},
    allow_redirects=False,
    timeout=5,
)
if resp.status_code == 302:
    print("[ERROR] unapproved user could log in")
    sys.exit(5)
print(f"[OK] registration pending approval: login_id={login_id}")
