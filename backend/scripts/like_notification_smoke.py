"""End-to-end smoke check for like notifications over WebSocket.

Prerequisites:
1. `python manage.py runserver` must be running (daphne serves HTTP + WS).
2. Install the script dependencies once: `pip install -e ".[scripts]"`.

The script will:
- Ensure two demo users exist close to each other (auto-register if missing).
- Open the liked user's notification WebSocket and complete the handshake.
- Like that user from the other account via REST and wait for the push.
"""

from __future__ import annotations

import json
import os
import queue
import threading
from typing import Dict, Tuple

import requests
import websocket  # type: ignore

BASE_URL = os.environ.get("MATCH_BASE_URL", "http://127.0.0.1:8000")
API_ROOT = f"{BASE_URL}/api"
AUTH_API = f"{API_ROOT}/auth"
INTERACT_API = f"{API_ROOT}/interact"

LIKER_CREDS = {
    "name": "WS Demo Liker",
    "email": "ws_demo_liker@example.com",
    "password": "demo1234",
    "latitude": 52.5200,
    "longitude": 13.4050,
}

LIKED_CREDS = {
    "name": "WS Demo Liked",
    "email": "ws_demo_liked@example.com",
    "password": "demo1234",
    "latitude": 52.5210,
    "longitude": 13.4100,
}


def _login_or_register(session: requests.Session, payload: Dict) -> Tuple[Dict, str]:
    login_body = {"email": payload["email"], "password": payload["password"]}
    login_resp = session.post(f"{AUTH_API}/login/", json=login_body, timeout=10)

    if login_resp.status_code != 200:
        reg_resp = session.post(f"{AUTH_API}/register/", json=payload, timeout=10)
        reg_resp.raise_for_status()
        login_resp = session.post(f"{AUTH_API}/login/", json=login_body, timeout=10)

    login_resp.raise_for_status()
    data = login_resp.json()
    token = data["tokens"]["access"]
    session.headers.update({"Authorization": f"Bearer {token}"})
    return data["user"], token


def _open_notification_socket(token: str, ready_evt: threading.Event, queue_out: queue.Queue) -> None:
    ws_url = BASE_URL.replace("http", "ws", 1) + "/ws/notifications/"

    def on_open(ws):  # type: ignore[no-untyped-def]
        print("[WS] Connected, sending handshake")
        ws.send(json.dumps({"type": "handshake", "token": token}))

    def on_message(ws, message):  # type: ignore[no-untyped-def]
        payload = json.loads(message)
        print(f"[WS] Received payload: {payload}")
        if payload.get("type") == "handshake" and payload.get("status") == "ok":
            ready_evt.set()
        elif payload.get("type") == "notification":
            queue_out.put(payload)
            ws.close()

    def on_error(ws, error):  # type: ignore[no-untyped-def]
        print(f"[WS] Error: {error}")
        ready_evt.set()

    def on_close(_ws, *_):  # type: ignore[no-untyped-def]
        print("[WS] Connection closed")

    ws_app = websocket.WebSocketApp(
        ws_url,
        on_open=on_open,
        on_message=on_message,
        on_error=on_error,
        on_close=on_close,
    )

    ws_app.run_forever()


def main() -> None:
    liker_session = requests.Session()
    liked_session = requests.Session()

    print("[HTTP] Logging in / registering demo accounts ...")
    liker, _ = _login_or_register(liker_session, LIKER_CREDS)
    liked, liked_token = _login_or_register(liked_session, LIKED_CREDS)
    print(f"[HTTP] Liker {liker['id']} + Liked {liked['id']} ready")

    nearby = liker_session.get(f"{INTERACT_API}/nearby/", timeout=10)
    nearby.raise_for_status()
    print(f"[HTTP] Liker sees {nearby.json()['count']} nearby user(s)")
    match = next((u for u in nearby.json()["data"] if u["id"] == liked["id"]), None)
    if match is None:
        raise AssertionError("Liked demo user is missing from the liker's nearby list")
    print(f"[HTTP] Liked user at lat={match['lat']} lon={match['lon']} ({match['distance_km']} km)")

    ready_evt = threading.Event()
    message_queue: queue.Queue = queue.Queue()
    ws_thread = threading.Thread(
        target=_open_notification_socket,
        args=(liked_token, ready_evt, message_queue),
        daemon=True,
    )
    ws_thread.start()

    if not ready_evt.wait(timeout=5):
        raise TimeoutError("Notification WebSocket failed to handshake within 5 seconds")

    like_resp = liker_session.post(f"{INTERACT_API}/likes/{liked['id']}/", timeout=10)
    like_resp.raise_for_status()
    print(f"[HTTP] Like created: {like_resp.json()['data']['id']}")

    try:
        payload = message_queue.get(timeout=10)
    except queue.Empty:
        raise TimeoutError("Liked user did not receive a notification within 10 seconds")

    actor_id = payload.get("data", {}).get("userId")
    if actor_id != liker["id"]:
        raise AssertionError(f"Notification names {actor_id}, expected {liker['id']}")

    print("[RESULT] Liked user was notified by", actor_id)
    print("[DONE] End-to-end like notification check completed.")


if __name__ == "__main__":
    main()
