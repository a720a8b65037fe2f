"""
Quick check that the chat API qualifies a buyer end to end: health, turns, memory round-trip, reset.
Run with: from project root, server must be running (uvicorn bentacars.main:app).
  python scripts/smoke_chat.py
"""
import os

import requests

# export CHAT_BASE_URL=http://host:8000 to point at another server
BASE = os.environ.get("CHAT_BASE_URL", "http://127.0.0.1:8000")
TIMEOUT = 15

MEMORY_FIELDS = ("ai_model", "ai_payment_mode", "ai_budget", "ai_location", "ai_timeline", "ai_transmission")

CONVERSATION = [
    "hi po",
    "vios",
    "financing",
    "100k dp",
    "next month",
    "Quezon City ako",
]


def send(message, memory, user="smoke-user"):
    payload = {"message": message, "user": user, "name": "Smoke Tester", **memory}
    r = requests.post(f"{BASE}/api/chat", json=payload, timeout=TIMEOUT)
    assert r.status_code == 200, f"Chat failed: {r.status_code} {r.text}"
    data = r.json()
    # Caller saves the returned fields back, exactly like the contact store does
    return data, {k: data.get(k) for k in MEMORY_FIELDS}


def main():
    # 1. Health
    r = requests.get(f"{BASE}/health", timeout=TIMEOUT)
    assert r.status_code == 200, f"Health failed: {r.status_code}"
    print("OK /health")

    # 2. Malformed turn
    r = requests.post(f"{BASE}/api/chat", json={"message": "vios"}, timeout=TIMEOUT)
    assert r.status_code == 400, f"Expected 400 without user, got {r.status_code}"
    print("OK POST /api/chat without user -> 400")

    # 3. Conversation with memory carried between turns
    memory = {}
    data = {}
    for message in CONVERSATION:
        data, memory = send(message, memory)
        print(f"  buyer: {message!r}")
        print(f"  reply: {data['ai_reply']}  [next={data['next_slot']}]")
    assert memory["ai_model"] == "sedan", memory
    assert memory["ai_payment_mode"] == "financing", memory
    assert memory["ai_budget"] == 100000, memory
    assert memory["ai_timeline"] == "next month", memory
    print(f"OK conversation -> {memory}")
    print(f"  qualification: {data['qualification']}")

    # 4. Reset clears memory
    data, memory = send("reset", memory)
    assert data["reset"] is True
    assert all(v is None for v in memory.values()), memory
    assert data["next_slot"] == "vehicle"
    print("OK reset")

    print("\nAll smoke checks passed.")


if __name__ == "__main__":
    main()
