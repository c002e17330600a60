import os

import dotenv
import httpx

from fetch_event_data import SSEDecoder

dotenv.load_dotenv()

url = os.environ["FETCH_EVENT_DATA_TEST_URL"]

headers = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}

decoder = SSEDecoder()

with httpx.Client(timeout=120.0) as client:
    with client.stream("GET", url, headers=headers) as r:
        print("status:", r.status_code)
        print("headers:", dict(r.headers))
        for i, chunk in enumerate(r.iter_bytes()):
            print(f"chunk {i}: {chunk!r}")
            for event in decoder.decode(chunk):
                print("  event=", event.event, "data=", repr(event.data))
                print("  raw=", event.raw)
        for event in decoder.flush():
            print("  (flush) event=", event.event, "data=", repr(event.data))
