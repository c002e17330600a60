import os

import dotenv

from fetch_event_data import ServerSentEvent, fetch_event_data

dotenv.load_dotenv()


def on_message(event: ServerSentEvent) -> None:
    label = event.event or "message"
    print(f"[{label}] {event.data}", flush=True)


fetch_event_data(
    os.environ["FETCH_EVENT_DATA_TEST_URL"],
    on_open=lambda resp: print("open:", resp.status_code),
    on_message=on_message,
    on_close=lambda: print("closed"),
    on_error=lambda err: print("error:", err),
)
