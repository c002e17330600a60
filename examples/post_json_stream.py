import asyncio
import os

import dotenv

from fetch_event_data import EventStreamHttpClient, FetchOptions, HttpConfig, afetch_event_data

dotenv.load_dotenv()


async def main() -> None:
    chunks: list[str] = []

    options = FetchOptions(
        data={"prompt": "Say hello", "stream": True},
        headers={"Authorization": f"Bearer {os.getenv('FETCH_EVENT_DATA_TOKEN', '')}"},
        on_message=lambda event: chunks.append(event.data),
    )

    async with EventStreamHttpClient(config=HttpConfig(timeout_s=60.0)) as client:
        await afetch_event_data(os.environ["FETCH_EVENT_DATA_TEST_URL"], options, client=client)

    print("".join(c for c in chunks if c != "[DONE]"))


asyncio.run(main())
