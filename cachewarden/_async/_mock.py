import typing as tp

import httpx

__all__ = ("MockAsyncTransport",)

MockOutcome = tp.Union[httpx.Response, Exception]


class MockAsyncTransport(httpx.AsyncBaseTransport):
    """
    Replays queued outcomes in order: responses are returned, exceptions are raised.

    Every request seen is recorded in `requests`.
    """

    def __init__(self) -> None:
        self.mocked_responses: tp.List[MockOutcome] = []
        self.requests: tp.List[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.mocked_responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def add_responses(self, responses: tp.List[MockOutcome]) -> None:
        self.mocked_responses.extend(responses)
