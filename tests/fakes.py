# =============================================
# File: tests/fakes.py
# Purpose: Stand-ins for the outbound HTTP session and the OpenAI SDK client
# =============================================
import json
from types import SimpleNamespace

import requests

from flamingo_proxy.config import Settings

SETTINGS = Settings(
    openai_api_key="sk-test",
    airtable_pat="pat-test",
    airtable_base="appTEST",
    swipes_table="Swipes",
    poll_interval_s=0,
    run_timeout_s=5,
)


def response(status=200, body=None, raw=None, content_type="application/json"):
    r = requests.Response()
    r.status_code = status
    if raw is None:
        raw = json.dumps(body if body is not None else {}).encode("utf-8")
    r._content = raw
    r.headers["Content-Type"] = content_type
    r.encoding = "utf-8"
    return r


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records every call."""

    def __init__(self, *responses):
        self.queue = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append(SimpleNamespace(method=method, url=url, **kwargs))
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def text_message(run_id, *texts, role="assistant"):
    blocks = [SimpleNamespace(type="text", text=SimpleNamespace(value=t)) for t in texts]
    return SimpleNamespace(role=role, run_id=run_id, content=blocks)


class FakeAssistantClient:
    """
    Mimics client.beta.threads.{create, messages.create, messages.list, runs.create, runs.retrieve}.
    ``statuses`` are returned by successive runs.retrieve calls.
    """

    def __init__(self, statuses=("completed",), messages=(), last_error=None, fail_on=None, error=None):
        self.statuses = list(statuses)
        self.messages = list(messages)
        self.last_error = last_error
        self.fail_on = fail_on
        self.error = error
        self.posted = []
        self.retrieves = 0
        self.calls = []

        threads = SimpleNamespace(
            create=self._create_thread,
            messages=SimpleNamespace(create=self._create_message, list=self._list_messages),
            runs=SimpleNamespace(create=self._create_run, retrieve=self._retrieve_run),
        )
        self.beta = SimpleNamespace(threads=threads)

    def _maybe_fail(self, name):
        self.calls.append(name)
        if self.fail_on == name:
            raise self.error

    def _create_thread(self):
        self._maybe_fail("threads.create")
        return SimpleNamespace(id="thread_1")

    def _create_message(self, thread_id, role, content):
        self._maybe_fail("messages.create")
        self.posted.append(SimpleNamespace(thread_id=thread_id, role=role, content=content))

    def _create_run(self, thread_id, assistant_id):
        self._maybe_fail("runs.create")
        return SimpleNamespace(id="run_1", status="queued", assistant_id=assistant_id)

    def _retrieve_run(self, run_id, thread_id):
        self._maybe_fail("runs.retrieve")
        status = self.statuses[min(self.retrieves, len(self.statuses) - 1)]
        self.retrieves += 1
        return SimpleNamespace(id=run_id, status=status, last_error=self.last_error)

    def _list_messages(self, thread_id, order):
        self._maybe_fail("messages.list")
        assert order == "asc"
        return SimpleNamespace(data=list(self.messages))
