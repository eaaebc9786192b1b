"""Scripted stand-in for the generative text client."""
import re
import threading


class FakeTextClient:
    """Scripted TextGenerationClient.

    `responses` are consumed in call order; an Exception instance is raised
    instead of returned. `responder(system_prompt, user_prompt)` takes over
    once the script is exhausted.
    """

    def __init__(self, responses=None, configured=True, responder=None):
        self.responses = list(responses or [])
        self.configured = configured
        self.responder = responder
        self.calls = []
        self._lock = threading.Lock()

    def is_configured(self):
        return self.configured

    def complete(self, system_prompt, user_prompt, max_tokens, temperature, timeout):
        with self._lock:
            self.calls.append(
                {
                    "system_prompt": system_prompt,
                    "user_prompt": user_prompt,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "timeout": timeout,
                }
            )
            scripted = self.responses.pop(0) if self.responses else None
        if scripted is None:
            if self.responder is None:
                raise RuntimeError("FakeTextClient has no scripted response left")
            scripted = self.responder(system_prompt, user_prompt)
        if isinstance(scripted, Exception):
            raise scripted
        return scripted


def requested_day(user_prompt):
    """Day name from a single-day user prompt ("Generate meals for Monday")."""
    match = re.search(r"Generate meals for (\w+)", user_prompt)
    return match.group(1) if match else None
