"""Prompt persona shared by all generation agents."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AgentPersona:
    """Role, goal and backstory rendered into a system prompt."""

    role: str
    goal: str
    backstory: str

    def system_preamble(self) -> str:
        return f"You are a {self.role}. {self.goal}\n\n{self.backstory.strip()}"
