"""Prompt task container shared by all generation tasks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from agents.persona import AgentPersona
from llm_config import CallBudget


@dataclass(frozen=True)
class PromptTask:
    """One generative call: who answers, what is asked and with which budget."""

    agent: AgentPersona
    description: str
    user_prompt: str
    expected_output: str
    budget: CallBudget

    @property
    def system_prompt(self) -> str:
        return f"{self.agent.system_preamble()}\n\n{self.description.strip()}"


def join_values(values: Iterable[Any]) -> str:
    """Comma-join non-empty values, "None" when nothing is left."""
    return ", ".join(str(value) for value in values if value) or "None"
