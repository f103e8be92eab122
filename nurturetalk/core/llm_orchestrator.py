"""LLM orchestrator for chat and summarization."""

from typing import List, Dict, Optional

from ..errors import LLMError
from .prompts import SYSTEM_PROMPT, CONTEXT_TEMPLATE, NO_CONTEXT, SUMMARY_PROMPT


# Transcript roles map onto OpenAI chat roles
_OPENAI_ROLES = {"user": "user", "bot": "assistant"}


class LLMOrchestrator:
    """Orchestrates LLM calls with memory context."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", history_window: int = 10, client=None):
        if client is None:
            from openai import OpenAI
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model
        self.history_window = history_window

    def build_messages(
        self,
        query: str,
        context: str,
        history: Optional[List[Dict]] = None
    ) -> List[Dict]:
        """
        Assemble the prompt for one turn.

        Args:
            query: User message
            context: Retrieved memory snippets, already joined
            history: Recent transcript as {role, content} dicts

        Returns:
            OpenAI chat messages
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "system", "content": CONTEXT_TEMPLATE.format(context=context or NO_CONTEXT)}
        ]

        if history and self.history_window > 0:
            for h in history[-self.history_window:]:
                messages.append({
                    "role": _OPENAI_ROLES.get(h["role"], "user"),
                    "content": h["content"]
                })

        messages.append({"role": "user", "content": query})
        return messages

    def chat(
        self,
        query: str,
        context: str,
        history: Optional[List[Dict]] = None
    ) -> str:
        """Generate a chat response grounded in retrieved context."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=self.build_messages(query, context, history),
            temperature=0.7,
        )
        return self._content(response)

    def summarize(self, transcript: str) -> str:
        """Summarize a conversation transcript."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SUMMARY_PROMPT},
                {"role": "user", "content": transcript}
            ],
            temperature=0.3,
        )
        return self._content(response)

    @staticmethod
    def _content(response) -> str:
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError("No output from the language model")
        return content
