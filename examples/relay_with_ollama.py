"""
Example: Relaying course questions to a local Ollama model

Builds a relay from an in-memory settings store, adds course context
for the caller and writes an audit trail to a JSON-lines file.

Requires a running Ollama server with the model pulled:
    ollama pull llama3.1
"""

import asyncio
from pathlib import Path

from teacher_assistant.relay import JsonlAuditSink, MessageRelay, StaticScopeProvider
from teacher_assistant.settings import DictSettingsStore, validate_config


async def main():
    store = DictSettingsStore(
        {
            "llm_provider": "ollama",
            "base_url": "http://localhost:11434",
            "ai_model": "llama3.1",
            "temperature": "0.3",
        }
    )
    scopes = StaticScopeProvider(
        {
            101: {"course_name": "Introduction to Biology", "user_role": "editingteacher"},
        }
    )
    audit_path = Path("audit.jsonl")

    async with MessageRelay(
        store=store,
        scope_provider=scopes,
        audit_sink=JsonlAuditSink(audit_path),
        user_id=7,
    ) as relay:
        if relay.setup_error:
            print(f"Setup failed: {relay.setup_error}")
            return

        for issue in validate_config(relay.config):
            print(f"Warning: {issue}")

        response = await relay.send(101, "How can I add a quiz with random questions?")
        print(f"success={response.success}")
        print(response.message)

        # Only this message is sent; history is recorded locally
        response = await relay.send(101, "And how do I set a time limit?")
        print(response.message)

        print(f"\n{len(relay.history())} turns in history")

    print(f"Audit trail written to {audit_path.resolve()}")


if __name__ == "__main__":
    asyncio.run(main())
