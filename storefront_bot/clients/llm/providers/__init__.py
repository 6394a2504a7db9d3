"""LLM provider implementations; builders are registered in clients.llm.registry."""
