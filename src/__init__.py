"""IT Operations Multi-Agent Assistant.

Root package for the conversational IT operations assistant. A coordinator
responder answers each chat turn and may hand the request to a specialist
responder via a trailing routing sentinel.

The system consists of several core components:
- orchestrator: Per-request coordination, routing, sessions and the chat HTTP API
- agents: Coordinator plus the Azure DevOps and ServiceNow specialists with their tools
- utils: Cross-cutting concerns including config, logging, LLM construction and validation
"""
