"""Responder agents for the IT operations assistant.

- coordinator: Front-line responder that answers general questions and routes
  work to a specialist with a trailing sentinel
- devops: Azure DevOps work-item specialist
- servicenow: ServiceNow incident and change-request specialist
- base: Shared chat responder built on a LangGraph agent/tools loop
"""
