from orchestrator.adapters.agent.http_client import AgentHttpClient, parse_agent_response

__all__ = ["AgentHttpClient", "parse_agent_response"]
