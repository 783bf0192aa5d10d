"""Built-in agents."""

from macau.agents.human_agent import HumanAgent
from macau.agents.policy_agent import PolicyAgent

__all__ = ["HumanAgent", "PolicyAgent"]
