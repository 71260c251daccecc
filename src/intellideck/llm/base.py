from pydantic_ai import Agent
from typing import List, Callable, Optional, Type, TypeVar
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

T = TypeVar('T')


def build_model(model_name: str, api_key: Optional[str]) -> GoogleModel:
    """Gemini model bound to an explicit API key"""
    provider = GoogleProvider(api_key=api_key)
    return GoogleModel(model_name, provider=provider)


class AgentClient:
    def __init__(
        self, system_prompt: str, model: GoogleModel, tools: Optional[List[Callable]] = None
    ):
        self.model = model
        self.system_prompt = system_prompt
        self.tools = tools or []

    def create_agent(self, result_type: Optional[Type[T]] = None):
        """Creates and returns a PydanticAI Agent instance."""
        if result_type:
            agent: Agent[None, T] = Agent(
                model=self.model,
                system_prompt=self.system_prompt,
                tools=self.tools,
                output_type=result_type  # type: ignore
            )
            return agent
        return Agent(model=self.model, system_prompt=self.system_prompt, tools=self.tools)
