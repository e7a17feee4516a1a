"""
Action Registry
Actions are registered explicitly in each provider's constructor and bound
to a wallet when listed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from common.errors import ErrorCode, create_error
from config.networks import Network
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)

ActionHandler = Callable[[WalletProvider, Any], Awaitable[str]]


@dataclass(frozen=True)
class Action:
    """A named, schema-validated operation bound to one wallet."""
    name: str
    description: str
    schema: Type[BaseModel]
    invoke: Callable[[Optional[Dict[str, Any]]], Awaitable[str]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "schema": self.schema.model_json_schema(),
        }


@dataclass(frozen=True)
class _RegisteredAction:
    name: str
    description: str
    schema: Type[BaseModel]
    handler: ActionHandler


def validate_args(schema: Type[BaseModel], args: Optional[Dict[str, Any]]) -> BaseModel:
    try:
        return schema.model_validate(args or {})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in e.errors()
        )
        raise create_error(
            f"Invalid input: {problems}",
            ErrorCode.INVALID_INPUT,
            {"errors": e.errors(include_url=False, include_context=False)},
        )


class ActionProvider:
    """
    Base class for action providers.

    Subclasses call register_action() in __init__ and override
    supports_network() when they only work on some chains. Child providers
    are listed after this provider's own actions.
    """

    def __init__(self, name: str, action_providers: Optional[List["ActionProvider"]] = None):
        self.name = name
        self.action_providers = list(action_providers or [])
        self._actions: List[_RegisteredAction] = []

    def register_action(
        self,
        name: str,
        description: str,
        schema: Type[BaseModel],
        handler: ActionHandler
    ):
        if any(a.name == name for a in self._actions):
            raise create_error(f"Action {name} already registered on {self.name}", ErrorCode.INVALID_INPUT)
        self._actions.append(_RegisteredAction(name, description.strip(), schema, handler))

    def supports_network(self, network: Network) -> bool:
        return True

    def get_actions(self, wallet: WalletProvider) -> List[Action]:
        actions = [self._bind(wallet, registered) for registered in self._actions]
        for child in self.action_providers:
            actions.extend(child.get_actions(wallet))
        return actions

    def _bind(self, wallet: WalletProvider, registered: _RegisteredAction) -> Action:
        full_name = f"{self.name}.{registered.name}"

        async def invoke(args: Optional[Dict[str, Any]] = None) -> str:
            parsed = validate_args(registered.schema, args)
            logger.debug(f"[ActionProvider] Invoking {full_name}")
            return await registered.handler(wallet, parsed)

        return Action(
            name=full_name,
            description=registered.description,
            schema=registered.schema,
            invoke=invoke,
        )
